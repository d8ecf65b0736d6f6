# Rev 0.2.0
from __future__ import annotations

from datetime import date
from typing import Dict, Optional

from PySide6.QtCore import QObject, QTimer, Signal

from pmdash.services import time_codec
from pmdash.services.timer_sessions import TimerSessionManager


class TimeTrackerViewModel(QObject):
    """
    VM for the per-task timers of one project.
    Emits:
      - elapsedUpdated(elapsed: dict[int, str])   once per tick while any timer runs
      - timersChanged(task_ids: list[int])        after start/stop
      - timeCommitted(task_id: int, hours: float) after a stop or manual entry is stored
      - notify(title: str, message: str)          user-facing outcome, success or error
    One QTimer drives every running timer.
    """

    elapsedUpdated = Signal(object)
    timersChanged = Signal(list)
    timeCommitted = Signal(int, float)
    notify = Signal(str, str)

    def __init__(self, sessions: TimerSessionManager, interval_ms: int = 1000):
        super().__init__()
        self._sessions = sessions
        self._elapsed: Dict[int, str] = {}
        self._ticker = QTimer(self)
        self._ticker.setInterval(interval_ms)
        self._ticker.timeout.connect(self.tick)

    # ---- state
    def is_running(self, task_id: int) -> bool:
        return self._sessions.is_running(task_id)

    def elapsed(self) -> Dict[int, str]:
        return dict(self._elapsed)

    def ticking(self) -> bool:
        return self._ticker.isActive()

    # ---- commands
    def start_timer(self, task_id: int) -> bool:
        res = self._sessions.start(task_id)
        if not res.ok:
            self.notify.emit("Timer", res.message)
            return False
        self._sync_ticker()
        self.tick()
        self.timersChanged.emit(self._sessions.running_task_ids())
        self.notify.emit("Timer started", "Time tracking started for this task")
        return True

    def stop_timer(self, task_id: int) -> bool:
        res = self._sessions.stop(task_id)
        if res.code == "task_missing":
            self._after_timer_ended(task_id)
            self.notify.emit("Error", "The task no longer exists; its timer was discarded")
            return False
        if not res.ok:
            if res.code == "commit_failed":
                self.notify.emit("Error", "Could not update the task hours")
            return False
        self._after_timer_ended(task_id)
        self.timeCommitted.emit(task_id, res.hours)
        self.notify.emit("Timer stopped", f"Logged {time_codec.encode(res.hours)} of work")
        return True

    def discard_timer(self, task_id: int) -> bool:
        """Drop the timer of a task that went away; nothing is committed."""
        if not self._sessions.discard(task_id):
            return False
        self._after_timer_ended(task_id)
        return True

    def add_manual_time(self, task_id: Optional[int], hms: str, work_date: Optional[date] = None,
                        description: Optional[str] = None) -> bool:
        if task_id is None:
            self.notify.emit("Error", "Select a task")
            return False
        if not time_codec.is_hms(hms):
            self.notify.emit("Error", "Enter a valid time in hh:mm:ss format")
            return False
        res = self._sessions.add_manual(task_id, hms, work_date, description)
        if not res.ok:
            msg = res.message if res.code == "invalid_time" else "Could not update the task hours"
            self.notify.emit("Error", msg)
            return False
        self.timeCommitted.emit(task_id, res.hours)
        self.notify.emit("Time logged", f"Logged {hms} of work")
        return True

    # ---- ticking
    def tick(self) -> None:
        self._elapsed = self._sessions.tick()
        self.elapsedUpdated.emit(dict(self._elapsed))

    def _after_timer_ended(self, task_id: int) -> None:
        self._elapsed.pop(task_id, None)
        self._sync_ticker()
        self.elapsedUpdated.emit(dict(self._elapsed))
        self.timersChanged.emit(self._sessions.running_task_ids())

    def _sync_ticker(self) -> None:
        if self._sessions.running_task_ids():
            if not self._ticker.isActive():
                self._ticker.start()
        else:
            self._ticker.stop()

    def shutdown(self) -> None:
        self._ticker.stop()
