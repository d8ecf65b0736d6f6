# Rev 0.2.0

"""Per-task work timers (Rev 0.2.0)

Each task is Idle or Running; timers of different tasks are independent.
Stopping a timer or entering time by hand commits hours through an
HoursLedger. A timer whose task has been deleted goes back to Idle on stop.
Wrong-state calls (double start, double stop) are reported in the returned
TimerResult and never raise.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Callable, Dict, List, Optional, Protocol

from ..models.entities import TimeEntry
from . import time_codec

log = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class HoursLedger(Protocol):
    """Where committed hours go; TaskFacade.add_hours satisfies this."""

    def add_hours(self, task_id: int, entry: TimeEntry): ...


class TimerStore(Protocol):
    """Extension point for durable timers. The default keeps nothing."""

    def save(self, task_id: int, started_at: datetime) -> None: ...
    def discard(self, task_id: int) -> None: ...


class NullTimerStore:
    def save(self, task_id: int, started_at: datetime) -> None:
        pass

    def discard(self, task_id: int) -> None:
        pass


@dataclass
class TimerResult:
    ok: bool
    code: str
    hours: float = 0.0
    message: str = ""


class TimerSessionManager:
    def __init__(self, ledger: HoursLedger, *, clock: Clock = utc_now, store: Optional[TimerStore] = None):
        self._ledger = ledger
        self._clock = clock
        self._store = store or NullTimerStore()
        self._active: Dict[int, datetime] = {}

    # ---- state
    def is_running(self, task_id: int) -> bool:
        return task_id in self._active

    def running_task_ids(self) -> List[int]:
        return list(self._active)

    def started_at(self, task_id: int) -> Optional[datetime]:
        return self._active.get(task_id)

    # ---- transitions
    def start(self, task_id: int) -> TimerResult:
        if task_id in self._active:
            return TimerResult(False, "already_running", message="A timer is already running for this task")
        started = self._clock()
        self._active[task_id] = started
        self._store.save(task_id, started)
        log.info("Timer started for task %s", task_id)
        return TimerResult(True, "started")

    def tick(self, now: Optional[datetime] = None) -> Dict[int, str]:
        """Live HH:MM:SS per running timer; commits nothing."""
        now = now or self._clock()
        return {
            task_id: time_codec.seconds_to_hms((now - started).total_seconds())
            for task_id, started in self._active.items()
        }

    def stop(self, task_id: int) -> TimerResult:
        # Claim the session before committing, so a second stop sees Idle.
        started = self._active.pop(task_id, None)
        if started is None:
            return TimerResult(False, "not_running", message="No timer is running for this task")

        ended = self._clock()
        hours = max(0.0, (ended - started).total_seconds() / 3600)
        if hours <= 0:
            self._store.discard(task_id)
            log.info("Timer for task %s stopped with no elapsed time", task_id)
            return TimerResult(True, "stopped", 0.0)

        entry = TimeEntry(
            id=None,
            task_id=task_id,
            hours_worked=hours,
            date=ended.date(),
            start_time=started,
            end_time=ended,
        )
        res = self._ledger.add_hours(task_id, entry)
        if not res.ok and res.code == "not_found":
            self._store.discard(task_id)
            log.warning("Timer for task %s dropped: the task no longer exists", task_id)
            return TimerResult(False, "task_missing", hours, res.message)
        if not res.ok:
            # keep the session so the user can retry
            self._active[task_id] = started
            log.error("Timer for task %s could not be committed: %s", task_id, res.message)
            return TimerResult(False, "commit_failed", hours, res.message)

        self._store.discard(task_id)
        log.info("Timer stopped for task %s: %s", task_id, time_codec.encode(hours))
        return TimerResult(True, "stopped", hours)

    def discard(self, task_id: int) -> bool:
        """Drop a running timer without committing anything."""
        if self._active.pop(task_id, None) is None:
            return False
        self._store.discard(task_id)
        log.info("Timer for task %s discarded", task_id)
        return True

    def add_manual(
        self,
        task_id: int,
        hms: str,
        work_date: Optional[date] = None,
        description: Optional[str] = None,
    ) -> TimerResult:
        hours = time_codec.decode(hms)
        if hours <= 0:
            log.warning("Manual time %r for task %s rejected", hms, task_id)
            return TimerResult(False, "invalid_time", message="Enter a valid time in hh:mm:ss format")

        entry = TimeEntry(
            id=None,
            task_id=task_id,
            hours_worked=hours,
            date=work_date or self._clock().date(),
            description=description or "",
        )
        res = self._ledger.add_hours(task_id, entry)
        if not res.ok:
            return TimerResult(False, "commit_failed", hours, res.message)
        log.info("Manual time for task %s: %s", task_id, hms)
        return TimerResult(True, "added", hours)
