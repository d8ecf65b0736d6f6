# Rev 0.2.0
# pmdash – SQLiteTimeEntryRepository
from __future__ import annotations
from typing import Any, Dict, List

from .base import SQLiteTableRepository


class SQLiteTimeEntryRepository(SQLiteTableRepository):
    """One row per committed work session; a task's actual hours is their sum."""

    table = "time_entries"
    columns = ("task_id", "start_time", "end_time", "hours_worked", "description", "date")
    order_by = "date DESC, id DESC"

    def list_for_task(self, task_id: int) -> List[Dict[str, Any]]:
        return self.list(task_id=task_id)

    def total_hours(self, task_id: int) -> float:
        rows = self._fetch_all(
            "SELECT COALESCE(SUM(hours_worked), 0) AS total FROM time_entries WHERE task_id = ?",
            (task_id,),
        )
        return float(rows[0]["total"]) if rows else 0.0
