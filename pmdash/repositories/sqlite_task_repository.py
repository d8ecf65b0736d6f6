# Rev 0.2.0
from __future__ import annotations

from typing import Any, Dict, List, Optional

from .base import NotFoundError, SQLiteTableRepository
from .sqlite_tag_repository import SQLiteTagRepository


class SQLiteTaskRepository(SQLiteTableRepository):
    """
    Task CRUD. Rows carry a `tags` list read from the task_tags join;
    passing `tags` to insert/update replaces the task's tag set.
    """

    table = "tasks"
    columns = (
        "project_id", "title", "description", "status", "priority",
        "responsible", "deadline", "estimated_hours", "actual_hours",
    )

    def __init__(self, db_or_conn, tags_repo: Optional[SQLiteTagRepository] = None):
        super().__init__(db_or_conn)
        self._tags = tags_repo or SQLiteTagRepository(db_or_conn)

    def list(self, **filters: Any) -> List[Dict[str, Any]]:
        rows = super().list(**filters)
        by_task = self._tags.names_by_task(r["id"] for r in rows)
        for r in rows:
            r["tags"] = by_task.get(r["id"], [])
        return rows

    def get(self, row_id: int) -> Optional[Dict[str, Any]]:
        row = super().get(row_id)
        if row is not None:
            row["tags"] = self._tags.names_for_task(row_id)
        return row

    def insert(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        with self.transaction(self._tags):
            row = super().insert(fields)
            if "tags" in fields:
                self._tags.set_task_tags(row["id"], fields["tags"] or ())
                row["tags"] = self._tags.names_for_task(row["id"])
        return row

    def update(self, row_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
        with self.transaction(self._tags):
            row = super().update(row_id, fields)
            if "tags" in fields:
                self._tags.set_task_tags(row_id, fields["tags"] or ())
                row["tags"] = self._tags.names_for_task(row_id)
        return row

    def add_time(self, task_id: int, entry: Dict[str, Any]) -> Dict[str, Any]:
        """
        Record a time entry and add its hours to the task, in one transaction.
        `entry` holds time_entries columns; task_id is taken from the argument.
        """
        with self.transaction():
            cur = self._execute(
                "UPDATE tasks SET actual_hours = COALESCE(actual_hours, 0) + ? WHERE id = ?",
                (entry["hours_worked"], task_id),
            )
            if cur.rowcount == 0:
                raise NotFoundError(f"tasks: no row with id {task_id}")
            self._execute(
                """
                INSERT INTO time_entries(task_id, start_time, end_time, hours_worked,
                                         description, date, created_at)
                VALUES (?, ?, ?, ?, ?, ?, datetime('now'))
                """,
                (task_id, entry.get("start_time"), entry.get("end_time"),
                 entry["hours_worked"], entry.get("description"), entry["date"]),
            )
        return self.get(task_id)
