# Rev 0.2.0
# pmdash – SQLiteTagRepository (tags + task_tags join)
from __future__ import annotations
from typing import Dict, Iterable, List

from .base import SQLiteTableRepository


class SQLiteTagRepository(SQLiteTableRepository):
    table = "tags"
    columns = ("name",)
    order_by = "name COLLATE NOCASE ASC"

    def ensure(self, name: str) -> int:
        """Return the id of tag `name`, creating it if needed."""
        self._execute("INSERT OR IGNORE INTO tags(name, created_at) VALUES (?, datetime('now'))", (name,))
        rows = self._fetch_all("SELECT id FROM tags WHERE name = ?", (name,))
        return int(rows[0]["id"])

    def names_for_task(self, task_id: int) -> List[str]:
        rows = self._fetch_all(
            """
            SELECT t.name FROM tags t
            JOIN task_tags tt ON tt.tag_id = t.id
            WHERE tt.task_id = ?
            ORDER BY t.name
            """,
            (task_id,),
        )
        return [r["name"] for r in rows]

    def names_by_task(self, task_ids: Iterable[int]) -> Dict[int, List[str]]:
        ids = list(task_ids)
        out: Dict[int, List[str]] = {i: [] for i in ids}
        if not ids:
            return out
        marks = ", ".join("?" for _ in ids)
        rows = self._fetch_all(
            f"""
            SELECT tt.task_id, t.name FROM task_tags tt
            JOIN tags t ON t.id = tt.tag_id
            WHERE tt.task_id IN ({marks})
            ORDER BY t.name
            """,
            tuple(ids),
        )
        for r in rows:
            out[r["task_id"]].append(r["name"])
        return out

    def set_task_tags(self, task_id: int, names: Iterable[str]) -> None:
        wanted = sorted({n.strip() for n in names if n and n.strip()})
        self._execute("DELETE FROM task_tags WHERE task_id = ?", (task_id,))
        for name in wanted:
            tag_id = self.ensure(name)
            self._execute("INSERT INTO task_tags(task_id, tag_id) VALUES (?, ?)", (task_id, tag_id))
