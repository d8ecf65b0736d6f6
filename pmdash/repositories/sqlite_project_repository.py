# Rev 0.2.0
# pmdash – SQLiteProjectRepository
from __future__ import annotations

from .base import SQLiteTableRepository


class SQLiteProjectRepository(SQLiteTableRepository):
    """Projects. Deleting a project cascades to its tasks, expenses and requirements."""

    table = "projects"
    columns = ("name", "description", "status", "start_date", "end_date", "budget")
    order_by = "created_at DESC, id DESC"
