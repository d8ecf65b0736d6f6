# Rev 0.2.0
# pmdash – SQLiteExpenseRepository
from __future__ import annotations

from .base import SQLiteTableRepository


class SQLiteExpenseRepository(SQLiteTableRepository):
    table = "expenses"
    columns = ("project_id", "description", "amount", "category", "date", "status")
    order_by = "date DESC, id DESC"
