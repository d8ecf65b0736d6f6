# Rev 0.2.0
# pmdash – SQLiteRequirementRepository
from __future__ import annotations

from .base import SQLiteTableRepository


class SQLiteRequirementRepository(SQLiteTableRepository):
    table = "requirements"
    columns = ("project_id", "title", "description", "type", "status", "priority", "deadline")
