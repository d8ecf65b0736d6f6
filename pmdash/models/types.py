# pmdash type definitions
# Rev 0.2.0

from __future__ import annotations
from typing import Literal, Tuple

ProjectStatus = Literal["To-do", "Doing", "Finished"]
TaskStatus = Literal["pending", "in-progress", "completed"]
TaskPriority = Literal["low", "medium", "high"]
ExpenseCategory = Literal["personal", "equipment", "software", "services", "other"]
ExpenseStatus = Literal["pending", "approved", "rejected"]
RequirementType = Literal["functional", "technical", "legal", "business"]
RequirementStatus = Literal["pending", "in-review", "approved", "rejected"]
RequirementPriority = Literal["low", "medium", "high", "critical"]
TimeFormat = Literal["decimal", "hms"]

# Vocabularies; the first entry is the default used when coercing bad data
PROJECT_STATUSES: Tuple[str, ...] = ("To-do", "Doing", "Finished")
TASK_STATUSES: Tuple[str, ...] = ("pending", "in-progress", "completed")
TASK_PRIORITIES: Tuple[str, ...] = ("medium", "low", "high")
EXPENSE_CATEGORIES: Tuple[str, ...] = ("other", "personal", "equipment", "software", "services")
EXPENSE_STATUSES: Tuple[str, ...] = ("pending", "approved", "rejected")
REQUIREMENT_TYPES: Tuple[str, ...] = ("functional", "technical", "legal", "business")
REQUIREMENT_STATUSES: Tuple[str, ...] = ("pending", "in-review", "approved", "rejected")
REQUIREMENT_PRIORITIES: Tuple[str, ...] = ("medium", "low", "high", "critical")
TIME_FORMATS: Tuple[str, ...] = ("hms", "decimal")
