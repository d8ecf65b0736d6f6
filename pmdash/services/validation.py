# Rev 0.2.0
"""Form-boundary validation. Each validator raises ValidationError with a user-facing message."""
from __future__ import annotations

from ..models.entities import Expense, Project, Requirement, Task
from ..models.types import (
    EXPENSE_CATEGORIES,
    EXPENSE_STATUSES,
    PROJECT_STATUSES,
    REQUIREMENT_PRIORITIES,
    REQUIREMENT_STATUSES,
    REQUIREMENT_TYPES,
    TASK_PRIORITIES,
    TASK_STATUSES,
)


class ValidationError(ValueError):
    pass


def _require_text(value: str, label: str) -> None:
    if not value or not value.strip():
        raise ValidationError(f"{label} is required")


def _require_choice(value: str, choices, label: str) -> None:
    if value not in choices:
        raise ValidationError(f"{label} must be one of {', '.join(choices)}")


def _require_project(project_id) -> None:
    if project_id is None:
        raise ValidationError("project is required")


def validate_project(p: Project) -> None:
    _require_text(p.name, "name")
    _require_text(p.description, "description")
    _require_choice(p.status, PROJECT_STATUSES, "status")
    if p.budget < 0:
        raise ValidationError("budget cannot be negative")
    if p.start_date and p.end_date and p.end_date <= p.start_date:
        raise ValidationError("end date must be after start date")


def validate_task(t: Task) -> None:
    _require_project(t.project_id)
    _require_text(t.title, "title")
    _require_text(t.assignee, "assignee")
    _require_choice(t.status, TASK_STATUSES, "status")
    _require_choice(t.priority, TASK_PRIORITIES, "priority")
    if t.estimated_hours < 0 or t.actual_hours < 0:
        raise ValidationError("hours cannot be negative")


def validate_expense(e: Expense) -> None:
    _require_project(e.project_id)
    _require_text(e.description, "description")
    if not e.amount or e.amount <= 0:
        raise ValidationError("amount must be greater than 0")
    if e.date is None:
        raise ValidationError("date is required")
    _require_choice(e.category, EXPENSE_CATEGORIES, "category")
    _require_choice(e.status, EXPENSE_STATUSES, "status")


def validate_requirement(r: Requirement) -> None:
    _require_project(r.project_id)
    _require_text(r.title, "title")
    _require_text(r.description, "description")
    _require_choice(r.type, REQUIREMENT_TYPES, "type")
    _require_choice(r.status, REQUIREMENT_STATUSES, "status")
    _require_choice(r.priority, REQUIREMENT_PRIORITIES, "priority")
