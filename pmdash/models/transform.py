# Rev 0.2.0
"""Row <-> entity mapping.

Rows use the store's column names (`responsible`, `deadline`, ...); entities
use domain names (`assignee`, `due_date`, ...). Reading is defensive:
malformed values coerce to a safe default instead of raising.
"""
from __future__ import annotations

import logging
import math
from datetime import date, datetime
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence

from .entities import Expense, Project, Requirement, Task, TimeEntry
from .types import (
    EXPENSE_CATEGORIES,
    EXPENSE_STATUSES,
    PROJECT_STATUSES,
    REQUIREMENT_PRIORITIES,
    REQUIREMENT_STATUSES,
    REQUIREMENT_TYPES,
    TASK_PRIORITIES,
    TASK_STATUSES,
)

log = logging.getLogger(__name__)


# ---- coercion helpers ------------------------------------------------------

def to_float(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        f = float(value)
    except (TypeError, ValueError):
        log.warning("Coercing non-numeric value %r to 0", value)
        return 0.0
    return f if math.isfinite(f) else 0.0


def to_text(value: Any) -> str:
    return "" if value is None else str(value)


def to_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        log.warning("Coercing unparseable date %r to None", value)
        return None


def to_choice(value: Any, choices: Sequence[str]) -> str:
    if value in choices:
        return value
    if value is not None:
        log.warning("Coercing unknown value %r to %r", value, choices[0])
    return choices[0]


def iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _drop_none_id(row: Dict[str, Any]) -> Dict[str, Any]:
    if row.get("id") is None:
        row.pop("id", None)
    return row


# ---- legacy expense approval ------------------------------------------------

def migrate_expense_status(row: Mapping[str, Any]) -> str:
    """Resolve the three-state status, migrating the legacy boolean `approved` flag."""
    status = row.get("status")
    if status in EXPENSE_STATUSES:
        return status
    if "approved" in row and row.get("approved") is not None:
        return "approved" if bool(row.get("approved")) else "pending"
    return to_choice(status, EXPENSE_STATUSES)


# ---- projects ---------------------------------------------------------------

def project_from_row(row: Mapping[str, Any]) -> Project:
    return Project(
        id=row.get("id"),
        name=to_text(row.get("name")),
        description=to_text(row.get("description")),
        status=to_choice(row.get("status"), PROJECT_STATUSES),
        start_date=to_date(row.get("start_date")),
        end_date=to_date(row.get("end_date")),
        budget=to_float(row.get("budget")),
        created_at=row.get("created_at"),
    )


def project_to_row(p: Project) -> Dict[str, Any]:
    return _drop_none_id({
        "id": p.id,
        "name": p.name,
        "description": p.description,
        "status": p.status,
        "start_date": iso(p.start_date),
        "end_date": iso(p.end_date),
        "budget": p.budget,
    })


# ---- tasks ------------------------------------------------------------------

def task_from_row(row: Mapping[str, Any]) -> Task:
    tags: Iterable[str] = row.get("tags") or ()
    return Task(
        id=row.get("id"),
        project_id=row.get("project_id"),
        title=to_text(row.get("title")),
        description=to_text(row.get("description")),
        status=to_choice(row.get("status"), TASK_STATUSES),
        priority=to_choice(row.get("priority"), TASK_PRIORITIES),
        assignee=to_text(row.get("responsible")),
        due_date=to_date(row.get("deadline")),
        estimated_hours=to_float(row.get("estimated_hours")),
        actual_hours=to_float(row.get("actual_hours")),
        tags=frozenset(str(t) for t in tags),
        created_at=row.get("created_at"),
    )


def task_to_row(t: Task) -> Dict[str, Any]:
    return _drop_none_id({
        "id": t.id,
        "project_id": t.project_id,
        "title": t.title,
        "description": t.description,
        "status": t.status,
        "priority": t.priority,
        "responsible": t.assignee,
        "deadline": iso(t.due_date),
        "estimated_hours": t.estimated_hours,
        "actual_hours": t.actual_hours,
        "tags": sorted(t.tags),
    })


# ---- expenses ---------------------------------------------------------------

def expense_from_row(row: Mapping[str, Any]) -> Expense:
    return Expense(
        id=row.get("id"),
        project_id=row.get("project_id"),
        description=to_text(row.get("description")),
        amount=to_float(row.get("amount")),
        category=to_choice(row.get("category"), EXPENSE_CATEGORIES),
        date=to_date(row.get("date")),
        status=migrate_expense_status(row),
        created_at=row.get("created_at"),
    )


def expense_to_row(e: Expense) -> Dict[str, Any]:
    return _drop_none_id({
        "id": e.id,
        "project_id": e.project_id,
        "description": e.description,
        "amount": e.amount,
        "category": e.category,
        "date": iso(e.date),
        "status": e.status,
    })


# ---- requirements -----------------------------------------------------------

def requirement_from_row(row: Mapping[str, Any]) -> Requirement:
    return Requirement(
        id=row.get("id"),
        project_id=row.get("project_id"),
        title=to_text(row.get("title")),
        description=to_text(row.get("description")),
        type=to_choice(row.get("type"), REQUIREMENT_TYPES),
        status=to_choice(row.get("status"), REQUIREMENT_STATUSES),
        priority=to_choice(row.get("priority"), REQUIREMENT_PRIORITIES),
        due_date=to_date(row.get("deadline")),
        created_at=row.get("created_at"),
    )


def requirement_to_row(r: Requirement) -> Dict[str, Any]:
    return _drop_none_id({
        "id": r.id,
        "project_id": r.project_id,
        "title": r.title,
        "description": r.description,
        "type": r.type,
        "status": r.status,
        "priority": r.priority,
        "deadline": iso(r.due_date),
    })


# ---- time entries -----------------------------------------------------------

def time_entry_to_row(e: TimeEntry) -> Dict[str, Any]:
    return _drop_none_id({
        "id": e.id,
        "task_id": e.task_id,
        "hours_worked": e.hours_worked,
        "date": e.date.isoformat(),
        "start_time": e.start_time.isoformat() if e.start_time else None,
        "end_time": e.end_time.isoformat() if e.end_time else None,
        "description": e.description or None,
    })
