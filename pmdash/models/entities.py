# Rev 0.2.0
"""Domain entities. Rows from the store are mapped onto these by models.transform."""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import FrozenSet, Optional

from .types import (
    ExpenseCategory,
    ExpenseStatus,
    ProjectStatus,
    RequirementPriority,
    RequirementStatus,
    RequirementType,
    TaskPriority,
    TaskStatus,
)


@dataclass
class Project:
    id: int | None
    name: str
    description: str = ""
    status: ProjectStatus = "To-do"
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    budget: float = 0.0
    created_at: Optional[str] = None


@dataclass
class Task:
    id: int | None
    project_id: int
    title: str
    description: str = ""
    status: TaskStatus = "pending"
    priority: TaskPriority = "medium"
    assignee: str = ""
    due_date: Optional[date] = None
    estimated_hours: float = 0.0
    actual_hours: float = 0.0
    tags: FrozenSet[str] = field(default_factory=frozenset)
    created_at: Optional[str] = None


@dataclass
class Expense:
    id: int | None
    project_id: int
    description: str
    amount: float
    category: ExpenseCategory = "other"
    date: Optional[date] = None
    status: ExpenseStatus = "pending"
    created_at: Optional[str] = None


@dataclass
class Requirement:
    id: int | None
    project_id: int
    title: str
    description: str = ""
    type: RequirementType = "functional"
    status: RequirementStatus = "pending"
    priority: RequirementPriority = "medium"
    due_date: Optional[date] = None
    created_at: Optional[str] = None


@dataclass
class TimeEntry:
    """One committed work session (timer stop or manual entry) on a task."""
    id: int | None
    task_id: int
    hours_worked: float
    date: date
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    description: str = ""


@dataclass
class ProjectSummary:
    """A project plus its derived figures; recomputed on every load, never stored."""
    project: Project
    progress: int = 0
    spent: float = 0.0
    total_tasks: int = 0
    completed_tasks: int = 0
    total_hours_worked: float = 0.0

    @property
    def id(self) -> int | None:
        return self.project.id

    @property
    def budget(self) -> float:
        return self.project.budget

    @property
    def status(self) -> ProjectStatus:
        return self.project.status
