# Rev 0.2.0

"""Project metrics (Rev 0.2.0)
Pure derivations over in-memory collections. Inputs may be entities or raw
row mappings. Every ratio with a zero denominator is 0.
"""
from __future__ import annotations

import math
from datetime import date
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence

from ..models.entities import Project, ProjectSummary
from ..models.transform import migrate_expense_status, to_float
from ..models.types import EXPENSE_CATEGORIES, REQUIREMENT_STATUSES, TASK_STATUSES


def _get(item: Any, name: str, default: Any = None) -> Any:
    if isinstance(item, Mapping):
        return item.get(name, default)
    return getattr(item, name, default)


def _ratio(part: float, whole: float) -> float:
    if not whole:
        return 0.0
    value = part * 100 / whole
    return value if math.isfinite(value) else 0.0


def is_approved(expense: Any) -> bool:
    if isinstance(expense, Mapping):
        return migrate_expense_status(expense) == "approved"
    status = getattr(expense, "status", None)
    if status is not None:
        return status == "approved"
    return getattr(expense, "approved", False) is True


# ---- tasks ------------------------------------------------------------------

def completed_tasks(tasks: Sequence[Any]) -> int:
    return sum(1 for t in tasks if _get(t, "status") == "completed")


def project_progress(tasks: Sequence[Any]) -> int:
    if not tasks:
        return 0
    return int(math.floor(_ratio(completed_tasks(tasks), len(tasks)) + 0.5))


def total_estimated_hours(tasks: Iterable[Any]) -> float:
    return sum(to_float(_get(t, "estimated_hours")) for t in tasks)


def total_actual_hours(tasks: Iterable[Any]) -> float:
    return sum(to_float(_get(t, "actual_hours")) for t in tasks)


def efficiency_ratio(tasks: Sequence[Any]) -> float:
    """Estimated over actual hours, as a percent; above 100 means under the estimate."""
    return _ratio(total_estimated_hours(tasks), total_actual_hours(tasks))


def task_status_distribution(tasks: Iterable[Any]) -> Dict[str, int]:
    counts = {s: 0 for s in TASK_STATUSES}
    for t in tasks:
        status = _get(t, "status")
        if status in counts:
            counts[status] += 1
    return counts


def status_proportions(distribution: Mapping[str, int]) -> Dict[str, float]:
    """Share of each bucket in percent, for proportional bar/column rendering."""
    total = sum(distribution.values())
    return {k: _ratio(v, total) for k, v in distribution.items()}


# ---- budget -----------------------------------------------------------------

def spent_budget(expenses: Iterable[Any]) -> float:
    return sum(to_float(_get(e, "amount")) for e in expenses if is_approved(e))


def budget_utilization(spent: float, budget: float) -> float:
    return _ratio(spent, budget) if budget > 0 else 0.0


def remaining_budget(budget: float, spent: float) -> float:
    return budget - spent


def available_budget(budget: float, spent: float) -> float:
    return max(0.0, remaining_budget(budget, spent))


def expenses_by_category(expenses: Iterable[Any]) -> Dict[str, float]:
    out: Dict[str, float] = {}
    for e in expenses:
        if not is_approved(e):
            continue
        category = _get(e, "category")
        if category not in EXPENSE_CATEGORIES:
            category = EXPENSE_CATEGORIES[0]
        out[category] = out.get(category, 0.0) + to_float(_get(e, "amount"))
    return {k: v for k, v in out.items() if v}


# ---- requirements -----------------------------------------------------------

def requirement_status_distribution(requirements: Iterable[Any]) -> Dict[str, int]:
    counts = {s: 0 for s in REQUIREMENT_STATUSES}
    for r in requirements:
        status = _get(r, "status")
        if status in counts:
            counts[status] += 1
    return counts


def requirement_approval_rate(requirements: Sequence[Any]) -> float:
    if not requirements:
        return 0.0
    approved = sum(1 for r in requirements if _get(r, "status") == "approved")
    return _ratio(approved, len(requirements))


# ---- project / portfolio ----------------------------------------------------

def project_duration_days(start: Optional[date], end: Optional[date]) -> int:
    if start is None or end is None or end < start:
        return 0
    return (end - start).days


def summarize_project(project: Project, tasks: Sequence[Any] = (), expenses: Iterable[Any] = ()) -> ProjectSummary:
    return ProjectSummary(
        project=project,
        progress=project_progress(tasks),
        spent=spent_budget(expenses),
        total_tasks=len(tasks),
        completed_tasks=completed_tasks(tasks),
        total_hours_worked=total_actual_hours(tasks),
    )


def portfolio_kpis(summaries: Sequence[ProjectSummary]) -> Dict[str, float]:
    total_budget = sum(s.budget for s in summaries)
    total_spent = sum(s.spent for s in summaries)
    return {
        "total_projects": len(summaries),
        "active_projects": sum(1 for s in summaries if s.status == "Doing"),
        "finished_projects": sum(1 for s in summaries if s.status == "Finished"),
        "total_budget": total_budget,
        "total_spent": total_spent,
        "budget_utilization": budget_utilization(total_spent, total_budget),
    }
