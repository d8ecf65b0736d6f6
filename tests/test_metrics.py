# tests/test_metrics.py
from __future__ import annotations

import math
from datetime import date

import pytest

from pmdash.models.entities import Expense, Project, Requirement, Task
from pmdash.services import metrics


def _task(status="pending", est=0.0, act=0.0, tid=1):
    return Task(id=tid, project_id=1, title=f"T{tid}", assignee="ana", status=status,
                estimated_hours=est, actual_hours=act)


def _expense(amount, status="approved", category="software", eid=1):
    return Expense(id=eid, project_id=1, description="e", amount=amount, category=category,
                   date=date(2025, 5, 1), status=status)


def _req(status):
    return Requirement(id=None, project_id=1, title="r", description="d", status=status)


# --- zero denominators ------------------------------------------------------

def test_zero_denominators_resolve_to_zero():
    values = [
        metrics.budget_utilization(500, 0),
        metrics.project_progress([]),
        metrics.requirement_approval_rate([]),
        metrics.efficiency_ratio([_task(est=4)]),
        metrics.status_proportions({"pending": 0, "in-progress": 0, "completed": 0})["pending"],
    ]
    assert values == [0, 0, 0, 0, 0]
    assert all(math.isfinite(v) for v in values)


def test_negative_budget_also_resolves_to_zero():
    assert metrics.budget_utilization(100, -10) == 0


# --- progress -----------------------------------------------------------------

@pytest.mark.parametrize(
    "statuses,expected",
    [
        (["completed", "pending", "pending"], 33),
        (["completed", "completed", "pending"], 67),
        (["completed", "pending"], 50),
        (["completed"], 100),
        (["pending", "in-progress"], 0),
    ],
)
def test_project_progress_rounds_to_nearest(statuses, expected):
    tasks = [_task(s, tid=i) for i, s in enumerate(statuses)]
    assert metrics.project_progress(tasks) == expected


# --- budget ---------------------------------------------------------------------

def test_only_approved_expenses_are_spent():
    expenses = [
        _expense(100, "approved", "software", 1),
        _expense(50, "pending", "equipment", 2),
        _expense(25, "rejected", "services", 3),
    ]
    assert metrics.spent_budget(expenses) == 100
    assert metrics.expenses_by_category(expenses) == {"software": 100}


def test_category_kept_when_another_approved_expense_shares_it():
    expenses = [
        _expense(100, "approved", "software", 1),
        _expense(50, "pending", "software", 2),
        _expense(30, "approved", "equipment", 3),
        _expense(30, "rejected", "equipment", 4),
    ]
    assert metrics.expenses_by_category(expenses) == {"software": 100, "equipment": 30}


def test_legacy_boolean_approval_rows():
    rows = [
        {"amount": 40, "approved": True, "category": "other"},
        {"amount": 60, "approved": False, "category": "other"},
    ]
    assert metrics.spent_budget(rows) == 40
    assert metrics.expenses_by_category(rows) == {"other": 40}


def test_remaining_may_go_negative_but_available_does_not():
    assert metrics.remaining_budget(1000, 1200) == -200
    assert metrics.available_budget(1000, 1200) == 0


def test_end_to_end_project_figures():
    project = Project(id=1, name="Launch", description="Summer line", status="Doing",
                      start_date=date(2025, 5, 1), end_date=date(2025, 8, 15), budget=50000)
    expenses = [_expense(20000, eid=1), _expense(12000, "approved", "services", 2), _expense(999, "pending", eid=3)]
    tasks = [_task("completed", tid=1), _task("completed", tid=2), _task("pending", tid=3)]

    spent = metrics.spent_budget(expenses)
    assert spent == 32000
    assert metrics.budget_utilization(spent, project.budget) == 64
    assert metrics.remaining_budget(project.budget, spent) == 18000
    assert metrics.project_progress(tasks) == 67
    assert metrics.project_duration_days(project.start_date, project.end_date) == 106


# --- hours ------------------------------------------------------------------------

def test_hour_totals_treat_missing_as_zero():
    rows = [
        {"estimated_hours": 4, "actual_hours": 3.5},
        {"estimated_hours": None, "actual_hours": "oops"},
        {},
    ]
    assert metrics.total_estimated_hours(rows) == 4
    assert metrics.total_actual_hours(rows) == 3.5


def test_efficiency_ratio():
    tasks = [_task(est=10, act=8, tid=1), _task(est=6, act=8, tid=2)]
    assert metrics.efficiency_ratio(tasks) == 100
    assert metrics.efficiency_ratio([_task(est=3, act=4)]) == 75


# --- distributions --------------------------------------------------------------

def test_task_status_distribution_and_proportions():
    tasks = [_task("completed", tid=1), _task("pending", tid=2), _task("pending", tid=3), _task("in-progress", tid=4)]
    dist = metrics.task_status_distribution(tasks)
    assert dist == {"pending": 2, "in-progress": 1, "completed": 1}
    assert metrics.status_proportions(dist) == {"pending": 50, "in-progress": 25, "completed": 25}


def test_requirement_approval_rate():
    reqs = [_req("approved"), _req("approved"), _req("pending"), _req("rejected")]
    assert metrics.requirement_approval_rate(reqs) == 50
    assert metrics.requirement_status_distribution(reqs) == {
        "pending": 1, "in-review": 0, "approved": 2, "rejected": 1,
    }


# --- project / portfolio ----------------------------------------------------------

def test_duration_days_edge_cases():
    assert metrics.project_duration_days(None, date(2025, 1, 1)) == 0
    assert metrics.project_duration_days(date(2025, 2, 1), date(2025, 1, 1)) == 0


def test_summarize_and_portfolio_kpis():
    a = Project(id=1, name="A", status="Doing", budget=1000)
    b = Project(id=2, name="B", status="Finished", budget=3000)
    sa = metrics.summarize_project(a, [_task("completed", act=2, tid=1), _task(act=1.5, tid=2)], [_expense(400)])
    sb = metrics.summarize_project(b, [], [_expense(600)])

    assert (sa.progress, sa.spent, sa.total_tasks, sa.completed_tasks, sa.total_hours_worked) == (50, 400, 2, 1, 3.5)
    assert sb.progress == 0

    kpis = metrics.portfolio_kpis([sa, sb])
    assert kpis == {
        "total_projects": 2,
        "active_projects": 1,
        "finished_projects": 1,
        "total_budget": 4000,
        "total_spent": 1000,
        "budget_utilization": 25,
    }
    assert metrics.portfolio_kpis([])["budget_utilization"] == 0
