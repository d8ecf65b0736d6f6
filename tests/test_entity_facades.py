# tests/test_entity_facades.py
from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

import pytest

from pmdash.models.entities import Expense, Project, Requirement, Task, TimeEntry
from pmdash.repositories.base import NotFoundError, RepositoryError
from pmdash.services.entity_facades import (
    ExpenseFacade,
    ProjectFacade,
    RequirementFacade,
    TaskFacade,
)


# --- In-memory repository stand-in ----------------------------------------------

class _StubRepo:
    def __init__(self, rows: Optional[List[Dict[str, Any]]] = None):
        self.rows: Dict[int, Dict[str, Any]] = {r["id"]: dict(r) for r in rows or []}
        self.next_id = max(self.rows, default=0) + 1
        self.fail = False
        self.calls: List[str] = []
        self.on_call = None  # hook for reentrancy tests

    def _maybe_fail(self, op: str):
        self.calls.append(op)
        if self.on_call:
            self.on_call(op)
        if self.fail:
            raise RepositoryError(f"{op} failed")

    def list(self, **filters):
        self._maybe_fail("list")
        return [dict(r) for r in self.rows.values()
                if all(r.get(k) == v for k, v in filters.items())]

    def insert(self, fields):
        self._maybe_fail("insert")
        row = dict(fields, id=self.next_id, created_at="2025-05-01 09:00:00")
        self.rows[row["id"]] = row
        self.next_id += 1
        return dict(row)

    def update(self, row_id, fields):
        self._maybe_fail("update")
        if row_id not in self.rows:
            raise NotFoundError("missing")
        self.rows[row_id].update(fields)
        return dict(self.rows[row_id])

    def delete(self, row_id):
        self._maybe_fail("delete")
        if self.rows.pop(row_id, None) is None:
            raise NotFoundError("missing")

    def add_time(self, task_id, entry):
        self._maybe_fail("add_time")
        if task_id not in self.rows:
            raise NotFoundError("missing")
        row = self.rows[task_id]
        row["actual_hours"] = (row.get("actual_hours") or 0) + entry["hours_worked"]
        return dict(row)


def _task_row(tid, **kw):
    row = {"id": tid, "project_id": 1, "title": f"Task {tid}", "responsible": "ana",
           "status": "pending", "priority": "medium", "estimated_hours": 2, "actual_hours": 0}
    row.update(kw)
    return row


@pytest.fixture()
def task_repo() -> _StubRepo:
    return _StubRepo([_task_row(1), _task_row(2, project_id=2)])


@pytest.fixture()
def tasks(task_repo) -> TaskFacade:
    facade = TaskFacade(task_repo)
    assert facade.load(project_id=1).ok
    return facade


# --- load / create -----------------------------------------------------------------

def test_load_maps_rows_to_entities(tasks):
    [t] = tasks.items()
    assert t.assignee == "ana"
    assert t.estimated_hours == 2.0


def test_create_appends_repository_entity(tasks, task_repo):
    res = tasks.create(Task(id=None, project_id=1, title="Write docs", assignee="luis", tags=frozenset({"docs"})))
    assert res.ok and res.code == "created"
    assert res.value.id == 3
    assert res.value.created_at == "2025-05-01 09:00:00"
    assert [t.id for t in tasks.items()] == [1, 3]
    assert task_repo.rows[3]["responsible"] == "luis"
    assert task_repo.rows[3]["tags"] == ["docs"]


@pytest.mark.parametrize(
    "task",
    [
        Task(id=None, project_id=1, title="  ", assignee="ana"),
        Task(id=None, project_id=1, title="x", assignee=""),
        Task(id=None, project_id=None, title="x", assignee="ana"),
        Task(id=None, project_id=1, title="x", assignee="ana", estimated_hours=-1),
        Task(id=None, project_id=1, title="x", assignee="ana", status="done"),
    ],
)
def test_invalid_task_never_reaches_repository(tasks, task_repo, task):
    task_repo.calls.clear()
    res = tasks.create(task)
    assert not res.ok and res.code == "validation"
    assert task_repo.calls == []
    assert len(tasks.cache) == 1


def test_repository_failure_leaves_cache_untouched(tasks, task_repo):
    task_repo.fail = True
    res = tasks.create(Task(id=None, project_id=1, title="x", assignee="ana"))
    assert not res.ok and res.code == "repository_error"
    assert [t.id for t in tasks.items()] == [1]

    res = tasks.load(project_id=1)
    assert res.code == "repository_error"
    assert [t.id for t in tasks.items()] == [1]


# --- update / delete -----------------------------------------------------------------

def test_update_replaces_local_entity(tasks):
    current = tasks.get(1)
    res = tasks.update(1, Task(id=1, project_id=1, title="Renamed", assignee=current.assignee, status="completed"))
    assert res.ok
    assert tasks.get(1).title == "Renamed"
    assert tasks.get(1).status == "completed"


def test_update_failure_keeps_previous_value(tasks, task_repo):
    task_repo.fail = True
    res = tasks.update(1, Task(id=1, project_id=1, title="Renamed", assignee="ana"))
    assert res.code == "repository_error"
    assert tasks.get(1).title == "Task 1"


def test_delete(tasks, task_repo):
    assert tasks.delete(1).ok
    assert 1 not in tasks.cache
    assert 1 not in task_repo.rows


def test_delete_failure_keeps_entity(tasks, task_repo):
    task_repo.fail = True
    res = tasks.delete(1)
    assert res.code == "repository_error"
    assert 1 in tasks.cache


def test_delete_unknown_id_surfaces_failure(tasks):
    res = tasks.delete(99)
    assert not res.ok and res.code == "not_found"


def test_update_of_row_deleted_elsewhere_is_not_found(tasks, task_repo):
    del task_repo.rows[1]
    res = tasks.update(1, Task(id=1, project_id=1, title="Renamed", assignee="ana"))
    assert res.code == "not_found"
    assert tasks.get(1).title == "Task 1"


# --- in-flight guard and liveness --------------------------------------------------------

def test_second_mutation_on_same_identity_is_rejected_while_pending(tasks, task_repo):
    nested = []

    def reenter(op):
        if op == "update" and not nested:
            nested.append(tasks.update(1, Task(id=1, project_id=1, title="Second", assignee="ana")))
            nested.append(tasks.delete(1))

    task_repo.on_call = reenter
    res = tasks.update(1, Task(id=1, project_id=1, title="First", assignee="ana"))
    assert res.ok
    assert [r.code for r in nested] == ["in_flight", "in_flight"]
    assert tasks.get(1).title == "First"
    assert not tasks.is_pending(1)


def test_response_after_detach_is_discarded(tasks, task_repo):
    task_repo.on_call = lambda op: tasks.detach()
    res = tasks.create(Task(id=None, project_id=1, title="late", assignee="ana"))
    assert not res.ok and res.code == "detached"
    assert len(tasks.cache) == 1


# --- time logging ----------------------------------------------------------------------

def test_add_hours_updates_cached_task(tasks):
    entry = TimeEntry(id=None, task_id=1, hours_worked=1.25, date=date(2025, 5, 1))
    res = tasks.add_hours(1, entry)
    assert res.ok
    assert tasks.get(1).actual_hours == pytest.approx(1.25)
    tasks.add_hours(1, entry)
    assert tasks.get(1).actual_hours == pytest.approx(2.5)


def test_add_hours_on_missing_task_is_not_found(tasks):
    res = tasks.add_hours(7, TimeEntry(id=None, task_id=7, hours_worked=1, date=date(2025, 5, 1)))
    assert not res.ok and res.code == "not_found"


def test_add_hours_rejects_non_positive(tasks, task_repo):
    task_repo.calls.clear()
    res = tasks.add_hours(1, TimeEntry(id=None, task_id=1, hours_worked=0, date=date(2025, 5, 1)))
    assert res.code == "validation"
    assert task_repo.calls == []


# --- other entities ------------------------------------------------------------------

def test_project_requires_end_after_start():
    facade = ProjectFacade(_StubRepo())
    bad = Project(id=None, name="P", description="d", start_date=date(2025, 5, 2), end_date=date(2025, 5, 1))
    assert facade.create(bad).code == "validation"
    same_day = Project(id=None, name="P", description="d", start_date=date(2025, 5, 1), end_date=date(2025, 5, 1))
    assert facade.create(same_day).code == "validation"
    good = Project(id=None, name="P", description="d", start_date=date(2025, 5, 1), end_date=date(2025, 6, 1),
                   budget=1000)
    res = facade.create(good)
    assert res.ok and res.value.budget == 1000


def test_project_requires_name_and_description():
    facade = ProjectFacade(_StubRepo())
    assert facade.create(Project(id=None, name="", description="d")).code == "validation"
    assert facade.create(Project(id=None, name="n", description=" ")).code == "validation"


@pytest.mark.parametrize("amount", [0, -5])
def test_expense_amount_must_be_positive(amount):
    facade = ExpenseFacade(_StubRepo())
    res = facade.create(Expense(id=None, project_id=1, description="laptop", amount=amount, date=date(2025, 5, 1)))
    assert res.code == "validation"


def test_expense_status_change_and_legacy_rows():
    repo = _StubRepo([
        {"id": 1, "project_id": 1, "description": "old", "amount": 10, "category": "other",
         "date": "2025-01-01", "approved": True},
        {"id": 2, "project_id": 1, "description": "older", "amount": 5, "category": "other",
         "date": "2025-01-02", "approved": False},
    ])
    facade = ExpenseFacade(repo)
    facade.load(project_id=1)
    assert [e.status for e in facade.items()] == ["approved", "pending"]

    res = facade.set_status(2, "rejected")
    assert res.ok and facade.get(2).status == "rejected"
    assert repo.rows[2]["status"] == "rejected"
    assert facade.set_status(42, "approved").code == "not_found"


def test_requirement_create_and_malformed_rows_are_coerced():
    repo = _StubRepo([{"id": 1, "project_id": 1, "title": "r", "status": "weird", "deadline": "not-a-date"}])
    facade = RequirementFacade(repo)
    facade.load()
    r = facade.get(1)
    assert r.status == "pending"
    assert r.due_date is None
    assert r.description == ""

    res = facade.create(Requirement(id=None, project_id=1, title="GDPR", description="consent", type="legal",
                                    priority="critical"))
    assert res.ok and res.value.type == "legal"
