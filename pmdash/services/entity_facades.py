# Rev 0.2.0

"""Entity CRUD façades (Rev 0.2.0)

Each façade validates a form submission, calls its repository and, only
after the repository confirms, reconciles the in-memory cache shown by the
UI. Outcomes are returned as `Result`s; nothing here raises for a failed
operation.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Generic, Iterator, List, Optional, Set, TypeVar

from ..models import transform
from ..models.entities import Expense, Project, Requirement, Task, TimeEntry
from ..repositories.base import NotFoundError, RepositoryError
from . import validation
from .validation import ValidationError

log = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Result(Generic[T]):
    ok: bool
    code: str
    value: Optional[T] = None
    message: str = ""

    @classmethod
    def success(cls, code: str, value: Optional[T] = None) -> "Result[T]":
        return cls(True, code, value)

    @classmethod
    def failure(cls, code: str, message: str) -> "Result[T]":
        return cls(False, code, None, message)


class EntityCache(Generic[T]):
    """Entities keyed by identity, in load/insert order."""

    def __init__(self) -> None:
        self._items: Dict[int, T] = {}

    def replace_all(self, items: List[T]) -> None:
        self._items = {getattr(i, "id"): i for i in items}

    def put(self, item: T) -> None:
        self._items[getattr(item, "id")] = item

    def remove(self, item_id: int) -> None:
        self._items.pop(item_id, None)

    def get(self, item_id: int) -> Optional[T]:
        return self._items.get(item_id)

    def values(self) -> List[T]:
        return list(self._items.values())

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._items.values()))


class EntityFacade(Generic[T]):
    kind = "entity"

    def __init__(self, repo):
        self._repo = repo
        self.cache: EntityCache[T] = EntityCache()
        self._in_flight: Set[int] = set()
        self._alive = True

    # ---- hooks
    def _validate(self, entity: T) -> None:
        raise NotImplementedError

    def _to_row(self, entity: T) -> Dict[str, Any]:
        raise NotImplementedError

    def _from_row(self, row: Dict[str, Any]) -> T:
        raise NotImplementedError

    # ---- lifecycle
    @property
    def alive(self) -> bool:
        return self._alive

    def detach(self) -> None:
        """Owner went away; responses that arrive afterwards are discarded."""
        self._alive = False

    def is_pending(self, entity_id: int) -> bool:
        return entity_id in self._in_flight

    @contextmanager
    def _guard(self, entity_id: int):
        self._in_flight.add(entity_id)
        try:
            yield
        finally:
            self._in_flight.discard(entity_id)

    def _call(self, op: str, fn: Callable[[], Any]) -> Result[Any]:
        outcome: Result[Any]
        try:
            outcome = Result.success(op, fn())
        except NotFoundError as exc:
            log.warning("%s %s: %s", self.kind, op, exc)
            outcome = Result.failure("not_found", f"Could not {op} {self.kind}: it no longer exists")
        except RepositoryError as exc:
            log.error("%s %s failed: %s", self.kind, op, exc)
            outcome = Result.failure("repository_error", f"Could not {op} {self.kind}: {exc}")
        # success or failure, nobody is listening any more
        if not self._alive:
            log.info("%s %s response discarded (detached)", self.kind, op)
            return Result.failure("detached", f"{self.kind} view is no longer active")
        return outcome

    def _check(self, entity: T) -> Optional[Result[T]]:
        try:
            self._validate(entity)
        except ValidationError as exc:
            log.warning("%s rejected: %s", self.kind, exc)
            return Result.failure("validation", str(exc))
        return None

    # ---- queries
    def load(self, **filters: Any) -> Result[List[T]]:
        res = self._call("load", lambda: self._repo.list(**filters))
        if not res.ok:
            return res
        items = [self._from_row(r) for r in res.value]
        self.cache.replace_all(items)
        return Result.success("loaded", items)

    def items(self) -> List[T]:
        return self.cache.values()

    def get(self, entity_id: int) -> Optional[T]:
        return self.cache.get(entity_id)

    # ---- commands
    def create(self, entity: T) -> Result[T]:
        bad = self._check(entity)
        if bad:
            return bad
        row = self._to_row(entity)
        row.pop("id", None)
        res = self._call("create", lambda: self._repo.insert(row))
        if not res.ok:
            return res
        created = self._from_row(res.value)
        self.cache.put(created)
        log.info("%s %s created", self.kind, getattr(created, "id"))
        return Result.success("created", created)

    def update(self, entity_id: int, entity: T) -> Result[T]:
        if self.is_pending(entity_id):
            return Result.failure("in_flight", f"{self.kind} {entity_id} has a pending change")
        bad = self._check(entity)
        if bad:
            return bad
        row = self._to_row(entity)
        row.pop("id", None)
        with self._guard(entity_id):
            res = self._call("update", lambda: self._repo.update(entity_id, row))
        if not res.ok:
            return res
        updated = self._from_row(res.value)
        self.cache.put(updated)
        log.info("%s %s updated", self.kind, entity_id)
        return Result.success("updated", updated)

    def delete(self, entity_id: int) -> Result[None]:
        if self.is_pending(entity_id):
            return Result.failure("in_flight", f"{self.kind} {entity_id} has a pending change")
        with self._guard(entity_id):
            res = self._call("delete", lambda: self._repo.delete(entity_id))
        if not res.ok:
            return res
        self.cache.remove(entity_id)
        log.info("%s %s deleted", self.kind, entity_id)
        return Result.success("deleted")


class ProjectFacade(EntityFacade[Project]):
    kind = "project"

    def _validate(self, entity: Project) -> None:
        validation.validate_project(entity)

    def _to_row(self, entity: Project) -> Dict[str, Any]:
        return transform.project_to_row(entity)

    def _from_row(self, row: Dict[str, Any]) -> Project:
        return transform.project_from_row(row)


class TaskFacade(EntityFacade[Task]):
    kind = "task"

    def _validate(self, entity: Task) -> None:
        validation.validate_task(entity)

    def _to_row(self, entity: Task) -> Dict[str, Any]:
        return transform.task_to_row(entity)

    def _from_row(self, row: Dict[str, Any]) -> Task:
        return transform.task_from_row(row)

    def add_hours(self, task_id: int, entry: TimeEntry) -> Result[Task]:
        """Commit a work session: record the entry and add its hours to the task."""
        if entry.hours_worked <= 0:
            return Result.failure("validation", "worked time must be greater than 0")
        if self.is_pending(task_id):
            return Result.failure("in_flight", f"task {task_id} has a pending change")
        row = transform.time_entry_to_row(replace(entry, task_id=task_id))
        row.pop("id", None)
        with self._guard(task_id):
            res = self._call("log time on", lambda: self._repo.add_time(task_id, row))
        if not res.ok:
            return res
        task = self._from_row(res.value)
        self.cache.put(task)
        log.info("task %s: +%.4fh (actual %.4fh)", task_id, entry.hours_worked, task.actual_hours)
        return Result.success("updated", task)


class ExpenseFacade(EntityFacade[Expense]):
    kind = "expense"

    def _validate(self, entity: Expense) -> None:
        validation.validate_expense(entity)

    def _to_row(self, entity: Expense) -> Dict[str, Any]:
        return transform.expense_to_row(entity)

    def _from_row(self, row: Dict[str, Any]) -> Expense:
        return transform.expense_from_row(row)

    def set_status(self, expense_id: int, status: str) -> Result[Expense]:
        current = self.cache.get(expense_id)
        if current is None:
            return Result.failure("not_found", f"expense {expense_id} is not loaded")
        return self.update(expense_id, replace(current, status=status))


class RequirementFacade(EntityFacade[Requirement]):
    kind = "requirement"

    def _validate(self, entity: Requirement) -> None:
        validation.validate_requirement(entity)

    def _to_row(self, entity: Requirement) -> Dict[str, Any]:
        return transform.requirement_to_row(entity)

    def _from_row(self, row: Dict[str, Any]) -> Requirement:
        return transform.requirement_from_row(row)
