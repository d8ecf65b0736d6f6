# Rev 0.2.0 - one project with its tasks, expenses and requirements
from __future__ import annotations

from typing import Any, Dict, Optional

from PySide6.QtCore import QObject, Signal

from pmdash.models.entities import Expense, Project, Requirement, Task
from pmdash.services import metrics
from pmdash.services.entity_facades import (
    ExpenseFacade,
    ProjectFacade,
    RequirementFacade,
    Result,
    TaskFacade,
)
from pmdash.services.formatter import Formatter


class ProjectViewModel(QObject):
    """
    Emits:
      loaded(project: Project | None)
      tasksReloaded(list[Task]), expensesReloaded(list[Expense]), requirementsReloaded(list[Requirement])
      metricsChanged(dict)     raw figures plus "*_text" display strings
      taskDeleted(task_id)     after a task is removed from the store
      notify(title, message)
    """

    loaded = Signal(object)
    tasksReloaded = Signal(object)
    expensesReloaded = Signal(object)
    requirementsReloaded = Signal(object)
    metricsChanged = Signal(object)
    taskDeleted = Signal(int)
    notify = Signal(str, str)

    def __init__(self, projects: ProjectFacade, tasks: TaskFacade, expenses: ExpenseFacade,
                 requirements: RequirementFacade, formatter: Formatter):
        super().__init__()
        self._projects = projects
        self._tasks = tasks
        self._expenses = expenses
        self._requirements = requirements
        self._fmt = formatter
        self._project: Optional[Project] = None
        formatter.on_settings_changed(self._on_settings_changed)

    @property
    def project(self) -> Optional[Project]:
        return self._project

    @property
    def tasks(self) -> TaskFacade:
        return self._tasks

    # ---- queries
    def load(self, project_id: int) -> bool:
        res = self._projects.load(id=project_id)
        if not self._report(res, "Could not load the project"):
            return False
        self._project = self._projects.get(project_id)
        self.loaded.emit(self._project)
        if self._project is None:
            return False
        ok = all([
            self._report(self._tasks.load(project_id=project_id), "Could not load tasks"),
            self._report(self._expenses.load(project_id=project_id), "Could not load expenses"),
            self._report(self._requirements.load(project_id=project_id), "Could not load requirements"),
        ])
        self._emit_all()
        return ok

    def metrics(self) -> Dict[str, Any]:
        tasks = self._tasks.items()
        expenses = self._expenses.items()
        reqs = self._requirements.items()
        budget = self._project.budget if self._project else 0.0
        spent = metrics.spent_budget(expenses)
        distribution = metrics.task_status_distribution(tasks)
        estimated = metrics.total_estimated_hours(tasks)
        actual = metrics.total_actual_hours(tasks)
        remaining = metrics.remaining_budget(budget, spent)
        out: Dict[str, Any] = {
            "progress": metrics.project_progress(tasks),
            "total_tasks": len(tasks),
            "completed_tasks": metrics.completed_tasks(tasks),
            "budget": budget,
            "spent": spent,
            "budget_utilization": metrics.budget_utilization(spent, budget),
            "remaining_budget": remaining,
            "available_budget": metrics.available_budget(budget, spent),
            "expenses_by_category": metrics.expenses_by_category(expenses),
            "estimated_hours": estimated,
            "actual_hours": actual,
            "efficiency": metrics.efficiency_ratio(tasks),
            "status_distribution": distribution,
            "status_proportions": metrics.status_proportions(distribution),
            "requirement_distribution": metrics.requirement_status_distribution(reqs),
            "requirement_approval_rate": metrics.requirement_approval_rate(reqs),
            "duration_days": metrics.project_duration_days(
                self._project.start_date if self._project else None,
                self._project.end_date if self._project else None,
            ),
        }
        out.update({
            "budget_text": self._fmt.format_currency(budget),
            "spent_text": self._fmt.format_currency(spent),
            "remaining_text": self._fmt.format_currency(remaining),
            "estimated_text": self._fmt.format_time(estimated),
            "actual_text": self._fmt.format_time(actual),
        })
        return out

    # ---- commands
    def save_project(self, project: Project) -> bool:
        res = self._projects.update(project.id, project) if project.id is not None else self._projects.create(project)
        if not self._report(res, "Could not save the project"):
            return False
        self._project = res.value
        self.loaded.emit(self._project)
        self._emit_metrics()
        return True

    def save_task(self, task: Task) -> bool:
        res = self._tasks.update(task.id, task) if task.id is not None else self._tasks.create(task)
        return self._after(res, "Could not save the task", self.tasksReloaded, self._tasks)

    def delete_task(self, task_id: int) -> bool:
        if not self._after(self._tasks.delete(task_id), "Could not delete the task", self.tasksReloaded, self._tasks):
            return False
        self.taskDeleted.emit(task_id)
        return True

    def save_expense(self, expense: Expense) -> bool:
        res = self._expenses.update(expense.id, expense) if expense.id is not None else self._expenses.create(expense)
        return self._after(res, "Could not save the expense", self.expensesReloaded, self._expenses)

    def set_expense_status(self, expense_id: int, status: str) -> bool:
        res = self._expenses.set_status(expense_id, status)
        return self._after(res, "Could not update the expense", self.expensesReloaded, self._expenses)

    def delete_expense(self, expense_id: int) -> bool:
        return self._after(self._expenses.delete(expense_id), "Could not delete the expense",
                           self.expensesReloaded, self._expenses)

    def save_requirement(self, req: Requirement) -> bool:
        res = self._requirements.update(req.id, req) if req.id is not None else self._requirements.create(req)
        return self._after(res, "Could not save the requirement", self.requirementsReloaded, self._requirements)

    def delete_requirement(self, req_id: int) -> bool:
        return self._after(self._requirements.delete(req_id), "Could not delete the requirement",
                           self.requirementsReloaded, self._requirements)

    def on_time_committed(self, task_id: int, hours: float) -> None:
        # TaskFacade already holds the updated task; just re-render
        self.tasksReloaded.emit(self._tasks.items())
        self._emit_metrics()

    def close(self) -> None:
        self._fmt.remove_settings_listener(self._on_settings_changed)
        for f in (self._projects, self._tasks, self._expenses, self._requirements):
            f.detach()

    # ---- internals
    def _on_settings_changed(self, _settings) -> None:
        self._emit_metrics()

    def _report(self, res: Result, fallback: str) -> bool:
        if res.ok:
            return True
        if res.code != "detached":
            self.notify.emit("Error", res.message or fallback)
        return False

    def _after(self, res: Result, fallback: str, signal, facade) -> bool:
        if not self._report(res, fallback):
            return False
        signal.emit(facade.items())
        self._emit_metrics()
        return True

    def _emit_all(self) -> None:
        self.tasksReloaded.emit(self._tasks.items())
        self.expensesReloaded.emit(self._expenses.items())
        self.requirementsReloaded.emit(self._requirements.items())
        self._emit_metrics()

    def _emit_metrics(self) -> None:
        if self._project is not None:
            self.metricsChanged.emit(self.metrics())
