# Rev 0.2.0
# pmdash/viewmodels/projects_viewmodel.py
from __future__ import annotations

from typing import Dict, List, Optional

from PySide6.QtCore import QObject, Signal

from pmdash.models.entities import Project, ProjectSummary
from pmdash.models.transform import expense_from_row, task_from_row
from pmdash.repositories.base import RepositoryError
from pmdash.services import metrics
from pmdash.services.entity_facades import ProjectFacade, Result


class ProjectsViewModel(QObject):
    """
    Project list with derived figures and portfolio KPIs.
    Emits:
      projectsReloaded(summaries: list[ProjectSummary])   filtered
      kpisChanged(kpis: dict)                              over all projects
      notify(title, message)
    """

    projectsReloaded = Signal(object)
    kpisChanged = Signal(dict)
    notify = Signal(str, str)

    def __init__(self, projects: ProjectFacade, tasks_repo, expenses_repo):
        """
        tasks_repo / expenses_repo must expose list(project_id=...) -> list[dict]
        """
        super().__init__()
        self._projects = projects
        self._tasks = tasks_repo
        self._expenses = expenses_repo
        self._search: str = ""
        self._status: Optional[str] = None
        self._summaries: List[ProjectSummary] = []

    # ---- filters
    def set_filters(self, search: str = "", status: Optional[str] = None) -> None:
        self._search = (search or "").strip().lower()
        self._status = None if status in (None, "all") else status
        self.projectsReloaded.emit(self.filtered())

    def filtered(self) -> List[ProjectSummary]:
        out = []
        for s in self._summaries:
            p = s.project
            if self._status and p.status != self._status:
                continue
            if self._search and self._search not in p.name.lower() and self._search not in p.description.lower():
                continue
            out.append(s)
        return out

    def status_counts(self) -> Dict[str, int]:
        counts = {"all": len(self._summaries), "To-do": 0, "Doing": 0, "Finished": 0}
        for s in self._summaries:
            counts[s.status] = counts.get(s.status, 0) + 1
        return counts

    # ---- queries
    def reload(self) -> bool:
        res = self._projects.load()
        if not self._report(res):
            return False
        summaries = []
        for p in res.value:
            try:
                tasks = [task_from_row(r) for r in self._tasks.list(project_id=p.id)]
                expenses = [expense_from_row(r) for r in self._expenses.list(project_id=p.id)]
            except RepositoryError as exc:
                self.notify.emit("Error", f"Could not load figures for {p.name}: {exc}")
                tasks, expenses = [], []
            summaries.append(metrics.summarize_project(p, tasks, expenses))
        self._summaries = summaries
        self.projectsReloaded.emit(self.filtered())
        self.kpisChanged.emit(metrics.portfolio_kpis(summaries))
        return True

    # ---- commands
    def create_project(self, project: Project) -> Optional[Project]:
        res = self._projects.create(project)
        if not self._report(res):
            return None
        self._summaries.insert(0, metrics.summarize_project(res.value))
        self.projectsReloaded.emit(self.filtered())
        self.kpisChanged.emit(metrics.portfolio_kpis(self._summaries))
        return res.value

    def delete_project(self, project_id: int) -> bool:
        res = self._projects.delete(project_id)
        if not self._report(res):
            return False
        self._summaries = [s for s in self._summaries if s.id != project_id]
        self.projectsReloaded.emit(self.filtered())
        self.kpisChanged.emit(metrics.portfolio_kpis(self._summaries))
        return True

    def close(self) -> None:
        self._projects.detach()

    def _report(self, res: Result) -> bool:
        if res.ok:
            return True
        if res.code != "detached":
            self.notify.emit("Error", res.message)
        return False
