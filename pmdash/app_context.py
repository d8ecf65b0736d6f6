# pmdash application context
# Rev 0.2.0

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .repositories.db import Database
from .repositories.sqlite_expense_repository import SQLiteExpenseRepository
from .repositories.sqlite_project_repository import SQLiteProjectRepository
from .repositories.sqlite_requirement_repository import SQLiteRequirementRepository
from .repositories.sqlite_tag_repository import SQLiteTagRepository
from .repositories.sqlite_task_repository import SQLiteTaskRepository
from .repositories.sqlite_time_entry_repository import SQLiteTimeEntryRepository
from .services.entity_facades import ExpenseFacade, ProjectFacade, RequirementFacade, TaskFacade
from .services.formatter import Formatter, SettingsService
from .services.timer_sessions import TimerSessionManager
from .utils.config import KeyValueStorage, default_storage, load_settings
from .utils.logging_setup import get_logger, setup_logging
from .utils.paths import DB_PATH
from .viewmodels.project_viewmodel import ProjectViewModel
from .viewmodels.projects_viewmodel import ProjectsViewModel
from .viewmodels.time_tracker_viewmodel import TimeTrackerViewModel


@dataclass
class AppContext:
    """Central container for shared app resources."""
    db: Database
    projects_repo: SQLiteProjectRepository
    tasks_repo: SQLiteTaskRepository
    expenses_repo: SQLiteExpenseRepository
    requirements_repo: SQLiteRequirementRepository
    tags_repo: SQLiteTagRepository
    time_entries_repo: SQLiteTimeEntryRepository
    settings: SettingsService
    formatter: Formatter
    tick_interval_ms: int = 1000

    @classmethod
    def create(cls, db_path: Path | str = DB_PATH, storage: Optional[KeyValueStorage] = None) -> "AppContext":
        """Open the DB, apply migrations, load settings."""
        log = get_logger("AppContext")
        app_cfg = load_settings()
        db = Database(db_path)
        db.run_migrations()
        tags = SQLiteTagRepository(db)
        settings = SettingsService(storage or default_storage())
        ctx = cls(
            db=db,
            projects_repo=SQLiteProjectRepository(db),
            tasks_repo=SQLiteTaskRepository(db, tags),
            expenses_repo=SQLiteExpenseRepository(db),
            requirements_repo=SQLiteRequirementRepository(db),
            tags_repo=tags,
            time_entries_repo=SQLiteTimeEntryRepository(db),
            settings=settings,
            formatter=Formatter(settings, app_cfg.get("display", {}).get("locale", "es_ES")),
            tick_interval_ms=int(app_cfg.get("timer", {}).get("tick_interval_ms", 1000)),
        )
        log.info("AppContext initialized with DB=%s", db.path)
        return ctx

    # ---- per-view wiring; each view owns its façades and caches
    def projects_viewmodel(self) -> ProjectsViewModel:
        return ProjectsViewModel(ProjectFacade(self.projects_repo), self.tasks_repo, self.expenses_repo)

    def project_viewmodel(self) -> ProjectViewModel:
        return ProjectViewModel(
            ProjectFacade(self.projects_repo),
            TaskFacade(self.tasks_repo),
            ExpenseFacade(self.expenses_repo),
            RequirementFacade(self.requirements_repo),
            self.formatter,
        )

    def time_tracker_viewmodel(self, project_vm: ProjectViewModel) -> TimeTrackerViewModel:
        """Timers commit through the project view's task façade so its cache stays current."""
        sessions = TimerSessionManager(project_vm.tasks)
        vm = TimeTrackerViewModel(sessions, self.tick_interval_ms)
        vm.timeCommitted.connect(project_vm.on_time_committed)
        project_vm.taskDeleted.connect(vm.discard_timer)
        return vm

    def close(self) -> None:
        self.db.close()


def bootstrap(db_path: Path | str = DB_PATH, storage: Optional[KeyValueStorage] = None) -> AppContext:
    """Process entry for a presentation layer: logging first, then the context."""
    setup_logging()
    return AppContext.create(db_path, storage)
