from __future__ import annotations

from dataclasses import dataclass

from .core.constants import DEFAULT_LUNCH_MINUTES, MAX_OPERATIONS, MAX_WORKERS
from .export.service import SpreadsheetExportService
from .history.memory_repository import InMemoryHistoryRepository
from .history.repository import HistoryRepository
from .mirror.generator import FormulaMirror
from .reports.service import ReportService
from .scheduling.factory import TimeModeStrategyFactory
from .scheduling.scheduler import Scheduler
from .timeline.service import TimelineService


@dataclass(frozen=True)
class AppSettings:
    max_operations: int = MAX_OPERATIONS
    max_workers: int = MAX_WORKERS
    default_lunch_start: str = "12:00"
    default_lunch_duration: int = DEFAULT_LUNCH_MINUTES
    export_sheet_title: str = "Timeline"


@dataclass(frozen=True)
class Container:
    settings: AppSettings

    history_repo: HistoryRepository

    scheduler: Scheduler
    report_service: ReportService
    timeline_service: TimelineService
    export_service: SpreadsheetExportService


def build_container(*, settings: AppSettings | None = None, history_repo: HistoryRepository | None = None) -> Container:
    settings = settings or AppSettings()
    history_repo = history_repo or InMemoryHistoryRepository()

    scheduler = Scheduler(
        strategy_factory=TimeModeStrategyFactory(),
        max_operations=settings.max_operations,
        max_workers=settings.max_workers,
    )
    report_service = ReportService()
    timeline_service = TimelineService(history_repo, scheduler=scheduler, reports=report_service)
    export_service = SpreadsheetExportService(
        history_repo,
        mirror=FormulaMirror(title=settings.export_sheet_title),
        sheet_title=settings.export_sheet_title,
    )

    return Container(
        settings=settings,
        history_repo=history_repo,
        scheduler=scheduler,
        report_service=report_service,
        timeline_service=timeline_service,
        export_service=export_service,
    )
