from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Optional

from ..common.datetime_utils import Instant, now_local
from ..common.guards import SingleFlight
from ..core.exceptions import ValidationError
from ..history.chain import resume_instant
from ..history.model import HistoryEntry
from ..history.repository import HistoryRepository
from ..reports.service import ReportService
from ..scheduling.scheduler import Scheduler
from .requests import TimelineRequest

logger = logging.getLogger(__name__)


class TimelineService:
    def __init__(
        self,
        history: HistoryRepository,
        *,
        scheduler: Scheduler | None = None,
        reports: ReportService | None = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._history = history
        self._scheduler = scheduler or Scheduler()
        self._reports = reports or ReportService()
        self._clock = clock
        self._flight = SingleFlight("timeline generation")

    @property
    def busy(self) -> bool:
        return self._flight.busy

    def _start(self, session_id: str, request: TimelineRequest, now: datetime) -> tuple[Instant, Optional[date]]:
        """Start instant and posting date; a chained run inherits both from the last entry."""
        if request.chain:
            last = self._history.last_entry(session_id)
            resumed = resume_instant(last)
            if resumed is not None:
                return resumed, request.posting_date or last.last_row.posting_date
        if request.start is not None:
            return request.start, request.posting_date
        return Instant.from_datetime(now.replace(second=0, microsecond=0)), request.posting_date

    def generate(self, session_id: str, request: TimelineRequest) -> Optional[HistoryEntry]:
        """Run one calculation and append it to the session's history.

        Returns ``None`` when another generation is still running.
        """
        return self._flight.run(lambda: self._generate(session_id, request))

    def _generate(self, session_id: str, request: TimelineRequest) -> HistoryEntry:
        if not self._history.get_session(session_id):
            raise ValidationError(f"Session {session_id} does not exist")

        now = self._clock()
        start, posting_date = self._start(session_id, request, now)
        result = self._scheduler.run(
            request.operations,
            request.workers,
            request.lunch,
            request.time_mode,
            start,
            pdtv=request.pdtv,
            posting_date=posting_date,
            sort_mode=request.sort_mode,
            lock_first_pause=self._history.last_entry(session_id) is None,
        )

        entry = HistoryEntry(
            title=self._reports.build_title(card_name=request.card_name, order=request.order, generated_at=now),
            rows=tuple(result.rows),
            lunch=request.lunch,
            chain=request.chain,
            time_mode=request.time_mode,
            workers=request.workers,
            report_lines=self._reports.build_lines(request.report, result.operation_names),
        )
        index = self._history.append_entry(session_id=session_id, entry=entry)
        logger.info("Session %s: entry %d generated from %s to %s", session_id, index, start, result.clock)
        return entry
