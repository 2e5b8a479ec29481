from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from fractions import Fraction
from typing import Optional

from ..common.datetime_utils import Instant, parse_iso_date
from ..core.enums import DurationUnit, TimeMode
from ..lunch.model import LunchConfig
from ..scheduling.model import ScheduleRow, WorkerSelection


@dataclass(frozen=True)
class HistoryEntry:
    """One calculation run as it is kept in a session's history.

    Entries are append-only; a correction is a new run and a new entry.
    """

    title: str
    rows: tuple[ScheduleRow, ...]
    lunch: Optional[LunchConfig]
    chain: bool = False
    time_mode: TimeMode = TimeMode.TOTAL
    workers: WorkerSelection = field(default_factory=WorkerSelection)
    report_lines: tuple[str, ...] = ()

    @property
    def last_row(self) -> Optional[ScheduleRow]:
        return self.rows[-1] if self.rows else None

    @property
    def pdtv_auto(self) -> bool:
        return bool(self.rows) and self.rows[0].pdtv_auto is True

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "rows": [row_to_dict(r) for r in self.rows],
            "lunch": self.lunch.to_dict() if self.lunch else None,
            "chain": self.chain,
            "time_mode": self.time_mode.value,
            "workers": {"count": self.workers.count, "ids": list(self.workers.ids)},
            "report_lines": list(self.report_lines),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "HistoryEntry":
        workers = data.get("workers") or {}
        lunch = data.get("lunch")
        return cls(
            title=str(data.get("title", "")),
            rows=tuple(row_from_dict(r) for r in data.get("rows") or []),
            lunch=LunchConfig.from_dict(lunch) if lunch else None,
            chain=bool(data.get("chain", False)),
            time_mode=TimeMode(data.get("time_mode", TimeMode.TOTAL.value)),
            workers=WorkerSelection(count=int(workers.get("count", 1)), ids=tuple(workers.get("ids") or ())),
            report_lines=tuple(data.get("report_lines") or ()),
        )


@dataclass(frozen=True)
class Session:
    """Named group of history entries."""

    session_id: str
    name: str
    created_at: datetime


def row_to_dict(row: ScheduleRow) -> dict:
    return {
        "ordinal": row.ordinal,
        "position": row.position,
        "name": row.name,
        "worker_index": row.worker_index,
        "worker": row.worker_label,
        "start": row.start.isoformat(),
        "end": row.end.isoformat(),
        "crossed_lunch": row.crossed_lunch,
        "pause": str(row.pause),
        "pause_unit": row.pause_unit.value,
        "posting_date": row.posting_date.strftime("%Y-%m-%d"),
        "duration": str(row.duration_value),
        "unit": row.duration_unit.value,
        "pdtv": row.pdtv_label,
        "pdtv_auto": row.pdtv_auto,
        "pdtv_offset": row.pdtv_offset,
    }


def _instant(value) -> Optional[Instant]:
    return Instant.from_datetime(datetime.fromisoformat(value)) if value else None


def _date(value) -> Optional[date]:
    return parse_iso_date(value) if value else None


def _fraction(value) -> Optional[Fraction]:
    return Fraction(str(value)) if value is not None else None


def row_from_dict(data: dict) -> ScheduleRow:
    """Rebuild a row from plain data; absent fields stay ``None`` for the mirror to reject."""
    return ScheduleRow(
        ordinal=data.get("ordinal"),
        position=data.get("position"),
        name=str(data.get("name", "")),
        worker_index=data.get("worker_index"),
        worker_label=str(data.get("worker", "")),
        start=_instant(data.get("start")),
        end=_instant(data.get("end")),
        crossed_lunch=bool(data.get("crossed_lunch", False)),
        pause=_fraction(data.get("pause", "0")),
        pause_unit=DurationUnit(data.get("pause_unit", DurationUnit.MINUTE.value)),
        posting_date=_date(data.get("posting_date")),
        duration_value=_fraction(data.get("duration")),
        duration_unit=DurationUnit(data.get("unit", DurationUnit.MINUTE.value)),
        pdtv_label=str(data.get("pdtv", "")),
        pdtv_auto=bool(data.get("pdtv_auto", False)),
        pdtv_offset=data.get("pdtv_offset"),
    )
