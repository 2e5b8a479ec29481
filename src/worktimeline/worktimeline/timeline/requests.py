"""Boundary parsing: raw JSON payloads into core values.

Out-of-range input is clamped or defaulted here, so the core only ever sees
values it can validate strictly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from fractions import Fraction
from typing import Any, Optional

from ..common.datetime_utils import Instant, parse_iso_date
from ..common.validators import parse_clock, parse_decimal
from ..core.constants import DEFAULT_LUNCH_HOUR, DEFAULT_LUNCH_MINUTE, DEFAULT_LUNCH_MINUTES, MAX_LUNCH_MINUTES, MAX_OPERATIONS, MAX_WORKERS
from ..core.enums import DurationUnit, SortMode, TimeMode
from ..core.exceptions import ValidationError
from ..lunch.model import LunchConfig
from ..pdtv.model import PdtvState
from ..reports.service import ReportInput
from ..scheduling.model import OperationSpec, WorkerSelection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimelineRequest:
    operations: list[OperationSpec]
    workers: WorkerSelection
    lunch: LunchConfig
    time_mode: TimeMode = TimeMode.TOTAL
    sort_mode: SortMode = SortMode.SEQUENTIAL
    chain: bool = False
    start: Optional[Instant] = None
    posting_date: Optional[date] = None
    pdtv: PdtvState = field(default_factory=PdtvState)
    card_name: str = "Manual input"
    order: str = ""
    report: ReportInput = field(default_factory=ReportInput)


def _enum(cls, value, default):
    try:
        return cls(value)
    except ValueError:
        return default


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def _int_or_none(value, field_name: str) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a whole number, got {value!r}") from None


def parse_lunch(data: Optional[dict], *, default_start: str = "", default_duration=DEFAULT_LUNCH_MINUTES) -> LunchConfig:
    """Lunch times fall back to 12:00 (first) and 00:00 (second, i.e. off)."""
    data = data or {}
    first = parse_clock(data.get("start")) or parse_clock(default_start) or (DEFAULT_LUNCH_HOUR, DEFAULT_LUNCH_MINUTE, 0)
    second = parse_clock(data.get("second_start")) or (0, 0, 0)
    duration = parse_decimal(data.get("duration"), default=Fraction(default_duration))
    duration = min(duration, Fraction(MAX_LUNCH_MINUTES))
    return LunchConfig(
        hour=first[0],
        minute=first[1],
        second_hour=second[0],
        second_minute=second[1],
        duration_minutes=duration,
    )


def parse_workers(data: Optional[dict], *, max_workers: int = MAX_WORKERS) -> WorkerSelection:
    data = data or {}
    try:
        count = int(data.get("count", 1))
    except (TypeError, ValueError):
        count = 1
    count = _clamp(count, 1, max_workers)
    ids = tuple(str(v or "").strip() for v in (data.get("ids") or ()))[:count]
    return WorkerSelection(count=count, ids=ids)


def parse_operation(data: dict, *, default_ordinal: int, worker_count: int) -> OperationSpec:
    try:
        ordinal = int(data.get("ordinal") or default_ordinal)
    except (TypeError, ValueError):
        ordinal = default_ordinal
    workers = data.get("workers")
    selected = None
    if workers is not None:
        slots = (_int_or_none(w, "worker") for w in workers)
        selected = frozenset(w for w in slots if w is not None and 1 <= w <= worker_count)
    confirmation = data.get("confirmation_id")
    return OperationSpec(
        ordinal=max(ordinal, 1),
        name=str(data.get("name") or "").strip(),
        duration=parse_decimal(data.get("duration")),
        duration_unit=_enum(DurationUnit, data.get("unit"), DurationUnit.MINUTE),
        pause=parse_decimal(data.get("pause")),
        pause_unit=_enum(DurationUnit, data.get("pause_unit"), DurationUnit.MINUTE),
        workers=selected,
        confirmation_id=str(confirmation) if confirmation else None,
        deleted=bool(data.get("deleted", False)),
    )


def parse_pdtv(data: Optional[dict]) -> PdtvState:
    data = data or {}
    last = _int_or_none(data.get("last"), "last")
    penultimate = _int_or_none(data.get("penultimate"), "penultimate")
    return PdtvState(
        first_id=str(data.get("first_id") or "").strip(),
        last=last,
        penultimate=penultimate,
        auto=bool(data.get("auto", False)),
    )


def parse_start(value: Any) -> Optional[Instant]:
    if not value:
        return None
    try:
        return Instant.from_datetime(datetime.fromisoformat(str(value)))
    except ValueError:
        raise ValidationError(f"Start must be an ISO date-time, got {value!r}") from None


def parse_timeline_request(
    data: Optional[dict],
    *,
    max_operations: int = MAX_OPERATIONS,
    max_workers: int = MAX_WORKERS,
    default_lunch_start: str = "",
    default_lunch_duration=DEFAULT_LUNCH_MINUTES,
) -> TimelineRequest:
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")

    workers = parse_workers(data.get("workers"), max_workers=max_workers)
    raw_ops = list(data.get("operations") or [])
    if len(raw_ops) > max_operations:
        logger.warning("Request has %d operations, keeping the first %d", len(raw_ops), max_operations)
        raw_ops = raw_ops[:max_operations]
    operations = [
        parse_operation(op or {}, default_ordinal=i, worker_count=workers.count) for i, op in enumerate(raw_ops, start=1)
    ]

    chain = bool(data.get("chain", False))
    time_mode = _enum(TimeMode, data.get("time_mode"), TimeMode.TOTAL)
    if chain and time_mode == TimeMode.INDIVIDUAL:
        logger.info("Individual mode cannot be chained, using total mode")
        time_mode = TimeMode.TOTAL

    posting = data.get("posting_date")
    try:
        posting_date = parse_iso_date(posting) if posting else None
    except ValueError:
        raise ValidationError(f"Posting date must be YYYY-MM-DD, got {posting!r}") from None

    report = data.get("report") or {}
    return TimelineRequest(
        operations=operations,
        workers=workers,
        lunch=parse_lunch(data.get("lunch"), default_start=default_lunch_start, default_duration=default_lunch_duration),
        time_mode=time_mode,
        sort_mode=_enum(SortMode, data.get("sort_mode"), SortMode.SEQUENTIAL),
        chain=chain,
        start=parse_start(data.get("start")),
        posting_date=posting_date,
        pdtv=parse_pdtv(data.get("pdtv")),
        card_name=str(data.get("card_name") or "Manual input").strip(),
        order="".join(ch for ch in str(data.get("order") or "") if ch.isdigit())[:12],
        report=ReportInput(
            state_before=str(report.get("state_before") or ""),
            extra_works=str(report.get("extra_works") or ""),
            deviations=str(report.get("deviations") or ""),
            insulation_resistance="".join(ch for ch in str(report.get("insulation_resistance") or "") if ch.isdigit())[:6],
            coefficient_k=str(report.get("coefficient_k") or "")[:5],
        ),
    )
