from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from fractions import Fraction
from typing import Optional

from ..common.datetime_utils import Instant, to_day_fraction
from ..core.enums import DurationUnit
from ..core.exceptions import InvalidConfigurationError


@dataclass(frozen=True)
class OperationSpec:
    """Domain entity: one operation of a technology card.

    ``ordinal`` is assigned once and never changes; it joins UI state and
    computed rows. ``workers`` is the set of participating worker slots
    (``None`` means every slot).
    """

    ordinal: int
    name: str
    duration: Fraction
    duration_unit: DurationUnit = DurationUnit.MINUTE
    pause: Fraction = Fraction(0)
    pause_unit: DurationUnit = DurationUnit.MINUTE
    workers: Optional[frozenset[int]] = None
    confirmation_id: Optional[str] = None
    deleted: bool = False

    def __post_init__(self):
        if self.ordinal < 1:
            raise InvalidConfigurationError(f"Operation ordinal must be >= 1, got {self.ordinal}")
        if self.duration < 0:
            raise InvalidConfigurationError(f"Operation {self.ordinal}: duration cannot be negative")
        if self.pause < 0:
            raise InvalidConfigurationError(f"Operation {self.ordinal}: pause cannot be negative")

    @property
    def pause_days(self) -> Fraction:
        return to_day_fraction(self.pause, self.pause_unit)

    def includes(self, worker_index: int) -> bool:
        return self.workers is None or worker_index in self.workers


@dataclass(frozen=True)
class WorkerSelection:
    count: int = 1
    ids: tuple[str, ...] = ()

    def slots(self) -> range:
        return range(1, self.count + 1)


@dataclass(frozen=True)
class ScheduleRow:
    """Read-model: one (operation, worker) line of a computed timeline."""

    ordinal: int
    position: int
    name: str
    worker_index: int
    worker_label: str
    start: Instant
    end: Instant
    crossed_lunch: bool
    pause: Fraction
    pause_unit: DurationUnit
    posting_date: date
    duration_value: Fraction
    duration_unit: DurationUnit
    pdtv_label: str
    pdtv_auto: bool = False
    pdtv_offset: Optional[int] = 0

    @property
    def key(self) -> str:
        return f"{self.position}_{self.worker_index}"


@dataclass(frozen=True)
class ScheduleResult:
    rows: list[ScheduleRow] = field(default_factory=list)
    clock: Optional[Instant] = None
    operation_names: list[str] = field(default_factory=list)
