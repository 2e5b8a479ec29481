from __future__ import annotations

from enum import Enum


class TimeMode(str, Enum):
    """How an operation's duration is applied to the running clock."""

    TOTAL = "total"
    PER_WORKER = "per_worker"
    INDIVIDUAL = "individual"


class DurationUnit(str, Enum):
    MINUTE = "min"
    HOUR = "hour"


class SortMode(str, Enum):
    """Calculation order of operations."""

    SEQUENTIAL = "sequential"
    CONFIRMATION = "confirmation"
