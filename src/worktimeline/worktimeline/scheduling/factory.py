from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import TimeMode
from .strategies.base import TimeModeStrategy
from .strategies.individual_strategy import IndividualStrategy
from .strategies.per_worker_strategy import PerWorkerStrategy
from .strategies.total_strategy import TotalStrategy


@dataclass
class TimeModeStrategyFactory:
    """Factory Pattern: choose the duration strategy for a time mode."""

    def for_mode(self, mode: TimeMode) -> TimeModeStrategy:
        if mode == TimeMode.INDIVIDUAL:
            return IndividualStrategy()
        if mode == TimeMode.PER_WORKER:
            return PerWorkerStrategy()
        return TotalStrategy()
