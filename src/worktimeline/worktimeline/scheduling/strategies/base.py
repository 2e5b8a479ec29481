from __future__ import annotations

from abc import ABC, abstractmethod
from fractions import Fraction


class TimeModeStrategy(ABC):
    """Strategy Pattern: encapsulate how a time mode feeds the running clock."""

    @abstractmethod
    def working_duration(self, raw: Fraction, *, worker_count: int) -> Fraction:
        """Duration (days) the clock advances by."""
        raise NotImplementedError

    @abstractmethod
    def display_duration(self, raw: Fraction, *, worker_count: int) -> Fraction:
        """Duration value (in the operation's own unit) kept for display/export."""
        raise NotImplementedError

    @abstractmethod
    def clock_pause(self, raw: Fraction) -> Fraction:
        raise NotImplementedError
