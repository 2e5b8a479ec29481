from __future__ import annotations

from fractions import Fraction

from .base import TimeModeStrategy


class IndividualStrategy(TimeModeStrategy):
    """Durations and pauses are recorded for export only; the clock stands still."""

    def working_duration(self, raw: Fraction, *, worker_count: int) -> Fraction:
        return Fraction(0)

    def display_duration(self, raw: Fraction, *, worker_count: int) -> Fraction:
        return raw

    def clock_pause(self, raw: Fraction) -> Fraction:
        return Fraction(0)
