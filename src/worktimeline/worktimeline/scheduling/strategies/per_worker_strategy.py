from __future__ import annotations

from fractions import Fraction

from .base import TimeModeStrategy


class PerWorkerStrategy(TimeModeStrategy):
    """Each worker spends the full duration."""

    def working_duration(self, raw: Fraction, *, worker_count: int) -> Fraction:
        return raw

    def display_duration(self, raw: Fraction, *, worker_count: int) -> Fraction:
        return raw

    def clock_pause(self, raw: Fraction) -> Fraction:
        return raw
