from __future__ import annotations

from fractions import Fraction

from .base import TimeModeStrategy


class TotalStrategy(TimeModeStrategy):
    """The duration is for the whole crew: split it between the workers."""

    def working_duration(self, raw: Fraction, *, worker_count: int) -> Fraction:
        return raw / worker_count if worker_count > 1 else raw

    def display_duration(self, raw: Fraction, *, worker_count: int) -> Fraction:
        return raw / worker_count if worker_count > 1 else raw

    def clock_pause(self, raw: Fraction) -> Fraction:
        return raw
