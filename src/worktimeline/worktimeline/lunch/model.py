from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction

from ..core.constants import DEFAULT_LUNCH_HOUR, DEFAULT_LUNCH_MINUTE, DEFAULT_LUNCH_MINUTES, MAX_LUNCH_MINUTES, MINUTES_PER_DAY
from ..core.exceptions import InvalidConfigurationError


@dataclass(frozen=True)
class LunchWindow:
    """Domain value: one daily lunch interval [start, start + duration)."""

    hour: int
    minute: int
    duration_minutes: Fraction

    @property
    def start(self) -> Fraction:
        return Fraction(self.hour * 60 + self.minute, MINUTES_PER_DAY)

    @property
    def duration(self) -> Fraction:
        return Fraction(self.duration_minutes) / MINUTES_PER_DAY

    @property
    def end(self) -> Fraction:
        """End as a time of day; may exceed 1 when lunch runs past midnight."""
        return self.start + self.duration

    @property
    def is_active(self) -> bool:
        return not (self.hour == 0 and self.minute == 0)

    def contains(self, time_of_day: Fraction) -> bool:
        return self.start <= time_of_day < self.end

    def label(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


@dataclass(frozen=True)
class LunchConfig:
    """Two optional lunch windows sharing one duration.

    A window starting at 00:00 is inactive. ``windows()`` always yields the
    active ones sorted by start, whatever order they were configured in.
    """

    hour: int = DEFAULT_LUNCH_HOUR
    minute: int = DEFAULT_LUNCH_MINUTE
    second_hour: int = 0
    second_minute: int = 0
    duration_minutes: Fraction = Fraction(DEFAULT_LUNCH_MINUTES)

    def __post_init__(self):
        for name in ("hour", "second_hour"):
            value = getattr(self, name)
            if not 0 <= value <= 23:
                raise InvalidConfigurationError(f"Lunch {name} out of range: {value}")
        for name in ("minute", "second_minute"):
            value = getattr(self, name)
            if not 0 <= value <= 59:
                raise InvalidConfigurationError(f"Lunch {name} out of range: {value}")
        if not 0 <= self.duration_minutes <= MAX_LUNCH_MINUTES:
            raise InvalidConfigurationError(
                f"Lunch duration must be between 0 and {MAX_LUNCH_MINUTES} minutes, got {self.duration_minutes}"
            )

    @property
    def first(self) -> LunchWindow:
        return LunchWindow(self.hour, self.minute, Fraction(self.duration_minutes))

    @property
    def second(self) -> LunchWindow:
        return LunchWindow(self.second_hour, self.second_minute, Fraction(self.duration_minutes))

    def windows(self) -> list[LunchWindow]:
        if self.duration_minutes == 0:
            return []
        active = [w for w in (self.first, self.second) if w.is_active]
        return sorted(active, key=lambda w: w.start)

    def to_dict(self) -> dict:
        return {
            "h": self.hour,
            "m": self.minute,
            "h2": self.second_hour,
            "m2": self.second_minute,
            "dur": str(self.duration_minutes),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LunchConfig":
        return cls(
            hour=int(data.get("h", 0)),
            minute=int(data.get("m", 0)),
            second_hour=int(data.get("h2", 0)),
            second_minute=int(data.get("m2", 0)),
            duration_minutes=Fraction(str(data.get("dur", DEFAULT_LUNCH_MINUTES))),
        )
