from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from fractions import Fraction

from ..core.constants import HOURS_PER_DAY, MINUTES_PER_DAY, SECONDS_PER_DAY
from ..core.enums import DurationUnit

# Day zero of spreadsheet date serials (1900 date system).
SERIAL_EPOCH = date(1899, 12, 30).toordinal()


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def to_day_fraction(value: Fraction, unit: DurationUnit) -> Fraction:
    """Convert a minute/hour amount into a fraction of a day."""
    if unit == DurationUnit.HOUR:
        return Fraction(value) / HOURS_PER_DAY
    return Fraction(value) / MINUTES_PER_DAY


def date_to_serial(value: date) -> int:
    return value.toordinal() - SERIAL_EPOCH


@dataclass(frozen=True, order=True)
class Instant:
    """A point in time as (day ordinal, exact fraction of that day).

    ``fraction`` is always normalised into [0, 1), so comparing instants and
    reading the time of day never involve floating point.
    """

    day: int
    fraction: Fraction = Fraction(0)

    @classmethod
    def from_days(cls, value: Fraction) -> "Instant":
        value = Fraction(value)
        day = value.numerator // value.denominator
        return cls(day=day, fraction=value - day)

    @classmethod
    def from_datetime(cls, value: datetime) -> "Instant":
        seconds = value.hour * 3600 + value.minute * 60 + value.second
        fraction = Fraction(seconds, SECONDS_PER_DAY) + Fraction(value.microsecond, SECONDS_PER_DAY * 10**6)
        return cls(day=value.date().toordinal(), fraction=fraction)

    @classmethod
    def combine(cls, on: date, at: time) -> "Instant":
        return cls.from_datetime(datetime.combine(on, at))

    @property
    def value(self) -> Fraction:
        """Absolute position in days."""
        return self.day + self.fraction

    @property
    def date(self) -> date:
        return date.fromordinal(self.day)

    @property
    def serial(self) -> Fraction:
        """Spreadsheet serial number (date serial plus time of day)."""
        return self.day - SERIAL_EPOCH + self.fraction

    def shift(self, days: Fraction) -> "Instant":
        return Instant.from_days(self.value + days)

    def at_time_of_day(self, fraction: Fraction) -> "Instant":
        """Same calendar day, at ``fraction`` (may roll into the next day)."""
        return Instant.from_days(self.day + fraction)

    def to_datetime(self) -> datetime:
        micros = round(self.fraction * SECONDS_PER_DAY * 10**6)
        return datetime.combine(self.date, time()) + timedelta(microseconds=micros)

    def isoformat(self) -> str:
        return self.to_datetime().isoformat()

    def __str__(self) -> str:
        return self.to_datetime().strftime("%Y-%m-%d %H:%M:%S")
