from __future__ import annotations

import re
from fractions import Fraction
from typing import Optional

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


def parse_clock(value: Optional[str]) -> Optional[tuple[int, int, int]]:
    """Parse ``HH:MM`` or ``HH:MM:SS``; ``None`` when malformed."""
    match = _TIME_RE.match(str(value or "").strip())
    if not match:
        return None
    hour, minute, second = int(match.group(1)), int(match.group(2)), int(match.group(3) or 0)
    if hour > 23 or minute > 59 or second > 59:
        return None
    return hour, minute, second


def parse_decimal(value, *, default: Fraction = Fraction(0)) -> Fraction:
    """Parse user numbers ("1,5", "2.25", 3) into an exact non-negative Fraction."""
    if value is None or value == "":
        return default
    text = str(value).strip().replace(",", ".")
    try:
        parsed = Fraction(text)
    except (ValueError, ZeroDivisionError):
        return default
    return max(parsed, Fraction(0))


def digits_only(value) -> str:
    return re.sub(r"[^0-9]", "", str(value or ""))
