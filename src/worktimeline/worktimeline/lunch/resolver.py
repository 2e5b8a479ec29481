"""Lunch-conflict resolution shared by the scheduler and the formula mirror.

Both entry points work on time of day only, so windows recur every day and
instants that roll past midnight are handled like any other. A span covers a
window when it starts before the window and reaches more than
``BOUNDARY_TOLERANCE`` past its start; the formula mirror emits exactly the same
comparisons.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from fractions import Fraction
from typing import Sequence

from ..common.datetime_utils import Instant
from ..core.constants import BOUNDARY_TOLERANCE
from .model import LunchWindow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolution:
    instant: Instant
    crossed: bool


def resolve(instant: Instant, windows: Sequence[LunchWindow]) -> Resolution:
    """Move ``instant`` to the end of any window it falls inside.

    Windows are visited in start order, so a shift that lands inside a later
    window is shifted again by that window.
    """
    crossed = False
    for window in sorted(windows, key=lambda w: w.start):
        if window.contains(instant.fraction):
            shifted = instant.at_time_of_day(window.end)
            logger.debug("start %s inside lunch %s, moved to %s", instant, window.label(), shifted)
            instant = shifted
            crossed = True
    return Resolution(instant=instant, crossed=crossed)


def covers(time_of_day: Fraction, relative_end: Fraction, window: LunchWindow) -> bool:
    """True when [time_of_day, relative_end) runs into today's or tomorrow's window."""
    for occurrence in (window.start, window.start + 1):
        if time_of_day < occurrence and relative_end > occurrence + BOUNDARY_TOLERANCE:
            return True
    return False


def extend_interval(start: Instant, end: Instant, windows: Sequence[LunchWindow]) -> Resolution:
    """Add a window's duration to ``end`` for every window the span runs into.

    The span tested against a window already includes the extensions of the
    windows before it.
    """
    time_of_day = start.fraction
    span = end.value - start.value
    crossed = False
    for window in sorted(windows, key=lambda w: w.start):
        if covers(time_of_day, time_of_day + span, window):
            span += window.duration
            crossed = True
    return Resolution(instant=start.shift(span), crossed=crossed)


def touches_window_end(instant: Instant, windows: Sequence[LunchWindow]) -> bool:
    """True when ``instant`` resumes right at the end of a window."""
    return any(abs(instant.fraction - window.end % 1) < BOUNDARY_TOLERANCE for window in windows)
