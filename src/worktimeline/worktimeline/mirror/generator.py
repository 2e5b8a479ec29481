"""Formula mirror: the timeline re-expressed as spreadsheet formulas.

Every data row gets the fixed columns of ``layout.Col``. Inputs a person may
edit (start of an unchained entry, pauses, durations, worker and posting
date anchors) are literals; everything derived from them is a formula built
from the same lunch arithmetic as ``lunch.resolver``, unrolled per window
because formulas cannot loop.
"""

from __future__ import annotations

import logging
from fractions import Fraction
from typing import Optional, Sequence

from ..core.constants import HOURS_PER_DAY, MINUTES_PER_DAY, PDTV_WIDTH
from ..core.enums import DurationUnit, TimeMode
from ..history.model import HistoryEntry
from ..lunch.model import LunchWindow
from .anchors import AnchorTable, EntryPlacement, RowPlacement, build_anchor_table
from .expr import Expr, Range, Ref, abs_, and_, call, if_, int_, mod1, or_, time_, wrap
from .layout import (
    CONFIRMED,
    FIRST_COLUMN,
    LAST_COLUMN,
    LUNCH_MARKER,
    NOT_CONFIRMED,
    SEPARATOR_ROW,
    SETTINGS_ROW,
    TITLE_ROW,
    CellKind,
    Col,
    SheetLayout,
)

logger = logging.getLogger(__name__)

COLUMN_HEADERS = {
    Col.ORDINAL: "No.",
    Col.NAME: "Operation",
    Col.LUNCH: "Lunch",
    Col.PAUSE: "Pause",
    Col.ALT_DURATION: "Alt. duration",
    Col.PDTV: "PDTV",
    Col.DURATION: "Duration",
    Col.POSTING_DATE: "Posting date",
    Col.WORKER: "Worker",
    Col.START_DATE: "Start date",
    Col.START_TIME: "Start time",
    Col.END_DATE: "End date",
    Col.END_TIME: "End time",
    Col.KEY: "Key",
}

REPORT_HEADER = "Report"
SETTINGS_LABEL = "Confirmed entries"

_ONE_SECOND = time_(0, 0, 1)
_PDTV_PATTERN = "0" * PDTV_WIDTH


def unit_divisor(unit: DurationUnit) -> int:
    return HOURS_PER_DAY if unit == DurationUnit.HOUR else MINUTES_PER_DAY


class LunchFormulas:
    """Lunch arithmetic of one entry's windows as formula builders."""

    def __init__(self, windows: Sequence[LunchWindow]):
        self.windows = sorted(windows, key=lambda w: w.start)

    @staticmethod
    def start_of(window: LunchWindow) -> Expr:
        return time_(window.hour, window.minute, 0)

    @staticmethod
    def duration_of(window: LunchWindow) -> Expr:
        minutes = Fraction(window.duration_minutes)
        if minutes.denominator == 1:
            return time_(0, minutes.numerator, 0)
        return wrap(window.duration)

    def end_of(self, window: LunchWindow) -> Expr:
        return self.start_of(window) + self.duration_of(window)

    def shift(self, value: Expr) -> Expr:
        """Move a serial date-time out of every window it starts inside."""
        for window in self.windows:
            start, end = self.start_of(window), self.end_of(window)
            tod = mod1(value)
            value = if_(and_(tod >= start, tod < end), int_(value) + end, value)
        return value

    def covers(self, tod: Expr, relative_end: Expr, window: LunchWindow) -> Expr:
        start = self.start_of(window)
        return or_(
            and_(tod < start, relative_end > start + _ONE_SECOND),
            and_(tod < start + 1, relative_end > start + 1 + _ONE_SECOND),
        )

    def extension(self, tod: Expr, duration: Expr) -> tuple[Expr, list[Expr]]:
        """Total lunch time added to a span, and the per-window cover tests."""
        relative_end = tod + duration
        added: Optional[Expr] = None
        tests: list[Expr] = []
        for window in self.windows:
            test = self.covers(tod, relative_end, window)
            tests.append(test)
            step = if_(test, self.duration_of(window), 0)
            relative_end = relative_end + step
            added = step if added is None else added + step
        return (added if added is not None else wrap(0)), tests

    def marker(self, tod: Expr, tests: Sequence[Expr]) -> Expr | str:
        if not self.windows:
            return ""
        touches = [abs_(tod - mod1(self.end_of(w))) < _ONE_SECOND for w in self.windows]
        return if_(or_(*touches, *tests), LUNCH_MARKER, "")


class FormulaMirror:
    def __init__(self, *, title: str = "Work timeline"):
        self.title = title

    def build(self, entries: Sequence[HistoryEntry]) -> SheetLayout:
        table = build_anchor_table(entries)
        layout = SheetLayout()
        self._sheet_header(layout, table)
        for placement in table.entries:
            self._entry(layout, placement)
        layout.last_row = max(layout.last_row, table.last_row)
        logger.info("Formula mirror built for %d entries, %d rows", len(table.entries), layout.last_row)
        return layout

    def _sheet_header(self, layout: SheetLayout, table: AnchorTable) -> None:
        layout.put(Col.ORDINAL, SETTINGS_ROW, SETTINGS_LABEL)
        status = Range(Col.ORDINAL, SEPARATOR_ROW + 1, max(table.last_row, SEPARATOR_ROW + 1))
        layout.put(Col.NAME, SETTINGS_ROW, call("COUNTIF", status, CONFIRMED), CellKind.NUMBER)
        layout.put(FIRST_COLUMN, TITLE_ROW, self.title)
        layout.merge(FIRST_COLUMN, TITLE_ROW, LAST_COLUMN)

    def _entry(self, layout: SheetLayout, placement: EntryPlacement) -> None:
        entry = placement.entry
        pdtv_mode = "PDTV auto" if entry.pdtv_auto else "PDTV manual"
        layout.put(Col.ORDINAL, placement.header_row, NOT_CONFIRMED, editable=True)
        layout.put(Col.LUNCH, placement.header_row, f"{entry.title} | {entry.time_mode.value} | {pdtv_mode}")
        layout.merge(Col.LUNCH, placement.header_row, LAST_COLUMN)
        for column, text in COLUMN_HEADERS.items():
            layout.put(column, placement.column_header_row, text)

        lunch = LunchFormulas(entry.lunch.windows())
        for row in placement.rows:
            self._data_row(layout, placement, row, lunch)

        layout.put(FIRST_COLUMN, placement.report_header_row, REPORT_HEADER)
        layout.merge(FIRST_COLUMN, placement.report_header_row, LAST_COLUMN)
        for sheet_row, line in zip(placement.report_rows, entry.report_lines):
            layout.put(FIRST_COLUMN, sheet_row, line, editable=True)
            layout.merge(FIRST_COLUMN, sheet_row, LAST_COLUMN)

    def _data_row(self, layout: SheetLayout, entry: EntryPlacement, p: RowPlacement, lunch: LunchFormulas) -> None:
        row, n = p.row, p.sheet_row
        individual = entry.entry.time_mode == TimeMode.INDIVIDUAL

        layout.put(Col.ORDINAL, n, row.ordinal, CellKind.NUMBER)
        layout.put(Col.NAME, n, row.name)
        layout.put(Col.KEY, n, row.key)

        # Pause
        if not p.is_group_first:
            layout.put(Col.PAUSE, n, Ref(Col.PAUSE, p.group_row), CellKind.NUMBER)
        elif p.entry_index == 0 and p.is_entry_first:
            layout.put(Col.PAUSE, n, 0, CellKind.NUMBER)
        else:
            layout.put(Col.PAUSE, n, row.pause, CellKind.NUMBER, editable=True)

        # Duration
        if p.is_group_first or individual:
            layout.put(Col.DURATION, n, row.duration_value, CellKind.NUMBER, editable=True)
        else:
            layout.put(Col.DURATION, n, Ref(Col.DURATION, p.group_row), CellKind.NUMBER)
        duration = Ref(Col.DURATION, n)
        alternate = duration * 60 if row.duration_unit == DurationUnit.HOUR else duration / 60
        layout.put(Col.ALT_DURATION, n, alternate, CellKind.NUMBER)

        # Confirmation number
        if row.pdtv_auto:
            if n == p.pdtv_row:
                layout.put(Col.PDTV, n, row.pdtv_label, editable=True)
            elif p.pdtv_delta == 0:
                layout.put(Col.PDTV, n, Ref(Col.PDTV, p.pdtv_row))
            else:
                number = call("VALUE", Ref(Col.PDTV, p.pdtv_row)) + p.pdtv_delta
                layout.put(Col.PDTV, n, call("TEXT", number, _PDTV_PATTERN))
        elif n == p.group_row:
            layout.put(Col.PDTV, n, row.pdtv_label, editable=True)
        else:
            layout.put(Col.PDTV, n, Ref(Col.PDTV, p.group_row))

        # Worker and posting date
        if n == p.worker_row:
            layout.put(Col.WORKER, n, row.worker_label, editable=True)
        else:
            layout.put(Col.WORKER, n, Ref(Col.WORKER, p.worker_row))
        if n == p.posting_row:
            layout.put(Col.POSTING_DATE, n, row.posting_date, CellKind.DATE, editable=True)
        else:
            layout.put(Col.POSTING_DATE, n, Ref(Col.POSTING_DATE, p.posting_row), CellKind.DATE)

        self._start(layout, entry, p, lunch)
        self._end(layout, p, lunch)

    def _start(self, layout: SheetLayout, entry: EntryPlacement, p: RowPlacement, lunch: LunchFormulas) -> None:
        row, n = p.row, p.sheet_row
        pause = Ref(Col.PAUSE, n) / unit_divisor(row.pause_unit)

        if p.lookup_key is not None:
            # The worker's previous row is always above; the range stops short of this row.
            above = entry.first_data_row, n - 1
            index = call("MATCH", p.lookup_key, Range(Col.KEY, *above), 0)
            previous_end = call("INDEX", Range(Col.END_DATE, *above), index) + call(
                "INDEX", Range(Col.END_TIME, *above), index
            )
            self._put_start(layout, n, lunch.shift(previous_end + pause))
        elif p.prev_row is None:
            layout.put(Col.START_DATE, n, row.start.date, CellKind.DATE, editable=True)
            layout.put(Col.START_TIME, n, row.start.fraction, CellKind.TIME, editable=True)
        elif not p.is_group_first:
            layout.put(Col.START_DATE, n, Ref(Col.START_DATE, n - 1), CellKind.DATE)
            layout.put(Col.START_TIME, n, Ref(Col.START_TIME, n - 1), CellKind.TIME)
        else:
            previous_end = Ref(Col.END_DATE, p.prev_row) + Ref(Col.END_TIME, p.prev_row)
            self._put_start(layout, n, lunch.shift(previous_end + pause))

    @staticmethod
    def _put_start(layout: SheetLayout, n: int, start: Expr) -> None:
        layout.put(Col.START_DATE, n, int_(start), CellKind.DATE)
        layout.put(Col.START_TIME, n, mod1(start), CellKind.TIME)

    @staticmethod
    def _end(layout: SheetLayout, p: RowPlacement, lunch: LunchFormulas) -> None:
        row, n = p.row, p.sheet_row
        tod = Ref(Col.START_TIME, n)
        duration = Ref(Col.DURATION, n) / unit_divisor(row.duration_unit)
        added, tests = lunch.extension(tod, duration)
        end = Ref(Col.START_DATE, n) + tod + duration + added
        layout.put(Col.END_DATE, n, int_(end), CellKind.DATE)
        layout.put(Col.END_TIME, n, mod1(end), CellKind.TIME)
        layout.put(Col.LUNCH, n, lunch.marker(tod, tests))
