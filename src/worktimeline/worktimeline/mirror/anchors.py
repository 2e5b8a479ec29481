"""Anchor table: where every row lands on the sheet and which cells it refers to.

Built in one pass over the entries, in export order, before any formula is
emitted. Worker and posting-date anchors live across consecutive chained
entries and are reset by an unchained one; duration, pause and manual PDTV
anchors are per operation group; auto PDTV anchors are per entry.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from ..core.enums import TimeMode
from ..core.exceptions import FormulaMirrorGapError
from ..history.model import HistoryEntry
from ..scheduling.model import ScheduleRow
from .layout import SEPARATOR_ROW

_REQUIRED_ROW_FIELDS = (
    "ordinal",
    "position",
    "worker_index",
    "start",
    "end",
    "pause",
    "posting_date",
    "duration_value",
)


@dataclass(frozen=True)
class RowPlacement:
    entry_index: int
    row: ScheduleRow
    sheet_row: int
    is_entry_first: bool
    is_group_first: bool
    group_row: int
    # Data row whose end date/time feeds this row's start; None for a literal start.
    prev_row: Optional[int]
    worker_row: int
    posting_row: int
    pdtv_row: int
    pdtv_delta: int
    # Individual mode: key of the same worker's previous row in this entry.
    lookup_key: Optional[str] = None


@dataclass(frozen=True)
class EntryPlacement:
    index: int
    entry: HistoryEntry
    header_row: int
    column_header_row: int
    first_data_row: int
    last_data_row: int
    report_header_row: int
    report_rows: tuple[int, ...]
    chained: bool
    rows: tuple[RowPlacement, ...]


class AnchorTable:
    def __init__(self, entries: Sequence[EntryPlacement]):
        self.entries = list(entries)

    @property
    def last_row(self) -> int:
        if not self.entries:
            return SEPARATOR_ROW
        tail = self.entries[-1]
        return tail.report_header_row + len(tail.report_rows) + 1


def _check_entry(index: int, entry: HistoryEntry) -> None:
    if entry.lunch is None:
        raise FormulaMirrorGapError(f"Entry {index} has no lunch configuration")
    if not entry.rows:
        raise FormulaMirrorGapError(f"Entry {index} has no rows")
    for i, row in enumerate(entry.rows):
        for name in _REQUIRED_ROW_FIELDS:
            if getattr(row, name, None) is None:
                raise FormulaMirrorGapError(f"Entry {index} row {i} lacks {name}")
        if row.pdtv_auto and row.pdtv_offset is None:
            raise FormulaMirrorGapError(f"Entry {index} row {i} is auto-numbered but has no PDTV offset")


def build_anchor_table(entries: Sequence[HistoryEntry]) -> AnchorTable:
    sheet_row = SEPARATOR_ROW
    worker_rows: dict[int, int] = {}
    posting_row: Optional[int] = None
    previous_last_row: Optional[int] = None
    out: list[EntryPlacement] = []

    for index, entry in enumerate(entries):
        _check_entry(index, entry)
        chained = entry.chain and previous_last_row is not None
        if not entry.chain:
            worker_rows = {}
            posting_row = None

        header_row = sheet_row + 1
        column_header_row = sheet_row + 2
        first_data_row = sheet_row + 3
        rows = sorted(entry.rows, key=lambda r: (r.position, r.worker_index))
        first_position = rows[0].position

        group_rows: dict[int, int] = {}
        previous_of_worker: dict[int, ScheduleRow] = {}
        pdtv_anchor: Optional[tuple[int, int]] = None
        placements: list[RowPlacement] = []
        for i, row in enumerate(rows):
            current = first_data_row + i
            is_group_first = row.position not in group_rows
            if is_group_first:
                group_rows[row.position] = current
            worker_rows.setdefault(row.worker_index, current)
            if posting_row is None:
                posting_row = current

            if row.pdtv_auto:
                if pdtv_anchor is None:
                    pdtv_anchor = (current, row.pdtv_offset)
                pdtv_row, pdtv_delta = pdtv_anchor[0], row.pdtv_offset - pdtv_anchor[1]
            else:
                pdtv_row, pdtv_delta = group_rows[row.position], 0

            if i == 0:
                prev_row = previous_last_row if chained else None
            else:
                prev_row = current - 1

            lookup_key = None
            if entry.time_mode == TimeMode.INDIVIDUAL and row.position != first_position:
                previous = previous_of_worker.get(row.worker_index)
                if previous is None:
                    raise FormulaMirrorGapError(
                        f"Entry {index}: worker {row.worker_index} has no row before operation {row.ordinal}"
                    )
                lookup_key = previous.key
            previous_of_worker[row.worker_index] = row

            placements.append(
                RowPlacement(
                    entry_index=index,
                    row=row,
                    sheet_row=current,
                    is_entry_first=i == 0,
                    is_group_first=is_group_first,
                    group_row=group_rows[row.position],
                    prev_row=prev_row,
                    worker_row=worker_rows[row.worker_index],
                    posting_row=posting_row,
                    pdtv_row=pdtv_row,
                    pdtv_delta=pdtv_delta,
                    lookup_key=lookup_key,
                )
            )

        last_data_row = first_data_row + len(rows) - 1
        report_header_row = last_data_row + 1
        report_rows = tuple(range(report_header_row + 1, report_header_row + 1 + len(entry.report_lines)))
        out.append(
            EntryPlacement(
                index=index,
                entry=entry,
                header_row=header_row,
                column_header_row=column_header_row,
                first_data_row=first_data_row,
                last_data_row=last_data_row,
                report_header_row=report_header_row,
                report_rows=report_rows,
                chained=chained,
                rows=tuple(placements),
            )
        )
        # Blank separator row after the report lines.
        sheet_row = report_header_row + len(report_rows) + 1
        previous_last_row = last_data_row

    return AnchorTable(out)
