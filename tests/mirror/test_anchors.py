from datetime import date, time
from fractions import Fraction

import pytest

from src.worktimeline.worktimeline.common.datetime_utils import Instant
from src.worktimeline.worktimeline.core.enums import TimeMode
from src.worktimeline.worktimeline.core.exceptions import FormulaMirrorGapError
from src.worktimeline.worktimeline.history.model import HistoryEntry, row_from_dict, row_to_dict
from src.worktimeline.worktimeline.lunch.model import LunchConfig
from src.worktimeline.worktimeline.mirror.anchors import build_anchor_table
from src.worktimeline.worktimeline.mirror.generator import FormulaMirror
from src.worktimeline.worktimeline.pdtv.model import PdtvState
from src.worktimeline.worktimeline.scheduling.model import OperationSpec, WorkerSelection
from src.worktimeline.worktimeline.scheduling.scheduler import Scheduler

DAY = date(2026, 3, 2)
LUNCH = LunchConfig(hour=12, minute=0, duration_minutes=Fraction(45))


def entry(ops_minutes, *, workers: int = 2, chain: bool = False, mode=TimeMode.PER_WORKER, start=time(8, 0), pdtv=None):
    ops = [OperationSpec(i, f"Op {i}", Fraction(m)) for i, m in enumerate(ops_minutes, start=1)]
    result = Scheduler().run(ops, WorkerSelection(workers), LUNCH, mode, Instant.combine(DAY, start), pdtv=pdtv)
    return HistoryEntry(
        title="Card",
        rows=tuple(result.rows),
        lunch=LUNCH,
        chain=chain,
        time_mode=mode,
        workers=WorkerSelection(workers),
        report_lines=("1. a", "2. b"),
    )


def test_rows_are_laid_out_entry_after_entry():
    table = build_anchor_table([entry([30, 20]), entry([10], chain=True), entry([10])])
    first, second, third = table.entries

    assert (first.header_row, first.column_header_row, first.first_data_row, first.last_data_row) == (4, 5, 6, 9)
    assert (first.report_header_row, first.report_rows) == (10, (11, 12))
    assert (second.header_row, second.first_data_row, second.last_data_row) == (14, 16, 17)
    assert (third.header_row, third.first_data_row) == (22, 24)
    assert table.last_row == 29


def test_chained_entry_references_previous_entry_anchors():
    table = build_anchor_table([entry([30, 20]), entry([10], chain=True)])
    head, tail = table.entries[1].rows

    assert table.entries[1].chained is True
    assert head.prev_row == 9
    assert (head.worker_row, tail.worker_row) == (6, 7)
    assert head.posting_row == tail.posting_row == 6
    assert tail.group_row == head.sheet_row


def test_unchained_entry_resets_worker_and_posting_anchors():
    table = build_anchor_table([entry([30]), entry([10])])
    head = table.entries[1].rows[0]

    assert table.entries[1].chained is False
    assert head.prev_row is None
    assert head.worker_row == head.posting_row == head.sheet_row


def test_auto_numbering_anchors_once_per_entry():
    pdtv = PdtvState(first_id="500", last=1, auto=True)
    rows = build_anchor_table([entry([10, 10, 10], workers=1, pdtv=pdtv)]).entries[0].rows

    assert [r.pdtv_row for r in rows] == [6, 6, 6]
    assert [r.pdtv_delta for r in rows] == [0, -2, -1]


def test_entry_without_lunch_is_rejected():
    broken = HistoryEntry(title="x", rows=entry([10]).rows, lunch=None)

    with pytest.raises(FormulaMirrorGapError):
        FormulaMirror().build([broken])


def test_entry_without_rows_is_rejected():
    with pytest.raises(FormulaMirrorGapError):
        FormulaMirror().build([HistoryEntry(title="x", rows=(), lunch=LUNCH)])


def test_row_missing_end_is_rejected():
    good = entry([10], workers=1)
    data = row_to_dict(good.rows[0])
    del data["end"]
    broken = HistoryEntry(title="x", rows=(row_from_dict(data),), lunch=LUNCH)

    with pytest.raises(FormulaMirrorGapError):
        build_anchor_table([broken])


def test_auto_numbered_row_without_offset_is_rejected():
    good = entry([10], workers=1, pdtv=PdtvState(first_id="1", auto=True))
    data = row_to_dict(good.rows[0])
    data["pdtv_offset"] = None
    broken = HistoryEntry(title="x", rows=(row_from_dict(data),), lunch=LUNCH)

    with pytest.raises(FormulaMirrorGapError):
        build_anchor_table([broken])


def test_individual_worker_without_previous_row_is_rejected():
    ops = [
        OperationSpec(1, "Op 1", Fraction(10), workers=frozenset({1})),
        OperationSpec(2, "Op 2", Fraction(10), workers=frozenset({1, 2})),
    ]
    result = Scheduler().run(ops, WorkerSelection(2), LUNCH, TimeMode.PER_WORKER, Instant.combine(DAY, time(8, 0)))
    broken = HistoryEntry(title="x", rows=tuple(result.rows), lunch=LUNCH, time_mode=TimeMode.INDIVIDUAL)

    with pytest.raises(FormulaMirrorGapError):
        build_anchor_table([broken])


def test_individual_lookup_uses_the_workers_previous_row():
    ops = [
        OperationSpec(1, "Op 1", Fraction(10)),
        OperationSpec(2, "Op 2", Fraction(10), workers=frozenset()),
        OperationSpec(3, "Op 3", Fraction(10)),
    ]
    result = Scheduler().run(ops, WorkerSelection(2), LUNCH, TimeMode.PER_WORKER, Instant.combine(DAY, time(8, 0)))
    individual = HistoryEntry(title="x", rows=tuple(result.rows), lunch=LUNCH, time_mode=TimeMode.INDIVIDUAL)

    rows = build_anchor_table([individual]).entries[0].rows

    assert [r.row.key for r in rows] == ["1_1", "1_2", "3_1", "3_2"]
    assert [r.lookup_key for r in rows] == [None, None, "1_1", "1_2"]
