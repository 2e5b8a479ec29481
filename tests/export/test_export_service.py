from datetime import date, time
from fractions import Fraction

import pytest
from openpyxl import load_workbook

from src.worktimeline.worktimeline.common.datetime_utils import Instant
from src.worktimeline.worktimeline.core.enums import TimeMode
from src.worktimeline.worktimeline.core.exceptions import ValidationError
from src.worktimeline.worktimeline.export.service import SpreadsheetExportService, layout_to_frame
from src.worktimeline.worktimeline.history.memory_repository import InMemoryHistoryRepository
from src.worktimeline.worktimeline.history.model import HistoryEntry
from src.worktimeline.worktimeline.lunch.model import LunchConfig
from src.worktimeline.worktimeline.mirror.generator import FormulaMirror
from src.worktimeline.worktimeline.scheduling.model import OperationSpec, WorkerSelection
from src.worktimeline.worktimeline.scheduling.scheduler import Scheduler

LUNCH = LunchConfig(hour=12, minute=0, duration_minutes=Fraction(45))


def make_entry(chain: bool = False) -> HistoryEntry:
    ops = [OperationSpec(1, "Inspect", Fraction(30)), OperationSpec(2, "Repair", Fraction(45))]
    start = Instant.combine(date(2026, 3, 2), time(11, 45))
    result = Scheduler().run(ops, WorkerSelection(2), LUNCH, TimeMode.PER_WORKER, start)
    return HistoryEntry(
        title="Pump overhaul",
        rows=tuple(result.rows),
        lunch=LUNCH,
        chain=chain,
        time_mode=TimeMode.PER_WORKER,
        workers=WorkerSelection(2),
        report_lines=("1. state", "2. works"),
    )


def make_service(*entries):
    repo = InMemoryHistoryRepository()
    session = repo.create_session("Shift A")
    for entry in entries:
        repo.append_entry(session_id=session.session_id, entry=entry)
    return SpreadsheetExportService(repo, mirror=FormulaMirror(title="Work timeline")), session.session_id


def test_frame_row_zero_is_sheet_row_one():
    layout = FormulaMirror(title="Work timeline").build([make_entry()])

    df = layout_to_frame(layout)

    assert list(df.columns[:3]) == ["A", "B", "C"]
    assert df.iloc[1]["B"] == "Work timeline"
    assert df.iloc[5]["C"] == "Inspect"


def test_workbook_holds_formulas_formats_and_merges():
    service, session_id = make_service(make_entry())

    wb = load_workbook(service.export(session_id))
    ws = wb["Timeline"]

    assert ws["B2"].value == "Work timeline"
    assert ws["C1"].value.startswith("=COUNTIF(B4:B")
    assert ws["B4"].value == "Not confirmed"
    assert ws["C6"].value == "Inspect"
    assert ws["L6"].value == 30
    assert ws["L7"].value == "=L6"
    assert ws["T6"].value.startswith("=INT(")
    assert ws["S8"].value.startswith("=MOD(IF(AND(")
    assert ws["V7"].value == "1_2"
    assert ws["R6"].number_format == "DD.MM.YYYY"
    assert ws["S6"].number_format == "HH:MM:SS"
    merged = {str(r) for r in ws.merged_cells.ranges}
    assert {"B2:V2", "D4:V4", "B10:V10", "B11:V11"} <= merged


def test_chained_entry_references_cells_of_the_previous_one():
    service, session_id = make_service(make_entry(), make_entry(chain=True))

    ws = load_workbook(service.export(session_id))["Timeline"]

    # Second entry: header 14, column header 15, first data row 16.
    assert "T9" in ws["S16"].value
    assert ws["P16"].value == "=P6"
    assert ws["O16"].value == "=O6"


def test_empty_history_cannot_be_exported():
    service, session_id = make_service()

    with pytest.raises(ValidationError):
        service.export(session_id)
