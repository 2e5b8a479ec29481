from __future__ import annotations

import io
import logging
from datetime import date
from fractions import Fraction
from typing import Optional

import pandas as pd
from openpyxl.utils import get_column_letter

from ..common.guards import SingleFlight
from ..core.exceptions import ValidationError
from ..history.repository import HistoryRepository
from ..mirror.generator import FormulaMirror
from ..mirror.layout import LAST_COLUMN, CellKind, MirrorCell, SheetLayout, column_index

logger = logging.getLogger(__name__)

NUMBER_FORMATS = {
    CellKind.DATE: "DD.MM.YYYY",
    CellKind.TIME: "HH:MM:SS",
    CellKind.NUMBER: "General",
}
MAX_SHEET_TITLE = 31


def cell_value(cell: MirrorCell):
    """What a mirrored cell looks like once written to the workbook."""
    if cell.is_formula:
        return cell.value.formula()
    value = cell.value
    if isinstance(value, bool) or isinstance(value, (str, date)):
        return value
    if isinstance(value, Fraction):
        return value.numerator if value.denominator == 1 else float(value)
    return value


def layout_to_frame(layout: SheetLayout) -> pd.DataFrame:
    """Dense A..last-column grid; row 0 of the frame is sheet row 1."""
    width = column_index(LAST_COLUMN)
    grid = [[None] * width for _ in range(layout.last_row)]
    for (column, row), cell in layout.cells.items():
        grid[row - 1][column_index(column) - 1] = cell_value(cell)
    return pd.DataFrame(grid, columns=[get_column_letter(i) for i in range(1, width + 1)])


class SpreadsheetExportService:
    def __init__(
        self,
        history: HistoryRepository,
        *,
        mirror: FormulaMirror | None = None,
        sheet_title: str = "Timeline",
    ):
        self._history = history
        self._mirror = mirror or FormulaMirror()
        self._sheet_title = (sheet_title or "Timeline")[:MAX_SHEET_TITLE]
        self._flight = SingleFlight("spreadsheet export")

    @property
    def busy(self) -> bool:
        return self._flight.busy

    def export(self, session_id: str) -> Optional[io.BytesIO]:
        """Workbook bytes for a session, or ``None`` while another export runs."""
        return self._flight.run(lambda: self._export(session_id))

    def _export(self, session_id: str) -> io.BytesIO:
        entries = self._history.list_entries(session_id)
        if not entries:
            raise ValidationError("There is nothing to export: the history is empty")

        layout = self._mirror.build(entries)
        df = layout_to_frame(layout)

        out = io.BytesIO()
        with pd.ExcelWriter(out, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, header=False, sheet_name=self._sheet_title)
            ws = writer.sheets[self._sheet_title]
            for (column, row), cell in layout.cells.items():
                fmt = NUMBER_FORMATS.get(cell.kind)
                if fmt:
                    ws[f"{column}{row}"].number_format = fmt
            for first, row, last in layout.merged:
                ws.merge_cells(f"{first}{row}:{last}{row}")
        out.seek(0)
        logger.info("Exported session %s: %d entries, %d sheet rows", session_id, len(entries), layout.last_row)
        return out
