from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from .expr import Expr

LUNCH_MARKER = "\U0001F37D"
FIRST_COLUMN = "B"
LAST_COLUMN = "V"
SETTINGS_ROW = 1
TITLE_ROW = 2
SEPARATOR_ROW = 3
CONFIRMED = "Confirmed"
NOT_CONFIRMED = "Not confirmed"


class Col:
    """Fixed column letters of a timeline data row."""

    ORDINAL = "B"
    NAME = "C"
    LUNCH = "D"
    PAUSE = "E"
    ALT_DURATION = "F"
    PDTV = "G"
    DURATION = "L"
    POSTING_DATE = "O"
    WORKER = "P"
    START_DATE = "R"
    START_TIME = "S"
    END_DATE = "T"
    END_TIME = "U"
    KEY = "V"


class CellKind(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    TIME = "time"
    DATE = "date"


@dataclass(frozen=True)
class MirrorCell:
    """A literal (anchor) or a formula placed in one sheet cell."""

    value: Union[Expr, object]
    kind: CellKind = CellKind.TEXT
    editable: bool = False

    @property
    def is_formula(self) -> bool:
        return isinstance(self.value, Expr)


@dataclass
class SheetLayout:
    cells: dict[tuple[str, int], MirrorCell] = field(default_factory=dict)
    merged: list[tuple[str, int, str]] = field(default_factory=list)
    last_row: int = 0

    def put(self, column: str, row: int, value, kind: CellKind = CellKind.TEXT, *, editable: bool = False) -> None:
        self.cells[(column, row)] = MirrorCell(value=value, kind=kind, editable=editable)
        self.last_row = max(self.last_row, row)

    def merge(self, first_column: str, row: int, last_column: str) -> None:
        self.merged.append((first_column, row, last_column))

    def get(self, column: str, row: int) -> Optional[MirrorCell]:
        return self.cells.get((column, row))


def column_index(letter: str) -> int:
    """1-based index of a single-letter column."""
    return ord(letter.upper()) - ord("A") + 1
