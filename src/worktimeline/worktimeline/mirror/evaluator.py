from __future__ import annotations

from datetime import date
from fractions import Fraction

from ..common.datetime_utils import date_to_serial
from .expr import Expr, Scalar
from .layout import SheetLayout


class SheetEvaluator:
    """Evaluates a mirrored sheet with exact fractions.

    Empty cells read as 0, dates as their serial number. Results are memoised
    per cell; a reference cycle raises ``RecursionError`` like any other
    runaway recursion.
    """

    def __init__(self, layout: SheetLayout):
        self.layout = layout
        self._cache: dict[tuple[str, int], Scalar] = {}

    def cell(self, column: str, row: int) -> Scalar:
        key = (column, row)
        if key not in self._cache:
            self._cache[key] = self._compute(column, row)
        return self._cache[key]

    def _compute(self, column: str, row: int) -> Scalar:
        mirrored = self.layout.get(column, row)
        if mirrored is None:
            return Fraction(0)
        value = mirrored.value
        if isinstance(value, Expr):
            return value.evaluate(self)
        if isinstance(value, date):
            return Fraction(date_to_serial(value))
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float, Fraction)):
            return Fraction(value)
        return value

    def serial(self, date_column: str, time_column: str, row: int) -> Fraction:
        """Date cell plus time cell of one row, as a serial date-time."""
        return Fraction(self.cell(date_column, row)) + Fraction(self.cell(time_column, row))
