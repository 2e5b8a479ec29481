from dataclasses import dataclass, field
from fractions import Fraction

import pytest

from src.worktimeline.worktimeline.mirror.expr import Num, Range, Ref, Text, and_, call, if_, mod1, time_


@dataclass
class FakeCells:
    values: dict = field(default_factory=dict)

    def cell(self, column: str, row: int):
        return self.values.get((column, row), Fraction(0))


def test_formula_text_is_fully_parenthesized():
    tod = Ref("S", 5)

    expr = if_(and_(tod >= time_(12, 0, 0), tod < time_(12, 45, 0)), 1, 0)

    assert expr.formula() == "=IF(AND((S5>=TIME(12,0,0)),(S5<TIME(12,45,0))),1,0)"


def test_numbers_render_exactly():
    assert Num(Fraction(5)).render() == "5"
    assert Num(Fraction(-2)).render() == "-2"
    assert Num(Fraction(1, 4)).render() == "0.25"
    assert Num(Fraction(1, 3)).render() == "(1/3)"
    assert Text('say "hi"').render() == '"say ""hi"""'


def test_time_and_mod_evaluate_to_exact_day_fractions():
    cells = FakeCells({("S", 1): Fraction(3, 2)})

    assert time_(0, 90, 0).evaluate(cells) == Fraction(90, 1440)
    assert time_(12, 0, 1).evaluate(cells) == Fraction(12 * 3600 + 1, 86400)
    assert mod1(Ref("S", 1)).evaluate(cells) == Fraction(1, 2)
    assert call("INT", Ref("S", 1)).evaluate(cells) == 1


def test_index_match_looks_up_by_key():
    cells = FakeCells(
        {
            ("V", 1): "1_1",
            ("V", 2): "1_2",
            ("V", 3): "2_1",
            ("T", 3): Fraction(46000),
        }
    )
    position = call("MATCH", "2_1", Range("V", 1, 3), 0)

    assert position.evaluate(cells) == 3
    assert call("INDEX", Range("T", 1, 3), position).evaluate(cells) == 46000
    with pytest.raises(LookupError):
        call("MATCH", "3_1", Range("V", 1, 3), 0).evaluate(cells)


def test_index_reads_only_the_selected_cell():
    class OnlyRowTwo(FakeCells):
        def cell(self, column: str, row: int):
            if row != 2:
                raise AssertionError(f"{column}{row} should not be read")
            return Fraction(7)

    assert call("INDEX", Range("T", 1, 5), 2).evaluate(OnlyRowTwo()) == 7
    with pytest.raises(LookupError):
        call("INDEX", Range("T", 1, 5), 6).evaluate(OnlyRowTwo())


def test_confirmation_number_arithmetic_keeps_padding():
    cells = FakeCells({("G", 6): "0000000005"})

    expr = call("TEXT", call("VALUE", Ref("G", 6)) + -2, "0000000000")

    assert expr.evaluate(cells) == "0000000003"
    assert expr.render() == 'TEXT((VALUE(G6)+-2),"0000000000")'


def test_countif_counts_matching_cells():
    cells = FakeCells({("B", 4): "Confirmed", ("B", 9): "Not confirmed", ("B", 12): "Confirmed"})

    assert call("COUNTIF", Range("B", 1, 12), "Confirmed").evaluate(cells) == 2


def test_unsupported_function_is_reported():
    with pytest.raises(NotImplementedError):
        call("VLOOKUP", 1).evaluate(FakeCells())
