"""Formula expressions for the fixed sheet layout.

Nodes render to spreadsheet formula text and can be evaluated with exact
fractions against a cell lookup. Only the functions the mirror emits are
supported.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal, localcontext
from fractions import Fraction
from typing import Callable, Protocol, Sequence, Union

from ..core.constants import SECONDS_PER_DAY

Scalar = Union[Fraction, int, bool, str]


class CellSource(Protocol):
    def cell(self, column: str, row: int) -> Scalar:
        raise NotImplementedError


def format_number(value) -> str:
    value = Fraction(value)
    if value.denominator == 1:
        return str(value.numerator)
    with localcontext() as ctx:
        ctx.prec = 40
        text = Decimal(value.numerator) / Decimal(value.denominator)
    if Fraction(text) == value:
        return format(text.normalize(), "f")
    return f"({value.numerator}/{value.denominator})"


class Expr:
    def render(self) -> str:
        raise NotImplementedError

    def evaluate(self, source: CellSource) -> Scalar:
        raise NotImplementedError

    def formula(self) -> str:
        return "=" + self.render()

    def __add__(self, other) -> "Expr":
        return BinOp("+", self, wrap(other))

    def __radd__(self, other) -> "Expr":
        return BinOp("+", wrap(other), self)

    def __sub__(self, other) -> "Expr":
        return BinOp("-", self, wrap(other))

    def __rsub__(self, other) -> "Expr":
        return BinOp("-", wrap(other), self)

    def __mul__(self, other) -> "Expr":
        return BinOp("*", self, wrap(other))

    def __truediv__(self, other) -> "Expr":
        return BinOp("/", self, wrap(other))

    def __lt__(self, other) -> "Expr":
        return BinOp("<", self, wrap(other))

    def __le__(self, other) -> "Expr":
        return BinOp("<=", self, wrap(other))

    def __gt__(self, other) -> "Expr":
        return BinOp(">", self, wrap(other))

    def __ge__(self, other) -> "Expr":
        return BinOp(">=", self, wrap(other))


@dataclass(frozen=True, eq=False)
class Num(Expr):
    value: Fraction

    def render(self) -> str:
        return format_number(self.value)

    def evaluate(self, source: CellSource) -> Scalar:
        return Fraction(self.value)


@dataclass(frozen=True, eq=False)
class Text(Expr):
    value: str

    def render(self) -> str:
        return '"' + self.value.replace('"', '""') + '"'

    def evaluate(self, source: CellSource) -> Scalar:
        return self.value


@dataclass(frozen=True, eq=False)
class Ref(Expr):
    column: str
    row: int

    def render(self) -> str:
        return f"{self.column}{self.row}"

    def evaluate(self, source: CellSource) -> Scalar:
        return source.cell(self.column, self.row)


@dataclass(frozen=True, eq=False)
class Range(Expr):
    column: str
    first: int
    last: int

    def render(self) -> str:
        return f"{self.column}{self.first}:{self.column}{self.last}"

    def evaluate(self, source: CellSource) -> Scalar:
        raise TypeError("A range is only valid as a function argument")

    def values(self, source: CellSource) -> list[Scalar]:
        return [source.cell(self.column, r) for r in range(self.first, self.last + 1)]


_BINARY: dict[str, Callable[[Scalar, Scalar], Scalar]] = {
    "+": lambda a, b: a + b,
    "-": lambda a, b: a - b,
    "*": lambda a, b: a * b,
    "/": lambda a, b: Fraction(a) / Fraction(b),
    "<": lambda a, b: a < b,
    "<=": lambda a, b: a <= b,
    ">": lambda a, b: a > b,
    ">=": lambda a, b: a >= b,
    "=": lambda a, b: a == b,
}


@dataclass(frozen=True, eq=False)
class BinOp(Expr):
    op: str
    left: Expr
    right: Expr

    def render(self) -> str:
        return f"({self.left.render()}{self.op}{self.right.render()})"

    def evaluate(self, source: CellSource) -> Scalar:
        return _BINARY[self.op](self.left.evaluate(source), self.right.evaluate(source))


@dataclass(frozen=True, eq=False)
class Func(Expr):
    name: str
    args: tuple[Expr, ...]

    def render(self) -> str:
        return f"{self.name}({','.join(a.render() for a in self.args)})"

    def evaluate(self, source: CellSource) -> Scalar:
        try:
            impl = _FUNCTIONS[self.name]
        except KeyError:
            raise NotImplementedError(f"Function {self.name} is not supported") from None
        return impl(self.args, source)


def _if(args: Sequence[Expr], source: CellSource) -> Scalar:
    return args[1].evaluate(source) if args[0].evaluate(source) else args[2].evaluate(source)


def _and(args: Sequence[Expr], source: CellSource) -> Scalar:
    return all(a.evaluate(source) for a in args)


def _or(args: Sequence[Expr], source: CellSource) -> Scalar:
    return any(a.evaluate(source) for a in args)


def _mod(args: Sequence[Expr], source: CellSource) -> Scalar:
    return Fraction(args[0].evaluate(source)) % Fraction(args[1].evaluate(source))


def _int(args: Sequence[Expr], source: CellSource) -> Scalar:
    return Fraction(math.floor(Fraction(args[0].evaluate(source))))


def _abs(args: Sequence[Expr], source: CellSource) -> Scalar:
    return abs(Fraction(args[0].evaluate(source)))


def _time(args: Sequence[Expr], source: CellSource) -> Scalar:
    h, m, s = (math.trunc(Fraction(a.evaluate(source))) for a in args)
    return Fraction(h * 3600 + m * 60 + s, SECONDS_PER_DAY) % 1


def _match(args: Sequence[Expr], source: CellSource) -> Scalar:
    needle = args[0].evaluate(source)
    haystack = _range(args[1]).values(source)
    for i, value in enumerate(haystack, start=1):
        if value == needle:
            return Fraction(i)
    raise LookupError(f"MATCH found no {needle!r} in {args[1].render()}")


def _index(args: Sequence[Expr], source: CellSource) -> Scalar:
    cells = _range(args[0])
    offset = int(args[1].evaluate(source)) - 1
    if not 0 <= offset <= cells.last - cells.first:
        raise LookupError(f"INDEX position {offset + 1} is outside {cells.render()}")
    return source.cell(cells.column, cells.first + offset)


def _countif(args: Sequence[Expr], source: CellSource) -> Scalar:
    needle = args[1].evaluate(source)
    return Fraction(sum(1 for v in _range(args[0]).values(source) if v == needle))


def _text(args: Sequence[Expr], source: CellSource) -> Scalar:
    value = math.trunc(_number(args[0].evaluate(source)))
    pattern = args[1].evaluate(source)
    if not pattern or set(pattern) != {"0"}:
        raise NotImplementedError(f"TEXT format {pattern!r} is not supported")
    return str(value).zfill(len(pattern))


def _value(args: Sequence[Expr], source: CellSource) -> Scalar:
    return _number(args[0].evaluate(source))


def _number(value: Scalar) -> Fraction:
    if isinstance(value, str):
        return Fraction(value.strip())
    return Fraction(value)


def _range(expr: Expr) -> Range:
    if not isinstance(expr, Range):
        raise TypeError(f"Expected a range, got {expr.render()}")
    return expr


_FUNCTIONS = {
    "IF": _if,
    "AND": _and,
    "OR": _or,
    "MOD": _mod,
    "INT": _int,
    "ABS": _abs,
    "TIME": _time,
    "MATCH": _match,
    "INDEX": _index,
    "COUNTIF": _countif,
    "TEXT": _text,
    "VALUE": _value,
}


def wrap(value) -> Expr:
    if isinstance(value, Expr):
        return value
    if isinstance(value, str):
        return Text(value)
    return Num(Fraction(value))


def call(name: str, *args) -> Func:
    return Func(name, tuple(wrap(a) for a in args))


def if_(condition, then, otherwise) -> Func:
    return call("IF", condition, then, otherwise)


def and_(*conditions) -> Func:
    return call("AND", *conditions)


def or_(*conditions) -> Func:
    return call("OR", *conditions)


def mod1(value) -> Func:
    return call("MOD", value, 1)


def int_(value) -> Func:
    return call("INT", value)


def time_(hour: int, minute: int, second: int = 0) -> Func:
    return call("TIME", hour, minute, second)


def abs_(value) -> Func:
    return call("ABS", value)
