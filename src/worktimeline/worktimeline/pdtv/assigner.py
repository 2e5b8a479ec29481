"""Confirmation number (PDTV) assignment.

Normal operations get a contiguous run in ordinal order; the operations marked
"last" and "penultimate" are carved out of that run and receive its final two
numbers, so the paperwork stays contiguous even when the last operation actually
performed is not last in the edited list.
"""

from __future__ import annotations

from typing import Optional

from ..common.validators import digits_only
from ..core.constants import PDTV_WIDTH
from ..core.exceptions import InvalidConfigurationError
from .model import PdtvState


def offset(ordinal: int, total_ops: int, state: PdtvState) -> int:
    """Distance of an operation's number from ``first_id``."""
    if state.last is not None and ordinal == state.last:
        return total_ops - 1
    if state.penultimate is not None and ordinal == state.penultimate:
        return total_ops - 2

    position = ordinal
    if state.last is not None and ordinal > state.last:
        position -= 1
    if state.penultimate is not None and ordinal > state.penultimate:
        position -= 1
    return position - 1


def format_number(number: int) -> str:
    return str(number).zfill(PDTV_WIDTH)


def label(ordinal: int, total_ops: int, state: PdtvState) -> str:
    first = state.first_number
    if first is None:
        return str(ordinal)
    return format_number(first + offset(ordinal, total_ops, state))


def normalize_override(value: Optional[str]) -> Optional[str]:
    """Manual confirmation ids are digits, left-padded to the PDTV width."""
    digits = digits_only(value)
    if not digits:
        return None
    return digits if len(digits) >= PDTV_WIDTH else digits.zfill(PDTV_WIDTH)


def resolve_label(ordinal: int, total_ops: int, state: PdtvState, override: Optional[str] = None) -> str:
    if state.auto and state.numbered:
        return label(ordinal, total_ops, state)
    return normalize_override(override) or label(ordinal, total_ops, state)


def validate_state(state: PdtvState, total_ops: int) -> None:
    for name in ("last", "penultimate"):
        value = getattr(state, name)
        if value is not None and not 1 <= value <= total_ops:
            raise InvalidConfigurationError(f"{name} operation {value} is outside 1..{total_ops}")
    if state.penultimate is not None and total_ops < 2:
        raise InvalidConfigurationError("A penultimate operation needs at least two operations")
