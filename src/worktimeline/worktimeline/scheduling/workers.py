from __future__ import annotations

from dataclasses import replace
from typing import Sequence

from ..common.validators import digits_only
from ..core.constants import WORKER_ID_WIDTH
from .model import OperationSpec, WorkerSelection


def worker_label(index: int, selection: WorkerSelection) -> str:
    """Configured worker number (digits, padded to 8) or the slot number."""
    if index - 1 < len(selection.ids):
        digits = digits_only(selection.ids[index - 1])
        if digits:
            return digits if len(digits) >= WORKER_ID_WIDTH else digits.zfill(WORKER_ID_WIDTH)
    return str(index)


def selected_workers(op: OperationSpec, selection: WorkerSelection) -> list[int]:
    return [w for w in selection.slots() if op.includes(w)]


def apply_worker_chain(ops: Sequence[OperationSpec], selection: WorkerSelection) -> list[OperationSpec]:
    """Once a worker is left out of an operation, leave it out of every later one.

    ``ops`` must be in calculation order; soft-deleted operations do not break a chain.
    """
    dropped: set[int] = set()
    out: list[OperationSpec] = []
    for op in ops:
        if op.deleted:
            out.append(op)
            continue
        keep = frozenset(w for w in selection.slots() if op.includes(w) and w not in dropped)
        dropped.update(w for w in selection.slots() if w not in keep)
        out.append(replace(op, workers=keep))
    return out
