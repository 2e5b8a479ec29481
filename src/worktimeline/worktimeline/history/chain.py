from __future__ import annotations

from typing import Optional

from ..common.datetime_utils import Instant
from ..core.exceptions import InconsistentChainStateError
from .model import HistoryEntry


def resume_instant(last_entry: Optional[HistoryEntry]) -> Optional[Instant]:
    """Where a chained run starts: the end of the previous entry's last row.

    ``None`` means there is nothing to chain to yet (first run of a session).
    A previous entry that cannot provide an end instant is an error, never a
    silent fallback to an unchained start.
    """
    if last_entry is None:
        return None
    row = last_entry.last_row
    if row is None or row.end is None:
        raise InconsistentChainStateError("Previous history entry has no end time to resume from")
    if last_entry.lunch is None:
        raise InconsistentChainStateError("Previous history entry has no lunch configuration")
    return row.end
