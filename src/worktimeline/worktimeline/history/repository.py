from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import HistoryEntry, Session


class HistoryRepository(Protocol):
    def create_session(self, name: str) -> Session:
        raise NotImplementedError

    def get_session(self, session_id: str) -> Optional[Session]:
        raise NotImplementedError

    def list_sessions(self) -> Sequence[Session]:
        raise NotImplementedError

    def rename_session(self, *, session_id: str, name: str) -> bool:
        raise NotImplementedError

    def delete_session(self, session_id: str) -> bool:
        raise NotImplementedError

    def append_entry(self, *, session_id: str, entry: HistoryEntry) -> int:
        """Append and return the entry's index within the session."""

        raise NotImplementedError

    def list_entries(self, session_id: str) -> Sequence[HistoryEntry]:
        """Entries in creation order (oldest first)."""

        raise NotImplementedError

    def last_entry(self, session_id: str) -> Optional[HistoryEntry]:
        raise NotImplementedError

    def clear_entries(self, session_id: str) -> int:
        raise NotImplementedError
