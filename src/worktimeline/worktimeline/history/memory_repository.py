from __future__ import annotations

import secrets
import threading
from dataclasses import replace
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from .model import HistoryEntry, Session


class InMemoryHistoryRepository:
    """Session-scoped history kept in process memory."""

    def __init__(self):
        self._lock = threading.Lock()
        self._sessions: dict[str, Session] = {}
        self._entries: dict[str, list[HistoryEntry]] = {}

    def create_session(self, name: str) -> Session:
        session = Session(session_id=f"session_{secrets.token_hex(8)}", name=name, created_at=now_local())
        with self._lock:
            self._sessions[session.session_id] = session
            self._entries[session.session_id] = []
        return session

    def get_session(self, session_id: str) -> Optional[Session]:
        return self._sessions.get(session_id)

    def list_sessions(self) -> Sequence[Session]:
        return sorted(self._sessions.values(), key=lambda s: s.created_at)

    def rename_session(self, *, session_id: str, name: str) -> bool:
        with self._lock:
            session = self._sessions.get(session_id)
            if not session:
                return False
            self._sessions[session_id] = replace(session, name=name)
        return True

    def delete_session(self, session_id: str) -> bool:
        with self._lock:
            self._entries.pop(session_id, None)
            return self._sessions.pop(session_id, None) is not None

    def append_entry(self, *, session_id: str, entry: HistoryEntry) -> int:
        with self._lock:
            entries = self._entries.setdefault(session_id, [])
            entries.append(entry)
            return len(entries) - 1

    def list_entries(self, session_id: str) -> Sequence[HistoryEntry]:
        return list(self._entries.get(session_id, []))

    def last_entry(self, session_id: str) -> Optional[HistoryEntry]:
        entries = self._entries.get(session_id) or []
        return entries[-1] if entries else None

    def clear_entries(self, session_id: str) -> int:
        with self._lock:
            removed = len(self._entries.get(session_id, []))
            self._entries[session_id] = []
        return removed
