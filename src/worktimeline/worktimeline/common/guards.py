from __future__ import annotations

import logging
import threading
from typing import Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SingleFlight:
    """Allows at most one in-flight call; overlapping calls are dropped, not queued."""

    def __init__(self, name: str):
        self.name = name
        self._lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def run(self, fn: Callable[[], T]) -> Optional[T]:
        if not self._lock.acquire(blocking=False):
            logger.warning("%s already in progress, call ignored", self.name)
            return None
        try:
            return fn()
        finally:
            self._lock.release()
