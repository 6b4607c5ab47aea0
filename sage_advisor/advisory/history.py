"""
Bounded in-memory history of (context, result) pairs.

Ring-buffer semantics: once ``capacity`` entries are held, each append
evicts the oldest.  Entries are immutable ``HistoryEntry`` models stamped
with a monotonic ``sequence`` number.

Appends serialize on a lock so insertion order (and therefore ``recent()``)
is well defined under concurrent requests.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from datetime import datetime, timezone

from sage_advisor.models.context import AdvisoryContext
from sage_advisor.models.result import AdvisoryResult, HistoryEntry

logger = logging.getLogger(__name__)


class HistoryStore:
    """Append-only, capacity-bounded history.

    Attributes:
        capacity: Maximum number of entries retained.
    """

    def __init__(self, capacity: int = 100) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}.")
        self.capacity = capacity
        self._entries: deque[HistoryEntry] = deque(maxlen=capacity)
        self._lock = threading.Lock()
        self._sequence = 0

    def __len__(self) -> int:
        return len(self._entries)

    def append(self, context: AdvisoryContext, result: AdvisoryResult) -> HistoryEntry:
        """Record one pair; evicts the oldest entry when full."""
        with self._lock:
            self._sequence += 1
            entry = HistoryEntry(
                sequence=self._sequence,
                context=context,
                result=result,
                recorded_at=datetime.now(tz=timezone.utc),
            )
            if len(self._entries) == self.capacity:
                evicted = self._entries[0]
                logger.debug(
                    "History full (%d); evicting entry #%d", self.capacity, evicted.sequence
                )
            self._entries.append(entry)
        return entry

    def recent(self, n: int | None = None) -> list[HistoryEntry]:
        """Return up to ``n`` most recent entries, newest first.

        ``n`` is capped at ``capacity``; ``None`` means ``capacity``;
        ``n <= 0`` returns an empty list.
        """
        limit = self.capacity if n is None else min(n, self.capacity)
        if limit <= 0:
            return []
        with self._lock:
            snapshot = list(self._entries)
        return snapshot[::-1][:limit]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
