"""
Bounded, most-recent-first history of finished executions.
"""

from __future__ import annotations

import itertools
import logging
from collections import deque
from collections.abc import Callable, Iterator
from datetime import datetime

from pipeboard.schemas import HistoryEntry

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 20


def make_audit_version(ts: datetime) -> str:
    """Build the audit version label recorded with a history entry.

    The label has the form ``v<date>_<epoch millis>``.
    """
    return f"v{ts:%Y-%m-%d}_{int(ts.timestamp() * 1000)}"


class ExecutionHistoryLedger:
    """Append-only ledger of history entries, newest first.

    Entries are inserted at the head. When the ledger grows past its
    capacity the oldest entry is evicted from the tail. Entries are never
    modified or removed otherwise, and identical entries are not merged.

    Args:
        capacity: Maximum number of entries to keep.
        on_append: Optional callback invoked with every appended entry.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_HISTORY_LIMIT,
        on_append: Callable[[HistoryEntry], None] | None = None,
    ) -> None:
        if capacity < 1:
            raise ValueError(f"Ledger capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._entries: deque[HistoryEntry] = deque()
        self._ids = itertools.count(1)
        self._on_append = on_append

    @property
    def capacity(self) -> int:
        return self._capacity

    def next_audit_id(self) -> int:
        """Reserve the audit id for the next entry to be created."""
        return next(self._ids)

    def append(self, entry: HistoryEntry) -> HistoryEntry | None:
        """Insert an entry at the head, evicting the tail if needed.

        Args:
            entry: The finished execution's summary.

        Returns:
            The evicted entry, or None if nothing was evicted.
        """
        self._entries.appendleft(entry)
        evicted = None
        if len(self._entries) > self._capacity:
            evicted = self._entries.pop()
            logger.debug(
                "Evicted history entry %s (audit id %d)",
                evicted.execution_id,
                evicted.audit_id,
            )
        if self._on_append:
            self._on_append(entry)
        return evicted

    def all(self) -> tuple[HistoryEntry, ...]:
        """Return every entry, most recent first."""
        return tuple(self._entries)

    @property
    def latest(self) -> HistoryEntry | None:
        return self._entries[0] if self._entries else None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(self.all())
