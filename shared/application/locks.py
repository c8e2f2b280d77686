"""
Keyed Locks

Process-local mutual exclusion scoped by a key (e.g. a venue id or a
reservation id). Two callers contend only when they use the same key, so
reservations for different venues never wait on each other.

Database-level row locks (SELECT FOR UPDATE) are taken in addition to these
by the Django stores; this registry covers the single-process case and the
in-memory stores, where no database lock exists.
"""

from contextlib import contextmanager
from typing import Dict, Hashable, Iterator
import logging
import threading

logger = logging.getLogger(__name__)


class _Entry:
    __slots__ = ('lock', 'holders')

    def __init__(self):
        self.lock = threading.Lock()
        self.holders = 0


class KeyedLock:
    """Registry of per-key locks; entries are dropped when unused."""

    def __init__(self):
        self._mutex = threading.Lock()
        self._entries: Dict[Hashable, _Entry] = {}

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with self._mutex:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = _Entry()
            entry.holders += 1

        entry.lock.acquire()
        try:
            yield
        finally:
            entry.lock.release()
            with self._mutex:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._entries[key]

    def __len__(self) -> int:
        with self._mutex:
            return len(self._entries)


# Global lock registry shared by every engine in this process
keyed_lock = KeyedLock()
