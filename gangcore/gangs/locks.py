"""
Gang Locks - Per-gang exclusive execution.

One RLock per gang ID. Mutations on the same gang run one at a time;
different gangs never contend. Reentrant so a facade operation may
call another facade operation on the same gang.

Entries are reference-counted by holders and waiters and dropped when
the last one leaves, so the registry only holds gangs that are in use.
"""

from __future__ import annotations
from contextlib import contextmanager
from typing import Iterator
import threading


class _LockEntry:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = threading.RLock()
        self.users = 0


class GangLockRegistry:
    """Hands out the lock for each gang ID while anyone needs it."""

    def __init__(self):
        self._entries: dict[str, _LockEntry] = {}
        self._registry_lock = threading.Lock()

    @contextmanager
    def exclusive(self, gang_id: str) -> Iterator[None]:
        """Critical section for one gang's mutations."""
        with self._registry_lock:
            entry = self._entries.get(gang_id)
            if entry is None:
                entry = self._entries[gang_id] = _LockEntry()
            entry.users += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._registry_lock:
                entry.users -= 1
                if entry.users == 0:
                    del self._entries[gang_id]

    def __len__(self) -> int:
        with self._registry_lock:
            return len(self._entries)
