# ==========================================================
#  File: routetrack/Services/owner_locks.py
#  Per-owner mutual exclusion for trip state changes.
#  One lock per owner id, created on demand and dropped when
#  no thread holds or waits for it.
# ==========================================================

from contextlib import contextmanager
from typing import Dict, Iterator
import threading


class _OwnerLock:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = threading.Lock()
        self.users = 0


class OwnerLockRegistry:
    """
    Hands out one exclusive lock per owner identity.

    - Different owners never share a lock
    - The registry lock is held only to look up or release entries, never
      while an owner's critical section runs
    - Entries are reference counted and removed once unused
    """

    def __init__(self):
        self._locks: Dict[str, _OwnerLock] = {}
        self._lock = threading.Lock()

    @contextmanager
    def hold(self, owner_id: str) -> Iterator[None]:
        """Block until ``owner_id``'s lock is acquired; release on exit."""
        with self._lock:
            entry = self._locks.get(owner_id)
            if entry is None:
                entry = _OwnerLock()
                self._locks[owner_id] = entry
            entry.users += 1

        try:
            with entry.lock:
                yield
        finally:
            with self._lock:
                entry.users -= 1
                if entry.users == 0:
                    del self._locks[owner_id]

    def active_owner_count(self) -> int:
        """Number of owners currently holding or waiting for their lock."""
        with self._lock:
            return len(self._locks)


# ==========================================================
# Shared instance (one per process)
# ==========================================================
owner_locks = OwnerLockRegistry()
