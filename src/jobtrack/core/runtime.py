from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager


class ColumnLocks:
    """Serializes read-max-order-then-write sequences per (user, column) within this process."""

    def __init__(self) -> None:
        self._locks: dict[tuple[int, int], threading.Lock] = {}
        self._guard = threading.Lock()

    def lock_for(self, user_id: int, column_id: int) -> threading.Lock:
        key = (user_id, column_id)
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, user_id: int, column_id: int) -> Iterator[None]:
        with self.lock_for(user_id, column_id):
            yield

    def forget(self, user_id: int, column_id: int) -> None:
        with self._guard:
            self._locks.pop((user_id, column_id), None)


_COLUMN_LOCKS = ColumnLocks()


def get_column_locks() -> ColumnLocks:
    return _COLUMN_LOCKS
