"""Per-key locks for serializing read-modify-write sequences."""

from __future__ import annotations

import threading
from collections.abc import Hashable, Iterator
from contextlib import contextmanager


class KeyedLock:
    """Hand out one re-usable lock per key and drop it once unused."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[Hashable, tuple[threading.Lock, int]] = {}

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        """Block until ``key`` is free and keep it for the ``with`` body."""
        with self._guard:
            lock, waiters = self._locks.get(key, (None, 0))
            if lock is None:
                lock = threading.Lock()
            self._locks[key] = (lock, waiters + 1)

        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                _, waiters = self._locks[key]
                if waiters <= 1:
                    self._locks.pop(key, None)
                else:
                    self._locks[key] = (lock, waiters - 1)

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
