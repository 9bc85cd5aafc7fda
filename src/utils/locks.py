"""Per-room mutual exclusion."""

from __future__ import annotations

import threading
from collections import Counter
from collections.abc import Iterator
from contextlib import contextmanager

from src.utils.crypto import normalize_room_code


class RoomLocks:
    """One lock per room id. Different rooms never contend.

    An entry exists only while some caller holds or waits on it, so codes
    that never name a room (or name an expired one) leave nothing behind.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._users: Counter[str] = Counter()

    @contextmanager
    def hold(self, room_id: str) -> Iterator[None]:
        key = normalize_room_code(room_id)
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._users[key] += 1
        try:
            with lock:
                yield
        finally:
            with self._guard:
                self._users[key] -= 1
                if self._users[key] == 0:
                    del self._users[key]
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
