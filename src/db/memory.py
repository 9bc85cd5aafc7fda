"""In-memory room repository.

Reads hand out deep copies and saves store a deep copy, so a caller that
fails halfway through a mutation never leaves a half-applied room behind.
"""

from __future__ import annotations

import copy
import threading

from src.game.models import Room
from src.utils.crypto import normalize_room_code


class InMemoryRoomRepository:
    def __init__(self) -> None:
        self._rooms: dict[str, Room] = {}
        self._guard = threading.Lock()

    def get_room(self, room_id: str) -> Room | None:
        with self._guard:
            room = self._rooms.get(normalize_room_code(room_id))
            if room is None:
                return None
            return copy.deepcopy(room)

    def save_room(self, room: Room) -> None:
        key = normalize_room_code(room.room_id)
        with self._guard:
            existing = self._rooms.get(key)
            if existing is None and room.version > 1:
                raise ValueError(f"Room {key} was deleted")
            if existing is not None and existing.version != room.version:
                raise ValueError(
                    f"Version conflict: expected {room.version}, found {existing.version}"
                )
            saved = copy.deepcopy(room)
            saved.version = room.version + 1
            self._rooms[key] = saved

    def delete_room(self, room_id: str) -> None:
        with self._guard:
            self._rooms.pop(normalize_room_code(room_id), None)

    def list_room_ids(self) -> list[str]:
        with self._guard:
            return list(self._rooms)

    def __contains__(self, room_id: str) -> bool:
        with self._guard:
            return normalize_room_code(room_id) in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)
