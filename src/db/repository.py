"""Repository protocol interfaces for room storage."""

from __future__ import annotations

from typing import Protocol

from src.game.models import Room


class RoomRepository(Protocol):
    def get_room(self, room_id: str) -> Room | None:
        ...

    def save_room(self, room: Room) -> None:
        ...

    def delete_room(self, room_id: str) -> None:
        ...

    def list_room_ids(self) -> list[str]:
        ...
