"""Room registry: creation, joining, leaving and idle expiry."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from src.db.repository import RoomRepository
from src.game import notifications
from src.game.engine import GameEngine
from src.game.models import Player, Room
from src.game.notifications import broadcast
from src.lobby.sessions import SessionRegistry
from src.utils.constants import (
    ERR_ALREADY_STARTED,
    ERR_ROOM_FULL,
    ERR_ROOM_NOT_FOUND,
    MAX_NAME_LENGTH,
    MAX_PLAYERS,
    ROOM_MAX_AGE,
    ROOM_STARTED_IDLE,
    ROOM_WAITING_IDLE,
)
from src.utils.crypto import generate_room_code, new_player_id, normalize_room_code
from src.utils.locks import RoomLocks

logger = logging.getLogger("staredown.lobby")


@dataclass
class RoomResult:
    success: bool
    room_id: str | None = None
    player_id: str | None = None
    players: list[dict] = field(default_factory=list)
    room: Room | None = None
    error: str | None = None
    code: str | None = None


@dataclass
class ExpiryPolicy:
    """Idle thresholds in seconds.

    Empty rooms go immediately. The absolute age limit applies to every
    room, however active.
    """

    waiting_idle: float = ROOM_WAITING_IDLE
    started_idle: float = ROOM_STARTED_IDLE
    max_age: float = ROOM_MAX_AGE

    def expiry_reason(self, room: Room, now: datetime) -> str | None:
        if not room.players:
            return "empty"
        if now - room.created_at > timedelta(seconds=self.max_age):
            return "max_age"
        idle = now - room.last_activity
        if room.game_started:
            if idle > timedelta(seconds=self.started_idle):
                return "idle_started"
        elif idle > timedelta(seconds=self.waiting_idle):
            return "idle_waiting"
        return None


@dataclass
class ExpiryReport:
    rooms: list[str] = field(default_factory=list)
    sessions: list[str] = field(default_factory=list)


def display_name(name: str | None, player_id: str) -> str:
    name = (name or "").strip()[:MAX_NAME_LENGTH]
    return name or f"Player {player_id[:4]}"


class RoomManager:
    def __init__(
        self,
        room_repo: RoomRepository,
        game_engine: GameEngine,
        sessions: SessionRegistry,
        locks: RoomLocks,
        policy: ExpiryPolicy | None = None,
    ) -> None:
        self._repo = room_repo
        self._engine = game_engine
        self._sessions = sessions
        self._locks = locks
        self._policy = policy or ExpiryPolicy()

    def create_room(
        self,
        player_name: str | None,
        client_id: str | None = None,
        now: datetime | None = None,
    ) -> RoomResult:
        """Create a room seeded with one player, who is also the dealer."""
        now = now or datetime.now(timezone.utc)
        player_id = new_player_id()
        player = Player(player_id=player_id, name=display_name(player_name, player_id))

        while True:
            code = generate_room_code()
            with self._locks.hold(code):
                if self._repo.get_room(code) is not None:
                    continue
                room = Room(
                    room_id=code,
                    dealer_id=player_id,
                    players=[player],
                    created_at=now,
                    last_activity=now,
                )
                self._repo.save_room(room)
                break

        if client_id:
            self._bind(client_id, code, player_id)

        logger.info(json.dumps({
            "event": "room_created",
            "room_id": code,
            "player_id": player_id,
        }))
        return RoomResult(
            success=True,
            room_id=code,
            player_id=player_id,
            players=[player.public_dict()],
            room=self._repo.get_room(code),
        )

    def join_room(
        self,
        room_id: str,
        player_name: str | None,
        client_id: str | None = None,
    ) -> RoomResult:
        """Take the next seat in a waiting room (lookup is case-insensitive)."""
        code = normalize_room_code(room_id)
        with self._locks.hold(code):
            room = self._repo.get_room(code)
            if room is None:
                return RoomResult(success=False, error="Room not found", code=ERR_ROOM_NOT_FOUND)

            if len(room.players) >= MAX_PLAYERS:
                return RoomResult(
                    success=False,
                    error=f"Room is full (max {MAX_PLAYERS})",
                    code=ERR_ROOM_FULL,
                )

            if room.game_started:
                return RoomResult(
                    success=False,
                    error="Game already started, cannot join",
                    code=ERR_ALREADY_STARTED,
                )

            player_id = new_player_id()
            player = Player(player_id=player_id, name=display_name(player_name, player_id))
            room.add_player(player)
            room.touch()
            broadcast(room, notifications.player_joined(room, player), exclude=player_id)
            self._repo.save_room(room)
            room = self._repo.get_room(code)

        if client_id and self._bind(client_id, code, player_id):
            room = self._repo.get_room(code)

        logger.info(json.dumps({
            "event": "player_joined",
            "room_id": code,
            "player_id": player_id,
            "seats": len(room.players),
        }))
        return RoomResult(
            success=True,
            room_id=code,
            player_id=player_id,
            players=room.roster(),
            room=room,
        )

    def leave_room(
        self,
        room_id: str,
        player_id: str,
        client_id: str | None = None,
    ) -> RoomResult:
        """Release a seat. The last player out deletes the room.

        Leaving does not pause a running game; the turn ring closes over
        the remaining seats.
        """
        code = normalize_room_code(room_id)
        deleted = False
        with self._locks.hold(code):
            room = self._repo.get_room(code)
            if room is None:
                return RoomResult(success=False, error="Room not found", code=ERR_ROOM_NOT_FOUND)

            removed = room.remove_player(player_id)
            if removed is not None:
                seat, player = removed
                if not room.players:
                    self._repo.delete_room(code)
                    deleted = True
                    room = None
                else:
                    self._engine.handle_departure(room, seat, player)
                    broadcast(room, notifications.player_left(room, player))
                    self._repo.save_room(room)
                    room = self._repo.get_room(code)

                logger.info(json.dumps({
                    "event": "player_left",
                    "room_id": code,
                    "player_id": player_id,
                    "room_deleted": deleted,
                }))

        if client_id:
            self._sessions.unbind(client_id)

        return RoomResult(
            success=True,
            room_id=code,
            player_id=player_id,
            players=room.roster() if room else [],
            room=room,
        )

    def expire_idle(self, now: datetime | None = None) -> ExpiryReport:
        """Sweep dead sessions, then empty, idle and over-age rooms."""
        now = now or datetime.now(timezone.utc)
        report = ExpiryReport()

        for session in self._sessions.expire(now):
            report.sessions.append(session.client_id)
            if session.is_bound:
                logger.info(json.dumps({
                    "event": "session_expired",
                    "client_id": session.client_id,
                    "room_id": session.room_id,
                    "player_id": session.player_id,
                }))
                self.leave_room(session.room_id, session.player_id)

        for room_id in self._repo.list_room_ids():
            with self._locks.hold(room_id):
                room = self._repo.get_room(room_id)
                if room is None:
                    continue
                reason = self._policy.expiry_reason(room, now)
                if reason is None:
                    continue
                self._repo.delete_room(room_id)
            report.rooms.append(room_id)
            logger.info(json.dumps({
                "event": "room_expired",
                "room_id": room_id,
                "reason": reason,
            }))

        return report

    def get_room(self, room_id: str) -> Room | None:
        return self._repo.get_room(room_id)

    def _bind(self, client_id: str, room_id: str, player_id: str) -> bool:
        """Bind the client to its new seat and release the seat it held before.

        A client polls for one seat at a time; an abandoned earlier seat would
        otherwise outlive the session. Returns True if a seat was released.
        """
        previous = self._sessions.bind(client_id, room_id, player_id)
        if previous is None:
            return False
        old_room, old_player = previous
        logger.info(json.dumps({
            "event": "session_rebound",
            "client_id": client_id,
            "room_id": old_room,
            "player_id": old_player,
        }))
        self.leave_room(old_room, old_player)
        return True

    def list_rooms(self) -> list[str]:
        return self._repo.list_room_ids()
