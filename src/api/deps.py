"""Dependency container for action handlers."""

from __future__ import annotations

import random
from dataclasses import dataclass

from src.db.memory import InMemoryRoomRepository
from src.db.repository import RoomRepository
from src.game.engine import GameEngine
from src.lobby.manager import ExpiryPolicy, RoomManager
from src.lobby.sessions import SessionRegistry
from src.utils.constants import SESSION_TIMEOUT
from src.utils.locks import RoomLocks


@dataclass
class Deps:
    """Bundles all dependencies for handler functions."""

    engine: GameEngine
    manager: RoomManager
    room_repo: RoomRepository
    sessions: SessionRegistry
    locks: RoomLocks


def create_deps(
    policy: ExpiryPolicy | None = None,
    session_timeout: float = SESSION_TIMEOUT,
    rng: random.Random | None = None,
) -> Deps:
    """Wire an in-memory server: one repository, one lock table, shared by all."""
    room_repo = InMemoryRoomRepository()
    locks = RoomLocks()
    sessions = SessionRegistry(timeout=session_timeout)
    engine = GameEngine(room_repo, locks, rng)
    manager = RoomManager(room_repo, engine, sessions, locks, policy)
    return Deps(
        engine=engine,
        manager=manager,
        room_repo=room_repo,
        sessions=sessions,
        locks=locks,
    )
