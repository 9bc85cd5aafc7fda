"""Client session tracking for liveness.

A client token is an opaque string sent by polling clients with every
request. It carries no authority; it only records when the client was last
seen and which seat it currently occupies, so that an abandoned seat can be
released once the client stops polling.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from src.utils.constants import SESSION_TIMEOUT


@dataclass
class Session:
    client_id: str
    last_seen: datetime
    room_id: str | None = None
    player_id: str | None = None

    @property
    def is_bound(self) -> bool:
        return self.room_id is not None and self.player_id is not None


class SessionRegistry:
    def __init__(self, timeout: float = SESSION_TIMEOUT) -> None:
        self._timeout = timedelta(seconds=timeout)
        self._sessions: dict[str, Session] = {}
        self._guard = threading.Lock()

    def touch(self, client_id: str, now: datetime | None = None) -> Session:
        """Record activity, creating the session on first sight."""
        now = now or datetime.now(timezone.utc)
        with self._guard:
            session = self._sessions.get(client_id)
            if session is None:
                session = Session(client_id=client_id, last_seen=now)
                self._sessions[client_id] = session
            else:
                session.last_seen = now
            return session

    def bind(
        self, client_id: str, room_id: str, player_id: str
    ) -> tuple[str, str] | None:
        """Point the session at a seat. Returns the (room_id, player_id) it
        was bound to before, if any; the caller releases that seat."""
        with self._guard:
            session = self._sessions.get(client_id)
            if session is None:
                session = Session(
                    client_id=client_id, last_seen=datetime.now(timezone.utc)
                )
                self._sessions[client_id] = session
            previous = (session.room_id, session.player_id) if session.is_bound else None
            session.room_id = room_id
            session.player_id = player_id
            return previous

    def unbind(self, client_id: str) -> None:
        with self._guard:
            session = self._sessions.get(client_id)
            if session is not None:
                session.room_id = None
                session.player_id = None

    def get(self, client_id: str) -> Session | None:
        with self._guard:
            return self._sessions.get(client_id)

    def expire(self, now: datetime | None = None) -> list[Session]:
        """Drop sessions not seen within the timeout and return them."""
        now = now or datetime.now(timezone.utc)
        with self._guard:
            expired = [
                s for s in self._sessions.values()
                if now - s.last_seen > self._timeout
            ]
            for session in expired:
                del self._sessions[session.client_id]
        return expired

    def __len__(self) -> int:
        return len(self._sessions)
