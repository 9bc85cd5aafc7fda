"""Polling client for the stare-down action API, using httpx."""

from __future__ import annotations

import logging
import os

import httpx

from src.utils.crypto import new_client_id

logger = logging.getLogger("staredown.client")

DEFAULT_URL = "http://localhost:3000/api/game"


class ActionError(Exception):
    """The server rejected an action."""

    def __init__(self, code: str | None, message: str | None) -> None:
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")


class StareDownClient:
    """Synchronous client. Remembers the room and seat it joined."""

    def __init__(
        self,
        base_url: str | None = None,
        client_id: str | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._url = base_url or os.environ.get("STAREDOWN_API_URL", DEFAULT_URL)
        self.client_id = client_id or new_client_id()
        self._client = client or httpx.Client(timeout=10.0)
        self.room_id: str | None = None
        self.player_id: str | None = None

    def create_room(self, player_name: str | None = None) -> dict:
        data = self._post("create_room", playerName=player_name)
        self.room_id = data["roomId"]
        self.player_id = data["playerId"]
        return data

    def join_room(self, room_id: str, player_name: str | None = None) -> dict:
        data = self._post("join_room", roomId=room_id, playerName=player_name)
        self.room_id = data["roomId"]
        self.player_id = data["playerId"]
        return data

    def leave_room(self) -> dict:
        data = self._post("leave_room", **self._seat())
        self.room_id = None
        self.player_id = None
        return data

    def start_game(self) -> dict:
        return self._post("start_game", **self._seat())

    def play_again(self) -> dict:
        return self._post("play_again", **self._seat())

    def play_cards(self, card_ids: list[str]) -> dict:
        return self._post("play_cards", cards=list(card_ids), **self._seat())

    def pass_turn(self) -> dict:
        return self._post("pass_turn", **self._seat())

    def get_updates(self) -> dict:
        """Poll: returns {"messages": [...], "roomState": {...}}."""
        params = {"clientId": self.client_id, **self._seat()}
        response = self._client.get(self._url, params=params)
        return self._check("get_updates", response)

    def close(self) -> None:
        self._client.close()

    def _seat(self) -> dict:
        if self.room_id is None or self.player_id is None:
            raise ActionError(None, "Not seated in any room")
        return {"roomId": self.room_id, "playerId": self.player_id}

    def _post(self, action: str, **params) -> dict:
        payload = {"action": action, "clientId": self.client_id, **params}
        response = self._client.post(self._url, json=payload)
        return self._check(action, response)

    def _check(self, action: str, response: httpx.Response) -> dict:
        data: dict = response.json()
        if not data.get("success"):
            logger.warning("Action %s rejected: %s", action, data)
            raise ActionError(data.get("code"), data.get("error"))
        return data
