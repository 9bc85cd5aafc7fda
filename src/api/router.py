"""Action router: dispatches decoded client requests to the core."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from src.utils.constants import ERR_INTERNAL, ERR_MALFORMED_REQUEST

if TYPE_CHECKING:
    from src.api.deps import Deps

logger = logging.getLogger("staredown.router")


class MalformedRequest(Exception):
    """A request whose parameters are missing or of the wrong shape."""


def _error(code: str, message: str) -> dict:
    return {"success": False, "error": message, "code": code}


def _require_str(body: dict, key: str) -> str:
    value = body.get(key)
    if not isinstance(value, str) or not value.strip():
        raise MalformedRequest(f"Missing parameter: {key}")
    return value


def _optional_str(body: dict, key: str) -> str | None:
    value = body.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise MalformedRequest(f"Parameter {key} must be a string")
    return value


def _card_ids(body: dict) -> list[str]:
    """Accept a list of identifiers or of card objects carrying an "id"."""
    cards = body.get("cards")
    if not isinstance(cards, list):
        raise MalformedRequest("Parameter cards must be a list")
    ids = []
    for card in cards:
        if isinstance(card, dict):
            card = card.get("id")
        if not isinstance(card, str):
            raise MalformedRequest("Every card must be an identifier")
        ids.append(card)
    return ids


def _from_result(result, kind: str, **fields) -> dict:
    if not result.success:
        return _error(result.code, result.error)
    return {"success": True, "type": kind, **fields}


# --- Action handlers ---


def _create_room(body: dict, deps: Deps, client_id: str | None) -> dict:
    result = deps.manager.create_room(_optional_str(body, "playerName"), client_id)
    return _from_result(
        result, "room_created", roomId=result.room_id, playerId=result.player_id
    )


def _join_room(body: dict, deps: Deps, client_id: str | None) -> dict:
    result = deps.manager.join_room(
        _require_str(body, "roomId"), _optional_str(body, "playerName"), client_id
    )
    return _from_result(
        result,
        "room_joined",
        roomId=result.room_id,
        playerId=result.player_id,
        players=result.players,
    )


def _leave_room(body: dict, deps: Deps, client_id: str | None) -> dict:
    result = deps.manager.leave_room(
        _require_str(body, "roomId"), _require_str(body, "playerId"), client_id
    )
    return _from_result(result, "left_room")


def _start_game(body: dict, deps: Deps, client_id: str | None) -> dict:
    result = deps.engine.start_game(
        _require_str(body, "roomId"), _require_str(body, "playerId")
    )
    return _from_result(result, "game_started")


def _play_cards(body: dict, deps: Deps, client_id: str | None) -> dict:
    room_id = _require_str(body, "roomId")
    player_id = _require_str(body, "playerId")
    result = deps.engine.play_cards(room_id, player_id, _card_ids(body))
    return _from_result(result, "cards_played", category=result.data.get("category"))


def _pass_turn(body: dict, deps: Deps, client_id: str | None) -> dict:
    result = deps.engine.pass_turn(
        _require_str(body, "roomId"), _require_str(body, "playerId")
    )
    return _from_result(
        result, "turn_passed", allPlayersPassed=result.data.get("allPlayersPassed")
    )


def _get_updates(body: dict, deps: Deps, client_id: str | None) -> dict:
    result = deps.engine.drain_updates(
        _require_str(body, "roomId"), _require_str(body, "playerId")
    )
    return _from_result(
        result,
        "updates",
        messages=result.data.get("messages", []),
        roomState=result.data.get("roomState"),
    )


ACTIONS: dict[str, Callable[..., dict]] = {
    "create_room": _create_room,
    "join_room": _join_room,
    "leave_room": _leave_room,
    "start_game": _start_game,
    "play_again": _start_game,
    "play_cards": _play_cards,
    "pass_turn": _pass_turn,
    "get_updates": _get_updates,
    "drain_updates": _get_updates,
}


def route_action(body: dict, deps: Deps) -> dict:
    """Run one action and return its JSON-ready result.

    Domain failures come back as {"success": False, "code": ...}; this
    function never raises.
    """
    action = body.get("action")
    handler = ACTIONS.get(action) if isinstance(action, str) else None
    if handler is None:
        return _error(ERR_MALFORMED_REQUEST, f"Unknown action: {action}")

    try:
        client_id = _optional_str(body, "clientId")
        if client_id:
            deps.sessions.touch(client_id)
        return handler(body, deps, client_id)
    except MalformedRequest as e:
        logger.warning("Malformed %s request: %s", action, e)
        return _error(ERR_MALFORMED_REQUEST, str(e))
    except Exception:
        logger.exception("Error processing action %s", action)
        return _error(ERR_INTERNAL, "Internal server error")
