"""Per-player outbound message queues and the events placed on them.

Polling clients never hold a connection, so every state change a player
must see is appended to that player's outbox and handed over on the next
drain. A drain empties the queue: events are delivered at most once, and
a client that stops polling misses whatever was drained by nobody.
"""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING

from src.utils.constants import (
    EVENT_CARD_PLAYED,
    EVENT_GAME_ENDED,
    EVENT_GAME_STARTED,
    EVENT_PLAYER_HAND,
    EVENT_PLAYER_JOINED,
    EVENT_PLAYER_LEFT,
    EVENT_TURN_PASSED,
)

if TYPE_CHECKING:
    from src.game.models import Play, Player, Room


class Outbox:
    """Ordered queue of pending events for one player."""

    def __init__(self) -> None:
        self._events: list[dict] = []

    def enqueue(self, event: dict) -> None:
        self._events.append(event)

    def drain(self) -> list[dict]:
        """Return every pending event, oldest first, and empty the queue."""
        events, self._events = self._events, []
        return events

    @property
    def pending(self) -> int:
        return len(self._events)

    def __len__(self) -> int:
        return len(self._events)

    def __repr__(self) -> str:
        return f"Outbox(pending={len(self._events)})"


def broadcast(room: Room, event: dict, exclude: str | None = None) -> None:
    """Append a private copy of event to every seated player's outbox."""
    for player in room.players:
        if player.player_id == exclude:
            continue
        player.outbox.enqueue(copy.deepcopy(event))


# --- Event builders ---


def player_joined(room: Room, player: Player) -> dict:
    return {
        "type": EVENT_PLAYER_JOINED,
        "playerId": player.player_id,
        "playerName": player.name,
        "players": room.roster(),
    }


def player_left(room: Room, player: Player) -> dict:
    return {
        "type": EVENT_PLAYER_LEFT,
        "playerId": player.player_id,
        "playerName": player.name,
        "players": room.roster(),
        "currentPlayer": room.current_player_id,
        "dealer": room.dealer_id,
    }


def game_started(room: Room) -> dict:
    return {
        "type": EVENT_GAME_STARTED,
        "dealer": room.dealer_id,
        "currentPlayer": room.current_player_id,
        "players": room.roster(),
        "drawPileCount": len(room.draw_pile),
    }


def player_hand(player: Player) -> dict:
    return {
        "type": EVENT_PLAYER_HAND,
        "hand": [c.to_dict() for c in player.hand],
    }


def card_played(room: Room, player: Player, play: Play) -> dict:
    return {
        "type": EVENT_CARD_PLAYED,
        "playerId": player.player_id,
        "playerName": player.name,
        "play": play.to_dict(),
        "nextPlayer": room.current_player_id,
        "newHandCount": player.hand_count,
        "allPlayersPassed": room.all_players_passed,
    }


def turn_passed(room: Room, player: Player) -> dict:
    return {
        "type": EVENT_TURN_PASSED,
        "playerId": player.player_id,
        "playerName": player.name,
        "nextPlayer": room.current_player_id,
        "allPlayersPassed": room.all_players_passed,
    }


def game_ended(winner: Player, special_result: str | None) -> dict:
    return {
        "type": EVENT_GAME_ENDED,
        "winnerId": winner.player_id,
        "winnerName": winner.name,
        "specialResult": special_result,
    }
