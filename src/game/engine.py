"""Game engine for stare-down: orchestrates dealing, turns, passes and wins."""

from __future__ import annotations

import json
import logging
import random
from collections import Counter
from dataclasses import dataclass, field

from src.db.repository import RoomRepository
from src.game import notifications
from src.game.deck import create_deck, deal, shuffle_cards
from src.game.models import Play, Player, Room
from src.game.notifications import broadcast
from src.game.validator import validate_play
from src.utils.constants import (
    ERR_ALREADY_STARTED,
    ERR_ILLEGAL_PLAY,
    ERR_INSUFFICIENT_PLAYERS,
    ERR_NOT_SEATED,
    ERR_NOT_STARTED,
    ERR_NOT_YOUR_TURN,
    ERR_ROOM_NOT_FOUND,
    MIN_PLAYERS,
    PLAYER_CARDS,
    RECENT_PLAYS_LIMIT,
    SPECIAL_CELESTIAL_WIN,
    STATUS_IN_PROGRESS,
    STATUS_WAITING,
)
from src.utils.crypto import create_rng
from src.utils.locks import RoomLocks

logger = logging.getLogger("staredown.engine")


@dataclass
class ActionResult:
    success: bool
    room: Room | None = None
    error: str | None = None
    code: str | None = None
    events: list[dict] = field(default_factory=list)
    data: dict = field(default_factory=dict)


def room_state(room: Room, viewer: Player | None = None) -> dict:
    """Snapshot of a room as seen by one player (only their own hand)."""
    return {
        "roomId": room.room_id,
        "status": room.status,
        "gameStarted": room.game_started,
        "dealer": room.dealer_id,
        "currentPlayer": room.current_player_id,
        "players": [
            {
                **p.public_dict(),
                "isCurrent": p.player_id == room.current_player_id,
                "isDealer": p.player_id == room.dealer_id,
                "passed": p.passed,
            }
            for p in room.players
        ],
        "lastPlay": room.last_play.to_dict() if room.last_play else None,
        "drawPileCount": len(room.draw_pile),
        "recentPlays": [p.to_dict() for p in room.recent_plays],
        "allPlayersPassed": room.all_players_passed,
        "lastResult": room.last_result,
        "hand": [c.to_dict() for c in viewer.hand] if viewer else [],
    }


class GameEngine:
    """Turn engine. Room state lives in the repository; every operation
    loads a copy under the room lock, validates, mutates and saves."""

    def __init__(
        self,
        repo: RoomRepository,
        locks: RoomLocks | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._repo = repo
        self._locks = locks if locks is not None else RoomLocks()
        self._rng = rng or create_rng()

    def start_game(self, room_id: str, player_id: str) -> ActionResult:
        """Shuffle, deal (dealer 6, others 5) and hand the first turn to the dealer."""
        with self._locks.hold(room_id):
            room = self._repo.get_room(room_id)
            if room is None:
                return _fail(ERR_ROOM_NOT_FOUND, "Room not found")

            if room.get_player(player_id) is None:
                return _fail(ERR_NOT_SEATED, "You are not seated in this room", room)

            if room.game_started:
                return _fail(ERR_ALREADY_STARTED, "Game already started", room)

            if len(room.players) < MIN_PLAYERS:
                return _fail(
                    ERR_INSUFFICIENT_PLAYERS,
                    f"At least {MIN_PLAYERS} players are needed to start",
                    room,
                )

            deck = shuffle_cards(create_deck(), self._rng)
            hands, remaining = deal(
                deck, len(room.players), room.seat_of(room.dealer_id)
            )
            for player, hand in zip(room.players, hands):
                player.set_hand(hand)
                player.passed = False

            room.draw_pile = remaining
            room.discard_pile = []
            room.status = STATUS_IN_PROGRESS
            room.current_player_id = room.dealer_id
            room.current_play = None
            room.last_play = None
            room.all_players_passed = False
            room.recent_plays = []
            room.games_played += 1
            room.touch()

            broadcast(room, notifications.game_started(room))
            for player in room.players:
                player.outbox.enqueue(notifications.player_hand(player))

            event = {
                "event": "game_start",
                "room_id": room.room_id,
                "game": room.games_played,
                "dealer": room.dealer_id,
                "players_cards": {p.player_id: p.hand_count for p in room.players},
                "draw_pile": len(room.draw_pile),
            }
            logger.info(json.dumps(event))
            return self._commit(room, [event])

    def play_cards(
        self, room_id: str, player_id: str, card_ids: list[str]
    ) -> ActionResult:
        """Play cards from the current player's hand, matched by identifier."""
        with self._locks.hold(room_id):
            room = self._repo.get_room(room_id)
            if room is None:
                return _fail(ERR_ROOM_NOT_FOUND, "Room not found")

            error = _validate_turn(room, player_id)
            if error:
                return _fail(*error, room)

            player = room.get_player(player_id)

            in_hand = {c.card_id: c for c in player.hand}
            for card_id, count in Counter(card_ids).items():
                if card_id not in in_hand:
                    return _fail(ERR_ILLEGAL_PLAY, f"card {card_id} not in hand", room)
                if count > 1:
                    return _fail(
                        ERR_ILLEGAL_PLAY, f"card {card_id} selected more than once", room
                    )
            cards = [in_hand[card_id] for card_id in card_ids]

            result = validate_play(cards, room.last_play, room.all_players_passed)
            if not result.valid:
                return _fail(ERR_ILLEGAL_PLAY, result.error, room)

            # Apply
            played = player.remove_cards(card_ids)
            room.discard_pile.extend(played)
            play = Play(
                player_id=player_id,
                player_name=player.name,
                cards=played,
                category=result.category,
            )
            room.current_play = play
            room.last_play = play
            room.all_players_passed = False
            for p in room.players:
                p.passed = False
            room.recent_plays = (room.recent_plays + [play])[-RECENT_PLAYS_LIMIT:]
            room.current_player_id = room.next_player_id(player_id)
            room.touch()

            broadcast(room, notifications.card_played(room, player, play))

            events = []
            play_event = {
                "event": "play",
                "room_id": room.room_id,
                "player_id": player_id,
                "cards": [c.card_id for c in played],
                "category": result.category,
                "hand_remaining": player.hand_count,
                "next_player": room.current_player_id,
            }
            events.append(play_event)
            logger.info(json.dumps(play_event))

            if player.hand_count == 0:
                self._end_game(room, player, events)

            return self._commit(room, events, {"category": result.category})

    def pass_turn(self, room_id: str, player_id: str) -> ActionResult:
        """Pass. When all seats but one have passed, a new round begins."""
        with self._locks.hold(room_id):
            room = self._repo.get_room(room_id)
            if room is None:
                return _fail(ERR_ROOM_NOT_FOUND, "Room not found")

            error = _validate_turn(room, player_id)
            if error:
                return _fail(*error, room)

            player = room.get_player(player_id)
            player.passed = True
            round_reset = _check_round_reset(room)
            room.current_player_id = room.next_player_id(player_id)
            room.touch()

            broadcast(room, notifications.turn_passed(room, player))

            event = {
                "event": "pass",
                "room_id": room.room_id,
                "player_id": player_id,
                "round_reset": round_reset,
                "next_player": room.current_player_id,
            }
            logger.info(json.dumps(event))
            return self._commit(room, [event], {"allPlayersPassed": room.all_players_passed})

    def drain_updates(self, room_id: str, player_id: str) -> ActionResult:
        """Hand over the player's queued events plus a fresh room snapshot."""
        with self._locks.hold(room_id):
            room = self._repo.get_room(room_id)
            if room is None:
                return _fail(ERR_ROOM_NOT_FOUND, "Room not found")

            player = room.get_player(player_id)
            if player is None:
                return _fail(ERR_NOT_SEATED, "Player not found", room)

            messages = player.outbox.drain()
            state = room_state(room, player)
            if messages:
                self._repo.save_room(room)
                room = self._repo.get_room(room_id)

            return ActionResult(
                success=True,
                room=room,
                data={"messages": messages, "roomState": state},
            )

    def handle_departure(self, room: Room, seat: int, player: Player) -> None:
        """Re-close the ring after `player` left seat `seat` of `room`.

        Called by the room registry on an already-loaded room that still
        has at least one seat. The departing hand goes to the discard pile.
        """
        if room.dealer_id == player.player_id:
            room.dealer_id = room.players[0].player_id

        if not room.game_started:
            return

        room.discard_pile.extend(player.hand)
        player.set_hand([])

        if room.current_player_id == player.player_id:
            room.current_player_id = room.players[seat % len(room.players)].player_id

        round_reset = _check_round_reset(room)
        room.touch()

        event = {
            "event": "departure",
            "room_id": room.room_id,
            "player_id": player.player_id,
            "current_player": room.current_player_id,
            "round_reset": round_reset,
        }
        logger.info(json.dumps(event))

    def get_room(self, room_id: str) -> Room | None:
        return self._repo.get_room(room_id)

    # --- Private helpers ---

    def _end_game(self, room: Room, winner: Player, events: list[dict]) -> None:
        """Declare the winner and return the room to a restartable state."""
        celestial = winner.player_id == room.dealer_id and all(
            p.hand_count == PLAYER_CARDS
            for p in room.players
            if p.player_id != room.dealer_id
        )
        special = SPECIAL_CELESTIAL_WIN if celestial else None

        ended = notifications.game_ended(winner, special)
        broadcast(room, ended)

        room.last_result = dict(ended)
        room.status = STATUS_WAITING
        room.current_player_id = None
        room.current_play = None
        room.last_play = None
        room.all_players_passed = False
        for p in room.players:
            p.passed = False

        end_event = {
            "event": "game_end",
            "room_id": room.room_id,
            "winner": winner.player_id,
            "special_result": special,
            "hands": {p.player_id: p.hand_count for p in room.players},
        }
        events.append(end_event)
        logger.info(json.dumps(end_event))

    def _commit(
        self, room: Room, events: list[dict], data: dict | None = None
    ) -> ActionResult:
        self._repo.save_room(room)
        room = self._repo.get_room(room.room_id)
        return ActionResult(success=True, room=room, events=events, data=data or {})


def _fail(code: str, error: str, room: Room | None = None) -> ActionResult:
    return ActionResult(success=False, room=room, error=error, code=code)


def _validate_turn(room: Room, player_id: str) -> tuple[str, str] | None:
    """Check the game is running and it is player_id's turn. Returns (code, error) or None."""
    if room.status != STATUS_IN_PROGRESS:
        return ERR_NOT_STARTED, "Game has not started"

    if room.get_player(player_id) is None:
        return ERR_NOT_SEATED, "You are not seated in this room"

    if room.current_player_id != player_id:
        return ERR_NOT_YOUR_TURN, "It is not your turn"

    return None


def _check_round_reset(room: Room) -> bool:
    """Start a new uncontested round once at most one seat has not passed."""
    if sum(1 for p in room.players if not p.passed) > 1:
        return False
    room.all_players_passed = True
    room.last_play = None
    for p in room.players:
        p.passed = False
    return True
