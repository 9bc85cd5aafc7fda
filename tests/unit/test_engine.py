"""Tests for the game engine."""

import pytest
from src.game.engine import room_state
from src.utils.constants import (
    ERR_ALREADY_STARTED,
    ERR_ILLEGAL_PLAY,
    ERR_INSUFFICIENT_PLAYERS,
    ERR_NOT_SEATED,
    ERR_NOT_STARTED,
    ERR_NOT_YOUR_TURN,
    ERR_ROOM_NOT_FOUND,
    PLAY_ANY,
    PLAY_BOMB,
    PLAY_NEW_ROUND,
    PLAY_NORMAL,
    SPECIAL_CELESTIAL_WIN,
    STATUS_IN_PROGRESS,
    STATUS_WAITING,
)

from tests.conftest import Table, drain_all, rig_hands

ALICE_HAND = ["8h", "8s", "3c", "4c", "5c", "6c"]
BOB_HAND = ["9h", "9s", "Jd", "Qd", "Kd"]


@pytest.fixture
def started(deps, table2):
    """Alice (dealer, to play) and Bob with known hands, outboxes drained."""
    table2.start()
    alice, bob = table2.ids
    rig_hands(deps, table2.room_id, {alice: ALICE_HAND, bob: BOB_HAND})
    drain_all(deps, table2.room)
    return table2


class TestStartGame:
    def test_deals_hands(self, table2):
        room = table2.start()
        assert [p.hand_count for p in room.players] == [6, 5]
        assert len(room.draw_pile) == 43
        assert room.discard_pile == []

    def test_dealer_moves_first(self, table2):
        room = table2.start()
        assert room.status == STATUS_IN_PROGRESS
        assert room.current_player_id == room.dealer_id == table2.ids[0]
        assert room.games_played == 1

    def test_any_seat_may_start(self, engine, table2):
        result = engine.start_game(table2.room_id, table2.ids[1])
        assert result.success
        assert result.room.current_player_id == table2.ids[0]

    def test_notifies_every_seat(self, table2):
        table2.start()
        messages = table2.drain(1)
        assert [m["type"] for m in messages] == ["game_started", "player_hand"]
        assert len(messages[1]["hand"]) == 5
        assert messages[0]["currentPlayer"] == table2.ids[0]

    def test_room_not_found(self, engine):
        result = engine.start_game("NOPE", "p1")
        assert not result.success
        assert result.code == ERR_ROOM_NOT_FOUND

    def test_not_seated(self, engine, table2):
        result = engine.start_game(table2.room_id, "stranger")
        assert result.code == ERR_NOT_SEATED

    def test_already_started(self, engine, table2):
        table2.start()
        result = engine.start_game(table2.room_id, table2.ids[0])
        assert not result.success
        assert result.code == ERR_ALREADY_STARTED

    def test_needs_two_players(self, deps, engine):
        table = Table(deps, ["Solo"])
        result = engine.start_game(table.room_id, table.ids[0])
        assert not result.success
        assert result.code == ERR_INSUFFICIENT_PLAYERS
        assert table.room.status == STATUS_WAITING

    def test_case_insensitive_room_id(self, engine, table2):
        result = engine.start_game(table2.room_id.lower(), table2.ids[0])
        assert result.success


class TestPlayCards:
    def test_first_play_is_any(self, engine, started):
        alice, bob = started.ids
        result = engine.play_cards(started.room_id, alice, ["8h"])
        assert result.success
        assert result.data["category"] == PLAY_ANY
        room = result.room
        assert room.current_player_id == bob
        assert room.get_player(alice).hand_count == 5
        assert [c.card_id for c in room.discard_pile] == ["8h"]
        assert room.last_play.player_id == alice

    def test_normal_follow(self, engine, started):
        alice, bob = started.ids
        engine.play_cards(started.room_id, alice, ["8h", "8s"])
        result = engine.play_cards(started.room_id, bob, ["9h", "Jd"])
        assert result.success
        assert result.data["category"] == PLAY_NORMAL

    def test_count_mismatch(self, engine, started):
        alice, bob = started.ids
        engine.play_cards(started.room_id, alice, ["8h"])
        result = engine.play_cards(started.room_id, bob, ["9h", "9s"])
        assert not result.success
        assert result.code == ERR_ILLEGAL_PLAY
        assert result.error == "count must match previous play"

    def test_bomb_over_single(self, deps, engine, table2):
        table2.start()
        alice, bob = table2.ids
        rig_hands(deps, table2.room_id, {
            alice: ["8h", "3c", "4c", "5c", "6c", "7c"],
            bob: ["9h", "9s", "Joker1", "Qd", "Kd"],
        })
        engine.play_cards(table2.room_id, alice, ["8h"])
        result = engine.play_cards(table2.room_id, bob, ["9h", "9s", "Joker1"])
        assert result.success
        assert result.data["category"] == PLAY_BOMB

    def test_not_your_turn(self, engine, started):
        result = engine.play_cards(started.room_id, started.ids[1], ["9h"])
        assert not result.success
        assert result.code == ERR_NOT_YOUR_TURN

    def test_card_not_in_hand(self, engine, started):
        result = engine.play_cards(started.room_id, started.ids[0], ["9h"])
        assert result.code == ERR_ILLEGAL_PLAY
        assert result.error == "card 9h not in hand"

    def test_duplicate_identifier(self, engine, started):
        result = engine.play_cards(started.room_id, started.ids[0], ["8h", "8h"])
        assert result.code == ERR_ILLEGAL_PLAY
        assert "more than once" in result.error

    def test_empty_selection(self, engine, started):
        result = engine.play_cards(started.room_id, started.ids[0], [])
        assert result.error == "no cards selected"

    def test_rejected_play_changes_nothing(self, engine, started):
        before = started.room
        engine.play_cards(started.room_id, started.ids[0], ["8h", "9h"])
        after = started.room
        assert after.version == before.version
        assert after.get_player(started.ids[0]).hand == before.get_player(started.ids[0]).hand

    def test_before_start(self, engine, table2):
        result = engine.play_cards(table2.room_id, table2.ids[0], ["8h"])
        assert result.code == ERR_NOT_STARTED

    def test_stranger(self, engine, started):
        result = engine.play_cards(started.room_id, "stranger", ["8h"])
        assert result.code == ERR_NOT_SEATED

    def test_room_not_found(self, engine):
        result = engine.play_cards("NOPE", "p1", ["8h"])
        assert result.code == ERR_ROOM_NOT_FOUND

    def test_broadcast_to_all_seats(self, engine, started):
        engine.play_cards(started.room_id, started.ids[0], ["8h"])
        for seat in (0, 1):
            (message,) = started.drain(seat)
            assert message["type"] == "card_played"
            assert message["play"]["cards"][0]["id"] == "8h"
            assert message["nextPlayer"] == started.ids[1]
            assert message["newHandCount"] == 5

    def test_recent_plays_capped(self, engine, started):
        alice, bob = started.ids
        for player_id, card in [
            (alice, "8h"), (bob, "9h"), (alice, "8s"), (bob, "9s"), (alice, "3c"),
        ]:
            assert engine.play_cards(started.room_id, player_id, [card]).success
        room = started.room
        assert len(room.recent_plays) == 4
        assert room.recent_plays[-1].cards[0].card_id == "3c"
        assert room.recent_plays[0].cards[0].card_id == "9h"


class TestPassTurn:
    def test_two_player_pass_resets_round(self, engine, started):
        alice, bob = started.ids
        engine.play_cards(started.room_id, alice, ["8h"])
        result = engine.pass_turn(started.room_id, bob)
        assert result.success
        assert result.data["allPlayersPassed"] is True
        room = result.room
        assert room.current_player_id == alice
        assert room.last_play is None
        assert not any(p.passed for p in room.players)

    def test_new_round_lifts_count(self, engine, started):
        alice, bob = started.ids
        engine.play_cards(started.room_id, alice, ["8h"])
        engine.pass_turn(started.room_id, bob)
        result = engine.play_cards(started.room_id, alice, ["3c", "4c"])
        assert result.success
        assert result.data["category"] == PLAY_NEW_ROUND
        assert result.room.all_players_passed is False

    def test_three_players_need_two_passes(self, deps, engine, table3):
        table3.start()
        alice, bob, carol = table3.ids
        rig_hands(deps, table3.room_id, {
            alice: ["8h", "3c", "4c", "5c", "6c", "7c"],
            bob: ["9h", "Jd", "Qd", "Kd", "Ad"],
            carol: ["9s", "Js", "Qs", "Ks", "As"],
        })
        engine.play_cards(table3.room_id, alice, ["8h"])

        first = engine.pass_turn(table3.room_id, bob)
        assert first.data["allPlayersPassed"] is False
        assert first.room.get_player(bob).passed
        assert first.room.current_player_id == carol

        second = engine.pass_turn(table3.room_id, carol)
        assert second.data["allPlayersPassed"] is True
        assert second.room.current_player_id == alice
        assert second.room.last_play is None

    def test_broadcast(self, engine, started):
        alice, bob = started.ids
        engine.play_cards(started.room_id, alice, ["8h"])
        engine.pass_turn(started.room_id, bob)
        messages = started.drain(0)
        assert messages[-1]["type"] == "turn_passed"
        assert messages[-1]["playerId"] == bob
        assert messages[-1]["allPlayersPassed"] is True

    def test_not_your_turn(self, engine, started):
        result = engine.pass_turn(started.room_id, started.ids[1])
        assert result.code == ERR_NOT_YOUR_TURN

    def test_before_start(self, engine, table2):
        result = engine.pass_turn(table2.room_id, table2.ids[0])
        assert result.code == ERR_NOT_STARTED


class TestGameEnd:
    def test_celestial_win(self, deps, engine, table2):
        table2.start()
        alice, bob = table2.ids
        rig_hands(deps, table2.room_id, {alice: ["8h"], bob: BOB_HAND})
        result = engine.play_cards(table2.room_id, alice, ["8h"])
        assert result.success
        room = result.room
        assert room.status == STATUS_WAITING
        assert room.current_player_id is None
        assert room.last_result["winnerId"] == alice
        assert room.last_result["specialResult"] == SPECIAL_CELESTIAL_WIN
        assert [e["event"] for e in result.events] == ["play", "game_end"]

    def test_plain_win(self, deps, engine, table2):
        table2.start()
        alice, bob = table2.ids
        rig_hands(deps, table2.room_id, {alice: ["8h", "3c"], bob: ["9h"]})
        engine.play_cards(table2.room_id, alice, ["8h"])
        result = engine.play_cards(table2.room_id, bob, ["9h"])
        assert result.room.last_result["winnerId"] == bob
        assert result.room.last_result["specialResult"] is None

    def test_dealer_win_after_others_played(self, deps, engine, started):
        alice, bob = started.ids
        rig_hands(deps, started.room_id, {alice: ["8h", "3c"], bob: BOB_HAND})
        engine.play_cards(started.room_id, alice, ["8h"])
        engine.play_cards(started.room_id, bob, ["9h"])
        result = engine.play_cards(started.room_id, alice, ["3c"])
        assert result.room.last_result["winnerId"] == alice
        assert result.room.last_result["specialResult"] is None

    def test_everyone_told(self, deps, engine, table2):
        table2.start()
        alice, bob = table2.ids
        rig_hands(deps, table2.room_id, {alice: ["8h"], bob: BOB_HAND})
        drain_all(deps, table2.room)
        engine.play_cards(table2.room_id, alice, ["8h"])
        for seat in (0, 1):
            messages = table2.drain(seat)
            assert [m["type"] for m in messages] == ["card_played", "game_ended"]
            assert messages[-1]["winnerName"] == "Alice"

    def test_play_again(self, deps, engine, table2):
        table2.start()
        alice, bob = table2.ids
        rig_hands(deps, table2.room_id, {alice: ["8h"], bob: BOB_HAND})
        engine.play_cards(table2.room_id, alice, ["8h"])

        result = engine.start_game(table2.room_id, bob)
        assert result.success
        room = result.room
        assert room.games_played == 2
        assert [p.hand_count for p in room.players] == [6, 5]
        assert room.discard_pile == []
        assert room.last_play is None


class TestDrainUpdates:
    def test_drain_empties_outbox(self, table2):
        table2.start()
        assert table2.drain(1)
        assert table2.drain(1) == []

    def test_snapshot_shows_only_own_hand(self, engine, table2):
        table2.start()
        result = engine.drain_updates(table2.room_id, table2.ids[1])
        state = result.data["roomState"]
        assert len(state["hand"]) == 5
        assert state["gameStarted"] is True
        assert state["drawPileCount"] == 43
        for player in state["players"]:
            assert "hand" not in player
        assert [p["cards"] for p in state["players"]] == [6, 5]
        assert state["players"][0]["isDealer"]
        assert state["players"][0]["isCurrent"]

    def test_drain_is_not_activity(self, engine, table2):
        before = table2.room.last_activity
        engine.drain_updates(table2.room_id, table2.ids[0])
        assert table2.room.last_activity == before

    def test_outboxes_are_independent(self, table2):
        table2.start()
        table2.drain(0)
        assert len(table2.drain(1)) == 2

    def test_unknown_room(self, engine):
        assert engine.drain_updates("NOPE", "p1").code == ERR_ROOM_NOT_FOUND

    def test_unknown_player(self, engine, table2):
        assert engine.drain_updates(table2.room_id, "stranger").code == ERR_NOT_SEATED


class TestRoomState:
    def test_waiting_room(self, table2):
        room = table2.room
        state = room_state(room, room.players[0])
        assert state["status"] == STATUS_WAITING
        assert state["currentPlayer"] is None
        assert state["hand"] == []
        assert state["lastResult"] is None
