"""Shared test fixtures for stare-down."""

from __future__ import annotations

import pytest

from src.api.deps import Deps, create_deps
from src.game.models import Card, Room
from src.utils.crypto import create_rng


def c(card_id: str) -> Card:
    return Card.from_id(card_id)


def rig_hands(deps: Deps, room_id: str, hands: dict[str, list[str]]) -> Room:
    """Replace dealt hands with fixed ones, keeping all 54 cards accounted for.

    `hands` must name every seat. Cards it lists are pulled out of wherever
    the deal put them; whatever the old hands held goes back to the draw pile.
    """
    room = deps.room_repo.get_room(room_id)
    assert set(hands) == {p.player_id for p in room.players}
    wanted = {card_id for ids in hands.values() for card_id in ids}
    pool = list(room.draw_pile)
    for player in room.players:
        pool.extend(player.hand)
    room.draw_pile = [card for card in pool if card.card_id not in wanted]
    for player_id, ids in hands.items():
        room.get_player(player_id).set_hand([c(i) for i in ids])
    deps.room_repo.save_room(room)
    return deps.room_repo.get_room(room_id)


def drain_all(deps: Deps, room: Room) -> None:
    for player in room.players:
        deps.engine.drain_updates(room.room_id, player.player_id)


class Table:
    """A room with seated players, in seat order; the first is the dealer."""

    def __init__(self, deps: Deps, names: list[str]) -> None:
        created = deps.manager.create_room(names[0])
        self.deps = deps
        self.room_id = created.room_id
        self.ids = [created.player_id]
        for name in names[1:]:
            self.ids.append(deps.manager.join_room(self.room_id, name).player_id)

    @property
    def room(self) -> Room:
        return self.deps.room_repo.get_room(self.room_id)

    def start(self) -> Room:
        result = self.deps.engine.start_game(self.room_id, self.ids[0])
        assert result.success, result.error
        return result.room

    def drain(self, seat: int) -> list[dict]:
        result = self.deps.engine.drain_updates(self.room_id, self.ids[seat])
        assert result.success, result.error
        return result.data["messages"]


@pytest.fixture
def deps():
    return create_deps(rng=create_rng(42))


@pytest.fixture
def engine(deps):
    return deps.engine


@pytest.fixture
def manager(deps):
    return deps.manager


@pytest.fixture
def table2(deps):
    """Alice (dealer) and Bob, waiting."""
    return Table(deps, ["Alice", "Bob"])


@pytest.fixture
def table3(deps):
    return Table(deps, ["Alice", "Bob", "Carol"])
