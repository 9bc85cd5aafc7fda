"""Data models for stare-down game state."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from src.game.notifications import Outbox
from src.utils.constants import (
    COLOR_BLACK,
    COLOR_RED,
    JOKER_IDS,
    JOKER_RANK,
    JOKER_SUIT,
    RANKS,
    RED_SUITS,
    STATUS_IN_PROGRESS,
    STATUS_WAITING,
    SUIT_SYMBOLS,
)


@dataclass(frozen=True)
class Card:
    """A single playing card.

    Identifier examples: "8h" = 8 of hearts, "Ks" = King of spades,
    "10c" = 10 of clubs, "Joker1" / "Joker2" = the two jokers.
    """

    rank: str  # "3".."10", "J", "Q", "K", "A", "2" or "Joker"
    suit: str  # "s", "h", "d", "c", "j"
    index: int = 0  # 1 or 2 for jokers

    @property
    def is_joker(self) -> bool:
        return self.suit == JOKER_SUIT

    @property
    def card_id(self) -> str:
        if self.is_joker:
            return f"Joker{self.index}"
        return f"{self.rank}{self.suit}"

    @property
    def color(self) -> str:
        if self.is_joker:
            return COLOR_RED if self.index == 1 else COLOR_BLACK
        return COLOR_RED if self.suit in RED_SUITS else COLOR_BLACK

    @property
    def strength(self) -> int:
        """Ordinal of the rank; jokers rank above everything."""
        if self.is_joker:
            return len(RANKS) + self.index - 1
        return RANKS.index(self.rank)

    @classmethod
    def from_id(cls, card_id: str) -> Card:
        """Decode a card identifier.

        Raises ValueError for anything that is not one of the 54 cards.
        """
        if card_id in JOKER_IDS:
            return cls(rank=JOKER_RANK, suit=JOKER_SUIT, index=int(card_id[-1]))
        rank, suit = card_id[:-1], card_id[-1:]
        if rank not in RANKS or suit not in SUIT_SYMBOLS or suit == JOKER_SUIT:
            raise ValueError(f"Unknown card: {card_id!r}")
        return cls(rank=rank, suit=suit)

    def display(self) -> str:
        """Unicode display string."""
        if self.is_joker:
            return "🃏"
        return f"{self.rank}{SUIT_SYMBOLS[self.suit]}"

    def to_dict(self) -> dict:
        return {
            "id": self.card_id,
            "rank": self.rank,
            "suit": self.suit,
            "color": self.color,
            "isJoker": self.is_joker,
        }

    @classmethod
    def from_dict(cls, d: dict) -> Card:
        return cls.from_id(d["id"])


@dataclass
class Player:
    """A seated player. The hand is private to this player."""

    player_id: str
    name: str
    hand: list[Card] = field(default_factory=list)
    passed: bool = False
    hand_count: int = 0
    outbox: Outbox = field(default_factory=Outbox)

    def set_hand(self, cards: list[Card]) -> None:
        self.hand = list(cards)
        self.hand_count = len(self.hand)

    def remove_cards(self, card_ids: list[str]) -> list[Card]:
        """Remove exactly one hand card per identifier and return them."""
        removed: list[Card] = []
        for card_id in card_ids:
            for i, card in enumerate(self.hand):
                if card.card_id == card_id:
                    removed.append(self.hand.pop(i))
                    break
        self.hand_count = len(self.hand)
        return removed

    def public_dict(self) -> dict:
        return {"id": self.player_id, "name": self.name, "cards": self.hand_count}

    def to_dict(self) -> dict:
        return {
            "playerId": self.player_id,
            "name": self.name,
            "hand": [c.to_dict() for c in self.hand],
            "passed": self.passed,
            "pending": self.outbox.pending,
        }


@dataclass
class Play:
    """A validated play."""

    player_id: str
    player_name: str
    cards: list[Card]
    category: str

    def to_dict(self) -> dict:
        return {
            "playerId": self.player_id,
            "playerName": self.player_name,
            "cards": [c.to_dict() for c in self.cards],
            "type": self.category,
        }


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Room:
    """Complete state of one room. Seat order is turn order."""

    room_id: str
    dealer_id: str
    players: list[Player] = field(default_factory=list)
    status: str = STATUS_WAITING
    current_player_id: str | None = None
    draw_pile: list[Card] = field(default_factory=list)
    discard_pile: list[Card] = field(default_factory=list)
    current_play: Play | None = None
    last_play: Play | None = None
    all_players_passed: bool = False
    recent_plays: list[Play] = field(default_factory=list)
    last_result: dict | None = None
    games_played: int = 0
    created_at: datetime = field(default_factory=_now)
    last_activity: datetime = field(default_factory=_now)
    version: int = 1
    _seats: dict[str, int] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        self._reindex()

    @property
    def game_started(self) -> bool:
        return self.status == STATUS_IN_PROGRESS

    def _reindex(self) -> None:
        self._seats = {p.player_id: i for i, p in enumerate(self.players)}

    def seat_of(self, player_id: str | None) -> int | None:
        if player_id is None:
            return None
        return self._seats.get(player_id)

    def get_player(self, player_id: str | None) -> Player | None:
        seat = self.seat_of(player_id)
        return self.players[seat] if seat is not None else None

    def add_player(self, player: Player) -> None:
        self.players.append(player)
        self._reindex()

    def remove_player(self, player_id: str) -> tuple[int, Player] | None:
        """Remove a seat. Returns (former seat index, player) or None."""
        seat = self.seat_of(player_id)
        if seat is None:
            return None
        player = self.players.pop(seat)
        self._reindex()
        return seat, player

    def next_player_id(self, player_id: str) -> str:
        """Seat after player_id, wrapping around the current membership."""
        seat = self.seat_of(player_id)
        return self.players[(seat + 1) % len(self.players)].player_id

    def roster(self) -> list[dict]:
        return [p.public_dict() for p in self.players]

    def touch(self, now: datetime | None = None) -> None:
        self.last_activity = now or _now()

    def to_dict(self) -> dict:
        """Full debug dump (includes hands)."""
        return {
            "roomId": self.room_id,
            "dealer": self.dealer_id,
            "players": [p.to_dict() for p in self.players],
            "status": self.status,
            "currentPlayer": self.current_player_id,
            "drawPile": [c.card_id for c in self.draw_pile],
            "discardPile": [c.card_id for c in self.discard_pile],
            "lastPlay": self.last_play.to_dict() if self.last_play else None,
            "allPlayersPassed": self.all_players_passed,
            "recentPlays": [p.to_dict() for p in self.recent_plays],
            "lastResult": self.last_result,
            "gamesPlayed": self.games_played,
            "createdAt": self.created_at.isoformat(),
            "lastActivity": self.last_activity.isoformat(),
            "version": self.version,
        }
