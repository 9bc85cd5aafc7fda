"""Deck operations: creation, shuffle, deal."""

from __future__ import annotations

import random

from src.game.models import Card
from src.utils.constants import (
    DEALER_CARDS,
    JOKER_RANK,
    JOKER_SUIT,
    PLAYER_CARDS,
    RANKS,
    SUITS,
)
from src.utils.crypto import create_rng


def create_deck() -> list[Card]:
    """Create the full 54-card deck (13 ranks x 4 suits + 2 jokers)."""
    cards: list[Card] = []
    for suit in SUITS:
        for rank in RANKS:
            cards.append(Card(rank=rank, suit=suit))
    cards.append(Card(rank=JOKER_RANK, suit=JOKER_SUIT, index=1))
    cards.append(Card(rank=JOKER_RANK, suit=JOKER_SUIT, index=2))
    return cards


def shuffle_cards(
    cards: list[Card], rng: random.Random | None = None
) -> list[Card]:
    """Fisher-Yates shuffle. Returns a new list.

    Without an explicit rng a fresh SystemRandom is used, so consecutive
    shuffles share no predictable seed.
    """
    rng = rng or create_rng()
    shuffled = list(cards)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def deal(
    deck: list[Card], num_players: int, dealer_index: int
) -> tuple[list[list[Card]], list[Card]]:
    """Deal from the top (end) of a shuffled deck.

    The dealer receives one extra card. Seats are served in order, each
    taking its whole hand before the next.

    Returns:
        (hands, remaining_deck)
        hands: one hand per seat, in seat order
        remaining_deck: the draw pile, top = last element
    """
    needed = PLAYER_CARDS * num_players + (DEALER_CARDS - PLAYER_CARDS)
    if num_players < 1 or not 0 <= dealer_index < num_players:
        raise ValueError(f"Invalid deal: {num_players} seats, dealer {dealer_index}")
    if needed > len(deck):
        raise ValueError(f"Deck has {len(deck)} cards, deal needs {needed}")

    remaining = list(deck)
    hands: list[list[Card]] = []
    for seat in range(num_players):
        count = DEALER_CARDS if seat == dealer_index else PLAYER_CARDS
        hands.append([remaining.pop() for _ in range(count)])
    return hands, remaining
