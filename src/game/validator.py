"""Play validation.

Decides whether a set of cards may follow the last accepted play and
which category the play falls into. Only card counts are compared:
ranks of "normal" plays are not checked against the previous play.
"""

from __future__ import annotations

from dataclasses import dataclass

from src.game.models import Card, Play
from src.utils.constants import (
    BOMB_SIZES,
    PLAY_ANY,
    PLAY_BOMB,
    PLAY_NEW_ROUND,
    PLAY_NORMAL,
)


@dataclass
class ValidationResult:
    valid: bool
    category: str | None = None
    error: str | None = None


def is_bomb(cards: list[Card]) -> bool:
    """3 or 4 cards of one rank. Jokers match any rank."""
    if len(cards) not in BOMB_SIZES:
        return False
    ranks = {c.rank for c in cards if not c.is_joker}
    return len(ranks) <= 1


def validate_play(
    cards: list[Card], last_play: Play | None, round_reset: bool
) -> ValidationResult:
    """Validate a proposed play against the table.

    Rules, in priority order:
    - open table (no last play): anything goes
    - bombs beat anything, whatever the sizes
    - after a round reset the count constraint is lifted
    - otherwise the count must match the last play
    """
    if not cards:
        return ValidationResult(False, error="no cards selected")

    if last_play is None:
        return ValidationResult(
            True, category=PLAY_NEW_ROUND if round_reset else PLAY_ANY
        )

    if is_bomb(cards):
        return ValidationResult(True, category=PLAY_BOMB)

    if round_reset:
        return ValidationResult(True, category=PLAY_NEW_ROUND)

    if len(cards) != len(last_play.cards):
        return ValidationResult(False, error="count must match previous play")

    return ValidationResult(True, category=PLAY_NORMAL)
