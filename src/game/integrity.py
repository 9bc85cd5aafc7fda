"""State integrity checker for rooms."""

from __future__ import annotations

from collections import Counter

from src.game.models import Card, Room
from src.utils.constants import MAX_PLAYERS, STATUS_IN_PROGRESS, TOTAL_CARDS


def validate_room_integrity(room: Room) -> list[str]:
    """Validate all room invariants. Returns list of errors (empty = OK).

    Checks:
    1. Seat index agrees with seat order, no duplicate players, <= 6 seats
    2. Dealer is seated
    3. Cached hand counts match hands
    While a game is in progress, also:
    4. Total cards = 54 (hands + draw pile + discard pile)
    5. No card appears twice
    6. Current player is seated
    7. The current player has not passed
    Outside a game:
    8. No current player or last play
    """
    errors: list[str] = []

    # 1. Seats
    ids = [p.player_id for p in room.players]
    if len(set(ids)) != len(ids):
        errors.append("Duplicate player in seat order")
    for seat, player_id in enumerate(ids):
        if room.seat_of(player_id) != seat:
            errors.append(f"Seat index for {player_id} is stale")
    if len(room.players) > MAX_PLAYERS:
        errors.append(f"{len(room.players)} seats, max {MAX_PLAYERS}")

    # 2. Dealer
    if room.players and room.get_player(room.dealer_id) is None:
        errors.append(f"Dealer {room.dealer_id} is not seated")

    # 3. Hand counts
    for player in room.players:
        if player.hand_count != len(player.hand):
            errors.append(
                f"Hand count for {player.player_id} = {player.hand_count}, "
                f"hand has {len(player.hand)}"
            )

    if room.status != STATUS_IN_PROGRESS:
        # 8.
        if room.current_player_id is not None:
            errors.append("Current player set outside a game")
        if room.last_play is not None:
            errors.append("Last play set outside a game")
        return errors

    # 4. Collect all cards and check total
    all_cards: list[Card] = []
    for player in room.players:
        all_cards.extend(player.hand)
    all_cards.extend(room.draw_pile)
    all_cards.extend(room.discard_pile)

    if len(all_cards) != TOTAL_CARDS:
        errors.append(f"Total cards = {len(all_cards)}, expected {TOTAL_CARDS}")

    # 5. Duplicates
    for card_id, count in Counter(c.card_id for c in all_cards).items():
        if count > 1:
            errors.append(f"Card {card_id} appears {count} times")

    # 6. Current turn player
    if room.get_player(room.current_player_id) is None:
        errors.append(f"Current player {room.current_player_id} is not seated")

    # 7. Pass flags
    current = room.get_player(room.current_player_id)
    if current is not None and current.passed:
        errors.append(f"Current player {current.player_id} has already passed")

    return errors
