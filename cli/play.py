"""Interactive hot-seat CLI for stare-down.

Usage: python -m cli.play --players 2 [--seed 42]
"""

from __future__ import annotations

import argparse

from src.api.deps import create_deps
from src.game.integrity import validate_room_integrity
from src.game.models import Card, Room
from src.utils.constants import MAX_PLAYERS, MIN_PLAYERS
from src.utils.crypto import create_rng


def display_hand(hand: list[Card]) -> str:
    """Format hand for terminal display."""
    if not hand:
        return "  (empty)"
    lines = []
    for i, card in enumerate(sorted(hand, key=lambda c: (c.strength, c.suit)), 1):
        lines.append(f"  {i:2d}. {card.display()} [{card.card_id}]")
    return "\n".join(lines)


def display_table(room: Room) -> str:
    """Format room state for terminal display."""
    current = room.get_player(room.current_player_id)
    lines = [
        "",
        f"{'=' * 50}",
        f"  STARE-DOWN — Room {room.room_id} — Game #{room.games_played}",
        f"{'=' * 50}",
        "",
        f"  Turn: {current.name if current else '-'}",
        f"  Draw pile: {len(room.draw_pile)} cards",
    ]

    if room.last_play:
        cards_str = " ".join(c.display() for c in room.last_play.cards)
        lines.append(
            f"  On the table: [{cards_str}] by {room.last_play.player_name} "
            f"({room.last_play.category})"
        )
    elif room.all_players_passed:
        lines.append("  On the table: (new round, play anything)")
    else:
        lines.append("  On the table: (open)")
    lines.append("")

    lines.append("  Players:")
    for player in room.players:
        status = ""
        if player.player_id == room.dealer_id:
            status += " [dealer]"
        if player.player_id == room.current_player_id:
            status += " ← turn"
        if player.passed:
            status += " (passed)"
        lines.append(f"    {player.name}: {player.hand_count} cards{status}")
    lines.append("")

    return "\n".join(lines)


HELP = "\n".join([
    "  Commands:",
    "    play <cards>  - Play cards by id (e.g. play 7h 7s Joker1)",
    "    pass          - Pass the turn",
    "    hand          - Show your hand",
    "    table         - Show the table",
    "    quit          - Leave",
    "",
])


def play_game(num_players: int, seed: int | None = None) -> None:
    deps = create_deps(rng=create_rng(seed))
    names = [f"player{i + 1}" for i in range(num_players)]
    created = deps.manager.create_room(names[0])
    room_id = created.room_id
    for name in names[1:]:
        deps.manager.join_room(room_id, name)

    result = deps.engine.start_game(room_id, created.player_id)
    if not result.success:
        print(f"Start failed: {result.error}")
        return
    room = result.room

    print("\n  Welcome to stare-down!")
    print(f"  Players: {', '.join(names)}")
    if seed is not None:
        print(f"  Seed: {seed}")

    while room.game_started:
        print(display_table(room))

        player = room.get_player(room.current_player_id)
        print(f"  --- {player.name}'s hand ---")
        print(display_hand(player.hand))
        print()
        print(HELP)

        try:
            action_str = input(f"  {player.name}> ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\n  Game interrupted.")
            return

        if not action_str:
            continue

        parts = action_str.split()
        cmd = parts[0].lower()

        if cmd == "quit":
            print("  Game abandoned.")
            return
        elif cmd == "hand":
            print(display_hand(player.hand))
            continue
        elif cmd == "table":
            print(display_table(room))
            continue
        elif cmd == "pass":
            result = deps.engine.pass_turn(room_id, player.player_id)
        elif cmd == "play":
            if len(parts) < 2:
                print("  Usage: play <card> [<card> ...]")
                continue
            result = deps.engine.play_cards(room_id, player.player_id, parts[1:])
        else:
            print(f"  Unknown command: {cmd}")
            continue

        if not result.success:
            print(f"  ✗ {result.error}")
            continue

        room = result.room
        for event in result.events:
            if event["event"] == "pass" and event["round_reset"]:
                print("\n  *** Everyone passed: new round ***")
            elif event["event"] == "game_end":
                winner = room.get_player(event["winner"])
                print(f"\n  *** {winner.name} wins! ***")
                if event["special_result"]:
                    print("  *** Celestial win! ***")

        if room.game_started:
            errors = validate_room_integrity(room)
            if errors:
                print(f"\n  ⚠ INTEGRITY ERROR: {errors}")
                return


def main() -> None:
    parser = argparse.ArgumentParser(description="Stare-down CLI")
    parser.add_argument(
        "--players", type=int, default=2,
        choices=range(MIN_PLAYERS, MAX_PLAYERS + 1),
    )
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args()
    play_game(args.players, args.seed)


if __name__ == "__main__":
    main()
