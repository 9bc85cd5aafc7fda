"""Simulate stare-down games with random bot players.

Usage: python -m cli.simulate --games 100 --players 4 [--seed 42] [--verbose]
"""

from __future__ import annotations

import argparse
import random
import time
from collections import defaultdict

from src.api.deps import create_deps
from src.game.integrity import validate_room_integrity
from src.game.models import Card, Room
from src.utils.constants import MAX_PLAYERS, MIN_PLAYERS
from src.utils.crypto import create_rng


def find_bomb(hand: list[Card]) -> list[str] | None:
    """Smallest bomb in the hand (3 cards of one rank, topped up with jokers)."""
    jokers = [c for c in hand if c.is_joker]
    by_rank: dict[str, list[Card]] = defaultdict(list)
    for card in hand:
        if not card.is_joker:
            by_rank[card.rank].append(card)

    for rank in sorted(by_rank, key=lambda r: by_rank[r][0].strength):
        group = by_rank[rank][:4]
        missing = max(0, 3 - len(group))
        if missing <= len(jokers):
            return [c.card_id for c in group + jokers[:missing]]
    return None


def choose_play(
    room: Room, hand: list[Card], rng: random.Random
) -> list[str] | None:
    """Pick cards to play, or None to pass."""
    if room.last_play is None or room.all_players_passed:
        # Free play: lead with the biggest same-rank group
        by_rank: dict[str, list[Card]] = defaultdict(list)
        for card in hand:
            by_rank[card.rank].append(card)
        group = max(by_rank.values(), key=len)
        return [c.card_id for c in group[:4]]

    bomb = find_bomb(hand)
    if bomb and rng.random() < 0.4:
        return bomb

    needed = len(room.last_play.cards)
    if len(hand) >= needed and rng.random() < 0.7:
        return [c.card_id for c in rng.sample(hand, needed)]
    return None


def simulate_game(
    num_players: int, rng: random.Random, verbose: bool = False
) -> dict:
    """Simulate one complete game. Returns stats dict."""
    deps = create_deps(rng=rng)
    created = deps.manager.create_room("bot1")
    room_id = created.room_id
    for i in range(1, num_players):
        deps.manager.join_room(room_id, f"bot{i + 1}")

    result = deps.engine.start_game(room_id, created.player_id)
    if not result.success:
        return {"error": result.error, "turns": 0}
    room = result.room

    max_turns = 2000
    turn_count = 0
    winner = None
    special = None

    while room.game_started and turn_count < max_turns:
        errors = validate_room_integrity(room)
        if errors:
            return {"error": f"Integrity: {errors}", "turns": turn_count}

        player = room.get_player(room.current_player_id)
        cards = choose_play(room, player.hand, rng)
        if cards is None:
            result = deps.engine.pass_turn(room_id, player.player_id)
        else:
            result = deps.engine.play_cards(room_id, player.player_id, cards)
        if not result.success:
            return {"error": result.error, "turns": turn_count}
        room = result.room
        turn_count += 1

        for event in result.events:
            if event["event"] == "game_end":
                winner = event["winner"]
                special = event["special_result"]

        if verbose and turn_count % 50 == 0:
            print(f"  Turn {turn_count}, hands {[p.hand_count for p in room.players]}")

    if room.game_started:
        return {"error": f"No winner after {max_turns} turns", "turns": turn_count}

    # Every seat must have received the game-ended notification
    for player in room.players:
        drained = deps.engine.drain_updates(room_id, player.player_id)
        if drained.data["messages"][-1]["type"] != "game_ended":
            return {"error": "game_ended not delivered", "turns": turn_count}

    return {
        "winner": room.get_player(winner).name,
        "turns": turn_count,
        "special_result": special,
        "error": None,
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Stare-down Simulator")
    parser.add_argument("--games", type=int, default=100)
    parser.add_argument(
        "--players", type=int, default=4,
        choices=range(MIN_PLAYERS, MAX_PLAYERS + 1),
    )
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    base_seed = args.seed if args.seed is not None else int(time.time())
    n, p = args.games, args.players
    print(f"Simulating {n} games with {p} players (base seed: {base_seed})")

    errors = 0
    wins: dict[str, int] = {}
    celestial = 0
    total_turns = 0

    for i in range(args.games):
        rng = create_rng(base_seed + i)
        result = simulate_game(args.players, rng, verbose=args.verbose)

        if result.get("error"):
            errors += 1
            if args.verbose:
                print(f"  Game {i + 1}: ERROR - {result['error']}")
        else:
            winner = result["winner"]
            wins[winner] = wins.get(winner, 0) + 1
            total_turns += result["turns"]
            if result["special_result"]:
                celestial += 1

            if args.verbose:
                print(f"  Game {i + 1}: winner={winner}, turns={result['turns']}")

        if (i + 1) % 100 == 0 and not args.verbose:
            print(f"  {i + 1}/{args.games} done...")

    completed = args.games - errors
    print("\nResults:")
    print(f"  Games completed: {completed}/{args.games}")
    print(f"  Errors: {errors}")
    if completed > 0:
        print(f"  Average turns: {total_turns / completed:.1f}")
        print(f"  Celestial wins: {celestial}")
        print(f"  Wins: {wins}")


if __name__ == "__main__":
    main()
