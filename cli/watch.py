"""Watch a room on a remote server by polling get_updates.

Usage:
  python -m cli.watch --name Alice                  # create a room
  python -m cli.watch --room ABC123 --name Bob      # join one
  python -m cli.watch --room ABC123 --url https://host/api/game --interval 1
"""

from __future__ import annotations

import argparse
import json
import time

from src.utils.client import ActionError, StareDownClient


def format_message(message: dict) -> str:
    kind = message.get("type", "?")
    if kind == "card_played":
        cards = " ".join(c["id"] for c in message["play"]["cards"])
        return f"{message['playerName']} played [{cards}] ({message['play']['type']})"
    if kind == "turn_passed":
        suffix = " - new round" if message.get("allPlayersPassed") else ""
        return f"{message['playerName']} passed{suffix}"
    if kind == "player_hand":
        return "your hand: " + " ".join(c["id"] for c in message["hand"])
    if kind == "game_ended":
        special = f" ({message['specialResult']})" if message.get("specialResult") else ""
        return f"{message['winnerName']} wins{special}"
    if kind in ("player_joined", "player_left"):
        verb = "joined" if kind == "player_joined" else "left"
        return f"{message['playerName']} {verb}"
    return json.dumps(message)


def watch(client: StareDownClient, interval: float, max_polls: int | None = None) -> None:
    polls = 0
    while max_polls is None or polls < max_polls:
        data = client.get_updates()
        for message in data["messages"]:
            print(f"  {format_message(message)}")
        polls += 1
        time.sleep(interval)


def main() -> None:
    parser = argparse.ArgumentParser(description="Stare-down room watcher")
    parser.add_argument("--url", default=None)
    parser.add_argument("--room", default=None)
    parser.add_argument("--name", default=None)
    parser.add_argument("--interval", type=float, default=2.0)
    args = parser.parse_args()

    client = StareDownClient(base_url=args.url)
    try:
        if args.room:
            client.join_room(args.room, args.name)
        else:
            client.create_room(args.name)
        print(f"Room {client.room_id}, seat {client.player_id}")
        watch(client, args.interval)
    except ActionError as e:
        print(f"Error: {e.message}")
    except KeyboardInterrupt:
        client.leave_room()
    finally:
        client.close()


if __name__ == "__main__":
    main()
