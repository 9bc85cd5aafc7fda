"""Secure random utilities for the stare-down server."""

import random
import secrets
import uuid

from src.utils.constants import ROOM_CODE_LENGTH


def create_rng(seed: int | None = None) -> random.Random:
    """Create a Random instance.

    If seed is provided, returns a deterministic Random (for tests/replay).
    If seed is None, returns SystemRandom (cryptographically secure).
    """
    if seed is not None:
        return random.Random(seed)
    return secrets.SystemRandom()


def generate_room_code(length: int = ROOM_CODE_LENGTH) -> str:
    """Generate an upper-case alphanumeric room code (no ambiguous chars)."""
    alphabet = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
    return "".join(secrets.choice(alphabet) for _ in range(length))


def normalize_room_code(code: str | None) -> str:
    """Canonical form of a human-entered room code."""
    return (code or "").strip().upper()


def new_player_id() -> str:
    return str(uuid.uuid4())


def new_client_id() -> str:
    return uuid.uuid4().hex
