"""AWS Lambda entry point for the stare-down game API.

This is a thin adapter that decodes API Gateway proxy events into action
requests and hands them to the router. POST carries a JSON body with an
"action"; GET is the polling shortcut for get_updates. All game logic
lives in src/game/ and src/lobby/.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

from src.utils.constants import ERR_MALFORMED_REQUEST

logger = logging.getLogger("staredown.handler")
logger.setLevel(logging.INFO)

# Module-level deps for Lambda warm starts
_deps = None


def _init_deps(overrides: dict | None = None):
    """Initialize dependencies (lazily, once per Lambda container)."""
    global _deps

    from src.api.deps import Deps, create_deps
    from src.lobby.manager import ExpiryPolicy
    from src.utils.constants import (
        ROOM_MAX_AGE,
        ROOM_STARTED_IDLE,
        ROOM_WAITING_IDLE,
        SESSION_TIMEOUT,
    )

    if overrides:
        _deps = Deps(**overrides)
        return _deps

    policy = ExpiryPolicy(
        waiting_idle=float(os.environ.get("ROOM_WAITING_IDLE_SECONDS", ROOM_WAITING_IDLE)),
        started_idle=float(os.environ.get("ROOM_STARTED_IDLE_SECONDS", ROOM_STARTED_IDLE)),
        max_age=float(os.environ.get("ROOM_MAX_AGE_SECONDS", ROOM_MAX_AGE)),
    )
    _deps = create_deps(
        policy=policy,
        session_timeout=float(os.environ.get("SESSION_TIMEOUT_SECONDS", SESSION_TIMEOUT)),
    )
    return _deps


def _response(status: int, payload: dict) -> dict:
    return {
        "statusCode": status,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(payload),
    }


def _http_method(event: dict) -> str:
    method = event.get("httpMethod")
    if not method:
        method = event.get("requestContext", {}).get("http", {}).get("method", "POST")
    return method.upper()


def lambda_handler(event: dict, context: Any = None) -> dict:
    """Handle one API Gateway request."""
    global _deps

    method = _http_method(event)
    if method == "GET":
        params = event.get("queryStringParameters") or {}
        body = {
            "action": "get_updates",
            "clientId": params.get("clientId"),
            "roomId": params.get("roomId"),
            "playerId": params.get("playerId"),
        }
    elif method == "POST":
        try:
            body = json.loads(event.get("body") or "{}")
        except json.JSONDecodeError:
            return _response(400, {
                "success": False,
                "error": "Invalid JSON",
                "code": ERR_MALFORMED_REQUEST,
            })
        if not isinstance(body, dict):
            return _response(400, {
                "success": False,
                "error": "Request body must be a JSON object",
                "code": ERR_MALFORMED_REQUEST,
            })
    else:
        return _response(405, {"success": False, "error": "Method not allowed"})

    if _deps is None:
        _init_deps()

    from src.api.router import route_action

    assert _deps is not None
    result = route_action(body, _deps)

    # Opportunistic sweep; a long-running process uses ExpirySweeper instead
    try:
        _deps.manager.expire_idle()
    except Exception:
        logger.exception("Expiry sweep failed")

    return _response(200, result)
