"""Background expiry task for long-running processes."""

from __future__ import annotations

import json
import logging
import threading

from src.lobby.manager import RoomManager
from src.utils.constants import SWEEP_INTERVAL

logger = logging.getLogger("staredown.sweeper")


class ExpirySweeper:
    """Runs RoomManager.expire_idle every `interval` seconds on a daemon thread.

    Owned by whoever builds the process; nothing starts it implicitly.
    """

    def __init__(self, manager: RoomManager, interval: float = SWEEP_INTERVAL) -> None:
        self._manager = manager
        self._interval = interval
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="staredown-expiry", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def sweep_once(self) -> None:
        try:
            report = self._manager.expire_idle()
        except Exception:
            logger.exception("Expiry sweep failed")
            return
        if report.rooms or report.sessions:
            logger.info(json.dumps({
                "event": "sweep",
                "rooms": report.rooms,
                "sessions": report.sessions,
            }))

    def _run(self) -> None:
        while not self._stop.wait(self._interval):
            self.sweep_once()

    def __enter__(self) -> ExpirySweeper:
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()
