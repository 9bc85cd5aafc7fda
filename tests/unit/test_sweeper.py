"""Tests for the background expiry sweeper."""

import time
from datetime import datetime, timedelta, timezone

from src.lobby.sweeper import ExpirySweeper

LONG_AGO = datetime.now(timezone.utc) - timedelta(days=1)


class TestExpirySweeper:
    def test_sweep_once_removes_stale_rooms(self, manager):
        stale = manager.create_room("Alice", now=LONG_AGO)
        fresh = manager.create_room("Bob")
        ExpirySweeper(manager).sweep_once()
        assert manager.list_rooms() == [fresh.room_id]
        assert manager.get_room(stale.room_id) is None

    def test_sweep_once_logs_failures(self, manager, monkeypatch, caplog):
        def boom(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(manager, "expire_idle", boom)
        ExpirySweeper(manager).sweep_once()
        assert "Expiry sweep failed" in caplog.text

    def test_background_thread(self, manager):
        manager.create_room("Alice", now=LONG_AGO)
        with ExpirySweeper(manager, interval=0.01) as sweeper:
            assert sweeper.running
            deadline = time.monotonic() + 5
            while manager.list_rooms() and time.monotonic() < deadline:
                time.sleep(0.01)
        assert not sweeper.running
        assert manager.list_rooms() == []

    def test_stop_without_start(self, manager):
        sweeper = ExpirySweeper(manager)
        sweeper.stop()
        assert not sweeper.running
