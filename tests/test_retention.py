"""Tests for the background retention sweeper."""

import asyncio
from datetime import datetime, timedelta, timezone

from fleetpulse.services.retention import RetentionSweeper
from fleetpulse.services.store import RetentionPolicy, StatusStore
from tests.conftest import make_report


class FlakyStore:
    """Stands in for StatusStore; the first sweep raises."""

    def __init__(self):
        self.policy = RetentionPolicy(period=timedelta(milliseconds=10))
        self.calls = 0

    def sweep(self):
        self.calls += 1
        if self.calls == 1:
            raise RuntimeError("boom")
        return 0


class TestRetentionSweeper:
    """Periodic sweeping as a cancellable asyncio task."""

    def test_periodic_sweep_prunes(self):
        """The sweeper prunes stale history on its own without an explicit call."""
        now = datetime.now(timezone.utc)
        store = StatusStore(RetentionPolicy(window=timedelta(hours=24),
                                            period=timedelta(milliseconds=10)))
        store.ingest(make_report(timestamp=now - timedelta(hours=30)))
        store.ingest(make_report(timestamp=now - timedelta(hours=1)))

        async def scenario():
            sweeper = RetentionSweeper(store)
            sweeper.start()
            assert sweeper.running
            for _ in range(200):
                if store.history_sizes()["10.0.0.2"] == 1:
                    break
                await asyncio.sleep(0.01)
            await sweeper.stop()
            assert not sweeper.running

        asyncio.run(scenario())
        assert len(store.get_history("10.0.0.2")) == 1

    def test_stop_before_first_sweep(self):
        """Stopping during the wait leaves history untouched."""
        now = datetime.now(timezone.utc)
        store = StatusStore(RetentionPolicy(period=timedelta(hours=1)))
        store.ingest(make_report(timestamp=now - timedelta(hours=30)))

        async def scenario():
            sweeper = RetentionSweeper(store)
            sweeper.start()
            await asyncio.sleep(0.01)
            await sweeper.stop()

        asyncio.run(scenario())
        assert len(store.get_history("10.0.0.2")) == 1

    def test_failed_sweep_does_not_stop_loop(self):
        """An exception from one sweep is logged and the next period still sweeps."""
        store = FlakyStore()

        async def scenario():
            sweeper = RetentionSweeper(store)
            sweeper.start()
            for _ in range(200):
                if store.calls >= 2:
                    break
                await asyncio.sleep(0.01)
            await sweeper.stop()

        asyncio.run(scenario())
        assert store.calls >= 2

    def test_stop_without_start(self):
        asyncio.run(RetentionSweeper(StatusStore()).stop())

    def test_start_twice_keeps_one_task(self):
        async def scenario():
            sweeper = RetentionSweeper(StatusStore())
            sweeper.start()
            task = sweeper._task
            sweeper.start()
            assert sweeper._task is task
            await sweeper.stop()

        asyncio.run(scenario())
