import asyncio
import logging
from typing import Optional

from .store import StatusStore

logger = logging.getLogger(__name__)


class RetentionSweeper:
    """Runs StatusStore.sweep every policy period until stopped.

    Each sweep runs in a worker thread; cancelling the task only interrupts the
    wait between sweeps, so a sweep already started is always completed.
    """

    def __init__(self, store: StatusStore):
        self.store = store
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info("Retention sweeper started: period=%s window=%s",
                    self.store.policy.period, self.store.policy.window)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Retention sweeper stopped")

    async def _run(self) -> None:
        period = self.store.policy.period.total_seconds()
        while True:
            await asyncio.sleep(period)
            sweep = asyncio.ensure_future(asyncio.to_thread(self.store.sweep))
            try:
                await asyncio.shield(sweep)
            except asyncio.CancelledError:
                await sweep
                raise
            except Exception:
                logger.exception("Retention sweep failed")
