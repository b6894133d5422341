"""
In-process iCal sync scheduler
Runs the sync job every ICAL_SYNC_INTERVAL_MINUTES plus once shortly after startup
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from ...config import ICAL_SYNC_INTERVAL_MINUTES, ICAL_SYNC_STARTUP_DELAY_SECONDS

logger = logging.getLogger(__name__)


class ICalSyncScheduler:
    def __init__(
        self,
        job: Callable[[], Awaitable[Any]],
        interval_seconds: float = ICAL_SYNC_INTERVAL_MINUTES * 60,
        startup_delay_seconds: float = ICAL_SYNC_STARTUP_DELAY_SECONDS,
    ):
        self.job = job
        self.interval_seconds = interval_seconds
        self.startup_delay_seconds = startup_delay_seconds
        self.runs = 0
        self._lock = asyncio.Lock()
        self._tasks: list[asyncio.Task] = []

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    def start(self) -> None:
        """Start the recurring loop and the delayed first run; must be called inside a running loop"""
        if self.running:
            logger.debug("iCal sync scheduler already running")
            return

        self._tasks = [
            asyncio.create_task(self._run_after_startup_delay(), name="ical-sync-startup"),
            asyncio.create_task(self._run_forever(), name="ical-sync-interval"),
        ]
        logger.info(
            f"🗓️ [iCal Sync] Scheduled automatic sync every {self.interval_seconds / 60:g} minutes"
        )

    async def stop(self) -> None:
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        logger.info("🛑 [iCal Sync] Scheduler stopped")

    async def run_once(self) -> Optional[Any]:
        """
        Run the job once and return its result.
        Returns None when a previous run is still in progress or the job failed;
        failures are logged so the schedule keeps going.
        """
        if self._lock.locked():
            logger.warning("⚠️ [iCal Sync] Previous run still in progress, skipping this tick")
            return None

        async with self._lock:
            self.runs += 1
            try:
                return await self.job()
            except Exception as e:
                logger.error(f"❌ [iCal Sync] Run failed: {type(e).__name__}: {e}")
                return None

    async def _run_after_startup_delay(self) -> None:
        await asyncio.sleep(self.startup_delay_seconds)
        logger.info("🚀 [iCal Sync] Running initial sync...")
        await self.run_once()

    async def _run_forever(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            await self.run_once()
