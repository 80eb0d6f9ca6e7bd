"""Scheduler driving the poll loop."""

import logging
from typing import Any, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from mixer_client.core.poll_loop import PollLoop

logger = logging.getLogger(__name__)

POLL_JOB_ID = "poll_loop"


class Scheduler:
    """Runs the poll loop on a fixed period."""

    def __init__(self):
        """Initialize the scheduler."""
        self._scheduler = AsyncIOScheduler()
        self._poll_loop: Optional[PollLoop] = None
        self._interval = 0.5
        self._running = False

    @property
    def is_running(self) -> bool:
        """Check if scheduler is running."""
        return self._running

    def set_poll_loop(self, poll_loop: PollLoop, interval_seconds: float) -> None:
        """Set the poll loop and its period.

        Args:
            poll_loop: PollLoop instance
            interval_seconds: Seconds between ticks
        """
        self._poll_loop = poll_loop
        self._interval = interval_seconds

    def _schedule_poll_loop(self) -> None:
        if not self._poll_loop:
            return

        poll_loop = self._poll_loop

        async def poll() -> None:
            try:
                await poll_loop.tick()
            except Exception as e:
                logger.exception(f"Poll tick failed: {e}")

        # One instance at a time; late ticks are dropped, not queued
        self._scheduler.add_job(
            poll,
            trigger=IntervalTrigger(seconds=self._interval),
            id=POLL_JOB_ID,
            name="Poll mixer",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )

        logger.info(f"Scheduled poll loop every {self._interval}s")

    async def start(self) -> None:
        """Start the scheduler."""
        if self._running:
            logger.warning("Scheduler already running")
            return

        self._schedule_poll_loop()

        self._scheduler.start()
        self._running = True
        logger.info("Scheduler started")

        # First check right away instead of waiting a full period
        if self._poll_loop:
            try:
                await self._poll_loop.tick()
            except Exception as e:
                logger.error(f"Initial poll failed: {e}")

    def stop(self) -> None:
        """Stop the scheduler."""
        if not self._running:
            return

        self._scheduler.shutdown(wait=False)
        self._running = False
        logger.info("Scheduler stopped")

    def get_jobs(self) -> list[dict[str, Any]]:
        """Get information about scheduled jobs.

        Returns:
            List of job info dictionaries
        """
        jobs = []
        for job in self._scheduler.get_jobs():
            next_run = job.next_run_time
            jobs.append({
                "id": job.id,
                "name": job.name,
                "next_run": next_run.isoformat() if next_run else None,
            })
        return jobs
