"""Mixer manager wiring gateway, session, poll loop and scheduler together."""

import asyncio
import logging
from typing import Any, Callable, Optional

import requests

from mixer_client.core.gateway import MixerGateway
from mixer_client.core.liveness import LivenessTracker
from mixer_client.core.poll_loop import PollLoop
from mixer_client.core.scheduler import Scheduler
from mixer_client.core.session import MixerSession
from mixer_client.models.config import Settings

logger = logging.getLogger(__name__)


class MixerManager:
    """Manages the complete client pipeline: device -> poll loop -> session."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        host: Optional[str] = None,
        alert: Optional[Callable[[str], None]] = None,
        confirm: Optional[Callable[[str], bool]] = None,
        http_session: Optional[requests.Session] = None,
    ):
        """Initialize the mixer manager.

        Args:
            settings: Application settings (read from the environment if omitted)
            host: Device host overriding the settings
            alert: Shows a message to the user
            confirm: Asks the user a yes/no question
            http_session: HTTP session for the gateway
        """
        self.settings = settings or Settings()
        self.liveness = LivenessTracker()
        self.gateway = MixerGateway(
            self.settings.device_config(host),
            self.liveness,
            session=http_session,
        )
        self.session = MixerSession(self.gateway, alert=alert, confirm=confirm)
        self.poll_loop = PollLoop(self.session, liveness_threshold=self.settings.liveness_threshold)

        self._scheduler = Scheduler()
        self._scheduler.set_poll_loop(self.poll_loop, self.settings.poll_interval)

    @property
    def scheduler(self) -> Scheduler:
        """Get the scheduler."""
        return self._scheduler

    async def start(self) -> None:
        """Start polling the device."""
        logger.info(f"Starting mixer client for {self.gateway.base_url}...")
        await self._scheduler.start()
        logger.info("Mixer client started")

    def stop(self) -> None:
        """Stop polling the device."""
        self._scheduler.stop()
        self.gateway.close()
        logger.info("Mixer client stopped")

    async def run_forever(self) -> None:
        """Poll the device until cancelled."""
        await self.start()

        try:
            while True:
                await asyncio.sleep(1)
        except asyncio.CancelledError:
            logger.info("Mixer client interrupted")
        finally:
            self.stop()

    def get_status(self) -> dict[str, Any]:
        """Get current status of the client.

        Returns:
            Status dictionary
        """
        status = self.session.get_status(self.settings.liveness_threshold)
        status.update({
            "device_url": self.gateway.base_url,
            "scheduler_running": self._scheduler.is_running,
            "scheduled_jobs": self._scheduler.get_jobs(),
            "ticks": self.poll_loop.ticks,
            "skipped_ticks": self.poll_loop.skipped,
        })
        return status
