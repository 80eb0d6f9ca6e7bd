"""Periodic synchronization of the session with the device."""

import logging

from mixer_client.core.liveness import DEFAULT_THRESHOLD
from mixer_client.core.session import MixerSession
from mixer_client.errors import ValidationFailure
from mixer_client.models.mixer import BAR_MODE_ANGLES, MixerValues

logger = logging.getLogger(__name__)


class PollLoop:
    """Mirrors the device state into the session, one tick at a time.

    A tick reads the values, re-reads the settings when the update version
    moved, applies angles and cycle timespan unless the user is editing,
    and finally refreshes the online indicator. Ticks never overlap: a
    tick requested while another is in flight is skipped.
    """

    def __init__(self, session: MixerSession, liveness_threshold: float = DEFAULT_THRESHOLD):
        self.session = session
        self.liveness_threshold = liveness_threshold
        self._busy = False
        self.ticks = 0
        self.skipped = 0

    @property
    def busy(self) -> bool:
        return self._busy

    async def tick(self) -> bool:
        """Run one synchronization step.

        Returns:
            False if the tick was skipped (gesture in progress or previous tick busy)
        """
        if self._busy:
            self.skipped += 1
            logger.debug("Previous tick still running, skipping")
            return False

        if self.session.edits.editing:
            self.skipped += 1
            logger.debug("User is editing, skipping tick")
            return False

        self._busy = True
        try:
            await self._sync()
        finally:
            self._busy = False
        self.ticks += 1
        return True

    async def _sync(self) -> None:
        session = self.session

        values = await session.gateway.read_values()
        if values is not None:
            # Settings first, so a mode switch is applied before the angles
            if session.version_gate.observe(values.update_version):
                settings = await session.gateway.read_settings()
                if settings is not None:
                    session.apply_settings(settings)

            self.apply_values(values)

        session.control.set_online_indicator(
            session.liveness.is_online(threshold=self.liveness_threshold)
        )

    def apply_values(self, values: MixerValues) -> None:
        """Show a values snapshot unless a gesture started in the meantime."""
        session = self.session
        if session.edits.editing:
            logger.debug("Gesture started while reading, values left unapplied")
            return

        if not session.is_mixer:
            session.control.set_angles(BAR_MODE_ANGLES)
            logger.debug("Not set [LIQUID_ANGLE_X..] -> No mixer")
        else:
            try:
                angles = values.checked_angles()
            except ValidationFailure as e:
                logger.warning(f"Data for liquid angles not matching: {e}")
            else:
                session.control.set_angles(angles)
                logger.debug(f"Set [LIQUID_ANGLE_X..] = {list(angles)}")

        try:
            timespan = values.checked_cycle_timespan()
        except ValidationFailure as e:
            logger.warning(f"Data for cycle timespan not matching: {e}")
        else:
            if not session.edits.slider_held:
                session.apply_cycle_timespan(timespan)

    def __repr__(self) -> str:
        return f"PollLoop(ticks={self.ticks}, skipped={self.skipped}, busy={self._busy})"
