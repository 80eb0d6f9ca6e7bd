"""Decides when the settings resource has to be fetched again."""

import logging

from mixer_client.models.mixer import UNKNOWN_VERSION

logger = logging.getLogger(__name__)


class SettingsVersionGate:
    """Tracks the device's update counter (``NEED_UPDATE``).

    The counter advances whenever the device's settings change. It is
    opaque: only equality with the last known value matters.
    """

    def __init__(self):
        self._last_known_version = UNKNOWN_VERSION

    @property
    def last_known_version(self) -> int:
        return self._last_known_version

    def observe(self, version: int) -> bool:
        """Record a freshly read version.

        Returns:
            True if the settings are stale and must be re-fetched
        """
        if version == UNKNOWN_VERSION:
            logger.debug("Device reported no update version yet")
            return False

        if version == self._last_known_version:
            return False

        logger.info(f"Update version changed {self._last_known_version} -> {version}, refreshing settings")
        self._last_known_version = version
        return True

    def reset(self) -> None:
        """Forget the known version so the next observation triggers a refresh."""
        self._last_known_version = UNKNOWN_VERSION
