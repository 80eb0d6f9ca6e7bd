"""Mixer device communication."""

import asyncio
import logging
import threading
from typing import Any, Optional, Union

import requests

from mixer_client.core.liveness import LivenessTracker
from mixer_client.errors import MixerClientError, ProtocolFailure, TransportFailure, MalformedPayload
from mixer_client.models.config import DeviceConfig
from mixer_client.models.mixer import (
    LIQUID_COUNT,
    MixerSettings,
    MixerValues,
    parse_settings,
    parse_values,
)

logger = logging.getLogger(__name__)

CYCLE_TIMESPAN_FIELD = "CYCLE_TIMESPAN"


def liquid_angle_field(index: int) -> str:
    """Return the command field name for the zero-based liquid ``index``."""
    if not 0 <= index < LIQUID_COUNT:
        raise ValueError(f"Liquid index must be within 0..{LIQUID_COUNT - 1}, got {index}")
    return f"LIQUID_ANGLE_{index + 1}"


class MixerGateway:
    """Reads and writes the mixer's ``/control`` query interface.

    Every public operation reports success or failure instead of raising.
    Successful responses refresh the liveness tracker.
    """

    def __init__(
        self,
        config: DeviceConfig,
        liveness: LivenessTracker,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the gateway.

        Args:
            config: Device connection configuration
            liveness: Tracker updated on every successful response
            session: HTTP session to use (a new one by default)
        """
        self.config = config
        self.liveness = liveness
        self._session = session or requests.Session()
        self._error: Optional[str] = None
        # Requests run on executor threads; one at a time on the shared session
        self._lock = threading.Lock()

    @property
    def base_url(self) -> str:
        return self.config.base_url

    @property
    def last_error(self) -> Optional[str]:
        """Return the last failure message, if any."""
        return self._error

    def _request(self, method: str, params: dict[str, Any]) -> requests.Response:
        """Send one request to the device.

        Raises:
            TransportFailure: If the device cannot be reached
            ProtocolFailure: If the device answers with a non-success status
        """
        try:
            with self._lock:
                response = self._session.request(
                    method,
                    self.base_url,
                    params=params,
                    timeout=self.config.timeout,
                )
        except requests.exceptions.RequestException as e:
            raise TransportFailure(f"Failed to connect to mixer at {self.config.host}: {e}") from e

        if not response.ok:
            raise ProtocolFailure(response.status_code, f"{method} {params} returned HTTP {response.status_code}")
        return response

    def _get_json(self, resource: str) -> Any:
        response = self._request("GET", {resource: 0})
        try:
            return response.json()
        except ValueError as e:
            raise MalformedPayload(f"Response to '{resource}' is not JSON: {e}") from e

    def fetch_values(self) -> MixerValues:
        """Read the values resource.

        Raises:
            MixerClientError: On any transport, protocol or payload failure
        """
        return parse_values(self._get_json("values"))

    def fetch_settings(self) -> MixerSettings:
        """Read the settings resource.

        Raises:
            MixerClientError: On any transport, protocol or payload failure
        """
        return parse_settings(self._get_json("settings"))

    def send_field(self, field: str, value: Union[int, str]) -> None:
        """Send a single-field command.

        Raises:
            MixerClientError: On any transport or protocol failure
        """
        self._request("PUT", {field: value})

    def _succeeded(self) -> None:
        self._error = None
        self.liveness.record_success()

    def _failed(self, action: str, error: MixerClientError) -> None:
        self._error = str(error)
        logger.warning(f"Error {action}: {error}")

    async def _run(self, func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func, *args)

    async def read_values(self) -> Optional[MixerValues]:
        """Read the values resource.

        Returns:
            Parsed snapshot, or None if the read failed
        """
        try:
            values = await self._run(self.fetch_values)
        except MixerClientError as e:
            self._failed("getting mixer values", e)
            return None
        self._succeeded()
        logger.debug(f"Got values: {values}")
        return values

    async def read_settings(self) -> Optional[MixerSettings]:
        """Read the settings resource.

        Returns:
            Parsed settings, or None if the read failed
        """
        try:
            settings = await self._run(self.fetch_settings)
        except MixerClientError as e:
            self._failed("getting mixer settings", e)
            return None
        self._succeeded()
        logger.debug(f"Got settings: {settings}")
        return settings

    async def write_field(self, field: str, value: Union[int, str]) -> bool:
        """Send a single-field command.

        Returns:
            True if the device accepted the command
        """
        try:
            await self._run(self.send_field, field, value)
        except MixerClientError as e:
            self._failed(f"sending {field}", e)
            return False
        self._succeeded()
        logger.info(f"Send: {field}={value} successful")
        return True

    def close(self) -> None:
        self._session.close()

    def __repr__(self) -> str:
        return f"MixerGateway(base_url='{self.base_url}')"
