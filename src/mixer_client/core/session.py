"""Per-connection client state and the handlers for user gestures."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from mixer_client.core.control import ADJUST_STEP_DEGREES, ControlListener, DoughnutChart
from mixer_client.core.editing import EditSuppression
from mixer_client.core.gateway import CYCLE_TIMESPAN_FIELD, MixerGateway, liquid_angle_field
from mixer_client.core.slider import CycleTimespanSlider
from mixer_client.core.versioning import SettingsVersionGate
from mixer_client.models.mixer import MixerSettings

logger = logging.getLogger(__name__)

BAR_MODE_MESSAGE = "The mixer is in bar mode. Control not available"
RELOAD_PROMPT = "The control is not connected. Reload page?"


@dataclass
class LiquidRow:
    """One row of the liquid table next to the chart."""

    label: str
    color: str
    percentage: float

    @property
    def text(self) -> str:
        return f"{self.percentage:.0f}%"


def _log_alert(message: str) -> None:
    logger.warning(message)


def _decline(message: str) -> bool:
    logger.warning(f"{message} (no prompt available, not reloading)")
    return False


class MixerSession:
    """Everything one client knows about the mixer.

    Owns the chart, the slider, the edit flags and the version gate, and
    turns completed gestures into device commands. Remote state reaches
    it only through the poll loop.
    """

    def __init__(
        self,
        gateway: MixerGateway,
        control: Optional[DoughnutChart] = None,
        slider: Optional[CycleTimespanSlider] = None,
        alert: Optional[Callable[[str], None]] = None,
        confirm: Optional[Callable[[str], bool]] = None,
    ):
        """Initialize the session.

        Args:
            gateway: Gateway to the device
            control: Chart to drive (a default doughnut chart if omitted)
            slider: Cycle timespan slider (a default slider if omitted)
            alert: Shows a message to the user
            confirm: Asks the user a yes/no question
        """
        self.gateway = gateway
        self.control = control or DoughnutChart()
        self.slider = slider or CycleTimespanSlider()
        self.edits = EditSuppression(self.control)
        self.version_gate = SettingsVersionGate()
        self.settings: Optional[MixerSettings] = None
        self.rows: list[LiquidRow] = []
        self._alert = alert or _log_alert
        self._confirm = confirm or _decline
        self._pending: set[asyncio.Task] = set()

        self._listener = _SessionListener(self)
        self.control.add_listener(self._listener)
        self.refresh_rows()

    @property
    def liveness(self):
        return self.gateway.liveness

    @property
    def is_mixer(self) -> bool:
        # Mixer mode until the device says otherwise
        return self.settings.is_mixer if self.settings else True

    @property
    def mixer_name(self) -> Optional[str]:
        return self.settings.mixer_name if self.settings else None

    def apply_settings(self, settings: MixerSettings) -> None:
        """Show freshly fetched settings."""
        self.settings = settings
        logger.info(f"Set [IS_MIXER] = {settings.is_mixer}")
        logger.info(f"Set [MIXER_NAME] = {settings.mixer_name}")
        self.control.set_labels_and_colors(settings.liquid_names, settings.liquid_colors)
        logger.info(f"Set [LIQUID_NAME_X..] = {list(settings.liquid_names)}")
        logger.info(f"Set [LIQUID_COLOR_X..] = {list(settings.liquid_colors)}")
        self.refresh_rows()

    def apply_cycle_timespan(self, value: int) -> None:
        """Move the slider to a value reported by the device."""
        self.slider.show_device_value(value)
        logger.debug(f"Set [CYCLE_TIMESPAN] = {self.slider.readout}")

    def refresh_rows(self) -> None:
        self.rows = [
            LiquidRow(
                label=segment.label,
                color=segment.color,
                percentage=self.control.displayed_percentage(index),
            )
            for index, segment in enumerate(self.control.segments)
        ]

    def _track(self, loop: asyncio.AbstractEventLoop, coro) -> asyncio.Task:
        task = loop.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def flush(self) -> list[bool]:
        """Wait for all commands issued by gestures so far."""
        results = []
        while self._pending:
            tasks = list(self._pending)
            self._pending.difference_update(tasks)
            results.extend(await asyncio.gather(*tasks))
        return results

    def _connection_lost(self) -> None:
        if self._confirm(RELOAD_PROMPT):
            self.reload()

    def reload(self) -> None:
        """Start over as if the page had been loaded again."""
        logger.info("Reloading session")
        self.version_gate.reset()
        self.settings = None
        self.edits.release_pointer()

    def shifted(self, index: int, increments: float) -> None:
        """Commit point of a chart gesture.

        Gestures that move a boundary must complete inside the running event
        loop, since the command is sent as a task on it.
        """
        if not self.is_mixer:
            self._alert(BAR_MODE_MESSAGE)
            return
        value = round(increments)
        if value == 0:
            logger.debug(f"Not sending {liquid_angle_field(index)}: boundary did not move")
            return
        loop = asyncio.get_running_loop()
        self._track(loop, self.send_angle(index, value))

    async def send_angle(self, index: int, value: int) -> bool:
        """Send a relative angle change in whole degrees for one liquid."""
        field = liquid_angle_field(index)
        if not await self.gateway.write_field(field, value):
            logger.info(f"Send: {field} no connection..")
            self._connection_lost()
            return False
        return True

    async def shift(self, index: int, degrees: float) -> bool:
        """Drag a boundary by ``degrees`` in one gesture and wait for the command."""
        self.control.begin_drag(index)
        self.control.drag(degrees)
        self.control.end_drag()
        results = await self.flush()
        return self.is_mixer and all(results)

    async def adjust(self, index: int, direction: int) -> bool:
        """Plus/minus button next to a liquid."""
        self.control.move_angle(index, direction * ADJUST_STEP_DEGREES)
        results = await self.flush()
        return self.is_mixer and all(results)

    def press_slider(self) -> None:
        self.edits.press_slider()

    def release_pointer(self) -> None:
        """Mouse up or touch end anywhere; also finishes a chart drag."""
        self.edits.release_pointer()
        if self.control.is_being_dragged():
            self.control.end_drag()

    def input_slider(self, value: float) -> str:
        """Slider moved; only the readout follows."""
        self.slider.set_value(value)
        return self.slider.readout

    async def commit_slider(self, value: float) -> bool:
        """Slider value changed; send it to the device."""
        self.slider.set_value(value)
        if not await self.gateway.write_field(CYCLE_TIMESPAN_FIELD, self.slider.value):
            logger.info(f"Send: {CYCLE_TIMESPAN_FIELD} no connection..")
            self._connection_lost()
            return False
        return True

    def get_status(self, threshold: float) -> dict[str, Any]:
        return {
            "online": self.liveness.is_online(threshold=threshold),
            "is_mixer": self.is_mixer,
            "mixer_name": self.mixer_name,
            "logo": self.settings.logo_name if self.settings else None,
            "update_version": self.version_gate.last_known_version,
            "angles": list(self.control.angles),
            "liquids": [
                {"label": row.label, "color": row.color, "percentage": row.text}
                for row in self.rows
            ],
            "cycle_timespan": self.slider.value,
            "cycle_timespan_text": self.slider.readout,
            "slider_held": self.edits.slider_held,
            "control_dragged": self.edits.control_dragged,
            "last_error": self.gateway.last_error,
        }


class _SessionListener(ControlListener):
    """Routes chart notifications into the session."""

    def __init__(self, session: MixerSession):
        self._session = session

    def on_change(self, from_user_input: bool, index: int) -> None:
        self._session.refresh_rows()

    def on_shift(self, index: int, increments: float) -> None:
        logger.debug(f"Chart shifting: segment {index} by {increments:+.1f}°")

    def on_shifted(self, index: int, increments: float) -> None:
        logger.debug(f"Chart shifted: segment {index} by {increments:+.1f}°")
        self._session.shifted(index, increments)
