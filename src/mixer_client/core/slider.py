"""Cycle timespan slider model."""

import logging

from mixer_client.models.mixer import CYCLE_TIMESPAN_MAX, CYCLE_TIMESPAN_MIN

logger = logging.getLogger(__name__)

SLIDER_STEP = 20
SLIDER_DEFAULT = 500


class CycleTimespanSlider:
    """Slider selecting the pump PWM cycle timespan in milliseconds."""

    def __init__(
        self,
        minimum: int = CYCLE_TIMESPAN_MIN,
        maximum: int = CYCLE_TIMESPAN_MAX,
        step: int = SLIDER_STEP,
        value: int = SLIDER_DEFAULT,
    ):
        self.minimum = minimum
        self.maximum = maximum
        self.step = step
        self._value = self.snap(value)

    @property
    def value(self) -> int:
        return self._value

    @property
    def readout(self) -> str:
        """Text shown next to the slider."""
        return f"{self._value}ms"

    def snap(self, value: float) -> int:
        """Clamp ``value`` to the slider range and round it to the nearest step."""
        value = max(self.minimum, min(self.maximum, value))
        steps = round((value - self.minimum) / self.step)
        return min(self.maximum, self.minimum + steps * self.step)

    def set_value(self, value: float) -> int:
        self._value = self.snap(value)
        return self._value

    def show_device_value(self, value: int) -> int:
        """Show a value reported by the device as is, only clamped to the range."""
        self._value = int(max(self.minimum, min(self.maximum, value)))
        return self._value

    def is_on_step(self, value: float) -> bool:
        return self.snap(value) == value
