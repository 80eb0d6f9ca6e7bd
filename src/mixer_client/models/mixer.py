"""Payload schemas for the mixer's settings and values resources."""

import math
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from mixer_client.errors import MalformedPayload, ValidationFailure

LIQUID_COUNT = 3
UNKNOWN_VERSION = -1

ANGLE_MIN = 0.0
ANGLE_MAX = 360.0
CYCLE_TIMESPAN_MIN = 200
CYCLE_TIMESPAN_MAX = 1000

# Angles shown when the device runs as a bar dispenser
BAR_MODE_ANGLES = (0.0, 120.0, 240.0)


class MixerSettings(BaseModel):
    """Rarely changing device settings (names, colors, operating mode)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    is_mixer: bool = Field(alias="IS_MIXER")
    mixer_name: str = Field(alias="MIXER_NAME")
    liquid_name_1: str = Field(alias="LIQUID_NAME_1")
    liquid_name_2: str = Field(alias="LIQUID_NAME_2")
    liquid_name_3: str = Field(alias="LIQUID_NAME_3")
    liquid_color_1: str = Field(alias="LIQUID_COLOR_1")
    liquid_color_2: str = Field(alias="LIQUID_COLOR_2")
    liquid_color_3: str = Field(alias="LIQUID_COLOR_3")

    @property
    def liquid_names(self) -> tuple[str, str, str]:
        return (self.liquid_name_1, self.liquid_name_2, self.liquid_name_3)

    @property
    def liquid_colors(self) -> tuple[str, str, str]:
        return (self.liquid_color_1, self.liquid_color_2, self.liquid_color_3)

    @property
    def logo_name(self) -> str:
        """Asset name of the logo matching the mixer name."""
        return f"logo_{self.mixer_name.lower()}.svg"


class MixerValues(BaseModel):
    """Snapshot of the device's live values, read on every poll tick.

    Angles and the cycle timespan are kept as received. Range checks
    happen in the ``checked_*`` accessors so one bad field does not
    discard the rest of the snapshot.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    update_version: int = Field(alias="NEED_UPDATE")
    liquid_angle_1: Optional[float] = Field(default=None, alias="LIQUID_ANGLE_1")
    liquid_angle_2: Optional[float] = Field(default=None, alias="LIQUID_ANGLE_2")
    liquid_angle_3: Optional[float] = Field(default=None, alias="LIQUID_ANGLE_3")
    cycle_timespan: Optional[float] = Field(default=None, alias="CYCLE_TIMESPAN")

    @property
    def liquid_angles(self) -> tuple[Optional[float], Optional[float], Optional[float]]:
        return (self.liquid_angle_1, self.liquid_angle_2, self.liquid_angle_3)

    def checked_angles(self) -> tuple[float, float, float]:
        """Return the three angles, or raise if any is missing, NaN or outside 0..360."""
        angles = self.liquid_angles
        for number, angle in enumerate(angles, start=1):
            if angle is None or math.isnan(angle) or not ANGLE_MIN <= angle <= ANGLE_MAX:
                raise ValidationFailure(
                    f"LIQUID_ANGLE_{number}={angle!r} (NaN is not allowed and must be "
                    f"within {ANGLE_MIN:.0f}° and {ANGLE_MAX:.0f}°)"
                )
        return angles  # type: ignore[return-value]

    def checked_cycle_timespan(self) -> int:
        """Return the cycle timespan in ms, or raise if missing, NaN or outside 200..1000."""
        value = self.cycle_timespan
        if (
            value is None
            or math.isnan(value)
            or not CYCLE_TIMESPAN_MIN <= value <= CYCLE_TIMESPAN_MAX
        ):
            raise ValidationFailure(
                f"CYCLE_TIMESPAN={value!r} (NaN is not allowed and must be "
                f"within {CYCLE_TIMESPAN_MIN}ms and {CYCLE_TIMESPAN_MAX}ms)"
            )
        return int(value)


def unwrap_payload(data: Any) -> dict[str, Any]:
    """Extract the single object the device wraps in a one-element array."""
    if isinstance(data, list):
        if not data:
            raise MalformedPayload("Empty response array")
        data = data[0]
    if not isinstance(data, dict):
        raise MalformedPayload(f"Expected a JSON object, got {type(data).__name__}")
    return data


def parse_settings(data: Any) -> MixerSettings:
    """Validate a raw settings response.

    Raises:
        MalformedPayload: If the payload lacks fields or has the wrong shape
    """
    try:
        return MixerSettings.model_validate(unwrap_payload(data))
    except ValidationError as e:
        raise MalformedPayload(f"Invalid settings payload: {e}") from e


def parse_values(data: Any) -> MixerValues:
    """Validate a raw values response.

    Raises:
        MalformedPayload: If the payload lacks fields or has the wrong shape
    """
    try:
        return MixerValues.model_validate(unwrap_payload(data))
    except ValidationError as e:
        raise MalformedPayload(f"Invalid values payload: {e}") from e
