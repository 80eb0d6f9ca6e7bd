"""Interactive circular control showing one segment per liquid."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence

from mixer_client.models.mixer import ANGLE_MAX, ANGLE_MIN, LIQUID_COUNT

logger = logging.getLogger(__name__)

FULL_CIRCLE = 360.0
MIN_SLICE_ANGLE = 6.0
ADJUST_STEP_DEGREES = 3.0


class ControlListener:
    """Receives notifications from an interactive control.

    All callbacks run synchronously on the event loop thread, in the
    order the gesture produced them. Subclasses override what they need.
    """

    def on_change(self, from_user_input: bool, index: int) -> None:
        """A segment boundary moved, by a drag or by ``set_angles``."""

    def on_shift(self, index: int, increments: float) -> None:
        """A boundary is moving during a drag. Signed degrees since the drag began."""

    def on_shifted(self, index: int, increments: float) -> None:
        """A drag finished. Signed degrees moved over the whole gesture."""


class InteractiveControl(ABC):
    """Capabilities the synchronization core needs from the visual control."""

    def __init__(self):
        self._listeners: list[ControlListener] = []

    def add_listener(self, listener: ControlListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: ControlListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _fire_change(self, from_user_input: bool, index: int) -> None:
        for listener in list(self._listeners):
            listener.on_change(from_user_input, index)

    def _fire_shift(self, index: int, increments: float) -> None:
        for listener in list(self._listeners):
            listener.on_shift(index, increments)

    def _fire_shifted(self, index: int, increments: float) -> None:
        for listener in list(self._listeners):
            listener.on_shifted(index, increments)

    @abstractmethod
    def set_labels_and_colors(self, names: Sequence[str], colors: Sequence[str]) -> None:
        pass

    @abstractmethod
    def set_angles(self, angles: Sequence[float]) -> None:
        """Set the start angle of every segment (three values within 0..360)."""
        pass

    @abstractmethod
    def get_slice_size_percentage(self, index: int) -> float:
        pass

    @abstractmethod
    def is_being_dragged(self) -> bool:
        pass

    @abstractmethod
    def set_online_indicator(self, online: bool) -> None:
        pass


@dataclass
class Segment:
    """One liquid's slice of the doughnut."""

    label: str
    color: str
    angle: float


def default_segments() -> list[Segment]:
    return [
        Segment(label="", color="#969696", angle=0.0),
        Segment(label="", color="#D5D5D5", angle=135.0),
        Segment(label="", color="#494949", angle=180.0),
    ]


class DoughnutChart(InteractiveControl):
    """Headless doughnut chart with draggable segment boundaries.

    Segment ``i`` starts at its own angle and ends where segment ``i + 1``
    starts. Dragging boundary ``i`` grows the previous segment and shrinks
    segment ``i``; no segment is dragged below ``min_angle`` degrees.
    Pointer geometry stays with the front end: drags arrive here already
    converted to degrees.
    """

    def __init__(self, segments: Optional[list[Segment]] = None, min_angle: float = MIN_SLICE_ANGLE):
        super().__init__()
        self.segments = segments or default_segments()
        self.min_angle = min_angle
        self._online = False
        self._drag_index: Optional[int] = None
        self._drag_increments = 0.0

    @property
    def online(self) -> bool:
        return self._online

    @property
    def angles(self) -> tuple[float, ...]:
        return tuple(segment.angle for segment in self.segments)

    @property
    def drag_index(self) -> Optional[int]:
        return self._drag_index

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self.segments):
            raise IndexError(f"Segment index must be within 0..{len(self.segments) - 1}, got {index}")

    def set_labels_and_colors(self, names: Sequence[str], colors: Sequence[str]) -> None:
        if len(names) != len(self.segments) or len(colors) != len(self.segments):
            raise ValueError(f"Expected {len(self.segments)} names and colors")
        for segment, name, color in zip(self.segments, names, colors):
            segment.label = name
            segment.color = color

    def set_angles(self, angles: Sequence[float]) -> None:
        if len(angles) != LIQUID_COUNT:
            raise ValueError(f"Expected {LIQUID_COUNT} angles, got {len(angles)}")
        for angle in angles:
            if not ANGLE_MIN <= angle <= ANGLE_MAX:
                raise ValueError(f"Angle {angle} is outside {ANGLE_MIN}..{ANGLE_MAX}")

        changed = []
        for index, (segment, angle) in enumerate(zip(self.segments, angles)):
            if segment.angle != angle:
                segment.angle = float(angle)
                changed.append(index)

        for index in changed:
            self._fire_change(False, index)

    def slice_size(self, index: int) -> float:
        """Size of segment ``index`` in degrees."""
        self._check_index(index)
        following = self.segments[(index + 1) % len(self.segments)]
        return (following.angle - self.segments[index].angle) % FULL_CIRCLE

    def get_slice_size_percentage(self, index: int) -> float:
        return self.slice_size(index) / FULL_CIRCLE * 100.0

    def displayed_percentage(self, index: int) -> float:
        """Percentage shown to the user; slices at or below ``min_angle`` read as 0."""
        percentage = self.get_slice_size_percentage(index)
        if percentage <= self.min_angle / FULL_CIRCLE * 100.0:
            return 0.0
        return percentage

    def is_being_dragged(self) -> bool:
        return self._drag_index is not None

    def set_online_indicator(self, online: bool) -> None:
        if online != self._online:
            logger.info("Mixer online" if online else "Mixer offline")
        self._online = online

    def _move_boundary(self, index: int, degrees: float) -> float:
        """Move the start of segment ``index`` by up to ``degrees``; return the applied amount."""
        previous = (index - 1) % len(self.segments)
        lower = min(self.min_angle - self.slice_size(previous), 0.0)
        upper = max(self.slice_size(index) - self.min_angle, 0.0)
        applied = max(lower, min(upper, degrees))
        if applied:
            segment = self.segments[index]
            segment.angle = (segment.angle + applied) % FULL_CIRCLE
            self._fire_change(True, index)
        return applied

    def begin_drag(self, index: int) -> None:
        """Press on the boundary at the start of segment ``index``."""
        self._check_index(index)
        if self._drag_index is not None:
            raise RuntimeError(f"Segment {self._drag_index} is already being dragged")
        self._drag_index = index
        self._drag_increments = 0.0

    def drag(self, degrees: float) -> float:
        """Move the dragged boundary by ``degrees``; return the increments so far."""
        if self._drag_index is None:
            raise RuntimeError("No drag in progress")
        self._drag_increments += self._move_boundary(self._drag_index, degrees)
        self._fire_shift(self._drag_index, self._drag_increments)
        return self._drag_increments

    def end_drag(self) -> float:
        """Release the dragged boundary; fires ``on_shifted`` once for the whole gesture."""
        if self._drag_index is None:
            raise RuntimeError("No drag in progress")
        index, increments = self._drag_index, self._drag_increments
        self._drag_index = None
        self._drag_increments = 0.0
        self._fire_shifted(index, increments)
        return increments

    def move_angle(self, index: int, degrees: float) -> float:
        """Move a boundary as one complete gesture, like the +/- buttons do."""
        self._check_index(index)
        increments = self._move_boundary(index, degrees)
        self._fire_shift(index, increments)
        self._fire_shifted(index, increments)
        return increments

    def __repr__(self) -> str:
        return f"DoughnutChart(angles={self.angles}, online={self._online})"
