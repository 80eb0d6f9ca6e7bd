"""Keeps polled values away from controls the user is manipulating."""

import logging

from mixer_client.core.control import InteractiveControl

logger = logging.getLogger(__name__)


class EditSuppression:
    """Tracks whether a user gesture is in progress.

    The slider counts as held from a press on the slider until a release
    anywhere in the document. Dragging state is asked from the control.
    """

    def __init__(self, control: InteractiveControl):
        self._control = control
        self._slider_held = False

    @property
    def slider_held(self) -> bool:
        return self._slider_held

    @property
    def control_dragged(self) -> bool:
        return self._control.is_being_dragged()

    @property
    def editing(self) -> bool:
        """True while remote values must not be applied."""
        return self._slider_held or self.control_dragged

    def press_slider(self) -> None:
        """Mouse down or touch start on the slider."""
        self._slider_held = True

    def release_pointer(self) -> None:
        """Mouse up or touch end anywhere."""
        self._slider_held = False
