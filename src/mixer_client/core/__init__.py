"""Core functionality for mixer_client."""

from mixer_client.core.control import ControlListener, DoughnutChart, InteractiveControl
from mixer_client.core.editing import EditSuppression
from mixer_client.core.gateway import MixerGateway
from mixer_client.core.liveness import LivenessTracker
from mixer_client.core.mixer_manager import MixerManager
from mixer_client.core.poll_loop import PollLoop
from mixer_client.core.scheduler import Scheduler
from mixer_client.core.session import MixerSession
from mixer_client.core.slider import CycleTimespanSlider
from mixer_client.core.versioning import SettingsVersionGate

__all__ = [
    "ControlListener",
    "DoughnutChart",
    "InteractiveControl",
    "EditSuppression",
    "MixerGateway",
    "LivenessTracker",
    "MixerManager",
    "PollLoop",
    "Scheduler",
    "MixerSession",
    "CycleTimespanSlider",
    "SettingsVersionGate",
]
