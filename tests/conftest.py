import json
import math
import threading
import time
from typing import Any, Optional

import pytest
import requests

from mixer_client.core.control import ControlListener, DoughnutChart
from mixer_client.core.gateway import MixerGateway
from mixer_client.core.liveness import LivenessTracker
from mixer_client.core.poll_loop import PollLoop
from mixer_client.core.session import MixerSession
from mixer_client.models.config import DeviceConfig

DEFAULT_SETTINGS = {
    "NEED_UPDATE": 5,
    "IS_MIXER": 1,
    "MIXER_NAME": "Cocktail",
    "LIQUID_NAME_1": "Rum",
    "LIQUID_NAME_2": "Cola",
    "LIQUID_NAME_3": "Lime",
    "LIQUID_COLOR_1": "#8B4513",
    "LIQUID_COLOR_2": "#3B1F0E",
    "LIQUID_COLOR_3": "#32CD32",
}

DEFAULT_VALUES = {
    "NEED_UPDATE": 5,
    "LIQUID_ANGLE_1": 90,
    "LIQUID_ANGLE_2": 200,
    "LIQUID_ANGLE_3": 310,
    "CYCLE_TIMESPAN": 500,
}


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeResponse:
    def __init__(self, status_code: int, text: str = ""):
        self.status_code = status_code
        self.text = text

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> Any:
        return json.loads(self.text)


class FakeDevice:
    """Stands in for ``requests.Session``, answering like the mixer's /control endpoint."""

    def __init__(self):
        self.settings = dict(DEFAULT_SETTINGS)
        self.values = dict(DEFAULT_VALUES)
        self.reachable = True
        self.fail_settings = False
        self.fail_writes = False
        self.raw_values: Optional[str] = None
        self.requests: list[tuple[str, dict[str, Any]]] = []
        self.closed = False
        self.delay = 0.0
        self.max_in_flight = 0
        self._in_flight = 0
        self._counter_lock = threading.Lock()

    def request(self, method, url, params=None, timeout=None):
        with self._counter_lock:
            self._in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self._in_flight)
        try:
            if self.delay:
                time.sleep(self.delay)
            return self._answer(method, dict(params or {}))
        finally:
            with self._counter_lock:
                self._in_flight -= 1

    def _answer(self, method, params):
        self.requests.append((method, params))
        if not self.reachable:
            raise requests.exceptions.ConnectionError("Device unreachable")

        if method == "GET":
            if "values" in params:
                if self.raw_values is not None:
                    return FakeResponse(200, self.raw_values)
                return FakeResponse(200, json.dumps([self.values]))
            if "settings" in params:
                if self.fail_settings:
                    return FakeResponse(500, "Internal error")
                return FakeResponse(200, json.dumps([self.settings]))
            return FakeResponse(404, "Unknown GET argument!")

        if method == "PUT":
            if self.fail_writes:
                return FakeResponse(404, "Value not valid")
            return FakeResponse(200, "Value update success")

        return FakeResponse(404, "Unknown HTTP method")

    def close(self) -> None:
        self.closed = True

    def reads(self, resource: str) -> int:
        return sum(1 for method, params in self.requests if method == "GET" and resource in params)

    def writes(self) -> list[dict[str, Any]]:
        return [params for method, params in self.requests if method == "PUT"]


class RecordingListener(ControlListener):
    def __init__(self):
        self.changes: list[tuple[bool, int]] = []
        self.shifts: list[tuple[int, float]] = []
        self.shifted: list[tuple[int, float]] = []

    def on_change(self, from_user_input: bool, index: int) -> None:
        self.changes.append((from_user_input, index))

    def on_shift(self, index: int, increments: float) -> None:
        self.shifts.append((index, increments))

    def on_shifted(self, index: int, increments: float) -> None:
        self.shifted.append((index, increments))


class RecordingChart(DoughnutChart):
    """Chart remembering every online indicator update and every angle application."""

    def __init__(self):
        super().__init__()
        self.indicator: list[bool] = []
        self.applied_angles: list[tuple[float, ...]] = []

    def set_online_indicator(self, online: bool) -> None:
        self.indicator.append(online)
        super().set_online_indicator(online)

    def set_angles(self, angles) -> None:
        assert not self.is_being_dragged()
        self.applied_angles.append(tuple(angles))
        super().set_angles(angles)


def transitions(indicator: list[bool], start: bool = False) -> list[tuple[bool, bool]]:
    result = []
    previous = start
    for online in indicator:
        if online != previous:
            result.append((previous, online))
        previous = online
    return result


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def device() -> FakeDevice:
    return FakeDevice()


@pytest.fixture()
def liveness(clock) -> LivenessTracker:
    return LivenessTracker(clock=clock)


@pytest.fixture()
def gateway(device, liveness) -> MixerGateway:
    return MixerGateway(DeviceConfig(host="mixer.local"), liveness, session=device)


@pytest.fixture()
def chart() -> RecordingChart:
    return RecordingChart()


@pytest.fixture()
def prompts() -> dict[str, list[str]]:
    return {"alerts": [], "confirms": []}


@pytest.fixture()
def session(gateway, chart, prompts) -> MixerSession:
    def confirm(message: str) -> bool:
        prompts["confirms"].append(message)
        return True

    return MixerSession(
        gateway,
        control=chart,
        alert=prompts["alerts"].append,
        confirm=confirm,
    )


@pytest.fixture()
def poll_loop(session) -> PollLoop:
    return PollLoop(session, liveness_threshold=1.5)


def nan_values_text(**overrides: Any) -> str:
    values = dict(DEFAULT_VALUES, LIQUID_ANGLE_1=math.nan)
    values.update(overrides)
    return json.dumps([values])
