import asyncio

from mixer_client.models.mixer import parse_values

from conftest import DEFAULT_VALUES, RecordingListener, nan_values_text, transitions


def tick(poll_loop) -> bool:
    return asyncio.run(poll_loop.tick())


class TestVersionGatedRefresh:
    """Settings follow the update version, values follow every tick."""

    def test_first_tick_fetches_settings(self, poll_loop, device, session) -> None:
        assert tick(poll_loop) is True
        assert device.reads("values") == 1
        assert device.reads("settings") == 1
        assert session.mixer_name == "Cocktail"
        assert [row.label for row in session.rows] == ["Rum", "Cola", "Lime"]

    def test_known_version_skips_settings(self, poll_loop, device, chart, session) -> None:
        # Scenario A: version 5 already known
        session.version_gate.observe(5)
        tick(poll_loop)
        assert device.reads("settings") == 0
        assert chart.angles == (90.0, 200.0, 310.0)

    def test_changed_version_fetches_settings_once(self, poll_loop, device, session) -> None:
        # Scenario B
        session.version_gate.observe(5)
        device.values["NEED_UPDATE"] = 6
        tick(poll_loop)
        tick(poll_loop)
        assert device.reads("settings") == 1
        assert session.version_gate.last_known_version == 6

    def test_unknown_version_never_fetches_settings(self, poll_loop, device) -> None:
        device.values["NEED_UPDATE"] = -1
        tick(poll_loop)
        tick(poll_loop)
        assert device.reads("settings") == 0

    def test_failed_settings_read_waits_for_next_version(self, poll_loop, device, session) -> None:
        device.fail_settings = True
        for _ in range(3):
            tick(poll_loop)
        assert device.reads("settings") == 1
        assert session.version_gate.last_known_version == 5
        assert session.settings is None

        device.fail_settings = False
        device.values["NEED_UPDATE"] = 6
        tick(poll_loop)
        tick(poll_loop)
        assert device.reads("settings") == 2
        assert session.mixer_name == "Cocktail"


class TestValueApplication:
    def test_invalid_angle_leaves_chart_but_applies_timespan(self, poll_loop, device, chart, session) -> None:
        # Scenario C
        device.raw_values = nan_values_text(CYCLE_TIMESPAN=640)
        assert tick(poll_loop) is True
        assert chart.applied_angles == []
        assert chart.angles == (0.0, 135.0, 180.0)
        assert session.slider.value == 640
        assert session.slider.readout == "640ms"

    def test_invalid_timespan_keeps_slider(self, poll_loop, device, chart, session) -> None:
        device.values["CYCLE_TIMESPAN"] = 1500
        tick(poll_loop)
        assert session.slider.value == 500
        assert chart.angles == (90.0, 200.0, 310.0)

    def test_device_timespan_shown_unsnapped(self, poll_loop, device, session) -> None:
        device.values["CYCLE_TIMESPAN"] = 510
        tick(poll_loop)
        assert session.slider.value == 510
        assert session.slider.readout == "510ms"

    def test_same_snapshot_twice_fires_no_extra_change(self, poll_loop, chart) -> None:
        listener = RecordingListener()
        chart.add_listener(listener)
        tick(poll_loop)
        assert len(listener.changes) == 3
        tick(poll_loop)
        assert len(listener.changes) == 3

    def test_bar_mode_uses_default_angles(self, poll_loop, device, chart, session) -> None:
        device.settings["IS_MIXER"] = 0
        tick(poll_loop)
        assert session.is_mixer is False
        assert chart.applied_angles == [(0.0, 120.0, 240.0)]

        device.values.update(LIQUID_ANGLE_1=10, LIQUID_ANGLE_2=20, LIQUID_ANGLE_3=30)
        tick(poll_loop)
        assert chart.angles == (0.0, 120.0, 240.0)

    def test_mode_switch_applies_in_same_tick(self, poll_loop, device, chart) -> None:
        tick(poll_loop)
        assert chart.angles == (90.0, 200.0, 310.0)

        device.settings["IS_MIXER"] = 0
        device.values["NEED_UPDATE"] = 7
        tick(poll_loop)
        assert chart.angles == (0.0, 120.0, 240.0)


class TestEditSuppression:
    """A gesture in progress is never disturbed by polled values."""

    def test_held_slider_skips_tick(self, poll_loop, device, session) -> None:
        session.press_slider()
        assert tick(poll_loop) is False
        assert device.requests == []
        assert poll_loop.skipped == 1

        session.release_pointer()
        assert tick(poll_loop) is True

    def test_dragged_chart_skips_tick(self, poll_loop, device, chart) -> None:
        chart.begin_drag(1)
        assert tick(poll_loop) is False
        assert device.requests == []
        assert chart.applied_angles == []

    def test_gesture_started_during_read_blocks_apply(self, poll_loop, chart, session) -> None:
        values = parse_values([DEFAULT_VALUES])
        chart.begin_drag(0)
        poll_loop.apply_values(values)
        assert chart.applied_angles == []
        assert chart.angles == (0.0, 135.0, 180.0)

        chart.end_drag()
        session.press_slider()
        poll_loop.apply_values(values)
        assert session.slider.value == 500
        assert chart.applied_angles == []


class TestLivenessAndOverlap:
    def test_unreachable_device_goes_offline_once(self, poll_loop, device, chart, clock) -> None:
        # Scenario E
        tick(poll_loop)
        assert chart.online is True

        device.reachable = False
        for _ in range(4):
            clock.advance(0.5)
            assert tick(poll_loop) is True

        assert chart.online is False
        assert transitions(chart.indicator) == [(False, True), (True, False)]
        assert device.writes() == []

    def test_starts_offline_until_first_success(self, poll_loop, device, chart) -> None:
        device.reachable = False
        tick(poll_loop)
        assert chart.indicator == [False]

    def test_overlapping_tick_is_skipped(self, poll_loop, device) -> None:
        async def two_ticks():
            return await asyncio.gather(poll_loop.tick(), poll_loop.tick())

        assert asyncio.run(two_ticks()) == [True, False]
        assert device.reads("values") == 1
        assert poll_loop.busy is False
