"""Tests for playback, looping and event triggering."""

import pytest

from spine_event_editor.event_store import EventCollection
from spine_event_editor.playback import PlaybackController, PlaybackState, crossed_event


@pytest.fixture
def events():
    collection = EventCollection()
    for name, time in (("windup", 0.5), ("hit", 1.0), ("recover", 1.8)):
        collection.add(name, time)
    return collection


@pytest.fixture
def controller(engine, events):
    return PlaybackController(engine, events, duration=2.0)


class TestCrossedEvent:
    """The per-tick trigger rule."""

    def test_forward_tick_fires_half_open_interval(self) -> None:
        assert crossed_event(0.4, 0.6, 0.5)
        assert crossed_event(0.4, 0.5, 0.5)
        assert not crossed_event(0.5, 0.6, 0.5)
        assert not crossed_event(0.6, 0.9, 0.5)

    def test_wrap_fires_tail_of_clip(self) -> None:
        assert crossed_event(1.7, 0.0, 1.8)
        assert not crossed_event(1.9, 0.0, 0.5)

    def test_wrap_to_zero_fires_event_at_zero(self) -> None:
        assert crossed_event(1.9, 0.0, 0.0)

    def test_backward_jump_refires_early_events(self) -> None:
        assert crossed_event(1.5, 0.5, 0.2)
        assert not crossed_event(1.5, 0.5, 1.0)

    def test_no_movement_fires_nothing(self) -> None:
        assert not crossed_event(0.5, 0.5, 0.5)


class TestAdvance:
    """Clock advance, wraparound and delivery of fired events."""

    def test_loop_fires_each_event_once(self, controller) -> None:
        controller.play()
        fired = []
        for dt in (0.5, 0.5, 0.5, 0.5, 0.3):
            fired.extend(evt.name for evt in controller.advance(dt))

        assert fired == ["windup", "hit", "recover"]
        assert controller.current_time == 0.0

    def test_time_equal_to_duration_does_not_wrap(self, controller) -> None:
        controller.play()
        controller.advance(2.0)
        assert controller.current_time == 2.0

    def test_speed_scales_advance(self, controller) -> None:
        controller.speed = 2.0
        controller.play()
        controller.advance(0.25)
        assert controller.current_time == 0.5

    def test_paused_keeps_time_but_poses(self, controller, engine) -> None:
        controller.set_current_time(0.7)
        engine.poses.clear()
        assert controller.advance(0.5) == []
        assert controller.current_time == 0.7
        assert engine.poses == [0.7]

    def test_listeners_receive_events_in_time_order(self, engine) -> None:
        events = EventCollection()
        late = events.add("late", 0.3)
        early = events.add("early", 0.2)
        controller = PlaybackController(engine, events, duration=1.0)
        received = []
        controller.add_listener(received.append)

        controller.play()
        assert controller.advance(0.5) == [early, late]
        assert received == [early, late]
        assert controller.drain_triggered() == [early, late]
        assert controller.drain_triggered() == []

    def test_removed_listener_is_not_called(self, controller) -> None:
        received = []
        controller.add_listener(received.append)
        controller.remove_listener(received.append)
        controller.play()
        controller.advance(0.6)
        assert received == []

    def test_zero_duration_never_wraps(self, engine, events) -> None:
        controller = PlaybackController(engine, events, duration=0.0)
        controller.play()
        controller.advance(5.0)
        assert controller.current_time == 5.0


class TestTransport:
    """Play state and time jumps."""

    def test_toggle(self, controller) -> None:
        assert controller.state == PlaybackState.IDLE
        controller.toggle()
        assert controller.is_playing
        controller.toggle()
        assert not controller.is_playing

    def test_set_current_time_clamps_only_below_zero(self, controller, engine) -> None:
        controller.set_current_time(-1.0)
        assert controller.current_time == 0.0
        controller.set_current_time(5.0)
        assert controller.current_time == 5.0
        assert engine.poses[-1] == 5.0

    def test_step_frame_stays_inside_clip(self, controller) -> None:
        controller.step_frame(-1)
        assert controller.current_time == 0.0
        controller.step_frame(1)
        assert controller.current_time == pytest.approx(1 / 30)
        controller.go_to_end()
        controller.step_frame(1)
        assert controller.current_time == 2.0

    def test_stop_rewinds(self, controller) -> None:
        controller.play()
        controller.advance(0.4)
        controller.stop()
        assert controller.state == PlaybackState.IDLE
        assert controller.current_time == 0.0
