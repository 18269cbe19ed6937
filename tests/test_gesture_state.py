"""
Tests for Gesture State Machine
================================
"""

import pytest

from gesture_light.recognition.gesture_state import (
    GestureMachineState,
    GestureStateManager,
    clamp_brightness,
    transition,
)
from gesture_light.recognition.gesture_types import (
    EventKind,
    GestureConfig,
    GestureEvent,
    HandGesture,
    HandState,
)

NO_HAND = HandState()


def open_palm(angle: float = 0.0) -> HandState:
    return HandState(HandGesture.OPEN_PALM, rotation_angle=angle, confidence=0.9, hand_detected=True)


def fist(angle: float = 0.0) -> HandState:
    return HandState(HandGesture.CLOSED_FIST, rotation_angle=angle, confidence=0.9, hand_detected=True)


def ambiguous(angle: float = 0.0) -> HandState:
    return HandState(HandGesture.NONE, rotation_angle=angle, confidence=0.9, hand_detected=True)


def run(manager: GestureStateManager, steps, start: float = 1000.0, interval: float = 300.0):
    """Feed (hand_state) steps at a fixed interval, returning the events."""
    return [manager.process(hand, start + i * interval) for i, hand in enumerate(steps)]


@pytest.fixture
def config():
    return GestureConfig()


@pytest.fixture
def manager(config):
    return GestureStateManager(config)


class TestInitialState:

    def test_defaults(self, manager):
        state = manager.state

        assert state.current_gesture is HandGesture.NONE
        assert state.last_processed_gesture is HandGesture.NONE
        assert not state.light_on
        assert state.brightness == 50
        assert state.base_rotation_angle == 0.0

    def test_initial_brightness_from_config(self):
        manager = GestureStateManager(GestureConfig(initial_brightness=30))

        assert manager.brightness == 30


class TestToggle:
    """Open palm turns on, closed fist turns off."""

    def test_open_palm_turns_on(self, manager):
        event = manager.process(open_palm(), 1000)

        assert event == GestureEvent.light_on()
        assert manager.is_light_on

    def test_held_open_palm_fires_once(self, manager):
        events = run(manager, [open_palm()] * 5)

        assert events[0].kind is EventKind.LIGHT_ON
        assert all(e.kind is EventKind.NO_ACTION for e in events[1:])

    def test_closed_fist_turns_off(self, manager):
        manager.process(open_palm(), 1000)
        event = manager.process(fist(), 1300)

        assert event == GestureEvent.light_off()
        assert not manager.is_light_on

    def test_held_fist_fires_once(self, manager):
        events = run(manager, [fist()] * 4)

        assert [e.kind for e in events] == [EventKind.LIGHT_OFF] + [EventKind.NO_ACTION] * 3

    def test_fist_has_no_debounce(self, manager):
        manager.process(open_palm(), 1000)
        event = manager.process(fist(), 1010)

        assert event.kind is EventKind.LIGHT_OFF

    def test_open_palm_debounced_after_fist(self, manager):
        manager.process(fist(), 1000)

        assert manager.process(open_palm(), 1100).kind is EventKind.NO_ACTION
        assert manager.process(open_palm(), 1200).kind is EventKind.NO_ACTION
        assert manager.process(open_palm(), 1201).kind is EventKind.LIGHT_ON

    def test_light_on_sets_rotation_baseline(self, manager):
        manager.process(open_palm(30.0), 1000)

        assert manager.state.base_rotation_angle == 30.0
        # 2 degrees from the baseline is inside the threshold
        assert manager.process(open_palm(32.0), 1300).kind is EventKind.NO_ACTION


class TestHandLost:

    def test_no_hand_is_no_action(self, manager):
        assert manager.process(NO_HAND, 1000) == GestureEvent.no_action()

    def test_hand_lost_rearms_open_palm(self, manager):
        events = run(manager, [open_palm(), NO_HAND, open_palm()])

        assert [e.kind for e in events] == [
            EventKind.LIGHT_ON, EventKind.NO_ACTION, EventKind.LIGHT_ON]

    def test_hand_lost_clears_gesture_memory(self, manager):
        manager.process(open_palm(), 1000)
        manager.process(NO_HAND, 1300)

        assert manager.state.current_gesture is HandGesture.NONE
        assert manager.state.last_processed_gesture is HandGesture.NONE
        assert manager.is_light_on

    def test_ambiguous_pose_does_not_rearm(self, manager):
        events = run(manager, [open_palm(), ambiguous(), open_palm()])

        assert [e.kind for e in events] == [
            EventKind.LIGHT_ON, EventKind.NO_ACTION, EventKind.NO_ACTION]
        assert manager.state.last_processed_gesture is HandGesture.OPEN_PALM


class TestBrightnessRatchet:

    def test_rotate_clockwise_increases(self, manager):
        manager.process(open_palm(0.0), 1000)
        event = manager.process(open_palm(8.0), 1300)

        assert event == GestureEvent.brightness_change(20)
        assert manager.brightness == 70

    def test_rotate_counter_clockwise_decreases(self, manager):
        manager.process(open_palm(0.0), 1000)
        event = manager.process(open_palm(-8.0), 1300)

        assert event == GestureEvent.brightness_change(-20)
        assert manager.brightness == 30

    def test_threshold_is_strict(self, manager):
        manager.process(open_palm(0.0), 1000)

        assert manager.process(open_palm(5.0), 1300).kind is EventKind.NO_ACTION
        assert manager.process(open_palm(-5.0), 1600).kind is EventKind.NO_ACTION
        assert manager.brightness == 50

    def test_baseline_reanchors(self, manager):
        """Holding the new angle does not keep stepping."""
        events = run(manager, [open_palm(0.0), open_palm(8.0), open_palm(8.0), open_palm(16.0)])

        assert [e.kind for e in events] == [
            EventKind.LIGHT_ON, EventKind.BRIGHTNESS_CHANGE,
            EventKind.NO_ACTION, EventKind.BRIGHTNESS_CHANGE]
        assert manager.brightness == 90
        assert manager.state.base_rotation_angle == 16.0

    def test_brightness_debounce(self, manager):
        manager.process(open_palm(0.0), 1000)
        manager.process(open_palm(8.0), 1300)

        assert manager.process(open_palm(16.0), 1400).kind is EventKind.NO_ACTION
        assert manager.process(open_palm(16.0), 1450).kind is EventKind.NO_ACTION
        assert manager.process(open_palm(16.0), 1451) == GestureEvent.brightness_change(20)

    def test_clamped_at_maximum(self, manager):
        events = run(manager, [open_palm(0.0), open_palm(8.0), open_palm(16.0),
                               open_palm(24.0), open_palm(32.0)])

        assert events[1:] == [
            GestureEvent.brightness_change(20),
            GestureEvent.brightness_change(20),
            GestureEvent.brightness_change(10),
            GestureEvent.no_action(),
        ]
        assert manager.brightness == 100

    def test_clamped_at_minimum(self):
        manager = GestureStateManager(GestureConfig(initial_brightness=10))
        manager.process(open_palm(0.0), 1000)
        event = manager.process(open_palm(-10.0), 1300)

        assert event == GestureEvent.brightness_change(-9)
        assert manager.brightness == 1

    def test_no_change_while_light_off(self, manager):
        manager.process(fist(), 1000)
        # Debounced palm: light stays off, rotation ignored
        event = manager.process(open_palm(45.0), 1100)

        assert event.kind is EventKind.NO_ACTION
        assert manager.brightness == 50

    def test_brightness_stays_in_range(self, manager):
        angles = [0, 10, 20, 30, 40, 50, 60, 70, 60, 50, 40, 30, 20, 10, 0, -10, -20, -30]
        run(manager, [open_palm(float(a)) for a in angles])

        assert 1 <= manager.brightness <= 100


class TestTransitionFunction:

    def test_pure(self, config):
        state = GestureMachineState.initial(config)
        first = transition(state, open_palm(), 1000, config)
        second = transition(state, open_palm(), 1000, config)

        assert first == second
        assert state == GestureMachineState.initial(config)

    def test_exactly_one_event(self, config):
        state = GestureMachineState.initial(config)
        for i, hand in enumerate([NO_HAND, open_palm(), fist(), ambiguous(), open_palm(9.0)]):
            state, event = transition(state, hand, 1000 + i * 300, config)
            assert isinstance(event, GestureEvent)

    def test_end_to_end(self, manager):
        events = run(manager, [NO_HAND, open_palm(0.0), open_palm(8.0), fist(), open_palm(0.0)])

        assert events == [
            GestureEvent.no_action(),
            GestureEvent.light_on(),
            GestureEvent.brightness_change(20),
            GestureEvent.light_off(),
            GestureEvent.light_on(),
        ]
        assert manager.brightness == 70
        assert manager.is_light_on


class TestManagerControls:

    def test_reset_restores_initial(self, manager, config):
        run(manager, [open_palm(0.0), open_palm(8.0)])
        manager.reset()

        assert manager.state == GestureMachineState.initial(config)

    def test_reset_idempotent(self, manager):
        manager.process(open_palm(), 1000)
        manager.reset()
        once = manager.state
        manager.reset()

        assert manager.state == once

    def test_set_brightness_clamps(self, manager):
        manager.set_brightness(150)
        assert manager.brightness == 100

        manager.set_brightness(0)
        assert manager.brightness == 1

    def test_clamp_brightness(self):
        assert clamp_brightness(-5) == 1
        assert clamp_brightness(42) == 42
        assert clamp_brightness(101) == 100


class TestGestureConfig:

    def test_defaults(self, config):
        assert config.open_threshold == 0.15
        assert config.closed_threshold == 0.08
        assert config.brightness_step == 20
        assert config.frame_skip_count == 3

    def test_inverted_thresholds_rejected(self):
        with pytest.raises(ValueError):
            GestureConfig(open_threshold=0.05, closed_threshold=0.08)

    def test_equal_thresholds_rejected(self):
        with pytest.raises(ValueError):
            GestureConfig(open_threshold=0.1, closed_threshold=0.1)

    def test_from_dict_partial(self):
        config = GestureConfig.from_dict({"brightness_step": 10})

        assert config.brightness_step == 10
        assert config.toggle_debounce_ms == 200
