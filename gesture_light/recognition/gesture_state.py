"""
Gesture State Machine
======================

Turns the noisy per-tick ``HandState`` stream into discrete, debounced
light control events.

Transitions, checked in order:
    hand lost                       -> forget gesture memory, NO_ACTION
    OPEN_PALM edge, toggle debounce -> LIGHT_ON, re-anchor rotation baseline
    CLOSED_FIST edge                -> LIGHT_OFF (immediate, no debounce)
    OPEN_PALM held while light on   -> brightness ratchet
    anything else                   -> track gesture, NO_ACTION

Edges are detected against ``last_processed_gesture``, which only moves when
a LIGHT_ON / LIGHT_OFF fires or the hand is lost, so a held pose never fires
twice.

Brightness ratchet: once the palm has rotated more than the threshold away
from the baseline angle, brightness steps by ``brightness_step`` in the
direction of rotation and the baseline re-anchors to the current angle.
"""

import time
import logging
import threading
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from .gesture_types import GestureConfig, GestureEvent, HandGesture, HandState

logger = logging.getLogger(__name__)

MIN_BRIGHTNESS = 1
MAX_BRIGHTNESS = 100


def clamp_brightness(value: int) -> int:
    """The light accepts 1-100; 0 is not a valid level."""
    return max(MIN_BRIGHTNESS, min(MAX_BRIGHTNESS, int(value)))


@dataclass(frozen=True)
class GestureMachineState:
    """Everything the state machine remembers between ticks."""
    current_gesture: HandGesture = HandGesture.NONE
    last_processed_gesture: HandGesture = HandGesture.NONE
    last_toggle_time: float = 0.0       # ms
    last_brightness_time: float = 0.0   # ms
    base_rotation_angle: float = 0.0    # degrees
    light_on: bool = False
    brightness: int = 50

    @classmethod
    def initial(cls, config: GestureConfig) -> "GestureMachineState":
        return cls(brightness=clamp_brightness(config.initial_brightness))


def transition(state: GestureMachineState, hand: HandState, now_ms: float,
               config: GestureConfig) -> Tuple[GestureMachineState, GestureEvent]:
    """
    Pure transition function.

    Args:
        state: State before this tick
        hand: Classifier output for this tick
        now_ms: Tick timestamp in milliseconds
        config: Thresholds and debounce windows

    Returns:
        (next_state, event) - exactly one event per call
    """
    if not hand.hand_detected:
        if state.current_gesture is not HandGesture.NONE:
            logger.debug("Hand lost, resetting gesture memory")
            state = replace(state,
                            current_gesture=HandGesture.NONE,
                            last_processed_gesture=HandGesture.NONE)
        return state, GestureEvent.no_action()

    gesture = hand.gesture

    if (gesture is HandGesture.OPEN_PALM
            and state.last_processed_gesture is not HandGesture.OPEN_PALM
            and now_ms - state.last_toggle_time > config.toggle_debounce_ms):
        logger.debug("Open palm detected - light ON")
        return replace(state,
                       current_gesture=HandGesture.OPEN_PALM,
                       last_processed_gesture=HandGesture.OPEN_PALM,
                       last_toggle_time=now_ms,
                       base_rotation_angle=hand.rotation_angle,
                       light_on=True), GestureEvent.light_on()

    if (gesture is HandGesture.CLOSED_FIST
            and state.last_processed_gesture is not HandGesture.CLOSED_FIST):
        logger.debug("Closed fist detected - light OFF")
        # Toggle time still moves so the next palm-on is debounced
        return replace(state,
                       current_gesture=HandGesture.CLOSED_FIST,
                       last_processed_gesture=HandGesture.CLOSED_FIST,
                       last_toggle_time=now_ms,
                       light_on=False), GestureEvent.light_off()

    if gesture is HandGesture.OPEN_PALM and state.light_on:
        state = replace(state, current_gesture=HandGesture.OPEN_PALM)
        return _ratchet_brightness(state, hand.rotation_angle, now_ms, config)

    return replace(state, current_gesture=gesture), GestureEvent.no_action()


def _ratchet_brightness(state: GestureMachineState, angle: float, now_ms: float,
                        config: GestureConfig) -> Tuple[GestureMachineState, GestureEvent]:
    if now_ms - state.last_brightness_time <= config.brightness_debounce_ms:
        return state, GestureEvent.no_action()

    rotation_delta = angle - state.base_rotation_angle
    if rotation_delta > config.rotation_threshold_deg:
        step = config.brightness_step
    elif rotation_delta < -config.rotation_threshold_deg:
        step = -config.brightness_step
    else:
        return state, GestureEvent.no_action()

    new_brightness = clamp_brightness(state.brightness + step)
    if new_brightness == state.brightness:
        return state, GestureEvent.no_action()

    logger.debug("Rotation %+.1f deg - brightness %s to %d",
                 rotation_delta, "UP" if step > 0 else "DOWN", new_brightness)
    delta = new_brightness - state.brightness
    return replace(state,
                   base_rotation_angle=angle,
                   last_brightness_time=now_ms,
                   brightness=new_brightness), GestureEvent.brightness_change(delta)


class GestureStateManager:
    """
    Owns the state machine state for one streaming session.

    ``process`` calls are serialized; the pipeline runs at most one
    classification at a time, the lock only guards against misuse.

    Example:
        >>> manager = GestureStateManager(GestureConfig())
        >>> event = manager.process(hand_state)
        >>> if event.is_action:
        ...     dispatcher.dispatch(event)
    """

    def __init__(self, config: Optional[GestureConfig] = None):
        self.config = config or GestureConfig()
        self._state = GestureMachineState.initial(self.config)
        self._lock = threading.Lock()

    def process(self, hand: HandState, now_ms: Optional[float] = None) -> GestureEvent:
        """Feed one classifier output and return the resulting event."""
        if now_ms is None:
            now_ms = time.time() * 1000
        with self._lock:
            self._state, event = transition(self._state, hand, now_ms, self.config)
        return event

    @property
    def state(self) -> GestureMachineState:
        return self._state

    @property
    def brightness(self) -> int:
        """Current tracked brightness level (1-100)."""
        return self._state.brightness

    @property
    def is_light_on(self) -> bool:
        return self._state.light_on

    def set_brightness(self, brightness: int) -> None:
        """Resync with the brightness reported by the light."""
        with self._lock:
            self._state = replace(self._state, brightness=clamp_brightness(brightness))

    def reset(self) -> None:
        """Restore every field to its initial default."""
        with self._lock:
            self._state = GestureMachineState.initial(self.config)
        logger.debug("State manager reset")
