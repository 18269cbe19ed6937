"""
Gesture pipeline orchestrator.

Frame path, on the producer thread:
    Frame -> normalize (NV21) -> display image -> FrameThrottle

Gesture path, on a daemon worker thread (at most one in flight):
    resize -> RGB -> HandDetector -> GestureClassifier
    -> GestureStateManager -> CommandDispatcher

A frame admitted by the throttle while a classification is still running is
dropped, not queued.
"""

import time
import logging
import threading
from typing import Optional

import cv2
import numpy as np

from .events import EventBus, Events
from ..capture.camera import Frame
from ..capture.color_convert import FrameFormatError, normalize, nv21_to_bgr
from ..capture.frame_throttle import FrameThrottle
from ..control.command_dispatcher import CommandDispatcher
from ..recognition.gesture_classifier import GestureClassifier
from ..recognition.gesture_state import GestureStateManager
from ..recognition.gesture_types import GestureConfig, GestureEvent, HandState
from ..utils.logger import GestureLogger
from ..utils.performance import PerformanceMonitor

logger = logging.getLogger(__name__)


class GesturePipeline:
    """Connects the frame source to the light through the gesture stages.

    The detector is anything with ``detect(rgb_image) -> Optional[HandLandmarks]``.
    """

    def __init__(
        self,
        detector,
        classifier: GestureClassifier,
        state_manager: GestureStateManager,
        dispatcher: CommandDispatcher,
        throttle: Optional[FrameThrottle] = None,
        config: Optional[GestureConfig] = None,
        event_bus: Optional[EventBus] = None,
        performance: Optional[PerformanceMonitor] = None,
        gesture_logger: Optional[GestureLogger] = None,
    ):
        self.config = config or GestureConfig()
        self._detector = detector
        self._classifier = classifier
        self._state = state_manager
        self._dispatcher = dispatcher
        self._throttle = throttle or FrameThrottle(self.config.frame_skip_count)
        self._bus = event_bus or EventBus()
        self._perf = performance or PerformanceMonitor()
        self._gesture_log = gesture_logger or GestureLogger()

        self._lock = threading.Lock()
        self._running = False
        self._in_flight = False
        self._generation = 0
        self._worker: Optional[threading.Thread] = None
        self._last_hand = HandState()
        self._last_event = GestureEvent.no_action()

    def start(self) -> None:
        with self._lock:
            self._running = True
        self._bus.emit(Events.SESSION_STARTED, generation=self._generation)
        logger.info("Gesture pipeline started (gestures %s)",
                    "enabled" if self._throttle.enabled else "disabled")

    def stop(self) -> None:
        """Stop admitting frames and reset gesture state.

        Does not wait for an in-flight classification; its result belongs to
        the previous session and is discarded when it completes.
        """
        with self._lock:
            self._running = False
            self._end_session()
        self._throttle.reset()
        self._bus.emit(Events.SESSION_STOPPED, generation=self._generation)
        logger.info("Gesture pipeline stopped")

    def submit_frame(self, frame: Frame) -> Optional[np.ndarray]:
        """Handle one camera frame.

        Returns:
            BGR display image, or None if the frame was malformed
        """
        self._perf.tick()
        try:
            with self._perf.measure("normalize"):
                nv21 = normalize(frame)
                image = nv21_to_bgr(nv21, frame.width, frame.height)
        except FrameFormatError as e:
            logger.warning("Dropping frame %d: %s", frame.frame_number, e)
            self._perf.count("malformed")
            self._bus.emit(Events.FRAME_REJECTED, frame_number=frame.frame_number, error=str(e))
            return None

        if not self.is_running or not self._throttle.admit(frame):
            return image

        with self._lock:
            if self._in_flight:
                busy = True
            else:
                busy = False
                self._in_flight = True
                generation = self._generation

        if busy:
            self._perf.count("dropped")
            self._bus.emit(Events.FRAME_DROPPED, frame_number=frame.frame_number)
            logger.debug("Worker busy, dropped frame %d", frame.frame_number)
            return image

        self._perf.count("admitted")
        self._worker = threading.Thread(
            target=self._run_worker, args=(image, generation), daemon=True
        )
        self._worker.start()
        return image

    def _run_worker(self, image: np.ndarray, generation: int) -> None:
        try:
            self.process_gesture(image, generation=generation)
        except Exception as e:
            logger.error("Gesture worker error: %s", e)
        finally:
            with self._lock:
                self._in_flight = False

    def process_gesture(self, image: np.ndarray, now_ms: Optional[float] = None,
                        generation: Optional[int] = None) -> Optional[GestureEvent]:
        """Classify one BGR image and drive the state machine with the result.

        Args:
            image: BGR image from submit_frame
            now_ms: Clock reading in milliseconds (defaults to wall time)
            generation: Session generation captured at admission

        Returns:
            The emitted event, or None if the session changed mid-flight
        """
        size = (self.config.gesture_frame_width, self.config.gesture_frame_height)
        try:
            with self._perf.measure("detection"):
                small = cv2.resize(image, size)
                rgb = cv2.cvtColor(small, cv2.COLOR_BGR2RGB)
                landmarks = self._detector.detect(rgb)
            with self._perf.measure("classification"):
                hand = self._classifier.classify(landmarks)
        except Exception as e:
            logger.error("Hand detection failed: %s", e)
            self._bus.emit(Events.DETECTOR_ERROR, error=str(e))
            hand = HandState()

        if now_ms is None:
            now_ms = time.time() * 1000

        # Session check and state update are one step so stop() and
        # set_gesture_enabled(False) cannot reset in between.
        with self._lock:
            if generation is not None and generation != self._generation:
                logger.debug("Discarding result from stale session %d", generation)
                return None
            event = self._state.process(hand, now_ms)
            brightness = self._state.brightness
            self._last_hand = hand
            self._last_event = event

        self._bus.emit(Events.HAND_STATE, hand=hand)
        if event.is_action:
            self._gesture_log.log_event(event, hand_state=hand, brightness=brightness)
            self._bus.emit(Events.GESTURE_EVENT, event=event, brightness=brightness)
            self._dispatcher.dispatch(event)
        return event

    def set_gesture_enabled(self, enabled: bool) -> None:
        """Enable or disable gesture recognition; disabling resets the state machine."""
        self._throttle.set_enabled(enabled)
        if not enabled:
            with self._lock:
                self._end_session()
        self._bus.emit(Events.GESTURES_TOGGLED, enabled=enabled)
        logger.info("Gestures %s", "enabled" if enabled else "disabled")

    def _end_session(self) -> None:
        """Invalidate in-flight work and reset gesture state. Caller holds the lock."""
        self._generation += 1
        self._state.reset()
        self._last_hand = HandState()
        self._last_event = GestureEvent.no_action()

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def gestures_enabled(self) -> bool:
        return self._throttle.enabled

    @property
    def is_busy(self) -> bool:
        return self._in_flight

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def last_hand(self) -> HandState:
        return self._last_hand

    @property
    def last_event(self) -> GestureEvent:
        return self._last_event

    @property
    def state_manager(self) -> GestureStateManager:
        return self._state

    @property
    def performance(self) -> PerformanceMonitor:
        return self._perf

    def build_status(self) -> dict:
        """Snapshot of pipeline state for status logging."""
        return {
            "running": self._running,
            "gestures_enabled": self._throttle.enabled,
            "light_on": self._state.is_light_on,
            "brightness": self._state.brightness,
            "gesture": self._last_hand.gesture.name,
            "rotation": self._last_hand.rotation_angle,
            "last_action": self._dispatcher.last_action,
            "fps": self._perf.fps,
        }
