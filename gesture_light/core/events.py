"""
Lightweight event bus for observability notices.

The pipeline and dispatcher publish what happened (gesture events, command
results, dropped frames); the CLI or any other front end subscribes to show
transient notices. Listener failures are logged and never reach the
publisher.

Usage:
    bus = EventBus()
    bus.subscribe(Events.ACTION_FAILED, show_notice)
    bus.emit(Events.ACTION_FAILED, command="set_brightness", error="HTTP 429")
"""

import time
import logging
import threading
from collections import defaultdict, deque
from typing import Callable

logger = logging.getLogger(__name__)


class EventBus:
    """Thread-safe publish/subscribe event bus with priority ordering."""

    def __init__(self, max_history: int = 100):
        self._listeners = defaultdict(list)  # event_name -> [(priority, callback)]
        self._lock = threading.Lock()
        self._event_history = deque(maxlen=max_history)
        self._enabled = True

    def subscribe(self, event_name: str, callback: Callable, priority: int = 0):
        """Register a listener for an event.

        Args:
            event_name: Event to listen for
            callback: Function to call. Receives **kwargs from emit().
            priority: Higher priority callbacks run first (default 0)
        """
        with self._lock:
            self._listeners[event_name].append((priority, callback))
            self._listeners[event_name].sort(key=lambda x: -x[0])
        logger.debug("Subscribed to '%s': %s (priority=%d)",
                     event_name, getattr(callback, "__name__", repr(callback)), priority)

    def unsubscribe(self, event_name: str, callback: Callable):
        """Remove a listener for an event."""
        with self._lock:
            self._listeners[event_name] = [
                (p, cb) for p, cb in self._listeners[event_name] if cb is not callback
            ]

    def emit(self, event_name: str, **kwargs):
        """Emit an event to all registered listeners."""
        if not self._enabled:
            return

        with self._lock:
            listeners = list(self._listeners.get(event_name, []))
            self._event_history.append({
                "event": event_name,
                "time": time.time(),
                "data": dict(kwargs),
            })

        for priority, callback in listeners:
            try:
                callback(**kwargs)
            except Exception as e:
                logger.error("Event handler error [%s -> %s]: %s",
                             event_name, getattr(callback, "__name__", repr(callback)), e)

    def set_enabled(self, enabled: bool):
        self._enabled = enabled

    def clear(self, event_name: str = None):
        """Remove all listeners, optionally for a specific event."""
        with self._lock:
            if event_name:
                self._listeners.pop(event_name, None)
            else:
                self._listeners.clear()

    @property
    def listener_count(self) -> int:
        """Total number of registered listeners."""
        with self._lock:
            return sum(len(cbs) for cbs in self._listeners.values())

    def get_history(self, last_n: int = 10) -> list:
        """Get recent event history, oldest first."""
        with self._lock:
            return list(self._event_history)[-last_n:]


class Events:
    """Standard event names used throughout the system."""

    # Pipeline events
    FRAME_REJECTED = "frame_rejected"
    FRAME_DROPPED = "frame_dropped"
    HAND_STATE = "hand_state"
    GESTURE_EVENT = "gesture_event"
    DETECTOR_ERROR = "detector_error"

    # Command events
    ACTION_EXECUTED = "action_executed"
    ACTION_FAILED = "action_failed"
    ACTION_SKIPPED = "action_skipped"

    # Lifecycle
    SESSION_STARTED = "session_started"
    SESSION_STOPPED = "session_stopped"
    GESTURES_TOGGLED = "gestures_toggled"
