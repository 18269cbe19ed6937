"""
Command Dispatcher
===================

Maps gesture events to light commands and sends them fire-and-forget.

- LIGHT_ON / LIGHT_OFF  -> actuator.set_power(True / False)
- BRIGHTNESS_CHANGE     -> actuator.set_brightness(<tracked absolute level>)
- NO_ACTION             -> nothing

Commands carry absolute values, so it does not matter that background sends
may reach the light out of order. Results never feed back into the gesture
state machine; its on/off and brightness are optimistic local tracking.
"""

import time
import logging
import threading
from typing import Callable, List, Optional, Protocol, runtime_checkable

from ..core.events import EventBus, Events
from ..recognition.gesture_state import GestureStateManager
from ..recognition.gesture_types import EventKind, GestureEvent

logger = logging.getLogger(__name__)


@runtime_checkable
class LightActuator(Protocol):
    """Capability that accepts on/off and brightness commands."""

    last_error: Optional[str]

    @property
    def is_configured(self) -> bool:
        ...

    def set_power(self, on: bool) -> bool:
        ...

    def set_brightness(self, value: int) -> bool:
        ...


class CommandDispatcher:
    """Sends light commands for gesture events on background threads."""

    ACTION_LABELS = {
        EventKind.LIGHT_ON: "Light ON",
        EventKind.LIGHT_OFF: "Light OFF",
        EventKind.BRIGHTNESS_CHANGE: "Brightness",
    }

    def __init__(self, actuator: Optional[LightActuator],
                 state_manager: GestureStateManager,
                 event_bus: Optional[EventBus] = None):
        self._actuator = actuator
        self._state = state_manager
        self._bus = event_bus or EventBus()

        self._action_callbacks: List[Callable[[str, bool], None]] = []
        self._last_action: Optional[str] = None
        self._last_action_time = 0.0
        self._sent_count = 0
        self._failed_count = 0
        self._count_lock = threading.Lock()

        if not self.is_configured:
            logger.warning("Light credentials not configured - gesture commands will be dropped")

    @property
    def is_configured(self) -> bool:
        return self._actuator is not None and self._actuator.is_configured

    def dispatch(self, event: GestureEvent, async_exec: bool = True) -> bool:
        """Send the command for an event.

        Args:
            event: Event from the gesture state machine
            async_exec: If True, send on a background daemon thread

        Returns:
            True if a command was handed to the actuator
        """
        if event.kind is EventKind.NO_ACTION:
            return False

        if event.kind is EventKind.BRIGHTNESS_CHANGE:
            brightness = self._state.brightness
            command, args = "set_brightness", (brightness,)
            label = f"Brightness: {brightness}%"
        else:
            turn_on = event.kind is EventKind.LIGHT_ON
            command, args = "set_power", (turn_on,)
            label = self.ACTION_LABELS[event.kind]

        self._last_action = label
        self._last_action_time = time.time()

        if not self.is_configured:
            logger.warning("Light credentials not configured, dropping '%s'", label)
            self._bus.emit(Events.ACTION_SKIPPED, command=command, label=label)
            return False

        if async_exec:
            thread = threading.Thread(
                target=self._send, args=(command, args, label), daemon=True
            )
            thread.start()
        else:
            self._send(command, args, label)
        return True

    def _send(self, command: str, args: tuple, label: str) -> bool:
        try:
            success = getattr(self._actuator, command)(*args)
            # Same thread as the call, so a concurrent send cannot overwrite it
            error = None if success else getattr(self._actuator, "last_error", None)
        except Exception as e:
            success = False
            error = str(e)

        with self._count_lock:
            if success:
                self._sent_count += 1
            else:
                self._failed_count += 1

        if success:
            logger.info("Command sent: %s", label)
            self._bus.emit(Events.ACTION_EXECUTED, command=command, label=label)
        else:
            logger.error("Failed to %s (%s): %s", command, label, error or "unknown error")
            self._bus.emit(Events.ACTION_FAILED, command=command, label=label,
                           error=error or "unknown error")

        for callback in self._action_callbacks:
            try:
                callback(label, success)
            except Exception as e:
                logger.error("Action callback error: %s", e)

        return success

    def on_action(self, callback: Callable[[str, bool], None]) -> None:
        """Register callback(label, success), called after each send."""
        self._action_callbacks.append(callback)

    @property
    def last_action(self) -> Optional[str]:
        return self._last_action

    @property
    def last_action_time(self) -> float:
        return self._last_action_time

    @property
    def sent_count(self) -> int:
        return self._sent_count

    @property
    def failed_count(self) -> int:
        return self._failed_count
