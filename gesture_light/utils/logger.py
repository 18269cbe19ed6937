"""
Logging setup and gesture event log.
"""

import os
import logging
import logging.handlers
import time
from collections import deque


def setup_logging(level="INFO", log_file=None, max_size_mb=10, backup_count=3):
    """Configure console and optional rotating file logging."""
    console_format = "%(asctime)s  %(levelname)-5s  %(message)s"
    file_format = "%(asctime)s [%(levelname)-7s] %(name)-25s | %(message)s"
    date_format = "%H:%M:%S"

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    root_logger.handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(root_logger.level)
    console.setFormatter(logging.Formatter(console_format, datefmt=date_format))
    root_logger.addHandler(console)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_size_mb * 1024 * 1024,
            backupCount=backup_count,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(file_format, datefmt=date_format))
        root_logger.addHandler(file_handler)

    return root_logger


class GestureLogger:
    """Bounded, in-session record of gesture events and command outcomes."""

    def __init__(self, max_entries: int = 200):
        self.logger = logging.getLogger("gesture_events")
        self._history = deque(maxlen=max_entries)

    def log_event(self, event, hand_state=None, brightness=None):
        """Log an emitted control event (NO_ACTION is not recorded)."""
        if not event.is_action:
            return
        entry = {
            "timestamp": time.time(),
            "event": event.kind.value,
            "delta": event.delta,
            "brightness": brightness,
            "rotation": hand_state.rotation_angle if hand_state else None,
            "confidence": hand_state.confidence if hand_state else None,
        }
        self._history.append(entry)
        self.logger.info(
            "Gesture: %-17s | Delta: %+4d | Brightness: %s",
            event.kind.value,
            event.delta,
            brightness if brightness is not None else "N/A",
        )

    def log_action(self, label, success=True):
        """Log a light command result."""
        self._history.append({
            "timestamp": time.time(),
            "action": label,
            "success": success,
        })
        self.logger.info("Action: %-17s | Success: %s", label, success)

    def get_history(self, last_n=None):
        if last_n:
            return list(self._history)[-last_n:]
        return list(self._history)

    def clear(self):
        self._history.clear()

    @property
    def total_events(self):
        return sum(1 for entry in self._history if "event" in entry)
