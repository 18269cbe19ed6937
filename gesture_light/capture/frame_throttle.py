"""
Frame throttle for the gesture path.

Admits one of every ``skip_count + 1`` frames so classification cost is
independent of the camera frame rate. Turning gesture processing off resets
the phase; frames offered while disabled are rejected without advancing it.
"""

import logging
import threading

logger = logging.getLogger(__name__)


class FrameThrottle:
    """Stateful every-Nth-frame admission counter."""

    def __init__(self, skip_count: int = 3, enabled: bool = True):
        if skip_count < 0:
            raise ValueError(f"skip_count must be >= 0, got {skip_count}")
        self._skip_count = skip_count
        self._enabled = enabled
        self._counter = 0
        self._seen = 0
        self._admitted = 0
        self._lock = threading.Lock()

    def admit(self, frame=None) -> bool:
        """Count a frame and report whether it enters the gesture pipeline."""
        with self._lock:
            if not self._enabled:
                return False

            self._seen += 1
            self._counter += 1
            if self._counter > self._skip_count:
                self._counter = 0
                self._admitted += 1
                return True
            return False

    def set_enabled(self, enabled: bool) -> None:
        with self._lock:
            if self._enabled == enabled:
                return
            self._enabled = enabled
            if not enabled:
                self._counter = 0
        logger.debug("Frame throttle %s", "enabled" if enabled else "disabled (phase reset)")

    def reset(self) -> None:
        """Restart the admission phase and clear counters."""
        with self._lock:
            self._counter = 0
            self._seen = 0
            self._admitted = 0

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def skip_count(self) -> int:
        return self._skip_count

    @property
    def phase(self) -> int:
        """Frames counted since the last admission."""
        return self._counter

    @property
    def seen(self) -> int:
        return self._seen

    @property
    def admitted(self) -> int:
        return self._admitted
