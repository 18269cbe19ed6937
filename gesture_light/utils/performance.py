"""
Performance Monitoring Module
==============================

Frame-rate, per-stage latency and frame accounting for the gesture pipeline.
Stages run on two threads (frame producer and gesture worker), so every
update is taken under a lock.
"""

import time
import logging
from dataclasses import dataclass
from typing import Dict, Optional
from collections import deque
from contextlib import contextmanager
import threading

logger = logging.getLogger(__name__)


@dataclass
class PerformanceMetrics:
    """Container for performance metrics snapshot."""
    fps: float = 0.0
    normalize_time_ms: float = 0.0
    detection_time_ms: float = 0.0
    classification_time_ms: float = 0.0
    frames_seen: int = 0
    frames_admitted: int = 0
    frames_dropped: int = 0
    frames_malformed: int = 0


class PerformanceMonitor:
    """
    Real-time performance monitoring for the gesture pipeline.

    Example:
        >>> monitor = PerformanceMonitor()
        >>> with monitor.measure("normalize"):
        ...     nv21 = normalize(frame)
        >>> monitor.tick()
        >>> print(monitor.get_report())
    """

    def __init__(self, window_size: int = 30):
        self.window_size = window_size
        self._tick_intervals: deque = deque(maxlen=window_size)
        self._last_tick: Optional[float] = None
        self._stage_times: Dict[str, deque] = {}
        self._counters: Dict[str, int] = {
            "seen": 0, "admitted": 0, "dropped": 0, "malformed": 0,
        }
        self._lock = threading.Lock()

    def reset(self) -> None:
        with self._lock:
            self._tick_intervals.clear()
            self._last_tick = None
            self._stage_times.clear()
            for key in self._counters:
                self._counters[key] = 0

    def tick(self) -> None:
        """Mark the arrival of one camera frame."""
        now = time.perf_counter()
        with self._lock:
            if self._last_tick is not None:
                self._tick_intervals.append(now - self._last_tick)
            self._last_tick = now
            self._counters["seen"] += 1

    def count(self, counter: str) -> None:
        """Increment one of: admitted, dropped, malformed."""
        with self._lock:
            self._counters[counter] += 1

    @contextmanager
    def measure(self, stage: str):
        """
        Context manager to measure a processing stage.

        Args:
            stage: Name of the stage (e.g., "normalize", "detection")
        """
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed = time.perf_counter() - start
            with self._lock:
                if stage not in self._stage_times:
                    self._stage_times[stage] = deque(maxlen=self.window_size)
                self._stage_times[stage].append(elapsed)

    @property
    def fps(self) -> float:
        """Incoming frame rate (rolling average)."""
        with self._lock:
            if not self._tick_intervals:
                return 0.0
            avg = sum(self._tick_intervals) / len(self._tick_intervals)
            return 1.0 / avg if avg > 0 else 0.0

    def stage_time_ms(self, stage: str) -> float:
        """Get average time for a specific stage in milliseconds."""
        with self._lock:
            times = self._stage_times.get(stage)
            if not times:
                return 0.0
            return (sum(times) / len(times)) * 1000

    def get_metrics(self) -> PerformanceMetrics:
        """Get current performance metrics snapshot."""
        with self._lock:
            counters = dict(self._counters)
        return PerformanceMetrics(
            fps=self.fps,
            normalize_time_ms=self.stage_time_ms("normalize"),
            detection_time_ms=self.stage_time_ms("detection"),
            classification_time_ms=self.stage_time_ms("classification"),
            frames_seen=counters["seen"],
            frames_admitted=counters["admitted"],
            frames_dropped=counters["dropped"],
            frames_malformed=counters["malformed"],
        )

    def get_report(self) -> str:
        """Get formatted performance report string."""
        m = self.get_metrics()
        return (
            f"Performance Report\n"
            f"{'=' * 40}\n"
            f"Camera FPS: {m.fps:.1f}\n"
            f"\nPer-Stage Breakdown:\n"
            f"  Normalize: {m.normalize_time_ms:.2f}ms\n"
            f"  Detection: {m.detection_time_ms:.2f}ms\n"
            f"  Classification: {m.classification_time_ms:.2f}ms\n"
            f"\nFrame Stats:\n"
            f"  Seen: {m.frames_seen}\n"
            f"  Admitted: {m.frames_admitted}\n"
            f"  Dropped (worker busy): {m.frames_dropped}\n"
            f"  Malformed: {m.frames_malformed}\n"
        )
