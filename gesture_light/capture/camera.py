"""
Camera Capture Module
======================

Planar frame container and a desktop video source.

The wearable stream delivers planar I420 frames; ``Camera`` reproduces that
contract from a local OpenCV capture device so the gesture pipeline can be
driven without the wearable session.
"""

import cv2
import time
import threading
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple
from collections import deque

logger = logging.getLogger(__name__)


class PixelLayout(Enum):
    """Supported YUV 4:2:0 byte layouts."""
    I420 = "i420"  # Y plane, U plane, V plane
    NV21 = "nv21"  # Y plane, interleaved V/U


@dataclass
class CameraConfig:
    """Camera configuration settings."""
    device_id: int = 0
    width: int = 640
    height: int = 480
    fps: int = 24
    buffer_size: int = 1  # Minimal buffering for low latency
    threaded: bool = False
    warmup_frames: int = 5

    @classmethod
    def from_dict(cls, config: dict) -> "CameraConfig":
        """Create config from dictionary (YAML parsed)."""
        return cls(
            device_id=config.get("device_id", 0),
            width=config.get("width", 640),
            height=config.get("height", 480),
            fps=config.get("fps", 24),
            buffer_size=config.get("buffer_size", 1),
            threaded=config.get("threaded", False),
            warmup_frames=config.get("warmup_frames", 5),
        )


@dataclass(frozen=True)
class Frame:
    """Immutable planar frame as delivered per camera tick."""
    data: bytes
    width: int
    height: int
    layout: PixelLayout = PixelLayout.I420
    timestamp: float = 0.0
    frame_number: int = 0

    @property
    def expected_size(self) -> int:
        """Byte length of a well-formed 4:2:0 buffer of these dimensions."""
        return self.width * self.height * 3 // 2


class Camera:
    """
    Local camera producing I420 ``Frame`` objects.

    Example:
        >>> camera = Camera(CameraConfig())
        >>> camera.start()
        >>> frame = camera.read()
        >>> if frame:
        ...     pipeline.submit_frame(frame)
        >>> camera.stop()
    """

    def __init__(self, config: Optional[CameraConfig] = None):
        self.config = config or CameraConfig()
        self._cap: Optional[cv2.VideoCapture] = None
        self._frame_number = 0
        self._running = False

        # Threading components
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self._latest_frame: Optional[Frame] = None

        self._capture_times = deque(maxlen=30)  # type: deque

    def start(self) -> bool:
        """
        Open the capture device.

        Returns:
            True if camera started successfully
        """
        logger.info("Starting camera (device={}, {}x{}@{}fps)".format(
            self.config.device_id, self.config.width, self.config.height, self.config.fps))

        self._cap = cv2.VideoCapture(self.config.device_id)
        if not self._cap.isOpened():
            logger.error("Failed to open camera device {}".format(self.config.device_id))
            self._cap = None
            return False

        self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.config.width)
        self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.config.height)
        self._cap.set(cv2.CAP_PROP_FPS, self.config.fps)
        self._cap.set(cv2.CAP_PROP_BUFFERSIZE, self.config.buffer_size)

        if self.config.warmup_frames > 0:
            logger.info("Warming up camera ({} frames)...".format(self.config.warmup_frames))
            for _ in range(self.config.warmup_frames):
                self._cap.read()

        self._running = True
        self._frame_number = 0

        if self.config.threaded:
            logger.info("Started threaded capture")
            self._thread = threading.Thread(target=self._capture_loop, daemon=True)
            self._thread.start()

        return True

    def stop(self) -> None:
        """Stop camera capture and release resources."""
        logger.info("Stopping camera...")
        self._running = False

        if self._thread:
            self._thread.join(timeout=1.0)
            self._thread = None

        if self._cap:
            self._cap.release()
            self._cap = None

        logger.info("Camera stopped")

    def read(self) -> Optional[Frame]:
        """
        Read the latest frame.

        In threaded mode, returns the most recent captured frame (callers
        compare ``frame_number`` to skip repeats).
        In synchronous mode, captures a new frame.
        """
        if not self._running:
            return None

        if self.config.threaded:
            with self._lock:
                return self._latest_frame
        return self._capture_frame()

    def _capture_frame(self) -> Optional[Frame]:
        """Capture one BGR image and repack it as planar I420."""
        if not self._cap:
            return None

        start_time = time.perf_counter()
        ret, image = self._cap.read()
        capture_time = time.perf_counter() - start_time

        if not ret or image is None:
            logger.warning("Failed to capture frame")
            return None

        height, width = image.shape[:2]
        # 4:2:0 subsampling needs even dimensions
        if width % 2 or height % 2:
            image = image[:height - height % 2, :width - width % 2]
            height, width = image.shape[:2]

        planar = cv2.cvtColor(image, cv2.COLOR_BGR2YUV_I420)

        self._frame_number += 1
        self._capture_times.append(capture_time)

        return Frame(
            data=planar.tobytes(),
            width=width,
            height=height,
            layout=PixelLayout.I420,
            timestamp=time.time(),
            frame_number=self._frame_number,
        )

    def _capture_loop(self) -> None:
        """Background thread for continuous frame capture."""
        while self._running:
            frame = self._capture_frame()
            if frame:
                with self._lock:
                    self._latest_frame = frame

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def resolution(self) -> Tuple[int, int]:
        return (self.config.width, self.config.height)

    @property
    def avg_capture_time_ms(self) -> float:
        """Get average frame capture time in milliseconds."""
        if not self._capture_times:
            return 0.0
        return (sum(self._capture_times) / len(self._capture_times)) * 1000

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False
