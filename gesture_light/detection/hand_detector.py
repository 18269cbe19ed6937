"""
Hand Detection Module - MediaPipe Tasks API
=============================================

Wraps the MediaPipe HandLandmarker as the landmark detector capability:
an RGB image in, zero or one hand's landmarks out.
"""

import numpy as np
import logging
import urllib.request
from typing import Optional
from pathlib import Path

import mediapipe as mp
from mediapipe.tasks import python
from mediapipe.tasks.python import vision

from .types import HandDetectorConfig, HandLandmarks, Landmark

logger = logging.getLogger(__name__)

HAND_LANDMARKER_MODEL_URL = "https://storage.googleapis.com/mediapipe-models/hand_landmarker/hand_landmarker/float16/1/hand_landmarker.task"
DEFAULT_MODEL_PATH = Path(__file__).parent.parent.parent / "models" / "hand_landmarker.task"


def download_model(url: str, save_path: Path) -> bool:
    """Download the hand landmarker model if not present."""
    if save_path.exists():
        logger.info(f"Model already exists at {save_path}")
        return True

    try:
        save_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"Downloading hand landmarker model to {save_path}...")
        urllib.request.urlretrieve(url, save_path)
        logger.info("Model download complete!")
        return True
    except Exception as e:
        logger.error(f"Failed to download model: {e}")
        return False


class HandDetector:
    """
    Single-hand landmark detector using MediaPipe HandLandmarker.

    Runs in IMAGE mode because the gesture path only sees every Nth frame,
    so there is no continuous video timeline to track across.

    Example:
        >>> detector = HandDetector(HandDetectorConfig())
        >>> detector.start()
        >>> hand = detector.detect(rgb_image)  # RGB format!
        >>> detector.stop()
    """

    def __init__(self, config: Optional[HandDetectorConfig] = None):
        self.config = config or HandDetectorConfig()
        self._landmarker: Optional[vision.HandLandmarker] = None

    def start(self) -> bool:
        """Initialize the hand landmarker."""
        try:
            model_path = self.config.model_path or str(DEFAULT_MODEL_PATH)

            if not Path(model_path).exists():
                if not download_model(HAND_LANDMARKER_MODEL_URL, Path(model_path)):
                    logger.error("Could not download hand landmarker model")
                    return False

            options = vision.HandLandmarkerOptions(
                base_options=python.BaseOptions(model_asset_path=model_path),
                running_mode=vision.RunningMode.IMAGE,
                num_hands=1,
                min_hand_detection_confidence=self.config.min_detection_confidence,
                min_hand_presence_confidence=self.config.min_presence_confidence,
                min_tracking_confidence=self.config.min_tracking_confidence,
            )
            self._landmarker = vision.HandLandmarker.create_from_options(options)

            logger.info(f"HandLandmarker initialized with model: {model_path}")
            return True

        except Exception as e:
            logger.error(f"Failed to initialize HandLandmarker: {e}")
            return False

    def stop(self) -> None:
        """Release resources."""
        if self._landmarker:
            self._landmarker.close()
            self._landmarker = None
        logger.info("HandLandmarker stopped")

    @property
    def is_ready(self) -> bool:
        return self._landmarker is not None

    def detect(self, image: np.ndarray) -> Optional[HandLandmarks]:
        """
        Detect at most one hand in the given image.

        Args:
            image: RGB image as numpy array (H, W, 3)

        Returns:
            HandLandmarks, or None when no hand is present
        """
        if self._landmarker is None:
            logger.warning("HandLandmarker not initialized. Call start() first.")
            return None

        height, width = image.shape[:2]
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=np.ascontiguousarray(image))
        result = self._landmarker.detect(mp_image)

        if not result.hand_landmarks:
            return None

        handedness = "Right"
        confidence = 0.0
        if result.handedness and result.handedness[0]:
            handedness = result.handedness[0][0].category_name
            confidence = result.handedness[0][0].score

        return HandLandmarks(
            landmarks=[Landmark(x=lm.x, y=lm.y, z=lm.z) for lm in result.hand_landmarks[0]],
            handedness=handedness,
            confidence=confidence,
            image_width=width,
            image_height=height,
        )

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False
