"""
Geometry Gesture Classifier
============================

Rule-based open-palm / closed-fist recognition from hand landmark geometry,
plus a palm rotation signal for brightness control.

Gesture Recognition Logic:
- Finger extension: mean 2-D distance from the palm reference (middle
  finger MCP) to the five fingertips
- Above the open threshold -> OPEN_PALM, below the closed threshold ->
  CLOSED_FIST, anything in between (including either threshold exactly)
  -> NONE
- Rotation: angle of the wrist -> middle fingertip vector from vertical
"""

import math
import logging
from typing import Optional, Sequence

import numpy as np

from ..detection.types import HandLandmarks, Landmark
from .gesture_types import GestureConfig, HandGesture, HandState

logger = logging.getLogger(__name__)

MAX_ROTATION_DEG = 90.0


class GestureClassifier:
    """
    Maps one hand's landmarks to a ``HandState``.

    Pure computation: no state is kept between calls.

    Example:
        >>> classifier = GestureClassifier(GestureConfig())
        >>> state = classifier.classify(hand_landmarks)
        >>> state.gesture, state.rotation_angle
    """

    def __init__(self, config: Optional[GestureConfig] = None):
        self.config = config or GestureConfig()

    def classify(self, landmarks: Optional[HandLandmarks],
                 confidence: Optional[float] = None) -> HandState:
        """
        Classify hand gesture from landmarks.

        Args:
            landmarks: Detected landmark set, or None when no hand was found
            confidence: Presence confidence; defaults to the landmark set's own

        Returns:
            HandState with gesture, rotation and confidence
        """
        if landmarks is None:
            return HandState(hand_detected=False)

        if confidence is None:
            confidence = landmarks.confidence

        avg_distance = self.average_fingertip_distance(
            landmarks.palm_reference, landmarks.fingertips)

        if avg_distance > self.config.open_threshold:
            gesture = HandGesture.OPEN_PALM
        elif avg_distance < self.config.closed_threshold:
            gesture = HandGesture.CLOSED_FIST
        else:
            gesture = HandGesture.NONE

        rotation = self.palm_rotation(landmarks.wrist, landmarks.middle_tip)

        logger.debug("Gesture: %s, Rotation: %.1f deg, Distance: %.4f",
                     gesture.name, rotation, avg_distance)

        return HandState(
            gesture=gesture,
            rotation_angle=rotation,
            confidence=float(confidence),
            hand_detected=True,
        )

    @staticmethod
    def average_fingertip_distance(palm: Landmark, fingertips: Sequence[Landmark]) -> float:
        """Mean Euclidean distance (x, y only) from palm to each fingertip."""
        tips = np.array([(tip.x, tip.y) for tip in fingertips], dtype=np.float64)
        offsets = tips - np.array([palm.x, palm.y], dtype=np.float64)
        return float(np.mean(np.hypot(offsets[:, 0], offsets[:, 1])))

    @staticmethod
    def palm_rotation(wrist: Landmark, middle_tip: Landmark) -> float:
        """
        Angle of the wrist -> middle fingertip vector from vertical, in degrees.

        0 = pointing up, negative = rotated left, positive = rotated right.
        Image y grows downward, hence the negated dy.
        """
        dx = middle_tip.x - wrist.x
        dy = middle_tip.y - wrist.y
        angle = math.degrees(math.atan2(dx, -dy))
        return max(-MAX_ROTATION_DEG, min(MAX_ROTATION_DEG, angle))
