"""
Hand landmark containers (MediaPipe 21-point convention) and detector settings.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import List, NamedTuple, Tuple

import numpy as np


class LandmarkIndex(IntEnum):
    """Hand landmark indices following MediaPipe convention."""
    WRIST = 0
    THUMB_CMC = 1
    THUMB_MCP = 2
    THUMB_IP = 3
    THUMB_TIP = 4
    INDEX_MCP = 5
    INDEX_PIP = 6
    INDEX_DIP = 7
    INDEX_TIP = 8
    MIDDLE_MCP = 9
    MIDDLE_PIP = 10
    MIDDLE_DIP = 11
    MIDDLE_TIP = 12
    RING_MCP = 13
    RING_PIP = 14
    RING_DIP = 15
    RING_TIP = 16
    PINKY_MCP = 17
    PINKY_PIP = 18
    PINKY_DIP = 19
    PINKY_TIP = 20


FINGERTIPS = (
    LandmarkIndex.THUMB_TIP,
    LandmarkIndex.INDEX_TIP,
    LandmarkIndex.MIDDLE_TIP,
    LandmarkIndex.RING_TIP,
    LandmarkIndex.PINKY_TIP,
)

# Middle finger knuckle stands in for the palm center
PALM_REFERENCE = LandmarkIndex.MIDDLE_MCP


class Landmark(NamedTuple):
    """A single landmark point with normalized coordinates."""
    x: float  # 0.0 to 1.0, normalized by image width
    y: float  # 0.0 to 1.0, normalized by image height
    z: float = 0.0  # Depth relative to wrist

    def to_pixel(self, width: int, height: int) -> Tuple[int, int]:
        """Convert normalized coordinates to pixel coordinates."""
        return (int(self.x * width), int(self.y * height))


@dataclass
class HandLandmarks:
    """One hand's landmark set with its presence confidence."""
    landmarks: List[Landmark]
    handedness: str = "Right"
    confidence: float = 0.0
    image_width: int = 320
    image_height: int = 240

    def get(self, index: LandmarkIndex) -> Landmark:
        """Get landmark by index."""
        return self.landmarks[index]

    @property
    def wrist(self) -> Landmark:
        return self.get(LandmarkIndex.WRIST)

    @property
    def middle_tip(self) -> Landmark:
        return self.get(LandmarkIndex.MIDDLE_TIP)

    @property
    def palm_reference(self) -> Landmark:
        return self.get(PALM_REFERENCE)

    @property
    def fingertips(self) -> List[Landmark]:
        return [self.get(idx) for idx in FINGERTIPS]

    def to_numpy(self) -> np.ndarray:
        """Convert landmarks to numpy array of shape (N, 3)."""
        return np.array([[lm.x, lm.y, lm.z] for lm in self.landmarks])


@dataclass
class HandDetectorConfig:
    """Configuration for hand detector."""
    model_path: str = ""
    min_detection_confidence: float = 0.3
    min_presence_confidence: float = 0.3
    min_tracking_confidence: float = 0.5

    @classmethod
    def from_dict(cls, d: dict) -> "HandDetectorConfig":
        """Create config from dictionary."""
        return cls(
            model_path=d.get("model_path", ""),
            min_detection_confidence=d.get("min_detection_confidence", 0.3),
            min_presence_confidence=d.get("min_presence_confidence", 0.3),
            min_tracking_confidence=d.get("min_tracking_confidence", 0.5),
        )
