"""Hand landmark types. The MediaPipe-backed detector lives in ``hand_detector``."""
from .types import HandDetectorConfig, HandLandmarks, Landmark, LandmarkIndex, FINGERTIPS, PALM_REFERENCE

__all__ = ["HandDetectorConfig", "HandLandmarks", "Landmark", "LandmarkIndex", "FINGERTIPS", "PALM_REFERENCE"]
