"""Frame capture, color-space normalization and throttling."""
from .camera import Camera, CameraConfig, Frame, PixelLayout
from .color_convert import FrameFormatError, normalize, i420_to_nv21, nv21_to_i420, nv21_to_bgr
from .frame_throttle import FrameThrottle

__all__ = [
    "Camera",
    "CameraConfig",
    "Frame",
    "PixelLayout",
    "FrameFormatError",
    "normalize",
    "i420_to_nv21",
    "nv21_to_i420",
    "nv21_to_bgr",
    "FrameThrottle",
]
