"""
Color-Space Normalizer
=======================

Converts planar I420 frames (Y plane, U plane, V plane) into the
semi-planar NV21 layout (Y plane, interleaved V/U) that OpenCV and most
image consumers decode directly.

All functions are pure and allocate a fresh output buffer, so they are safe
to call concurrently across frames.
"""

import logging
from typing import Union

import cv2
import numpy as np

from .camera import Frame, PixelLayout

logger = logging.getLogger(__name__)

BufferLike = Union[bytes, bytearray, memoryview, np.ndarray]


class FrameFormatError(ValueError):
    """Raised when a frame buffer does not match its declared dimensions."""


def _as_uint8(data: BufferLike) -> np.ndarray:
    if isinstance(data, np.ndarray):
        return data.astype(np.uint8, copy=False).reshape(-1)
    return np.frombuffer(data, dtype=np.uint8)


def _check_geometry(buf: np.ndarray, width: int, height: int) -> int:
    """Validate a 4:2:0 buffer and return the luma plane size."""
    if width <= 0 or height <= 0:
        raise FrameFormatError(f"Invalid frame dimensions {width}x{height}")
    if width % 2 or height % 2:
        raise FrameFormatError(f"Frame dimensions must be even, got {width}x{height}")

    size = width * height
    expected = size * 3 // 2
    if buf.size != expected:
        raise FrameFormatError(
            f"Buffer length {buf.size} does not match {width}x{height} "
            f"(expected {expected})"
        )
    return size


def i420_to_nv21(data: BufferLike, width: int, height: int) -> np.ndarray:
    """
    Convert I420 (YYYYYYYY:UU:VV) to NV21 (YYYYYYYY:VUVU).

    Args:
        data: Planar buffer of length width * height * 1.5
        width: Frame width in pixels (even)
        height: Frame height in pixels (even)

    Returns:
        New uint8 array of the same length
    """
    src = _as_uint8(data)
    size = _check_geometry(src, width, height)
    quarter = size // 4

    out = np.empty_like(src)
    out[:size] = src[:size]
    out[size::2] = src[size + quarter:]         # V first
    out[size + 1::2] = src[size:size + quarter]  # U second
    return out


def nv21_to_i420(data: BufferLike, width: int, height: int) -> np.ndarray:
    """Inverse of ``i420_to_nv21``."""
    src = _as_uint8(data)
    size = _check_geometry(src, width, height)
    quarter = size // 4

    out = np.empty_like(src)
    out[:size] = src[:size]
    out[size:size + quarter] = src[size + 1::2]
    out[size + quarter:] = src[size::2]
    return out


def normalize(frame: Frame) -> np.ndarray:
    """Return the frame's pixels in NV21 layout as a new buffer."""
    if frame.layout is PixelLayout.NV21:
        src = _as_uint8(frame.data)
        _check_geometry(src, frame.width, frame.height)
        return src.copy()
    return i420_to_nv21(frame.data, frame.width, frame.height)


def nv21_to_bgr(data: BufferLike, width: int, height: int) -> np.ndarray:
    """Decode an NV21 buffer to a displayable (H, W, 3) BGR image."""
    src = _as_uint8(data)
    _check_geometry(src, width, height)
    yuv = src.reshape(height * 3 // 2, width)
    return cv2.cvtColor(yuv, cv2.COLOR_YUV2BGR_NV21)
