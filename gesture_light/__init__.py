"""
Gesture Light Control
======================

Hand gesture control of a smart light from a wearable camera stream.

Modules:
    - capture: Planar frame container, color-space normalization, frame throttling
    - detection: MediaPipe hand landmark detection
    - recognition: Geometry classification and the debounced gesture state machine
    - control: Light actuator client and command dispatch
    - core: Pipeline orchestration and event bus
    - utils: Configuration, logging, performance monitoring
"""

__version__ = "1.0.0"
__author__ = "HCI Team"
