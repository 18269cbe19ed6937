"""Gesture recognition module."""
from .gesture_types import EventKind, GestureConfig, GestureEvent, HandGesture, HandState
from .gesture_classifier import GestureClassifier
from .gesture_state import GestureMachineState, GestureStateManager, transition

__all__ = [
    "EventKind",
    "GestureConfig",
    "GestureEvent",
    "HandGesture",
    "HandState",
    "GestureClassifier",
    "GestureMachineState",
    "GestureStateManager",
    "transition",
]
