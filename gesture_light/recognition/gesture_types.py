"""
Gesture Types
==============

Value types shared by the classifier, the state machine and the dispatcher.
"""

from dataclasses import dataclass
from enum import Enum, auto


class HandGesture(Enum):
    """Recognized hand poses."""
    NONE = auto()         # No hand, or ambiguous pose
    OPEN_PALM = auto()    # All fingers extended - light ON
    CLOSED_FIST = auto()  # All fingers closed - light OFF


@dataclass(frozen=True)
class HandState:
    """Per-tick classifier output."""
    gesture: HandGesture = HandGesture.NONE
    rotation_angle: float = 0.0   # degrees, -90 to 90
    confidence: float = 0.0       # 0 to 1
    hand_detected: bool = False


class EventKind(Enum):
    """Discrete control events emitted by the state machine."""
    LIGHT_ON = "light_on"
    LIGHT_OFF = "light_off"
    BRIGHTNESS_CHANGE = "brightness_change"
    NO_ACTION = "no_action"


@dataclass(frozen=True)
class GestureEvent:
    """Tagged union of control events. ``delta`` is only meaningful for
    BRIGHTNESS_CHANGE."""
    kind: EventKind
    delta: int = 0

    @classmethod
    def light_on(cls) -> "GestureEvent":
        return cls(EventKind.LIGHT_ON)

    @classmethod
    def light_off(cls) -> "GestureEvent":
        return cls(EventKind.LIGHT_OFF)

    @classmethod
    def brightness_change(cls, delta: int) -> "GestureEvent":
        return cls(EventKind.BRIGHTNESS_CHANGE, delta)

    @classmethod
    def no_action(cls) -> "GestureEvent":
        return cls(EventKind.NO_ACTION)

    @property
    def is_action(self) -> bool:
        return self.kind is not EventKind.NO_ACTION

    def __repr__(self):
        if self.kind is EventKind.BRIGHTNESS_CHANGE:
            return f"GestureEvent({self.kind.value}, delta={self.delta:+d})"
        return f"GestureEvent({self.kind.value})"


@dataclass
class GestureConfig:
    """Thresholds and timings for classification and debouncing."""
    # Fingertip-to-palm distance thresholds (normalized units)
    open_threshold: float = 0.15
    closed_threshold: float = 0.08

    # Rotation ratchet
    rotation_threshold_deg: float = 5.0
    brightness_step: int = 20
    initial_brightness: int = 50

    # Debounce timings
    toggle_debounce_ms: int = 200
    brightness_debounce_ms: int = 150

    # Frame processing
    frame_skip_count: int = 3
    gesture_frame_width: int = 320
    gesture_frame_height: int = 240

    def __post_init__(self):
        if not self.closed_threshold < self.open_threshold:
            raise ValueError(
                f"closed_threshold ({self.closed_threshold}) must be below "
                f"open_threshold ({self.open_threshold})"
            )
        if self.frame_skip_count < 0:
            raise ValueError(f"frame_skip_count must be >= 0, got {self.frame_skip_count}")

    @classmethod
    def from_dict(cls, config: dict) -> "GestureConfig":
        """Create config from dictionary (YAML parsed)."""
        return cls(
            open_threshold=config.get("open_threshold", 0.15),
            closed_threshold=config.get("closed_threshold", 0.08),
            rotation_threshold_deg=config.get("rotation_threshold_deg", 5.0),
            brightness_step=config.get("brightness_step", 20),
            initial_brightness=config.get("initial_brightness", 50),
            toggle_debounce_ms=config.get("toggle_debounce_ms", 200),
            brightness_debounce_ms=config.get("brightness_debounce_ms", 150),
            frame_skip_count=config.get("frame_skip_count", 3),
            gesture_frame_width=config.get("gesture_frame_width", 320),
            gesture_frame_height=config.get("gesture_frame_height", 240),
        )
