"""
Configuration loading.

Reads a YAML file, merges it over built-in defaults and validates the
result against a type schema. Validation problems are logged as warnings;
the component dataclasses raise on values they cannot work with (e.g.
inverted gesture thresholds).
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional

import yaml

from ..capture.camera import CameraConfig
from ..control.govee_client import GoveeConfig
from ..detection.types import HandDetectorConfig
from ..recognition.gesture_types import GestureConfig

logger = logging.getLogger(__name__)

_BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
DEFAULT_CONFIG_PATH = os.path.join(_BASE_DIR, "config", "config.yaml")

DEFAULTS = {
    "camera": {
        "device_id": 0,
        "width": 640,
        "height": 480,
        "fps": 24,
    },
    "mediapipe": {
        "model_path": "",
        "min_detection_confidence": 0.3,
        "min_presence_confidence": 0.3,
        "min_tracking_confidence": 0.5,
    },
    "gesture": {
        "enabled": True,
        "open_threshold": 0.15,
        "closed_threshold": 0.08,
        "rotation_threshold_deg": 5.0,
        "brightness_step": 20,
        "initial_brightness": 50,
        "toggle_debounce_ms": 200,
        "brightness_debounce_ms": 150,
        "frame_skip_count": 3,
        "gesture_frame_width": 320,
        "gesture_frame_height": 240,
    },
    "govee": {
        "api_key": "",
        "device_id": "",
        "sku": "",
        "timeout_s": 5.0,
    },
    "logging": {
        "level": "INFO",
        "file": None,
    },
}

# Schema: sections and their expected types
_CONFIG_SCHEMA = {
    "camera": {
        "device_id": int,
        "width": int,
        "height": int,
        "fps": int,
    },
    "mediapipe": {
        "min_detection_confidence": float,
        "min_presence_confidence": float,
        "min_tracking_confidence": float,
    },
    "gesture": {
        "enabled": bool,
        "open_threshold": float,
        "closed_threshold": float,
        "rotation_threshold_deg": float,
        "brightness_step": int,
        "initial_brightness": int,
        "toggle_debounce_ms": int,
        "brightness_debounce_ms": int,
        "frame_skip_count": int,
        "gesture_frame_width": int,
        "gesture_frame_height": int,
    },
    "govee": {
        "api_key": str,
        "device_id": str,
        "sku": str,
        "timeout_s": float,
    },
    "logging": {
        "level": str,
    },
}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base dict."""
    merged = base.copy()
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def validate_config(data: dict) -> list:
    """Check config sections against the schema; return warning strings."""
    warnings = []
    for section_name, fields in _CONFIG_SCHEMA.items():
        section = data.get(section_name)
        if section is None:
            warnings.append(f"Missing config section: '{section_name}'")
            continue
        if not isinstance(section, dict):
            warnings.append(f"Section '{section_name}' should be a dict, got {type(section).__name__}")
            continue
        for field_name, expected_type in fields.items():
            if field_name not in section:
                continue
            value = section[field_name]
            # Allow int where float is expected
            if expected_type is float and isinstance(value, (int, float)) and not isinstance(value, bool):
                continue
            if expected_type is int and isinstance(value, bool):
                warnings.append(f"{section_name}.{field_name}: expected int, got bool ({value!r})")
                continue
            if not isinstance(value, expected_type):
                warnings.append(
                    f"{section_name}.{field_name}: expected {expected_type.__name__}, "
                    f"got {type(value).__name__} ({value!r})"
                )

    for w in warnings:
        logger.warning("Config validation: %s", w)
    if not warnings:
        logger.debug("Config validation passed")
    return warnings


def load_config(config_path: Optional[str] = None) -> dict:
    """Load YAML configuration merged over the defaults."""
    config_path = config_path or DEFAULT_CONFIG_PATH
    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}
        logger.info("Loaded config from %s", config_path)
    except FileNotFoundError:
        logger.warning("Config file not found: %s, using defaults", config_path)
        data = {}

    if not isinstance(data, dict):
        logger.warning("Config root should be a mapping, got %s; using defaults",
                       type(data).__name__)
        data = {}

    merged = _deep_merge(DEFAULTS, data)
    validate_config(merged)
    return merged


@dataclass
class AppConfig:
    """Application configuration container."""
    camera: CameraConfig
    mediapipe: HandDetectorConfig
    gesture: GestureConfig
    govee: GoveeConfig
    gestures_enabled: bool = True
    log_level: str = "INFO"
    log_file: Optional[str] = None


def create_app_config(config_dict: dict) -> AppConfig:
    """Create AppConfig from configuration dictionary."""
    gesture_section = config_dict.get("gesture", {})
    logging_section = config_dict.get("logging", {})
    return AppConfig(
        camera=CameraConfig.from_dict(config_dict.get("camera", {})),
        mediapipe=HandDetectorConfig.from_dict(config_dict.get("mediapipe", {})),
        gesture=GestureConfig.from_dict(gesture_section),
        govee=GoveeConfig.from_dict(config_dict.get("govee", {})),
        gestures_enabled=gesture_section.get("enabled", True),
        log_level=logging_section.get("level", "INFO"),
        log_file=logging_section.get("file"),
    )
