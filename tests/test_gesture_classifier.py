"""
Tests for Gesture Classifier
=============================
"""

import math

import pytest

from gesture_light.detection.types import (
    FINGERTIPS,
    HandLandmarks,
    Landmark,
    LandmarkIndex,
    PALM_REFERENCE,
)
from gesture_light.recognition.gesture_classifier import GestureClassifier
from gesture_light.recognition.gesture_types import GestureConfig, HandGesture


def create_mock_landmarks(
    tip_distance: float,
    rotation_deg: float = 0.0,
    palm=(0.5, 0.5),
    confidence: float = 0.9,
) -> HandLandmarks:
    """
    Create mock hand landmarks for testing.

    Every fingertip sits ``tip_distance`` from the palm reference, on a ray
    tilted ``rotation_deg`` from vertical; the wrist sits on the opposite side.
    """
    theta = math.radians(rotation_deg)
    ux, uy = math.sin(theta), -math.cos(theta)
    px, py = palm

    landmarks = [Landmark(x=px, y=py) for _ in range(21)]
    landmarks[LandmarkIndex.WRIST] = Landmark(x=px - 0.25 * ux, y=py - 0.25 * uy)
    for idx in FINGERTIPS:
        landmarks[idx] = Landmark(x=px + tip_distance * ux, y=py + tip_distance * uy)

    return HandLandmarks(landmarks=landmarks, handedness="Right", confidence=confidence)


@pytest.fixture
def classifier():
    return GestureClassifier(GestureConfig())


class TestGestureClassifier:
    """Test suite for open palm / closed fist classification."""

    def test_no_hand(self, classifier):
        state = classifier.classify(None)

        assert not state.hand_detected
        assert state.gesture is HandGesture.NONE
        assert state.rotation_angle == 0.0
        assert state.confidence == 0.0

    def test_open_palm(self, classifier):
        state = classifier.classify(create_mock_landmarks(0.25))

        assert state.hand_detected
        assert state.gesture is HandGesture.OPEN_PALM

    def test_closed_fist(self, classifier):
        state = classifier.classify(create_mock_landmarks(0.03))

        assert state.hand_detected
        assert state.gesture is HandGesture.CLOSED_FIST

    def test_ambiguous_between_thresholds(self, classifier):
        state = classifier.classify(create_mock_landmarks(0.1))

        assert state.hand_detected
        assert state.gesture is HandGesture.NONE

    def test_confidence_from_landmarks(self, classifier):
        state = classifier.classify(create_mock_landmarks(0.25, confidence=0.75))

        assert state.confidence == pytest.approx(0.75)

    def test_confidence_override(self, classifier):
        state = classifier.classify(create_mock_landmarks(0.25, confidence=0.75), confidence=0.5)

        assert state.confidence == pytest.approx(0.5)

    def test_deterministic(self, classifier):
        landmarks = create_mock_landmarks(0.2, rotation_deg=12.0)

        assert classifier.classify(landmarks) == classifier.classify(landmarks)


class TestThresholdBoundaries:
    """A distance exactly on a threshold is ambiguous."""

    @pytest.fixture
    def classifier(self):
        return GestureClassifier(GestureConfig(open_threshold=0.125, closed_threshold=0.0625))

    def test_exactly_open_threshold(self, classifier):
        landmarks = create_mock_landmarks(0.125)
        avg = GestureClassifier.average_fingertip_distance(
            landmarks.palm_reference, landmarks.fingertips)

        assert avg == 0.125
        assert classifier.classify(landmarks).gesture is HandGesture.NONE

    def test_exactly_closed_threshold(self, classifier):
        landmarks = create_mock_landmarks(0.0625)

        assert classifier.classify(landmarks).gesture is HandGesture.NONE

    def test_just_above_open_threshold(self, classifier):
        assert classifier.classify(create_mock_landmarks(0.13)).gesture is HandGesture.OPEN_PALM

    def test_just_below_closed_threshold(self, classifier):
        assert classifier.classify(create_mock_landmarks(0.06)).gesture is HandGesture.CLOSED_FIST


class TestFingertipDistance:

    def test_palm_reference_is_middle_knuckle(self):
        assert PALM_REFERENCE is LandmarkIndex.MIDDLE_MCP

    def test_average_of_five(self):
        palm = Landmark(0.0, 0.0)
        tips = [Landmark(0.3, 0.4), Landmark(0.0, 0.1), Landmark(0.0, 0.2),
                Landmark(0.0, 0.3), Landmark(0.0, 0.0)]

        # distances 0.5, 0.1, 0.2, 0.3, 0.0
        assert GestureClassifier.average_fingertip_distance(palm, tips) == pytest.approx(0.22)

    def test_depth_ignored(self):
        palm = Landmark(0.5, 0.5, z=0.0)
        tips = [Landmark(0.5, 0.3, z=0.9)] * 5

        assert GestureClassifier.average_fingertip_distance(palm, tips) == pytest.approx(0.2)


class TestPalmRotation:
    """Wrist -> middle fingertip angle from vertical."""

    def test_upright(self):
        assert GestureClassifier.palm_rotation(Landmark(0.5, 0.8), Landmark(0.5, 0.3)) == 0.0

    def test_rotated_right_positive(self):
        angle = GestureClassifier.palm_rotation(Landmark(0.5, 0.5), Landmark(0.6, 0.4))

        assert angle == pytest.approx(45.0)

    def test_rotated_left_negative(self):
        angle = GestureClassifier.palm_rotation(Landmark(0.5, 0.5), Landmark(0.4, 0.4))

        assert angle == pytest.approx(-45.0)

    def test_clamped_at_90(self):
        """A hand pointing downward saturates instead of wrapping."""
        right = GestureClassifier.palm_rotation(Landmark(0.5, 0.5), Landmark(0.9, 0.6))
        left = GestureClassifier.palm_rotation(Landmark(0.5, 0.5), Landmark(0.1, 0.6))

        assert right == 90.0
        assert left == -90.0

    @pytest.mark.parametrize("rotation", [-60.0, -15.0, 0.0, 7.5, 30.0, 80.0])
    def test_classifier_reports_rotation(self, classifier, rotation):
        state = classifier.classify(create_mock_landmarks(0.25, rotation_deg=rotation))

        assert state.rotation_angle == pytest.approx(rotation)
        assert state.gesture is HandGesture.OPEN_PALM
