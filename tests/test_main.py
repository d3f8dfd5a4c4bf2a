"""
Tests for the Application Frame Handling
=========================================
"""

import math
import pytest
import sys
from collections import namedtuple
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

pytest.importorskip("cv2")
pytest.importorskip("mediapipe")

from core.events import EventBus
from modules.detection.landmark_extractor import flatten_landmarks
from modules.recognition.aggregator import Aggregator
from modules.recognition.frame_service import FrameClassificationService
from modules.recognition.knn_classifier import KNNClassifier
from main import HandsignGame

Landmark = namedtuple("Landmark", ["x", "y", "z"])


def create_mock_landmarks(bad_index: int = None) -> list:
    points = [Landmark(x=i / 100, y=i / 50, z=0.0) for i in range(21)]
    if bad_index is not None:
        points[bad_index] = Landmark(x=math.nan, y=0.0, z=0.0)
    return points


class TestHandsignGameFrames:
    """Test suite for per-frame classification inside the game loop."""

    @pytest.fixture
    def bus(self):
        bus = EventBus()
        bus.reset()
        yield bus
        bus.reset()

    @pytest.fixture
    def app(self, bus):
        # Camera and detector are not needed to classify a detected hand
        app = HandsignGame.__new__(HandsignGame)
        app._classifier = KNNClassifier(k=1)
        app._service = FrameClassificationService(app._classifier, Aggregator(), event_bus=bus)
        return app

    def test_classifies_hand(self, app):
        app.classifier.learn("hand", flatten_landmarks(create_mock_landmarks()))
        result = app._classify_hand(create_mock_landmarks())
        assert result.label == "hand"

    def test_non_finite_landmark_skips_frame(self, app):
        app.classifier.learn("hand", flatten_landmarks(create_mock_landmarks()))
        assert app._classify_hand(create_mock_landmarks(bad_index=3)) is None
        # Next good frame is still classified
        assert app._classify_hand(create_mock_landmarks()).label == "hand"

    def test_wrong_landmark_count_skips_frame(self, app):
        app.classifier.learn("hand", flatten_landmarks(create_mock_landmarks()))
        assert app._classify_hand(create_mock_landmarks()[:5]) is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
