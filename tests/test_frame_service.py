"""
Tests for Landmark Flattening and the Frame Classification Service
===================================================================
"""

import pytest
import numpy as np
import sys
from collections import namedtuple
from pathlib import Path
from types import SimpleNamespace

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.errors import EmptyRecording, InvalidFeatureLength, InvalidLabel
from core.events import EventBus, Events
from core.types import NO_CLASSIFICATION
from modules.detection.landmark_extractor import extract_landmarks, flatten_landmarks
from modules.recognition.aggregator import Aggregator
from modules.recognition.frame_service import FrameClassificationService
from modules.recognition.knn_classifier import KNNClassifier
from modules.utils.performance_monitor import PerformanceMonitor

Landmark = namedtuple("Landmark", ["x", "y", "z"])


def create_mock_landmarks(offset: float = 0.0, count: int = 21) -> list:
    """Landmark i sits at (i + offset, i + 100, i + 200) / 1000."""
    return [
        Landmark(x=(i + offset) / 1000, y=(i + 100) / 1000, z=(i + 200) / 1000)
        for i in range(count)
    ]


class TestLandmarkFlattening:
    """Test suite for turning detector output into feature vectors."""

    def test_flatten_order(self):
        vector = flatten_landmarks(create_mock_landmarks())
        assert vector.shape == (63,)
        assert list(vector[:6]) == pytest.approx([0.0, 0.1, 0.2, 0.001, 0.101, 0.201])
        assert vector[60:].tolist() == pytest.approx([0.020, 0.120, 0.220])

    def test_mediapipe_landmark_list(self):
        hand = SimpleNamespace(landmark=create_mock_landmarks())
        assert np.array_equal(flatten_landmarks(hand), flatten_landmarks(create_mock_landmarks()))

    def test_mapping_points(self):
        points = [{"x": p.x, "y": p.y, "z": p.z} for p in create_mock_landmarks()]
        assert np.array_equal(flatten_landmarks(points), flatten_landmarks(create_mock_landmarks()))

    def test_array_input(self):
        arr = np.arange(63, dtype=np.float64).reshape(21, 3)
        assert extract_landmarks(arr).shape == (21, 3)
        assert list(flatten_landmarks(arr)) == list(range(63))

    def test_wrong_landmark_count(self):
        with pytest.raises(InvalidFeatureLength):
            flatten_landmarks(create_mock_landmarks(count=20))
        with pytest.raises(InvalidFeatureLength):
            flatten_landmarks(np.zeros((20, 3)))

    def test_flat_vector_is_not_a_landmark_set(self):
        with pytest.raises(InvalidFeatureLength):
            flatten_landmarks([0.0] * 63)

    def test_point_with_missing_coordinate(self):
        points = [[0.1, 0.2]] * 21
        with pytest.raises(InvalidFeatureLength):
            flatten_landmarks(points)
        with pytest.raises(InvalidFeatureLength):
            flatten_landmarks([{"x": 0.1, "y": 0.2}] * 21)


class TestFrameClassificationService:
    """Test suite for per-frame classification and recording control."""

    @pytest.fixture
    def bus(self):
        bus = EventBus()
        bus.reset()
        yield bus
        bus.reset()

    @pytest.fixture
    def classifier(self):
        return KNNClassifier(k=1)

    @pytest.fixture
    def service(self, classifier, bus):
        return FrameClassificationService(classifier, Aggregator(), event_bus=bus)

    def test_untrained_returns_sentinel(self, service):
        result = service.process_frame(create_mock_landmarks())
        assert result is NO_CLASSIFICATION
        assert not result.is_classified
        assert result.label is None

    def test_classifies_learned_pose(self, service, classifier):
        classifier.learn("peace", flatten_landmarks(create_mock_landmarks(0.0)))
        classifier.learn("vuist", flatten_landmarks(create_mock_landmarks(50.0)))

        result = service.process_frame(create_mock_landmarks(1.0))
        assert result.label == "peace"
        assert service.last_result is result
        assert service.process_frame(create_mock_landmarks(49.0)).label == "vuist"

    def test_invalid_landmarks_propagate(self, service, classifier):
        classifier.learn("peace", flatten_landmarks(create_mock_landmarks()))
        with pytest.raises(InvalidFeatureLength):
            service.process_frame(create_mock_landmarks(count=5))

    def test_emits_frame_classified(self, service, classifier, bus):
        received = []
        bus.subscribe(Events.FRAME_CLASSIFIED, lambda **kw: received.append(kw["label"]))

        service.process_frame(create_mock_landmarks())  # untrained: no event
        classifier.learn("hand", flatten_landmarks(create_mock_landmarks()))
        service.process_frame(create_mock_landmarks())
        assert received == ["hand"]

    def test_record_and_learn_prototype(self, service, classifier):
        service.start_recording()
        assert service.is_recording
        service.process_frame(create_mock_landmarks(0.0))
        service.process_frame(create_mock_landmarks(2.0))
        assert service.recorded_frames == 2

        prototype = service.stop_recording("oke")
        expected = flatten_landmarks(create_mock_landmarks(1.0))
        assert prototype == pytest.approx(expected)
        assert classifier.size() == 1
        assert classifier.classify(expected) == "oke"
        assert not service.is_recording

    def test_frames_not_recorded_when_idle(self, service):
        service.process_frame(create_mock_landmarks())
        assert service.recorded_frames == 0

    def test_stop_recording_empty(self, service, classifier):
        service.start_recording()
        with pytest.raises(EmptyRecording):
            service.stop_recording("oke")
        assert classifier.size() == 0

    def test_stop_recording_invalid_label_discards(self, service, classifier):
        service.start_recording()
        service.process_frame(create_mock_landmarks())
        with pytest.raises(InvalidLabel):
            service.stop_recording("")
        assert classifier.size() == 0
        assert service.recorded_frames == 0
        assert not service.is_recording

    def test_recording_events(self, service, bus):
        events = []
        bus.subscribe(Events.RECORDING_STARTED, lambda **kw: events.append("started"))
        bus.subscribe(Events.RECORDING_STOPPED, lambda **kw: events.append(("stopped", kw["frames"])))
        bus.subscribe(Events.SAMPLE_LEARNED, lambda **kw: events.append(("learned", kw["index"])))

        service.start_recording()
        service.process_frame(create_mock_landmarks())
        service.stop_recording("duim omhoog")
        assert events == ["started", ("stopped", 1), ("learned", 0)]

    def test_measures_classification_latency(self, classifier):
        perf = PerformanceMonitor()
        service = FrameClassificationService(classifier, performance_monitor=perf)
        classifier.learn("hand", flatten_landmarks(create_mock_landmarks()))
        service.process_frame(create_mock_landmarks())
        assert "classification" in perf.get_report()["latencies_ms"]
        assert perf.get_stage_latency("classification") >= 0.0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
