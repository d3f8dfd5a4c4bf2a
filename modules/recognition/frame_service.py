"""
Per-frame glue between the hand detector and the k-NN classifier.

Runs synchronously inside the detector's frame callback. It does no
algorithmic work of its own: flatten, classify, and while the record
toggle is on, hand the same vector to the aggregator.
"""

import logging

import numpy as np

from core.errors import InsufficientTrainingData, InvalidLabel
from core.events import EventBus, Events
from core.types import NO_CLASSIFICATION, ClassificationResult
from modules.detection.landmark_extractor import flatten_landmarks
from modules.recognition.aggregator import Aggregator
from modules.recognition.knn_classifier import KNNClassifier
from modules.recognition.sample_store import validate_label
from modules.utils.performance_monitor import PerformanceMonitor

logger = logging.getLogger(__name__)


class FrameClassificationService:
    """Classifies one detected hand per frame and manages gesture recording."""

    def __init__(self, classifier: KNNClassifier, aggregator: Aggregator = None,
                 event_bus: EventBus = None, performance_monitor: PerformanceMonitor = None):
        self._classifier = classifier
        self._aggregator = aggregator or Aggregator()
        self._bus = event_bus
        self._perf = performance_monitor
        self._last_result = NO_CLASSIFICATION

    @property
    def last_result(self) -> ClassificationResult:
        return self._last_result

    @property
    def is_recording(self) -> bool:
        return self._aggregator.is_recording

    @property
    def recorded_frames(self) -> int:
        return self._aggregator.frame_count

    def process_frame(self, raw_landmarks) -> ClassificationResult:
        """Classify the hand pose of one frame.

        Args:
            raw_landmarks: 21 detector landmarks with x, y, z each

        Returns:
            ClassificationResult, or NO_CLASSIFICATION while untrained

        Raises:
            InvalidFeatureLength: not exactly 21 landmarks of 3 coordinates
        """
        features = flatten_landmarks(raw_landmarks)

        if self._aggregator.is_recording:
            self._aggregator.record(features)

        try:
            if self._perf is not None:
                with self._perf.measure("classification"):
                    result = self._classifier.predict(features)
            else:
                result = self._classifier.predict(features)
        except InsufficientTrainingData:
            result = NO_CLASSIFICATION

        self._last_result = result
        if self._bus is not None and result.is_classified:
            self._bus.emit(Events.FRAME_CLASSIFIED, label=result.label,
                           distance=result.distance, votes=result.votes)
        return result

    def start_recording(self):
        """Start buffering frames for a new user gesture."""
        self._aggregator.start()
        if self._bus is not None:
            self._bus.emit(Events.RECORDING_STARTED)

    def stop_recording(self, label: str) -> np.ndarray:
        """Average the recorded frames and learn them under label.

        The recording is discarded even when this raises.

        Raises:
            InvalidLabel: label is empty
            EmptyRecording: no frames were recorded
        """
        try:
            validate_label(label)
        except InvalidLabel:
            self._aggregator.discard()
            raise

        frame_count = self._aggregator.frame_count
        prototype = self._aggregator.stop()
        sample = self._classifier.learn(label, prototype)
        logger.info("Learned gesture '%s' from %d frames (sample #%d)",
                    label, frame_count, sample.index)

        if self._bus is not None:
            self._bus.emit(Events.RECORDING_STOPPED, label=label, frames=frame_count)
            self._bus.emit(Events.SAMPLE_LEARNED, label=label, index=sample.index)
        return prototype
