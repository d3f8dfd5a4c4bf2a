"""
Reduces a recording session to a single prototype feature vector.

Every frame captured while recording is active counts equally; the
prototype is the plain component-wise mean. Frames recorded before the
hand pose settled are not filtered out.
"""

import logging
from typing import List

import numpy as np

from core.errors import EmptyRecording
from core.types import as_feature_vector

logger = logging.getLogger(__name__)


class Aggregator:
    """Collects feature vectors between start() and stop()."""

    def __init__(self):
        self._buffer: List[np.ndarray] = []
        self._recording = False

    @property
    def is_recording(self) -> bool:
        return self._recording

    @property
    def frame_count(self) -> int:
        return len(self._buffer)

    def start(self):
        """Begin a new session, discarding anything buffered so far."""
        if self._buffer:
            logger.debug("Discarding %d unreduced frames", len(self._buffer))
        self._buffer = []
        self._recording = True
        logger.info("Recording started")

    def record(self, features):
        """Buffer one frame. Ignored while not recording.

        Raises:
            InvalidFeatureLength: features do not hold exactly 63 values
        """
        vector = as_feature_vector(features)
        if not self._recording:
            return
        self._buffer.append(vector)

    def discard(self):
        """End the session without producing a prototype."""
        logger.info("Recording discarded (%d frames)", len(self._buffer))
        self._buffer = []
        self._recording = False

    def stop(self) -> np.ndarray:
        """End the session and return the mean of the buffered frames.

        The buffer is emptied whether or not a prototype is produced.

        Raises:
            EmptyRecording: no frames were recorded
        """
        buffer, self._buffer = self._buffer, []
        self._recording = False

        if not buffer:
            logger.warning("Recording stopped with no frames captured")
            raise EmptyRecording("no frames were recorded; record before stopping")

        prototype = np.mean(np.stack(buffer), axis=0)
        prototype.setflags(write=False)
        logger.info("Recording stopped: %d frames averaged", len(buffer))
        return prototype
