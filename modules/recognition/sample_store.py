"""
Append-only storage for labeled gesture samples.

Samples are kept twice: as Sample objects in insertion order, and as rows
of a growing float64 matrix that the classifier scans in one vectorized
pass. Rows are written once and never modified, so a snapshot handed to a
reader stays valid while later samples are appended.
"""

import logging
import threading
from typing import List, Tuple

import numpy as np

from core.errors import InvalidLabel
from core.types import FEATURE_LENGTH, Sample, as_feature_vector

logger = logging.getLogger(__name__)


def validate_label(label) -> str:
    """Return label unchanged, or raise InvalidLabel if it is empty or not text."""
    if not isinstance(label, str) or not label:
        raise InvalidLabel(f"sample label must be a non-empty string, got {label!r}")
    return label


class SampleStore:
    """Ordered, append-only collection of training samples.

    Single writer, many readers: insert() and snapshot() hold the lock,
    everything returned to a reader is an immutable snapshot.
    """

    def __init__(self, initial_capacity: int = 64):
        self._samples: List[Sample] = []
        self._matrix = np.empty((max(initial_capacity, 1), FEATURE_LENGTH), dtype=np.float64)
        self._labels: List[str] = []
        self._lock = threading.Lock()

    def insert(self, label: str, features) -> Sample:
        """Append a new sample.

        Raises:
            InvalidFeatureLength: features do not hold exactly 63 values
            NonFiniteFeature: features contain NaN or infinity
            InvalidLabel: label is empty
        """
        vector = as_feature_vector(features)
        validate_label(label)

        with self._lock:
            index = len(self._samples)
            if index == self._matrix.shape[0]:
                self._grow()
            self._matrix[index] = vector
            sample = Sample(label=label, features=vector, index=index)
            self._samples.append(sample)
            self._labels.append(label)

        logger.debug("Stored sample #%d (%s)", index, label)
        return sample

    def _grow(self):
        # Readers may still hold views of the old matrix; allocate a new one.
        grown = np.empty((self._matrix.shape[0] * 2, FEATURE_LENGTH), dtype=np.float64)
        grown[:self._matrix.shape[0]] = self._matrix
        self._matrix = grown

    def size(self) -> int:
        return len(self._samples)

    def __len__(self):
        return self.size()

    def iterate(self) -> Tuple[Sample, ...]:
        """Samples in insertion order, as a restartable read-only snapshot."""
        with self._lock:
            return tuple(self._samples)

    def snapshot(self) -> Tuple[np.ndarray, Tuple[str, ...]]:
        """Feature matrix (n, 63) and labels for the first n samples.

        The matrix is a read-only view; rows it covers are never rewritten.
        """
        with self._lock:
            n = len(self._samples)
            view = self._matrix[:n]
            labels = tuple(self._labels)
        view = view.view()
        view.setflags(write=False)
        return view, labels
