"""
k-nearest-neighbor gesture classifier over 63-value landmark vectors.

Trained online: the preloaded dataset and user-recorded prototypes both
arrive through learn(). Queried once per video frame, so the distance
scan is a single vectorized numpy pass over the sample matrix.

Neighbor selection and voting are deterministic:
    - neighbors are ordered by (distance, insertion index)
    - the label with the most votes among the k nearest wins
    - a tie on votes goes to the tied label whose closest selected
      neighbor comes first in that ordering
"""

import logging
from collections import Counter
from typing import List

import numpy as np

from core.errors import InsufficientTrainingData
from core.types import ClassificationResult, Neighbor, Sample, as_feature_vector
from modules.recognition.sample_store import SampleStore

logger = logging.getLogger(__name__)


class KNNClassifier:
    """Classifies feature vectors by majority vote of the k nearest samples."""

    def __init__(self, k: int = 3):
        """Initialize the classifier.

        Args:
            k: Number of neighbors consulted per query. Fixed for the
               lifetime of the instance; build a new classifier to change it.
        """
        if isinstance(k, bool) or not isinstance(k, int) or k < 1:
            raise ValueError(f"k must be a positive integer, got {k!r}")
        self._k = k
        self._store = SampleStore()
        self._known_labels = {}  # label -> first insertion index

    @property
    def k(self) -> int:
        return self._k

    def learn(self, label: str, features) -> Sample:
        """Add one labeled example.

        Raises:
            InvalidFeatureLength: features do not hold exactly 63 values
            InvalidLabel: label is empty
        """
        sample = self._store.insert(label, features)
        if sample.label not in self._known_labels:
            self._known_labels[sample.label] = sample.index
            logger.info("New gesture label learned: %s", sample.label)
        return sample

    def size(self) -> int:
        return self._store.size()

    def __len__(self):
        return self._store.size()

    @property
    def labels(self) -> List[str]:
        """Distinct learned labels, in the order they were first learned."""
        return list(self._known_labels)

    def samples(self):
        """Read-only snapshot of all learned samples in insertion order."""
        return self._store.iterate()

    def classify(self, features) -> str:
        """Return the label that best matches features.

        Raises:
            InvalidFeatureLength: features do not hold exactly 63 values
            InsufficientTrainingData: nothing has been learned yet
        """
        return self.predict(features).label

    def predict(self, features) -> ClassificationResult:
        """Classify features and return the result with vote details."""
        neighbors = self.kneighbors(features)

        votes = Counter(n.label for n in neighbors)
        top_count = max(votes.values())
        tied = {label for label, count in votes.items() if count == top_count}

        # neighbors are already ordered by (distance, index)
        winner = next(n for n in neighbors if n.label in tied)

        return ClassificationResult(
            label=winner.label,
            distance=neighbors[0].distance,
            votes=dict(votes),
            neighbor_count=len(neighbors),
        )

    def kneighbors(self, features) -> List[Neighbor]:
        """The min(k, size) nearest samples, closest first.

        Equal distances are ordered by insertion index, earliest first.
        """
        query = as_feature_vector(features)
        matrix, labels = self._store.snapshot()
        if matrix.shape[0] == 0:
            raise InsufficientTrainingData("classifier has no training samples")

        distances = self._distances(matrix, query)
        k = min(self._k, matrix.shape[0])
        order = np.argsort(distances, kind="stable")[:k]

        return [Neighbor(int(i), labels[i], float(distances[i])) for i in order]

    @staticmethod
    def _distances(matrix: np.ndarray, query: np.ndarray) -> np.ndarray:
        """Euclidean distance from query to every row of matrix."""
        diff = matrix - query
        return np.sqrt(np.einsum("ij,ij->i", diff, diff))

    def get_info(self) -> dict:
        """Summary of the trained model."""
        counts = Counter(sample.label for sample in self._store.iterate())
        return {
            "k": self._k,
            "samples": self.size(),
            "labels": self.labels,
            "samples_per_label": dict(counts),
        }
