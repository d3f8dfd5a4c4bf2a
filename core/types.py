"""
Shared domain types for the hand-sign gesture game.

Centralizes the feature vector contract, training samples and
classification results used across modules.
"""

import time
from dataclasses import dataclass
from typing import Dict, NamedTuple, Optional

import numpy as np

from core.errors import InvalidFeatureLength, InvalidFeatureVector, NonFiniteFeature


# =============================================================================
# Feature Vector Contract
# =============================================================================

NUM_LANDMARKS = 21
COORDS_PER_LANDMARK = 3  # x, y, z
FEATURE_LENGTH = NUM_LANDMARKS * COORDS_PER_LANDMARK  # 63


def as_feature_vector(values) -> np.ndarray:
    """Validate and convert values into a read-only feature vector.

    Args:
        values: 1-D sequence (or array) of exactly 63 finite numbers

    Returns:
        np.ndarray of shape (63,), dtype float64, not writeable

    Raises:
        InvalidFeatureLength: wrong length or not one-dimensional
        NonFiniteFeature: NaN or infinite entries
        InvalidFeatureVector: values are not numeric
    """
    try:
        vector = np.array(values, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidFeatureVector(f"feature values are not numeric: {e}") from e

    if vector.ndim != 1:
        raise InvalidFeatureLength(f"shape {vector.shape}")
    if vector.shape[0] != FEATURE_LENGTH:
        raise InvalidFeatureLength(vector.shape[0])
    if not np.all(np.isfinite(vector)):
        raise NonFiniteFeature("feature vector contains NaN or infinite values")

    vector.setflags(write=False)
    return vector


# =============================================================================
# Data Containers
# =============================================================================

@dataclass(frozen=True, eq=False)
class Sample:
    """One labeled training example. Never mutated after creation."""
    label: str
    features: np.ndarray  # (63,) read-only
    index: int            # insertion position in the sample store


class Neighbor(NamedTuple):
    """A selected nearest neighbor of a query vector."""
    index: int
    label: str
    distance: float


class ClassificationResult:
    """Container for a single k-NN classification.

    ``label`` is None only for the NO_CLASSIFICATION sentinel, which is
    shared and therefore has no timestamp. Results are immutable.
    """

    __slots__ = ("label", "distance", "votes", "neighbor_count", "timestamp")

    def __init__(self, label: Optional[str], distance: float = float("inf"),
                 votes: Optional[Dict[str, int]] = None, neighbor_count: int = 0):
        object.__setattr__(self, "label", label)
        object.__setattr__(self, "distance", distance)
        object.__setattr__(self, "votes", dict(votes or {}))
        object.__setattr__(self, "neighbor_count", neighbor_count)
        object.__setattr__(self, "timestamp", time.time() if label is not None else None)

    def __setattr__(self, name, value):
        raise AttributeError(f"ClassificationResult is immutable (cannot set {name!r})")

    def __delattr__(self, name):
        raise AttributeError(f"ClassificationResult is immutable (cannot delete {name!r})")

    def __repr__(self):
        if self.label is None:
            return "ClassificationResult(<none>)"
        return f"ClassificationResult({self.label!r}, dist={self.distance:.4f})"

    @property
    def is_classified(self) -> bool:
        return self.label is not None


NO_CLASSIFICATION = ClassificationResult(None)
