"""
21-point hand landmark flattening.

Turns whatever the hand detector hands us into the 63-value feature vector
the classifier works on: landmark 0 (wrist) first, each point contributing
x, y, z in that order. The order must match the one used for training.
"""

import logging
from collections.abc import Mapping

import numpy as np

from core.errors import InvalidFeatureLength, InvalidFeatureVector
from core.types import COORDS_PER_LANDMARK, NUM_LANDMARKS, as_feature_vector

logger = logging.getLogger(__name__)

def _point_coords(point):
    """(x, y, z) of a single landmark in any supported representation."""
    if hasattr(point, "x") and hasattr(point, "y") and hasattr(point, "z"):
        return point.x, point.y, point.z
    if isinstance(point, Mapping):
        try:
            return point["x"], point["y"], point["z"]
        except KeyError as e:
            raise InvalidFeatureLength(
                f"no {e.args[0]!r}", COORDS_PER_LANDMARK, "coordinates per landmark"
            ) from e
    coords = np.asarray(point, dtype=np.float64).ravel()
    if coords.shape[0] != COORDS_PER_LANDMARK:
        raise InvalidFeatureLength(coords.shape[0], COORDS_PER_LANDMARK, "coordinates per landmark")
    return coords[0], coords[1], coords[2]


def extract_landmarks(hand_landmarks) -> np.ndarray:
    """Convert detector landmarks to a numpy array of (x, y, z).

    Accepts a MediaPipe NormalizedLandmarkList (``.landmark``), a sequence
    of objects with x/y/z attributes, mappings with x/y/z keys, or a
    sequence/array of coordinate triples.

    Returns:
        np.ndarray of shape (21, 3)

    Raises:
        InvalidFeatureLength: not exactly 21 points of 3 coordinates
    """
    points = getattr(hand_landmarks, "landmark", hand_landmarks)
    if isinstance(points, np.ndarray):
        if points.shape != (NUM_LANDMARKS, COORDS_PER_LANDMARK):
            raise InvalidFeatureLength(
                f"shape {points.shape}", (NUM_LANDMARKS, COORDS_PER_LANDMARK), "landmark array shape"
            )
        return points.astype(np.float64)

    points = list(points)
    if len(points) != NUM_LANDMARKS:
        raise InvalidFeatureLength(len(points), NUM_LANDMARKS, "landmarks")

    landmarks = np.zeros((NUM_LANDMARKS, COORDS_PER_LANDMARK), dtype=np.float64)
    for i, point in enumerate(points):
        try:
            landmarks[i] = _point_coords(point)
        except InvalidFeatureVector:
            raise
        except (TypeError, ValueError) as e:
            raise InvalidFeatureVector(f"landmark {i} is not numeric: {e}") from e
    return landmarks


def flatten_landmarks(hand_landmarks) -> np.ndarray:
    """Flatten detector landmarks into a read-only 63-value feature vector."""
    return as_feature_vector(extract_landmarks(hand_landmarks).reshape(-1))
