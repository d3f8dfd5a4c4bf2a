"""
Exceptions raised by the gesture classification engine.

All of them describe local, recoverable conditions. Callers decide how to
surface them: ingestion skips the offending record, the frame loop turns
an untrained classifier into a "no classification" result, and the UI
shows an empty recording as a user mistake.
"""


class GestureEngineError(Exception):
    """Base exception for gesture engine errors."""
    pass


class InvalidFeatureVector(GestureEngineError, ValueError):
    """Raised when a feature vector is malformed."""
    pass


class InvalidFeatureLength(InvalidFeatureVector):
    """Raised when a feature vector does not hold exactly 63 values."""

    def __init__(self, actual, expected=63, unit="feature values"):
        self.actual = actual
        self.expected = expected
        super().__init__(f"expected {expected} {unit}, got {actual}")


class NonFiniteFeature(InvalidFeatureVector):
    """Raised when a feature vector contains NaN or infinity."""
    pass


class InvalidLabel(GestureEngineError, ValueError):
    """Raised when a sample label is empty or not text."""
    pass


class InsufficientTrainingData(GestureEngineError):
    """Raised when classifying against an empty sample store."""
    pass


class EmptyRecording(GestureEngineError):
    """Raised when a recording is stopped without any captured frames."""
    pass


class DatasetError(GestureEngineError):
    """Raised when a training dataset file cannot be read."""
    pass
