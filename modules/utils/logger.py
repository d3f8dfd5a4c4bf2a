"""
Logging setup plus a gesture event log for recognitions and learned samples.
"""

import os
import logging
import logging.handlers
import time
from functools import wraps


def setup_logging(level="INFO", log_file=None, max_size_mb=10, backup_count=3):
    """Configure console (and optional rotating file) logging."""
    console_format = "%(asctime)s  %(levelname)-5s  %(message)s"
    file_format = "%(asctime)s [%(levelname)-7s] %(name)-25s | %(message)s"
    date_format = "%H:%M:%S"

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    root_logger.handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(logging.INFO)
    console.setFormatter(logging.Formatter(console_format, datefmt=date_format))
    root_logger.addHandler(console)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_size_mb * 1024 * 1024,
            backupCount=backup_count,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(file_format, datefmt=date_format))
        root_logger.addHandler(file_handler)

    return root_logger


class GestureLogger:
    """Keeps a history of recognized and learned gestures.

    Recognitions are only logged when the label changes, so a held pose
    does not flood the log at frame rate.
    """

    def __init__(self, max_history=500):
        self.logger = logging.getLogger("gesture_events")
        self._history = []
        self._max_history = max_history
        self._last_label = None

    def log_recognition(self, label, distance=None, latency_ms=None):
        """Record a classified frame."""
        if label == self._last_label:
            return
        self._last_label = label
        self._append({"event": "recognized", "label": label,
                      "distance": distance, "latency_ms": latency_ms})
        self.logger.info(
            "Gesture: %-15s | Distance: %s | Latency: %s",
            label,
            f"{distance:.4f}" if distance is not None else "N/A",
            f"{latency_ms:.2f}ms" if latency_ms is not None else "N/A",
        )

    def log_learned(self, label, frames=None):
        """Record a newly learned sample."""
        self._append({"event": "learned", "label": label, "frames": frames})
        self.logger.info("Learned: %-15s | Frames: %s", label, frames if frames else "N/A")

    def _append(self, entry):
        entry["timestamp"] = time.time()
        self._history.append(entry)
        if len(self._history) > self._max_history:
            self._history = self._history[-self._max_history:]

    def get_history(self, last_n=None):
        if last_n:
            return self._history[-last_n:]
        return self._history.copy()

    @property
    def total_events(self):
        return len(self._history)


def log_timing(func):
    """Decorator to log function execution time."""
    logger = logging.getLogger(func.__module__)

    @wraps(func)
    def wrapper(*args, **kwargs):
        start = time.perf_counter()
        result = func(*args, **kwargs)
        elapsed = (time.perf_counter() - start) * 1000
        logger.debug("%s took %.2fms", func.__name__, elapsed)
        return result

    return wrapper
