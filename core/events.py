"""
Lightweight event bus connecting the classifier, the recorder and the game.

The game logic never reads classifier state directly; it subscribes to
events instead.

Usage:
    bus = EventBus()
    bus.subscribe(Events.FRAME_CLASSIFIED, on_label)
    bus.emit(Events.FRAME_CLASSIFIED, label="peace", distance=0.12)
"""

import time
import logging
import threading
from collections import defaultdict
from typing import Callable

logger = logging.getLogger(__name__)


class EventBus:
    """Thread-safe synchronous publish/subscribe bus.

    Listeners run in priority order on the emitting thread. A failing
    listener is logged and skipped so the frame loop keeps running.
    """

    _instance = None

    def __new__(cls):
        """One bus per process."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return
        self._listeners = defaultdict(list)  # event_name -> [(priority, callback)]
        self._lock = threading.Lock()
        self._event_history = []
        self._max_history = 100
        self._enabled = True
        self._initialized = True

    def subscribe(self, event_name: str, callback: Callable, priority: int = 0):
        """Register a listener.

        Args:
            event_name: Event to listen for
            callback: Called with the keyword arguments given to emit()
            priority: Higher priority listeners run first (default 0)
        """
        with self._lock:
            self._listeners[event_name].append((priority, callback))
            self._listeners[event_name].sort(key=lambda x: -x[0])
        logger.debug("Subscribed to '%s': %s (priority=%d)",
                     event_name, getattr(callback, "__name__", repr(callback)), priority)

    def unsubscribe(self, event_name: str, callback: Callable):
        """Remove a listener."""
        with self._lock:
            self._listeners[event_name] = [
                (p, cb) for p, cb in self._listeners[event_name] if cb is not callback
            ]

    def emit(self, event_name: str, **kwargs):
        """Deliver an event to every listener registered for it."""
        if not self._enabled:
            return

        with self._lock:
            listeners = list(self._listeners.get(event_name, []))
            self._event_history.append({
                "event": event_name,
                "time": time.time(),
                "data_keys": list(kwargs.keys()),
            })
            if len(self._event_history) > self._max_history:
                self._event_history = self._event_history[-self._max_history:]

        for _, callback in listeners:
            try:
                callback(**kwargs)
            except Exception as e:
                logger.error("Event handler error [%s -> %s]: %s",
                             event_name, getattr(callback, "__name__", repr(callback)), e)

    def clear(self, event_name: str = None):
        """Remove all listeners, optionally only for one event."""
        with self._lock:
            if event_name:
                self._listeners.pop(event_name, None)
            else:
                self._listeners.clear()

    @property
    def listener_count(self) -> int:
        with self._lock:
            return sum(len(cbs) for cbs in self._listeners.values())

    def get_history(self, last_n: int = 10) -> list:
        """Most recent emitted events, oldest first."""
        with self._lock:
            return self._event_history[-last_n:]

    def reset(self):
        """Drop listeners and history (for testing)."""
        with self._lock:
            self._listeners.clear()
            self._event_history.clear()
        self._enabled = True


class Events:
    """Event names used throughout the system."""

    # Recognition
    FRAME_CLASSIFIED = "frame_classified"
    SAMPLE_LEARNED = "sample_learned"
    DATASET_LOADED = "dataset_loaded"

    # Recording
    RECORDING_STARTED = "recording_started"
    RECORDING_STOPPED = "recording_stopped"

    # Game
    ROUND_STARTED = "round_started"
    TARGET_HIT = "target_hit"
    GAME_OVER = "game_over"
