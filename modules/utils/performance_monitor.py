"""
Frame-rate and per-stage latency tracking against the frame budget.
Thread-safe metrics collection with rolling windows.
"""

import time
import threading
import logging
from collections import deque
from contextlib import contextmanager

logger = logging.getLogger(__name__)

# ~33 ms per frame at 30 fps
DEFAULT_FRAME_BUDGET_MS = 1000.0 / 30


class PerformanceMonitor:
    """Tracks FPS, per-stage latency and frame budget overruns."""

    def __init__(self, window_size=100, frame_budget_ms=DEFAULT_FRAME_BUDGET_MS):
        self._window_size = window_size
        self._frame_budget_ms = frame_budget_ms
        self._lock = threading.Lock()

        self._frame_times = deque(maxlen=window_size)
        self._last_frame_time = None

        self._stage_times = {}
        self._over_budget = {}
        self._frame_count = 0
        self._start_time = time.time()

    @contextmanager
    def measure(self, stage_name: str):
        """Time the enclosed block as one sample of stage_name."""
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            self.record(stage_name, elapsed_ms)

    def record(self, stage_name: str, elapsed_ms: float):
        """Add one latency sample for a stage."""
        with self._lock:
            if stage_name not in self._stage_times:
                self._stage_times[stage_name] = deque(maxlen=self._window_size)
                self._over_budget[stage_name] = 0
            self._stage_times[stage_name].append(elapsed_ms)
            if elapsed_ms > self._frame_budget_ms:
                self._over_budget[stage_name] += 1
        if elapsed_ms > self._frame_budget_ms:
            logger.debug("%s exceeded frame budget: %.2fms > %.2fms",
                         stage_name, elapsed_ms, self._frame_budget_ms)

    def tick(self):
        """Call once per frame to track FPS."""
        now = time.perf_counter()
        with self._lock:
            if self._last_frame_time is not None:
                self._frame_times.append(now - self._last_frame_time)
            self._last_frame_time = now
            self._frame_count += 1

    @property
    def fps(self) -> float:
        """Current frames per second (rolling average)."""
        with self._lock:
            if len(self._frame_times) < 2:
                return 0.0
            avg_interval = sum(self._frame_times) / len(self._frame_times)
            return 1.0 / avg_interval if avg_interval > 0 else 0.0

    @property
    def frame_budget_ms(self) -> float:
        return self._frame_budget_ms

    def get_stage_latency(self, stage_name: str) -> float:
        """Average latency of a stage in ms (0.0 if never measured)."""
        with self._lock:
            times = self._stage_times.get(stage_name)
            if not times:
                return 0.0
            return sum(times) / len(times)

    def get_max_latency(self, stage_name: str) -> float:
        """Worst latency in the current window for a stage, in ms."""
        with self._lock:
            times = self._stage_times.get(stage_name)
            return max(times) if times else 0.0

    def get_over_budget_count(self, stage_name: str) -> int:
        with self._lock:
            return self._over_budget.get(stage_name, 0)

    def get_report(self) -> dict:
        """Snapshot of all collected metrics."""
        uptime = time.time() - self._start_time
        with self._lock:
            stages = list(self._stage_times)
            frame_count = self._frame_count
        return {
            "fps": round(self.fps, 1),
            "total_frames": frame_count,
            "uptime_seconds": round(uptime, 1),
            "frame_budget_ms": round(self._frame_budget_ms, 2),
            "latencies_ms": {s: round(self.get_stage_latency(s), 3) for s in stages},
            "max_latencies_ms": {s: round(self.get_max_latency(s), 3) for s in stages},
            "over_budget": {s: self.get_over_budget_count(s) for s in stages},
        }

    def print_report(self):
        """Log a formatted performance report."""
        report = self.get_report()
        logger.info("=" * 60)
        logger.info("PERFORMANCE REPORT")
        logger.info("=" * 60)
        logger.info("FPS:            %.1f", report["fps"])
        logger.info("Total Frames:   %d", report["total_frames"])
        logger.info("Uptime:         %.1fs", report["uptime_seconds"])
        logger.info("Frame Budget:   %.2f ms", report["frame_budget_ms"])
        logger.info("-" * 40)
        logger.info("Stage Latencies (avg / max ms, over budget):")
        for stage, latency in report["latencies_ms"].items():
            logger.info("  %-18s %7.3f / %7.3f  %d",
                        stage, latency, report["max_latencies_ms"][stage],
                        report["over_budget"][stage])
        logger.info("=" * 60)

    def reset(self):
        """Reset all metrics."""
        with self._lock:
            self._frame_times.clear()
            self._last_frame_time = None
            self._stage_times.clear()
            self._over_budget.clear()
            self._frame_count = 0
            self._start_time = time.time()
