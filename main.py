#!/usr/bin/env python3
"""
Handsign k-NN Game
Main application entry point.

Hand landmarks from MediaPipe are classified by a k-nearest-neighbor model
every frame; the player scores by showing the randomly chosen target sign
before the countdown runs out. New signs can be taught live by recording
a few seconds of a pose.

Usage:
    python main.py                           # Play with the default dataset
    python main.py --dataset my_signs.json   # Play with another dataset
    python main.py -k 5                      # Use 5 neighbors
    python main.py --mode benchmark          # Time classification per frame

Keys (play mode):
    g  start game
    r  start recording a new sign
    s  stop recording and name the sign (prompted on the console)
    q  quit
"""

import sys
import os
import signal
import argparse
import logging

import cv2
import numpy as np

PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, PROJECT_ROOT)

from core.errors import DatasetError, EmptyRecording, InvalidFeatureVector, InvalidLabel
from core.events import EventBus, Events
from core.types import FEATURE_LENGTH
from modules.utils.config import Config
from modules.utils.logger import setup_logging, GestureLogger
from modules.utils.performance_monitor import PerformanceMonitor
from modules.capture.camera_manager import CameraManager
from modules.detection.hand_detector import HandDetector
from modules.recognition.knn_classifier import KNNClassifier
from modules.recognition.aggregator import Aggregator
from modules.recognition.frame_service import FrameClassificationService
from modules.data.dataset_loader import load_dataset
from modules.game.game_session import GameSession
from modules.visualization.overlay import Overlay

logger = logging.getLogger(__name__)


class HandsignGame:
    """Wires detector, classifier, recorder and game state together."""

    def __init__(self, config: Config):
        self._config = config
        self._running = False
        self._message = ""

        self._bus = EventBus()
        self._perf = PerformanceMonitor(
            window_size=config.get("performance.metrics_window", 100),
            frame_budget_ms=config.get("performance.frame_budget_ms", 1000.0 / 30),
        )
        self._gesture_logger = GestureLogger()

        self._classifier = KNNClassifier(k=config.get("classifier.k", 3))
        self._service = FrameClassificationService(
            self._classifier, Aggregator(),
            event_bus=self._bus, performance_monitor=self._perf,
        )
        self._game = GameSession(config.game, signs=config.signs, event_bus=self._bus)

        self._camera = CameraManager(config.camera)
        self._detector = HandDetector(config.mediapipe)
        self._overlay = Overlay(config.visualization)

        self._bus.subscribe(Events.FRAME_CLASSIFIED, self._on_frame_classified)
        self._bus.subscribe(Events.RECORDING_STOPPED, self._on_recording_stopped)
        self._bus.subscribe(Events.GAME_OVER, self._on_game_over)

        logger.info("HandsignGame initialized (k=%d)", self._classifier.k)

    @property
    def classifier(self) -> KNNClassifier:
        return self._classifier

    def load_signs(self, path: str):
        """Seed the classifier from a signs.json dataset."""
        try:
            report = load_dataset(self._classifier, path, event_bus=self._bus)
        except DatasetError as e:
            logger.error("Could not load dataset: %s", e)
            return None
        for index, name, reason in report.errors:
            logger.error("Sign #%d (%s) not loaded: %s", index, name, reason)
        return report

    # --- event handlers ---

    def _on_frame_classified(self, **kwargs):
        label = kwargs.get("label")
        self._gesture_logger.log_recognition(
            label, kwargs.get("distance"), self._perf.get_stage_latency("classification"),
        )
        self._game.submit(label)

    def _on_recording_stopped(self, **kwargs):
        self._gesture_logger.log_learned(kwargs.get("label"), kwargs.get("frames"))

    def _on_game_over(self, **kwargs):
        self._message = f"Tijd is op! Score: {kwargs.get('score', 0)}"
        logger.info(self._message)

    # --- recording ---

    def _stop_recording(self):
        label = input("Enter gesture name: ").strip()
        try:
            self._service.stop_recording(label)
            self._message = f"Learned '{label}'"
        except EmptyRecording:
            self._message = "Nothing recorded - record before stopping"
        except InvalidLabel:
            self._message = "Recording discarded: no gesture name given"

    # --- main loop ---

    def _classify_hand(self, hand):
        """Classify one detected hand. Malformed landmarks skip the frame."""
        try:
            return self._service.process_frame(hand)
        except InvalidFeatureVector as e:
            logger.warning("Skipping frame with malformed landmarks: %s", e)
            return None

    def run(self) -> bool:
        """Run the camera game loop until 'q' or a signal."""
        if not self._camera.open():
            logger.error("Failed to open camera. Check connection and permissions.")
            return False
        self._detector.initialize()

        window_name = self._config.get("visualization.window_name", "Handsign Game")
        colors = self._config.get("visualization.colors", {})
        landmark_color = tuple(colors.get("landmarks", [0, 0, 255]))
        connection_color = tuple(colors.get("connections", [0, 255, 0]))

        self._running = True
        while self._running:
            frame_id, frame = self._camera.read()
            if frame is None:
                continue
            self._perf.tick()

            with self._perf.measure("total"):
                with self._perf.measure("detection"):
                    hands = self._detector.detect(frame)

                result = None
                if hands:
                    hand = hands[0]
                    if self._config.get("visualization.show_landmarks", True):
                        self._detector.draw_landmarks(frame, hand, landmark_color, connection_color)
                    result = self._classify_hand(hand)

                self._game.update()

            if self._config.get("visualization.enabled", True):
                frame = self._overlay.render(frame, self._build_state(result))
                cv2.imshow(window_name, frame)

            key = cv2.waitKey(1) & 0xFF
            if key == ord("q"):
                self._running = False
            elif key == ord("g"):
                self._message = ""
                self._game.start()
            elif key == ord("r"):
                self._service.start_recording()
                self._message = "Recording..."
            elif key == ord("s"):
                self._stop_recording()

        self._shutdown()
        return True

    def _build_state(self, result) -> dict:
        return {
            "score": self._game.score,
            "round": max(self._game.round - 1, 0),
            "time_left": self._game.time_left(),
            "target": self._game.target,
            "predicted": result.label if result is not None else None,
            "recording": self._service.is_recording,
            "recorded_frames": self._service.recorded_frames,
            "samples": self._classifier.size(),
            "fps": self._perf.fps,
            "message": self._message,
        }

    def benchmark(self, queries: int = 300):
        """Time classification of random queries against the frame budget."""
        rng = np.random.default_rng(0)
        if self._classifier.size() == 0:
            logger.info("No dataset loaded - using 200 synthetic samples")
            for i in range(200):
                self._classifier.learn(f"synthetic_{i % 7}", rng.random(FEATURE_LENGTH))

        logger.info("=== BENCHMARK MODE ===")
        logger.info("Classifying %d queries against %d samples (k=%d)",
                    queries, self._classifier.size(), self._classifier.k)
        for _ in range(queries):
            with self._perf.measure("classification"):
                self._classifier.classify(rng.random(FEATURE_LENGTH))
        self._perf.print_report()

    def _shutdown(self):
        logger.info("Shutting down...")
        self._running = False
        self._game.stop()
        self._camera.stop()
        self._detector.close()
        cv2.destroyAllWindows()
        self._perf.print_report()
        logger.info("High score: %d", self._game.high_score)

    def handle_signal(self, signum, frame):
        """Handle SIGINT/SIGTERM for graceful shutdown."""
        logger.info("Signal %d received, shutting down...", signum)
        self._running = False


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Handsign k-NN gesture game")
    parser.add_argument(
        "--mode", choices=["play", "benchmark"], default="play",
        help="Operating mode"
    )
    parser.add_argument("--config", type=str, default=None, help="Path to config.yaml")
    parser.add_argument("--gestures", type=str, default=None, help="Path to gestures.yaml")
    parser.add_argument("--dataset", type=str, default=None, help="Path to signs.json")
    parser.add_argument("--camera", type=int, default=None, help="Camera device ID")
    parser.add_argument("-k", type=int, default=None, help="Number of neighbors")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    config = Config()
    config.load(config_path=args.config, gestures_path=args.gestures)

    overrides = {}
    if args.camera is not None:
        overrides["camera"] = {"device_id": args.camera}
    if args.k is not None:
        overrides["classifier"] = {"k": args.k}
    if args.dataset is not None:
        overrides["dataset"] = {"path": args.dataset}
    config.update(overrides)

    log_cfg = config.get_section("logging")
    setup_logging(
        level=log_cfg.get("level", "INFO"),
        log_file=log_cfg.get("file"),
        max_size_mb=log_cfg.get("max_size_mb", 10),
        backup_count=log_cfg.get("backup_count", 3),
    )

    logger.info("=" * 60)
    logger.info("  HANDSIGN k-NN GAME")
    logger.info("  Version: %s", config.get("system.version", "1.0.0"))
    logger.info("  Mode: %s", args.mode)
    logger.info("=" * 60)

    app = HandsignGame(config)

    dataset_path = config.get("dataset.path", "data/signs.json")
    if not os.path.isabs(dataset_path):
        dataset_path = os.path.join(config.base_dir, dataset_path)
    app.load_signs(dataset_path)

    if args.mode == "benchmark":
        app.benchmark()
        return 0

    signal.signal(signal.SIGINT, app.handle_signal)
    signal.signal(signal.SIGTERM, app.handle_signal)
    return 0 if app.run() else 1


if __name__ == "__main__":
    sys.exit(main())
