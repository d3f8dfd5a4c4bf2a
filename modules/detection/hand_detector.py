"""
MediaPipe Hands wrapper. Produces the 21 landmarks per frame that the
frame classification service consumes.
"""

import logging
import cv2
import numpy as np
import mediapipe as mp

logger = logging.getLogger(__name__)


class HandDetector:
    """Single-hand MediaPipe detector for the game loop."""

    def __init__(self, config: dict):
        self._model_complexity = config.get("model_complexity", 1)
        self._max_hands = config.get("max_num_hands", 1)
        self._min_detect_conf = config.get("min_detection_confidence", 0.5)
        self._min_track_conf = config.get("min_tracking_confidence", 0.5)

        self._mp_hands = mp.solutions.hands
        self._mp_drawing = mp.solutions.drawing_utils
        self._hands = None

    def initialize(self):
        """Create the MediaPipe Hands solution."""
        self._hands = self._mp_hands.Hands(
            static_image_mode=False,
            model_complexity=self._model_complexity,
            max_num_hands=self._max_hands,
            min_detection_confidence=self._min_detect_conf,
            min_tracking_confidence=self._min_track_conf,
        )
        logger.info(
            "MediaPipe Hands initialized (complexity=%d, max_hands=%d, "
            "detect_conf=%.2f, track_conf=%.2f)",
            self._model_complexity, self._max_hands,
            self._min_detect_conf, self._min_track_conf,
        )

    def detect(self, bgr_frame: np.ndarray) -> list:
        """Detect hands in a BGR frame.

        Returns:
            List of NormalizedLandmarkList, one per detected hand
        """
        if self._hands is None:
            self.initialize()

        rgb_frame = cv2.cvtColor(bgr_frame, cv2.COLOR_BGR2RGB)
        rgb_frame.flags.writeable = False
        results = self._hands.process(rgb_frame)

        if results and results.multi_hand_landmarks:
            return list(results.multi_hand_landmarks)
        return []

    def draw_landmarks(self, frame: np.ndarray, hand_landmarks,
                       landmark_color=(0, 0, 255), connection_color=(0, 255, 0)):
        """Draw one hand's landmarks and connections on a BGR frame."""
        self._mp_drawing.draw_landmarks(
            frame,
            hand_landmarks,
            self._mp_hands.HAND_CONNECTIONS,
            self._mp_drawing.DrawingSpec(color=landmark_color, thickness=1, circle_radius=2),
            self._mp_drawing.DrawingSpec(color=connection_color, thickness=1),
        )
        return frame

    def close(self):
        """Release MediaPipe resources."""
        if self._hands:
            self._hands.close()
            self._hands = None
            logger.info("MediaPipe Hands closed")

    def __enter__(self):
        self.initialize()
        return self

    def __exit__(self, *args):
        self.close()
