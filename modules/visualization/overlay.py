"""
Game overlay: score, round, countdown, target sign, predicted gesture
and recording indicator drawn on the camera frame.
"""

import logging
import cv2
import numpy as np

logger = logging.getLogger(__name__)


class Overlay:
    """Renders the game HUD on BGR frames."""

    def __init__(self, config: dict):
        colors = config.get("colors", {})
        self._color_text = tuple(colors.get("text", [255, 255, 255]))
        self._color_target = tuple(colors.get("target", [0, 255, 255]))
        self._color_recording = tuple(colors.get("recording", [0, 0, 255]))
        self._bar_height = config.get("bar_height", 70)
        self._bar_opacity = config.get("bar_opacity", 0.7)

    def render(self, frame: np.ndarray, state: dict) -> np.ndarray:
        """Draw the HUD.

        Args:
            frame: BGR frame to draw on
            state: dict with
                - score, round, time_left, target (game)
                - predicted: str or None
                - recording: bool, recorded_frames: int
                - samples: int, fps: float
                - message: optional status text

        Returns:
            Frame with overlay
        """
        h, w = frame.shape[:2]
        self._draw_top_bar(frame, w, state)

        predicted = state.get("predicted")
        cv2.putText(
            frame, f"Predicted Gesture: {predicted if predicted else '-'}",
            (15, self._bar_height + 30), cv2.FONT_HERSHEY_SIMPLEX, 0.7, self._color_text, 2,
        )

        if state.get("target"):
            cv2.putText(
                frame, f"Maak gebaar: {state['target']}",
                (15, self._bar_height + 60), cv2.FONT_HERSHEY_SIMPLEX, 0.7, self._color_target, 2,
            )

        if state.get("recording"):
            self._draw_recording(frame, w, state.get("recorded_frames", 0))

        if state.get("message"):
            cv2.putText(
                frame, state["message"], (15, h - 20),
                cv2.FONT_HERSHEY_SIMPLEX, 0.55, (0, 150, 255), 2,
            )
        return frame

    def _draw_top_bar(self, frame, w, state):
        overlay = frame.copy()
        cv2.rectangle(overlay, (0, 0), (w, self._bar_height), (20, 20, 20), -1)
        cv2.addWeighted(overlay, self._bar_opacity, frame, 1 - self._bar_opacity, 0, frame)

        cv2.putText(
            frame, f"Score: {state.get('score', 0)}",
            (15, 30), cv2.FONT_HERSHEY_SIMPLEX, 0.7, self._color_text, 2,
        )
        cv2.putText(
            frame, f"Ronde: {state.get('round', 0)}",
            (180, 30), cv2.FONT_HERSHEY_SIMPLEX, 0.7, self._color_text, 2,
        )
        cv2.putText(
            frame, f"Tijd: {state.get('time_left', 0):.0f}s",
            (330, 30), cv2.FONT_HERSHEY_SIMPLEX, 0.7, self._color_text, 2,
        )
        cv2.putText(
            frame, f"Samples: {state.get('samples', 0)}  FPS: {state.get('fps', 0):.1f}",
            (15, 58), cv2.FONT_HERSHEY_SIMPLEX, 0.5, (180, 180, 180), 1,
        )

    def _draw_recording(self, frame, w, recorded_frames):
        cv2.circle(frame, (w - 30, 30), 10, self._color_recording, -1)
        cv2.putText(
            frame, f"REC {recorded_frames}",
            (w - 140, 36), cv2.FONT_HERSHEY_SIMPLEX, 0.6, self._color_recording, 2,
        )
