"""
Measurement overlay.

Draws the following elements onto each video frame:
  • The detected face box and the forehead sampling region.
  • BPM readout coloured by confidence, with its heart-rate zone.
  • A measurement progress bar.
  • The session's feedback line.
"""

from __future__ import annotations

from typing import Optional

import cv2
import numpy as np

from rppg_monitor.face_detector import BoundingBox
from rppg_monitor.results import Confidence, HeartRateEstimate
from rppg_monitor.zones import heart_rate_zone


# ---------------------------------------------------------------------------
# Colour palette (BGR)
# ---------------------------------------------------------------------------
_GREEN  = (0, 220,  80)
_RED    = (0,  50, 220)
_YELLOW = (0, 210, 210)
_WHITE  = (255, 255, 255)
_BLACK  = (0, 0, 0)
_CYAN   = (220, 200,  0)
_DARK   = (30, 30, 30)

_CONFIDENCE_COLOURS = {
    Confidence.HIGH: _GREEN,
    Confidence.MEDIUM: _YELLOW,
    Confidence.LOW: _RED,
}


class Visualizer:
    """Draws the heart-rate measurement UI onto OpenCV frames in-place."""

    def draw(
        self,
        frame: np.ndarray,
        estimate: Optional[HeartRateEstimate],
        progress: float,
        feedback: str,
        face: Optional[BoundingBox] = None,
        roi: Optional[BoundingBox] = None,
    ) -> np.ndarray:
        """
        Annotate *frame* in-place and return it.

        Parameters
        ----------
        frame:
            BGR frame from the camera.
        estimate:
            Latest estimate, or *None* before the first one.
        progress:
            Measurement progress (0 – 1).  Drives the loading bar.
        feedback:
            Instruction line shown at the bottom.
        face, roi:
            Detected face box and forehead sampling region, if any.
        """
        h, w = frame.shape[:2]

        if face is not None:
            cv2.rectangle(frame, (face.x, face.y), (face.x + face.width, face.y + face.height), _GREEN, 2)
        if roi is not None:
            cv2.rectangle(frame, (roi.x, roi.y), (roi.x + roi.width, roi.y + roi.height), _CYAN, 1)

        self._draw_bpm(frame, estimate)
        self._draw_progress(frame, progress, w, h)

        cv2.rectangle(frame, (0, h - 30), (w, h), _DARK, -1)
        cv2.putText(
            frame, feedback,
            (10, h - 10), cv2.FONT_HERSHEY_SIMPLEX, 0.5, _WHITE, 1, cv2.LINE_AA,
        )
        return frame

    # ------------------------------------------------------------------
    # Private drawing helpers
    # ------------------------------------------------------------------

    def _draw_bpm(self, frame: np.ndarray, estimate: Optional[HeartRateEstimate]) -> None:
        if estimate is None or not estimate.valid:
            cv2.putText(
                frame, "Measuring...",
                (16, 52), cv2.FONT_HERSHEY_SIMPLEX, 0.7, _YELLOW, 2, cv2.LINE_AA,
            )
            return

        col = _CONFIDENCE_COLOURS[estimate.confidence]
        text = f"{estimate.bpm} BPM"
        cv2.putText(frame, text, (16, 52), cv2.FONT_HERSHEY_SIMPLEX, 1.6, _BLACK, 5, cv2.LINE_AA)
        cv2.putText(frame, text, (16, 52), cv2.FONT_HERSHEY_SIMPLEX, 1.6, col, 3, cv2.LINE_AA)

        zone = heart_rate_zone(estimate.bpm)
        cv2.putText(
            frame, f"{zone.zone} - conf {estimate.confidence.value}",
            (16, 78), cv2.FONT_HERSHEY_SIMPLEX, 0.45, _WHITE, 1, cv2.LINE_AA,
        )

    def _draw_progress(self, frame: np.ndarray, progress: float, w: int, h: int) -> None:
        bar_w = int((w - 32) * min(max(progress, 0.0), 1.0))
        y0, y1 = h - 44, h - 36
        cv2.rectangle(frame, (16, y0), (w - 16, y1), _DARK, -1)
        cv2.rectangle(frame, (16, y0), (16 + bar_w, y1), _CYAN, -1)
