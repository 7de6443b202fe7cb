"""
Frame source for the measurement loop.

Wraps OpenCV ``VideoCapture`` to provide a simple iterator of BGR frames
from a webcam (device index) or a recorded video file (path).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Generator, Optional, Tuple, Union

import cv2
import numpy as np

logger = logging.getLogger(__name__)

Source = Union[int, str, Path]


class Camera:
    """
    Thin wrapper around ``cv2.VideoCapture``.

    Parameters
    ----------
    source:
        Camera index or path to a video file.
    resolution:
        (width, height) requested from a live camera.  Ignored for files.
    fps:
        Target frame rate requested from a live camera.
    flip_horizontal:
        Mirror the image left-to-right (selfie view).
    """

    def __init__(
        self,
        source: Source = 0,
        resolution: Tuple[int, int] = (640, 480),
        fps: int = 30,
        flip_horizontal: bool = True,
    ) -> None:
        self.source = source
        self.resolution = resolution
        self.fps = fps
        self.flip_horizontal = flip_horizontal

        self._cap: Optional[cv2.VideoCapture] = None

    @property
    def is_file(self) -> bool:
        return not isinstance(self.source, int)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self) -> None:
        """Open the device or file."""
        source = str(self.source) if self.is_file else self.source
        cap = cv2.VideoCapture(source)
        if not cap.isOpened():
            raise RuntimeError(f"Cannot open video source {self.source!r}")
        if not self.is_file:
            w, h = self.resolution
            cap.set(cv2.CAP_PROP_FRAME_WIDTH, w)
            cap.set(cv2.CAP_PROP_FRAME_HEIGHT, h)
            cap.set(cv2.CAP_PROP_FPS, self.fps)
        self._cap = cap
        logger.info(
            "Video source opened – source=%s fps=%.1f", self.source, self.actual_fps
        )

    def close(self) -> None:
        """Release the device or file."""
        if self._cap is None:
            return
        self._cap.release()
        self._cap = None
        logger.info("Video source closed.")

    def __enter__(self) -> "Camera":
        self.open()
        return self

    def __exit__(self, *_) -> None:
        self.close()

    @property
    def actual_fps(self) -> float:
        """Frame rate reported by the backend, or the requested rate if unknown."""
        if self._cap is None:
            return float(self.fps)
        reported = self._cap.get(cv2.CAP_PROP_FPS)
        return float(reported) if reported and reported > 0 else float(self.fps)

    # ------------------------------------------------------------------
    # Frame acquisition
    # ------------------------------------------------------------------

    def read_frame(self) -> np.ndarray | None:
        """
        Capture a single frame.

        Returns
        -------
        numpy.ndarray
            BGR image array (H × W × 3, dtype uint8), or *None* on failure.
        """
        if self._cap is None:
            raise RuntimeError("Camera is not open.  Call open() first.")
        ok, frame = self._cap.read()
        if not ok:
            return None
        if self.flip_horizontal:
            frame = cv2.flip(frame, 1)
        return frame

    def frames(self) -> Generator[np.ndarray, None, None]:
        """
        Yield frames until the source is exhausted or closed.

        A live camera is abandoned after 10 consecutive failed reads; a
        video file ends at its first failed read.
        """
        null_streak = 0
        while self._cap is not None:
            frame = self.read_frame()
            if frame is None:
                if self.is_file:
                    logger.info("End of video file.")
                    break
                null_streak += 1
                if null_streak >= 10:
                    logger.error("Camera returned 10 consecutive empty reads – aborting.")
                    break
                continue
            null_streak = 0
            yield frame
