"""
Skin-colour face locator.

A webcam frame with a face in it contains a compact blob of pixels that
pass a simple RGB skin test:
  - Red above 95, green above 40, blue above 20.
  - Red dominant over both green and blue.
  - Red at least 15 levels brighter than green.

The bounding box of those pixels is taken as the face when skin fills a
reasonable share of it.  This is a lightweight heuristic meant to gate the
pulse sampler, not a real face detector; it tracks a single subject.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np


@dataclass(frozen=True)
class BoundingBox:
    x: int
    y: int
    width: int
    height: int

    def crop(self, frame: np.ndarray) -> np.ndarray:
        return frame[self.y:self.y + self.height, self.x:self.x + self.width]


class SkinFaceDetector:
    """
    Heuristic detector: where is the face in this frame?

    Parameters
    ----------
    min_fill:
        Minimum share of the skin bounding box that must be skin pixels.
        Default: 0.3.
    min_size:
        Minimum width and height of the bounding box in pixels (exclusive).
        Default: 50.
    step:
        Examine every *step*-th pixel in each direction.  Values above 1
        trade precision for speed on large frames.
    channel_order:
        ``"bgr"`` for OpenCV frames (default) or ``"rgb"``.
    """

    def __init__(
        self,
        min_fill: float = 0.3,
        min_size: int = 50,
        step: int = 1,
        channel_order: str = "bgr",
    ) -> None:
        if step < 1:
            raise ValueError(f"step must be >= 1, got {step}")
        if channel_order not in ("rgb", "bgr"):
            raise ValueError(f"channel_order must be 'rgb' or 'bgr', got {channel_order!r}")
        self.min_fill = min_fill
        self.min_size = min_size
        self.step = step
        self.channel_order = channel_order

    def skin_mask(self, frame: np.ndarray) -> np.ndarray:
        """Boolean ``H × W`` mask of skin-coloured pixels."""
        if frame.ndim != 3 or frame.shape[2] < 3:
            raise ValueError(f"Expected an H × W × 3 frame, got shape {frame.shape}")
        px = frame[:, :, :3].astype(np.int32)
        if self.channel_order == "bgr":
            b, g, r = px[:, :, 0], px[:, :, 1], px[:, :, 2]
        else:
            r, g, b = px[:, :, 0], px[:, :, 1], px[:, :, 2]

        return (
            (r > 95) & (g > 40) & (b > 20)
            & (r > g) & (r > b)
            & (r - g > 15)
        )

    def detect(self, frame: np.ndarray) -> Optional[BoundingBox]:
        """
        Return the face bounding box in *frame*, or *None*.

        Coordinates are in full-resolution pixels even when ``step > 1``.
        """
        sampled = frame[::self.step, ::self.step]
        mask = self.skin_mask(sampled)
        ys, xs = np.nonzero(mask)
        if xs.size == 0:
            return None

        min_x, max_x = int(xs.min()) * self.step, int(xs.max()) * self.step
        min_y, max_y = int(ys.min()) * self.step, int(ys.max()) * self.step
        width = max_x - min_x
        height = max_y - min_y

        skin_pixels = xs.size * self.step * self.step
        big_enough = width > self.min_size and height > self.min_size
        filled = skin_pixels > width * height * self.min_fill

        if big_enough and filled:
            return BoundingBox(min_x, min_y, width, height)
        return None


def forehead_roi(face: BoundingBox) -> BoundingBox:
    """Central third of the face width, from 10 % to 35 % of its height."""
    return BoundingBox(
        x=int(face.x + face.width * 0.33),
        y=int(face.y + face.height * 0.1),
        width=max(1, int(face.width * 0.33)),
        height=max(1, int(face.height * 0.25)),
    )
