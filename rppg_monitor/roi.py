"""
Per-frame helpers for the capture layer.

The capture loop calls these on the face region of every frame:
:func:`calculate_brightness` + :func:`is_lighting_good` warn the user about
bad lighting, and :func:`extract_rgb_from_roi` produces the
:class:`RGBSample` that feeds the chrominance extractor.

Pixel buffers
-------------
Either a ``numpy`` array whose last axis holds the colour channels
(``H × W × 3`` or ``H × W × 4``; a fourth alpha channel is ignored), or a
flat interleaved RGBA buffer whose length is a multiple of 4, which is the
layout a browser canvas ``ImageData`` delivers.  ``channel_order="bgr"``
accepts OpenCV frames without a colour conversion.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from rppg_monitor import config

# ITU-R BT.601 luma weights
LUMA_WEIGHTS = (0.299, 0.587, 0.114)


@dataclass(frozen=True)
class RGBSample:
    """Mean channel intensities (0 – 255) of a face region in one frame."""

    r: float
    g: float
    b: float

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.r, self.g, self.b)


def calculate_brightness(pixels: np.ndarray, channel_order: str = "rgb") -> float:
    """Mean luminance ``0.299 R + 0.587 G + 0.114 B`` over all pixels."""
    rgb = _as_rgb_pixels(pixels, channel_order)
    luma = rgb @ np.asarray(LUMA_WEIGHTS)
    return float(luma.mean())


def is_lighting_good(
    brightness: float,
    low: float = config.LIGHTING_MIN,
    high: float = config.LIGHTING_MAX,
) -> bool:
    """True only when ``low < brightness < high`` (both bounds exclusive)."""
    return low < brightness < high


def extract_rgb_from_roi(pixels: np.ndarray, channel_order: str = "rgb") -> RGBSample:
    """Average each colour channel over the region."""
    rgb = _as_rgb_pixels(pixels, channel_order)
    r, g, b = rgb.mean(axis=0)
    return RGBSample(float(r), float(g), float(b))


def _as_rgb_pixels(pixels: np.ndarray, channel_order: str) -> np.ndarray:
    """Reshape *pixels* into an ``(N, 3)`` float array in R, G, B order."""
    if channel_order not in ("rgb", "bgr"):
        raise ValueError(f"channel_order must be 'rgb' or 'bgr', got {channel_order!r}")

    arr = np.asarray(pixels)
    if arr.ndim == 1:
        if arr.size % 4 != 0:
            raise ValueError(
                f"Flat pixel buffers must be interleaved RGBA (length % 4 == 0), got {arr.size}"
            )
        arr = arr.reshape(-1, 4)
    if arr.shape[-1] not in (3, 4):
        raise ValueError(f"Expected 3 or 4 colour channels, got shape {arr.shape}")

    flat = arr.reshape(-1, arr.shape[-1])[:, :3].astype(np.float64)
    if flat.shape[0] == 0:
        raise ValueError("Pixel buffer contains no pixels")
    if channel_order == "bgr":
        flat = flat[:, ::-1]
    return flat
