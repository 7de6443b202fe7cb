"""
CHROM pulse extraction.

Combines the per-frame red, green and blue means into one pulse signal
using the chrominance projection of De Haan & Jeanne:

    X = 3R - 2G
    Y = 1.5R + G - 1.5B
    S = X - Y

The projection cancels most of the specular and motion components that
affect all three channels alike, leaving the blood-volume pulse.  ``S`` is
returned normalized to zero mean and unit variance.

References
----------
- De Haan G., Jeanne V., "Robust pulse rate from chrominance-based rPPG."
  IEEE Trans. Biomed. Eng., 2013.
"""

from __future__ import annotations

from typing import Iterable, Tuple

import numpy as np

from rppg_monitor.filters import SignalLike, as_signal, normalize_signal
from rppg_monitor.roi import RGBSample


def extract_pulse_signal(red: SignalLike, green: SignalLike, blue: SignalLike) -> np.ndarray:
    """
    Return the normalized CHROM pulse signal for three equal-length channels.

    Raises
    ------
    ValueError
        If a channel is empty or the lengths differ.
    """
    r = as_signal(red, "red")
    g = as_signal(green, "green")
    b = as_signal(blue, "blue")
    if not r.size == g.size == b.size:
        raise ValueError(
            f"Channel lengths differ: red={r.size} green={g.size} blue={b.size}"
        )

    x = 3.0 * r - 2.0 * g
    y = 1.5 * r + g - 1.5 * b
    return normalize_signal(x - y)


def split_channels(samples: Iterable[RGBSample]) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Unzip a sequence of :class:`RGBSample` into red, green and blue arrays."""
    arr = np.array([s.as_tuple() for s in samples], dtype=np.float64).reshape(-1, 3)
    return arr[:, 0], arr[:, 1], arr[:, 2]
