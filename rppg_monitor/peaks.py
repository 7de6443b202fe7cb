"""Greedy local-maximum detection for the time-domain heart-rate path."""

from __future__ import annotations

import numpy as np

from rppg_monitor.filters import SignalLike, as_signal


def find_peaks(signal: SignalLike, min_distance: int = 10, threshold: float = 0.2) -> np.ndarray:
    """
    Return indices of accepted peaks in *signal*, strictly increasing.

    An interior sample is a candidate when it is strictly greater than both
    neighbours and than *threshold*.  Candidates are accepted left to right;
    a candidate closer than *min_distance* samples to the previously
    accepted peak is skipped, so the rising and falling wobble of one beat
    is not counted twice.
    """
    x = as_signal(signal)
    if x.size < 3:
        return np.array([], dtype=int)

    mid = x[1:-1]
    is_peak = (mid > x[:-2]) & (mid > x[2:]) & (mid > threshold)
    candidates = np.flatnonzero(is_peak) + 1

    accepted = []
    for i in candidates:
        if not accepted or i - accepted[-1] >= min_distance:
            accepted.append(int(i))
    return np.array(accepted, dtype=int)
