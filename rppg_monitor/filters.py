"""
Time-domain conditioning stages for the pulse signal.

Three stateless stages, applied by the estimator in this order:

1. :func:`bandpass_filter` – causal first-order IIR band limiting
   (0.7 – 4.0 Hz by default, i.e. 42 – 240 BPM).
2. :func:`smooth_signal` – centred moving average.
3. :func:`normalize_signal` – zero mean, unit variance.

The bandpass is a single forward recursive pass, not a zero-phase
``filtfilt``: outputs depend only on past samples and cost O(n).
"""

from __future__ import annotations

from typing import Sequence, Union

import numpy as np
from scipy.signal import lfilter


SignalLike = Union[Sequence[float], np.ndarray]

BANDPASS_MODES = ("cascade", "product")


def as_signal(signal: SignalLike, name: str = "signal") -> np.ndarray:
    """Return *signal* as a non-empty 1-D float64 array or raise ``ValueError``."""
    arr = np.asarray(signal, dtype=np.float64)
    if arr.ndim != 1:
        raise ValueError(f"{name} must be one-dimensional, got shape {arr.shape}")
    if arr.size == 0:
        raise ValueError(f"{name} must not be empty")
    return arr


def normalize_signal(signal: SignalLike) -> np.ndarray:
    """
    Rescale *signal* to zero mean and unit (population) standard deviation.

    A constant input has zero deviation; it is divided by 1 instead, which
    leaves an all-zero array.
    """
    x = as_signal(signal)
    mean = x.mean()
    std = float(np.sqrt(np.mean((x - mean) ** 2)))
    if std == 0.0 or not np.isfinite(std):
        std = 1.0
    return (x - mean) / std


def smooth_signal(signal: SignalLike, window_size: int = 5) -> np.ndarray:
    """
    Centred moving average.

    Each output sample is the mean of the inputs within
    ``window_size // 2`` positions on either side.  Windows are clipped at
    the ends of the sequence, so edge samples average fewer values.
    """
    x = as_signal(signal)
    if window_size < 1:
        raise ValueError(f"window_size must be >= 1, got {window_size}")

    half = window_size // 2
    n = x.size
    csum = np.concatenate(([0.0], np.cumsum(x)))
    idx = np.arange(n)
    lo = np.maximum(idx - half, 0)
    hi = np.minimum(idx + half, n - 1) + 1
    return (csum[hi] - csum[lo]) / (hi - lo)


def bandpass_filter(
    signal: SignalLike,
    low_cut: float = 0.7,
    high_cut: float = 4.0,
    fs: float = 30.0,
    mode: str = "cascade",
) -> np.ndarray:
    """
    Causal first-order IIR band limiting.

    Parameters
    ----------
    signal:
        1-D input samples.
    low_cut:
        Corner of the single-pole low-pass stage (Hz).
    high_cut:
        Corner of the single-pole high-pass stage (Hz).
    fs:
        Sample rate (Hz).
    mode:
        ``"cascade"`` feeds the low-pass output into the high-pass stage.
        ``"product"`` runs both stages on the raw input and multiplies their
        outputs sample by sample, reproducing the reference web
        implementation exactly.  Note that the product of two sinusoids at
        frequency *f* oscillates at *2f*.

    Returns
    -------
    numpy.ndarray
        Filtered samples, same length as *signal*.
    """
    x = as_signal(signal)
    if fs <= 0:
        raise ValueError(f"Sample rate must be positive, got {fs}")
    if mode not in BANDPASS_MODES:
        raise ValueError(f"Unknown bandpass mode {mode!r}; expected one of {BANDPASS_MODES}")

    dt = 1.0 / fs
    rc_low = 1.0 / (2.0 * np.pi * low_cut)
    rc_high = 1.0 / (2.0 * np.pi * high_cut)
    alpha_low = dt / (rc_low + dt)
    alpha_high = rc_high / (rc_high + dt)

    low = _low_pass(x, alpha_low)
    if mode == "product":
        return low * _high_pass(x, alpha_high)
    return _high_pass(low, alpha_high)


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------

def _low_pass(x: np.ndarray, alpha: float) -> np.ndarray:
    # y[n] = y[n-1] + alpha * (x[n] - y[n-1]), with y[-1] = x[0]
    zi = np.array([(1.0 - alpha) * x[0]])
    y, _ = lfilter([alpha], [1.0, alpha - 1.0], x, zi=zi)
    return y


def _high_pass(x: np.ndarray, alpha: float) -> np.ndarray:
    # y[n] = alpha * (y[n-1] + x[n] - x[n-1]), with y[-1] = 0 and x[-1] = x[0]
    zi = np.array([-alpha * x[0]])
    y, _ = lfilter([alpha, -alpha], [1.0, -alpha], x, zi=zi)
    return y
