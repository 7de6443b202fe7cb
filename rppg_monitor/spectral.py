"""
Frequency-domain heart-rate fallback.

Used when peak counting cannot produce a plausible rate.  The processed
signal is zero-padded to the next power of two, its magnitude spectrum is
computed, and the strongest bin between 0.67 Hz and 3.0 Hz (40 – 180 BPM)
gives the rate.  Resolution is ``fs / padded_length``, i.e. about 7 BPM for
a 256-sample window at 30 fps, so the result is always reported with
medium confidence.
"""

from __future__ import annotations

import logging

import numpy as np

from rppg_monitor import config
from rppg_monitor.filters import SignalLike, as_signal
from rppg_monitor.results import Confidence, HeartRateEstimate, round_bpm

logger = logging.getLogger(__name__)


def next_power_of_two(n: int) -> int:
    if n < 1:
        raise ValueError(f"n must be positive, got {n}")
    return 1 << (n - 1).bit_length()


def magnitude_spectrum(signal: SignalLike, method: str = "fft") -> np.ndarray:
    """
    Full (two-sided) DFT magnitude of *signal*.

    ``method="fft"`` uses ``numpy.fft``; ``method="dft"`` evaluates the
    transform directly in O(n²).  Both return the same magnitudes.
    """
    x = as_signal(signal)
    if method == "fft":
        return np.abs(np.fft.fft(x))
    if method == "dft":
        n = x.size
        k = np.arange(n)
        angles = 2.0 * np.pi * np.outer(k, k) / n
        real = np.cos(angles) @ x
        imag = -(np.sin(angles) @ x)
        return np.hypot(real, imag)
    raise ValueError(f"Unknown spectrum method {method!r}; expected 'fft' or 'dft'")


def estimate_heart_rate_spectral(
    signal: SignalLike,
    fs: float = config.FPS,
    low_hz: float = config.SPECTRAL_LOW_HZ,
    high_hz: float = config.SPECTRAL_HIGH_HZ,
    min_bpm: int = config.MIN_BPM,
    max_bpm: int = config.MAX_BPM,
    method: str = "fft",
) -> HeartRateEstimate:
    """
    Estimate BPM from the dominant spectral bin of *signal*.

    Returns a medium-confidence estimate when the rate lands in
    ``[min_bpm, max_bpm]``, otherwise :meth:`HeartRateEstimate.invalid`.
    """
    x = as_signal(signal)
    if fs <= 0:
        raise ValueError(f"Sample rate must be positive, got {fs}")

    padded_len = next_power_of_two(x.size)
    padded = np.zeros(padded_len, dtype=np.float64)
    padded[: x.size] = x
    magnitudes = magnitude_spectrum(padded, method=method)

    resolution = fs / padded_len
    min_bin = int(np.floor(low_hz / resolution))
    max_bin = int(np.ceil(high_hz / resolution))
    # Only bins strictly below padded_len / 2
    last_bin = min(max_bin, (padded_len + 1) // 2 - 1)
    if last_bin < min_bin:
        logger.debug(
            "Spectral search range empty (bins %d..%d, padded length %d)",
            min_bin, max_bin, padded_len,
        )
        return HeartRateEstimate.invalid()

    band = magnitudes[min_bin: last_bin + 1]
    peak_bin = min_bin + int(np.argmax(band))
    bpm = round_bpm(peak_bin * resolution * 60.0)

    if min_bpm <= bpm <= max_bpm:
        logger.debug("Spectral estimate: bin %d → %d BPM", peak_bin, bpm)
        return HeartRateEstimate(bpm=bpm, confidence=Confidence.MEDIUM, valid=True)

    logger.debug("Spectral estimate %d BPM outside [%d, %d] – discarded", bpm, min_bpm, max_bpm)
    return HeartRateEstimate.invalid()
