"""
Heart-rate estimator.

Decision procedure (one pass per call, no state kept between calls)
-------------------------------------------------------------------
1. Reject windows shorter than ``min_window_seconds`` (3 s by default).
2. Bandpass → moving average → normalize.
3. Reject signals whose deviation falls below ``min_signal_std``.
4. Detect peaks at least ``floor(fs / 2.5)`` samples apart (≤ 150 BPM)
   and above ``peak_threshold``.
5. With two or more peaks, BPM is ``fs / mean_interval * 60``; accepted
   inside ``[min_bpm, max_bpm]``.  Confidence is high for ≥ 5 peaks, medium
   for ≥ 3, low otherwise.
6. Otherwise fall back to the spectral estimate of the same processed
   signal; its result is final.

Every rejection is reported as :meth:`HeartRateEstimate.invalid`; callers
keep sampling and retry on the next tick.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np

from rppg_monitor.config import FPS, EstimatorConfig
from rppg_monitor.filters import SignalLike, bandpass_filter, normalize_signal, smooth_signal
from rppg_monitor.peaks import find_peaks
from rppg_monitor.results import Confidence, HeartRateEstimate, round_bpm
from rppg_monitor.spectral import estimate_heart_rate_spectral

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = EstimatorConfig()


def process_signal(
    signal: SignalLike,
    fs: float = FPS,
    config: Optional[EstimatorConfig] = None,
) -> np.ndarray:
    """Apply the bandpass, smoothing and normalization stages in order."""
    cfg = config or DEFAULT_CONFIG
    filtered = bandpass_filter(signal, cfg.low_cut, cfg.high_cut, fs, mode=cfg.bandpass_mode)
    smoothed = smooth_signal(filtered, cfg.smoothing_window)
    return normalize_signal(smoothed)


def confidence_for_peak_count(n_peaks: int) -> Confidence:
    if n_peaks >= 5:
        return Confidence.HIGH
    if n_peaks >= 3:
        return Confidence.MEDIUM
    return Confidence.LOW


def estimate_heart_rate(
    signal: SignalLike,
    fs: float = FPS,
    config: Optional[EstimatorConfig] = None,
) -> HeartRateEstimate:
    """
    Estimate the heart rate carried by a pulse *signal* sampled at *fs* Hz.

    Parameters
    ----------
    signal:
        1-D pulse signal, typically the output of
        :func:`rppg_monitor.chrom.extract_pulse_signal`.
    fs:
        Sample rate in Hz (the camera frame rate).
    config:
        Estimator tunables; defaults to :class:`EstimatorConfig()`.

    Returns
    -------
    HeartRateEstimate
        ``valid`` is False (and ``bpm`` 0) when no trustworthy rate could
        be derived.
    """
    if fs <= 0:
        raise ValueError(f"Sample rate must be positive, got {fs}")
    cfg = config or DEFAULT_CONFIG

    x = np.asarray(signal, dtype=np.float64)
    if x.ndim != 1:
        raise ValueError(f"signal must be one-dimensional, got shape {x.shape}")

    min_len = cfg.min_window_seconds * fs
    if x.size < min_len:
        logger.debug("Window too short: %d samples < %.0f required", x.size, min_len)
        return HeartRateEstimate.invalid()

    processed = process_signal(x, fs, cfg)

    std = float(np.std(processed))
    if std < cfg.min_signal_std:
        logger.debug("Signal too flat after filtering (std=%.3f)", std)
        return HeartRateEstimate.invalid()

    min_distance = int(math.floor(fs / cfg.max_peak_rate_hz))
    peaks = find_peaks(processed, min_distance, cfg.peak_threshold)

    if len(peaks) >= 2:
        mean_interval = float(np.mean(np.diff(peaks)))
        bpm = round_bpm(fs / mean_interval * 60.0)
        if cfg.min_bpm <= bpm <= cfg.max_bpm:
            confidence = confidence_for_peak_count(len(peaks))
            logger.debug("Peak estimate: %d peaks → %d BPM (%s)", len(peaks), bpm, confidence)
            return HeartRateEstimate(bpm=bpm, confidence=confidence, valid=True)
        logger.debug("Peak estimate %d BPM out of range – trying spectral fallback", bpm)
    else:
        logger.debug("Only %d peak(s) found – trying spectral fallback", len(peaks))

    return estimate_heart_rate_spectral(
        processed,
        fs,
        low_hz=cfg.spectral_low_hz,
        high_hz=cfg.spectral_high_hz,
        min_bpm=cfg.min_bpm,
        max_bpm=cfg.max_bpm,
    )


class HeartRateEstimator:
    """
    Stateless wrapper binding a sample rate and :class:`EstimatorConfig`.

    Safe to share between threads: :meth:`estimate` touches nothing but
    its argument.
    """

    def __init__(self, fs: float = FPS, config: Optional[EstimatorConfig] = None) -> None:
        if fs <= 0:
            raise ValueError(f"Sample rate must be positive, got {fs}")
        self.fs = fs
        self.config = config or DEFAULT_CONFIG

    def estimate(self, signal: SignalLike) -> HeartRateEstimate:
        return estimate_heart_rate(signal, self.fs, self.config)

    @property
    def min_samples(self) -> int:
        """Shortest window (in samples) that will be analysed."""
        return int(math.ceil(self.config.min_window_seconds * self.fs))
