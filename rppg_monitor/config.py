"""
Default tuning values for the rPPG heart-rate pipeline.

Module-level constants are the defaults used by every component; the
:class:`EstimatorConfig` dataclass bundles the estimator tunables so a
caller can override several of them at once.
"""

from __future__ import annotations

from dataclasses import dataclass

# ==================== CAPTURE ====================
FPS = 30.0                 # nominal camera frame rate (Hz)
MEASURE_SECONDS = 10.0     # length of one guided measurement
WINDOW_SECONDS = 10.0      # rolling RGB window kept by a session
MIN_WINDOW_SECONDS = 3.0   # shortest window the estimator will analyse

# ==================== FILTERING ====================
BANDPASS_LOW_HZ = 0.7      # 42 BPM
BANDPASS_HIGH_HZ = 4.0     # 240 BPM
BANDPASS_MODE = "cascade"  # "cascade" or "product"
SMOOTHING_WINDOW = 5

# ==================== ESTIMATION ====================
MIN_SIGNAL_STD = 0.15      # quality gate after filtering
PEAK_THRESHOLD = 0.2
MAX_PEAK_RATE_HZ = 2.5     # min peak distance = floor(fps / 2.5), i.e. <= 150 BPM
SPECTRAL_LOW_HZ = 0.67     # 40 BPM
SPECTRAL_HIGH_HZ = 3.0     # 180 BPM
MIN_BPM = 40
MAX_BPM = 180

# ==================== LIGHTING ====================
LIGHTING_MIN = 50.0        # exclusive
LIGHTING_MAX = 200.0       # exclusive


@dataclass(frozen=True)
class EstimatorConfig:
    """
    Tunables for :func:`rppg_monitor.estimator.estimate_heart_rate`.

    Parameters
    ----------
    low_cut, high_cut:
        Bandpass corner frequencies in Hz.
    bandpass_mode:
        ``"cascade"`` (true first-order band-pass) or ``"product"``
        (per-sample product of low-pass and high-pass outputs).
    smoothing_window:
        Moving-average window size applied after the bandpass.
    min_window_seconds:
        Windows shorter than this are rejected outright.
    min_signal_std:
        Processed signals flatter than this are rejected.
    peak_threshold:
        Minimum normalized amplitude of an accepted peak.
    max_peak_rate_hz:
        Highest beat rate the peak detector may resolve.
    min_bpm, max_bpm:
        Plausible human range; estimates outside it are discarded.
    spectral_low_hz, spectral_high_hz:
        Frequency range searched by the spectral fallback.
    """

    low_cut: float = BANDPASS_LOW_HZ
    high_cut: float = BANDPASS_HIGH_HZ
    bandpass_mode: str = BANDPASS_MODE
    smoothing_window: int = SMOOTHING_WINDOW
    min_window_seconds: float = MIN_WINDOW_SECONDS
    min_signal_std: float = MIN_SIGNAL_STD
    peak_threshold: float = PEAK_THRESHOLD
    max_peak_rate_hz: float = MAX_PEAK_RATE_HZ
    min_bpm: int = MIN_BPM
    max_bpm: int = MAX_BPM
    spectral_low_hz: float = SPECTRAL_LOW_HZ
    spectral_high_hz: float = SPECTRAL_HIGH_HZ

    def __post_init__(self) -> None:
        if self.bandpass_mode not in ("cascade", "product"):
            raise ValueError(
                f"bandpass_mode must be 'cascade' or 'product', got {self.bandpass_mode!r}"
            )
        if not 0 < self.low_cut < self.high_cut:
            raise ValueError("Bandpass corners must satisfy 0 < low_cut < high_cut")
        if self.smoothing_window < 1:
            raise ValueError("smoothing_window must be >= 1")
        if self.min_bpm >= self.max_bpm:
            raise ValueError("min_bpm must be below max_bpm")
