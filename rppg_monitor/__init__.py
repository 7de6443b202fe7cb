"""
rPPG Monitor: webcam heart-rate estimation for the campus wellness feature.
Look at the camera; the system averages the skin colour of your forehead
in every frame, extracts the pulse with the CHROM method and computes BPM.
"""

from rppg_monitor.chrom import extract_pulse_signal
from rppg_monitor.estimator import HeartRateEstimator, estimate_heart_rate
from rppg_monitor.results import Confidence, HeartRateEstimate
from rppg_monitor.roi import RGBSample, calculate_brightness, extract_rgb_from_roi, is_lighting_good

__version__ = "0.1.0"
__author__ = "rppg_monitor"

__all__ = [
    "Confidence",
    "HeartRateEstimate",
    "HeartRateEstimator",
    "RGBSample",
    "calculate_brightness",
    "estimate_heart_rate",
    "extract_pulse_signal",
    "extract_rgb_from_roi",
    "is_lighting_good",
]
