"""
Unit tests for the capture-side helpers: ROI averaging, lighting checks,
the skin-colour face detector and the measurement session.
Run with:  pytest tests/
"""

from __future__ import annotations

import numpy as np
import pytest

from rppg_monitor.face_detector import BoundingBox, SkinFaceDetector, forehead_roi
from rppg_monitor.roi import RGBSample, calculate_brightness, extract_rgb_from_roi, is_lighting_good
from rppg_monitor.session import (
    FEEDBACK_BAD_LIGHT,
    FEEDBACK_FAILED,
    FEEDBACK_NO_FACE,
    MeasurementSession,
    SessionStatus,
)


def _bgr_patch(r, g, b, size=8) -> np.ndarray:
    """Uniform float BGR patch."""
    patch = np.empty((size, size, 3), dtype=np.float64)
    patch[:, :, 0] = b
    patch[:, :, 1] = g
    patch[:, :, 2] = r
    return patch


# ---------------------------------------------------------------------------
# Lighting and ROI averaging
# ---------------------------------------------------------------------------

class TestLighting:

    @pytest.mark.parametrize(
        "brightness, expected",
        [(49, False), (50, False), (51, True), (199, True), (200, False)],
    )
    def test_bounds_are_exclusive(self, brightness, expected):
        assert is_lighting_good(brightness) is expected

    def test_brightness_uses_luma_weights(self):
        frame = np.zeros((4, 5, 3), dtype=np.uint8)
        frame[:] = (10, 20, 30)
        assert calculate_brightness(frame) == pytest.approx(0.299 * 10 + 0.587 * 20 + 0.114 * 30)

    def test_brightness_flat_rgba_buffer(self):
        data = np.array([10, 20, 30, 255] * 6, dtype=np.uint8)
        assert calculate_brightness(data) == pytest.approx(18.15)

    def test_brightness_bgr_order(self):
        frame = np.zeros((2, 2, 3), dtype=np.uint8)
        frame[:] = (30, 20, 10)   # B, G, R
        assert calculate_brightness(frame, channel_order="bgr") == pytest.approx(18.15)

    def test_flat_buffer_wrong_length_raises(self):
        with pytest.raises(ValueError):
            calculate_brightness(np.zeros(7))

    def test_empty_region_raises(self):
        with pytest.raises(ValueError):
            calculate_brightness(np.zeros((0, 0, 3)))


class TestExtractRgbFromRoi:

    def test_channel_means(self):
        frame = np.zeros((2, 2, 3), dtype=np.uint8)
        frame[0, 0] = (100, 50, 0)
        frame[1, 1] = (100, 150, 40)
        assert extract_rgb_from_roi(frame) == RGBSample(50.0, 50.0, 10.0)

    def test_alpha_ignored(self):
        data = np.array([200, 100, 50, 0, 100, 50, 25, 255], dtype=np.uint8)
        assert extract_rgb_from_roi(data) == RGBSample(150.0, 75.0, 37.5)

    def test_bgr_order(self):
        sample = extract_rgb_from_roi(_bgr_patch(r=180, g=120, b=90), channel_order="bgr")
        assert sample.as_tuple() == (180.0, 120.0, 90.0)

    def test_bad_channel_order_raises(self):
        with pytest.raises(ValueError):
            extract_rgb_from_roi(np.zeros((2, 2, 3)), channel_order="hsv")


# ---------------------------------------------------------------------------
# Face detector
# ---------------------------------------------------------------------------

class TestSkinFaceDetector:

    def _frame_with_face(self, x0=50, y0=50, size=100) -> np.ndarray:
        frame = np.zeros((200, 200, 3), dtype=np.uint8)
        frame[y0:y0 + size, x0:x0 + size] = (80, 100, 180)   # BGR skin tone
        return frame

    def test_detects_skin_block(self):
        box = SkinFaceDetector().detect(self._frame_with_face())
        assert box == BoundingBox(50, 50, 99, 99)

    def test_subsampled_detection(self):
        box = SkinFaceDetector(step=2).detect(self._frame_with_face())
        assert box is not None
        assert box.x == 50 and box.y == 50
        assert 95 <= box.width <= 99

    def test_no_skin(self):
        frame = np.full((120, 120, 3), 60, dtype=np.uint8)
        assert SkinFaceDetector().detect(frame) is None

    def test_too_small(self):
        assert SkinFaceDetector().detect(self._frame_with_face(size=30)) is None

    def test_sparse_skin_rejected(self):
        frame = np.zeros((200, 200, 3), dtype=np.uint8)
        frame[::10, ::10] = (80, 100, 180)
        assert SkinFaceDetector().detect(frame) is None

    def test_rgb_order(self):
        frame = self._frame_with_face()[:, :, ::-1]
        assert SkinFaceDetector(channel_order="rgb").detect(frame) is not None

    def test_forehead_roi(self):
        roi = forehead_roi(BoundingBox(100, 50, 90, 120))
        assert roi == BoundingBox(129, 62, 29, 30)

    def test_crop(self):
        frame = np.arange(100).reshape(10, 10)
        assert BoundingBox(2, 3, 4, 5).crop(frame).shape == (5, 4)


# ---------------------------------------------------------------------------
# Measurement session
# ---------------------------------------------------------------------------

class TestMeasurementSession:

    def _pulse_patches(self, seconds, fps=30.0, pulse_hz=1.2):
        t = np.arange(int(seconds * fps)) / fps
        for g in 120.0 + 2.0 * np.sin(2 * np.pi * pulse_hz * t):
            yield _bgr_patch(r=150.0, g=g, b=100.0)

    def test_push_before_start_raises(self):
        session = MeasurementSession()
        with pytest.raises(RuntimeError):
            session.push_roi(_bgr_patch(150, 120, 100))

    def test_completes_with_pulse(self):
        session = MeasurementSession(fps=30.0, measure_seconds=5.0)
        session.start()
        for patch in self._pulse_patches(5.0):
            assert session.push_roi(patch) is True
        assert session.finished
        assert session.status == SessionStatus.COMPLETE
        assert session.result.valid
        assert abs(session.result.bpm - 72) <= 3
        assert session.feedback == f"Heart rate: {session.result.bpm} BPM"

    def test_flat_signal_ends_in_error(self):
        session = MeasurementSession(fps=30.0, measure_seconds=4.0)
        session.start()
        for _ in range(120):
            session.push_roi(_bgr_patch(150, 120, 100))
        assert session.status == SessionStatus.ERROR
        assert session.feedback == FEEDBACK_FAILED
        assert session.result.valid is False

    def test_progress(self):
        session = MeasurementSession(fps=30.0, measure_seconds=5.0)
        session.start()
        for _ in range(75):
            session.push_roi(_bgr_patch(150, 120, 100))
        assert session.progress == pytest.approx(0.5)
        assert session.frame_count == 75
        assert not session.finished

    def test_dark_frame_warns(self):
        session = MeasurementSession()
        session.start()
        assert session.push_roi(_bgr_patch(20, 20, 20)) is False
        assert session.feedback == FEEDBACK_BAD_LIGHT
        assert not session.lighting_ok

    def test_face_lost_feedback(self):
        session = MeasurementSession()
        session.start()
        session.face_lost()
        assert session.feedback == FEEDBACK_NO_FACE

    def test_current_estimate_empty_and_short(self):
        session = MeasurementSession()
        assert session.current_estimate().valid is False
        session.start()
        for patch in self._pulse_patches(2.0):
            session.push_roi(patch)
        assert session.current_estimate().bpm == 0

    def test_rolling_window_is_bounded(self):
        session = MeasurementSession(fps=10.0, measure_seconds=10.0, window_seconds=3.0)
        session.start()
        for _ in range(50):
            session.push_sample(RGBSample(150, 120, 100))
        assert session.buffer_fill_ratio == 1.0
        assert session.frame_count == 50

    def test_reset(self):
        session = MeasurementSession()
        session.start()
        session.push_roi(_bgr_patch(150, 120, 100))
        session.reset()
        assert session.status == SessionStatus.IDLE
        assert session.frame_count == 0
        assert session.buffer_fill_ratio == 0.0
        assert session.result is None

    def test_invalid_parameters(self):
        with pytest.raises(ValueError):
            MeasurementSession(fps=0)
        with pytest.raises(ValueError):
            MeasurementSession(measure_seconds=-1)
