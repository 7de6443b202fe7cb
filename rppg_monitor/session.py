"""
Guided heart-rate measurement.

A :class:`MeasurementSession` owns the rolling window of per-frame RGB
means that the stateless estimator consumes.  The capture loop feeds it
the forehead region of every frame in which a face was found; once
``measure_seconds`` worth of frames has been collected the session runs
the full pipeline and settles into ``COMPLETE`` or ``ERROR``.

    session = MeasurementSession(fps=30)
    session.start()
    for frame in camera.frames():
        face = detector.detect(frame)
        if face is None:
            session.face_lost()
            continue
        session.push_roi(forehead_roi(face).crop(frame))
        if session.finished:
            break
    print(session.result)
"""

from __future__ import annotations

import logging
from collections import deque
from enum import Enum
from typing import Deque, Optional

import numpy as np

from rppg_monitor import config
from rppg_monitor.chrom import extract_pulse_signal, split_channels
from rppg_monitor.config import EstimatorConfig
from rppg_monitor.estimator import HeartRateEstimator
from rppg_monitor.results import HeartRateEstimate
from rppg_monitor.roi import RGBSample, calculate_brightness, extract_rgb_from_roi, is_lighting_good

logger = logging.getLogger(__name__)

FEEDBACK_IDLE = "Position your face in the center"
FEEDBACK_MEASURING = "Measuring... Keep still"
FEEDBACK_BAD_LIGHT = "Adjust lighting - too dark or too bright"
FEEDBACK_NO_FACE = "Face not detected - look at the camera"
FEEDBACK_FAILED = "Could not detect pulse. Try again with better lighting."


class SessionStatus(str, Enum):
    IDLE = "idle"
    MEASURING = "measuring"
    COMPLETE = "complete"
    ERROR = "error"


class MeasurementSession:
    """
    Rolling RGB buffer plus measurement bookkeeping.

    Parameters
    ----------
    fps:
        Frame rate of the capture loop.  Must match the camera's actual
        rate for the BPM to be right.
    measure_seconds:
        Duration of one measurement; the session completes after
        ``fps * measure_seconds`` frames.
    window_seconds:
        Length of the rolling sample window.  Defaults to
        ``measure_seconds`` so the final estimate sees every frame.
    estimator_config:
        Passed through to :class:`HeartRateEstimator`.
    channel_order:
        Colour order of the ROI patches pushed in (``"bgr"`` for OpenCV).
    """

    def __init__(
        self,
        fps: float = config.FPS,
        measure_seconds: float = config.MEASURE_SECONDS,
        window_seconds: Optional[float] = None,
        estimator_config: Optional[EstimatorConfig] = None,
        channel_order: str = "bgr",
    ) -> None:
        if fps <= 0:
            raise ValueError(f"fps must be positive, got {fps}")
        if measure_seconds <= 0:
            raise ValueError(f"measure_seconds must be positive, got {measure_seconds}")

        self.fps = fps
        self.measure_seconds = measure_seconds
        self.window_seconds = window_seconds if window_seconds is not None else measure_seconds
        self.channel_order = channel_order
        self.estimator = HeartRateEstimator(fps, estimator_config)

        self.measure_frames = int(round(fps * measure_seconds))
        self._buffer: Deque[RGBSample] = deque(maxlen=max(1, int(round(fps * self.window_seconds))))

        self._frame_count = 0
        self._status = SessionStatus.IDLE
        self._feedback = FEEDBACK_IDLE
        self._lighting_ok = True
        self._result: Optional[HeartRateEstimate] = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Clear any previous data and begin a new measurement."""
        self._buffer.clear()
        self._frame_count = 0
        self._result = None
        self._status = SessionStatus.MEASURING
        self._feedback = FEEDBACK_MEASURING
        logger.info(
            "Measurement started – %d frames at %.1f fps", self.measure_frames, self.fps
        )

    def push_roi(self, pixels: np.ndarray) -> bool:
        """
        Add one frame's face region to the window.

        Returns whether the lighting was acceptable.  Samples taken in poor
        lighting are still kept; the user is only warned.
        """
        if self._status is not SessionStatus.MEASURING:
            raise RuntimeError(f"Session is {self._status.value}; call start() first.")

        brightness = calculate_brightness(pixels, self.channel_order)
        self._lighting_ok = is_lighting_good(brightness)
        self._feedback = FEEDBACK_MEASURING if self._lighting_ok else FEEDBACK_BAD_LIGHT

        self.push_sample(extract_rgb_from_roi(pixels, self.channel_order))
        return self._lighting_ok

    def push_sample(self, sample: RGBSample) -> None:
        """Add a pre-averaged RGB sample; completes the session when enough have arrived."""
        if self._status is not SessionStatus.MEASURING:
            raise RuntimeError(f"Session is {self._status.value}; call start() first.")
        self._buffer.append(sample)
        self._frame_count += 1
        if self._frame_count >= self.measure_frames:
            self.finish()

    def face_lost(self) -> None:
        """Record a frame in which no face was found."""
        if self._status is SessionStatus.MEASURING:
            self._feedback = FEEDBACK_NO_FACE

    def current_estimate(self) -> HeartRateEstimate:
        """Run the pipeline on the current window without ending the session."""
        if not self._buffer:
            return HeartRateEstimate.invalid()
        red, green, blue = split_channels(self._buffer)
        return self.estimator.estimate(extract_pulse_signal(red, green, blue))

    def finish(self) -> HeartRateEstimate:
        """Produce the final estimate and settle the session status."""
        result = self.current_estimate()
        self._result = result
        if result.valid:
            self._status = SessionStatus.COMPLETE
            self._feedback = f"Heart rate: {result.bpm} BPM"
            logger.info("Measurement complete: %d BPM (%s confidence)", result.bpm, result.confidence)
        else:
            self._status = SessionStatus.ERROR
            self._feedback = FEEDBACK_FAILED
            logger.info("Measurement failed after %d frames", self._frame_count)
        return result

    def reset(self) -> None:
        """Return to ``IDLE`` and drop all samples."""
        self._buffer.clear()
        self._frame_count = 0
        self._result = None
        self._status = SessionStatus.IDLE
        self._feedback = FEEDBACK_IDLE
        self._lighting_ok = True

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def finished(self) -> bool:
        return self._status in (SessionStatus.COMPLETE, SessionStatus.ERROR)

    @property
    def feedback(self) -> str:
        return self._feedback

    @property
    def lighting_ok(self) -> bool:
        return self._lighting_ok

    @property
    def result(self) -> Optional[HeartRateEstimate]:
        return self._result

    @property
    def frame_count(self) -> int:
        return self._frame_count

    @property
    def progress(self) -> float:
        """Fraction of the measurement completed (0 – 1)."""
        return min(1.0, self._frame_count / self.measure_frames) if self.measure_frames else 1.0

    @property
    def buffer_fill_ratio(self) -> float:
        """How full the rolling window is (0 – 1)."""
        return len(self._buffer) / self._buffer.maxlen
