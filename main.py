#!/usr/bin/env python3
"""
rPPG Monitor – main entry point.

Usage
-----
    python main.py [OPTIONS]

Options
-------
    --resolution WxH     Camera resolution (default: 640x480)
    --fps FLOAT          Capture frame rate (default: 30)
    --duration FLOAT     Measurement length in seconds (default: 10)
    --window FLOAT       Rolling analysis window in seconds (default: duration)
    --bandpass-mode STR  "cascade" or "product" (default: cascade)
    --camera-index INT   OpenCV camera index (default: 0)
    --video PATH         Read frames from a video file instead of a camera
    --no-flip            Disable horizontal mirror
    --headless           Run without display window (log BPM to stdout)
    --verbose            Debug logging

Keyboard shortcuts (when a window is open)
------------------------------------------
    q / ESC  – quit
    r        – restart the measurement
    s        – save a single annotated frame as PNG
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import cv2

from rppg_monitor.camera import Camera
from rppg_monitor.config import FPS, MEASURE_SECONDS, EstimatorConfig
from rppg_monitor.face_detector import SkinFaceDetector, forehead_roi
from rppg_monitor.session import MeasurementSession
from rppg_monitor.visualizer import Visualizer
from rppg_monitor.zones import heart_rate_zone

logger = logging.getLogger("rppg_monitor")

WINDOW_NAME = "rPPG Monitor"


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Webcam heart-rate measurement (rPPG, CHROM method)",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--resolution", default="640x480",
                        help="Camera resolution, e.g. 640x480")
    parser.add_argument("--fps", type=float, default=FPS,
                        help="Capture frame rate")
    parser.add_argument("--duration", type=float, default=MEASURE_SECONDS,
                        help="Measurement length in seconds")
    parser.add_argument("--window", type=float, default=None,
                        help="Rolling analysis window in seconds (defaults to --duration)")
    parser.add_argument("--bandpass-mode", choices=("cascade", "product"), default="cascade",
                        help="How the low-pass and high-pass stages are combined")
    parser.add_argument("--camera-index", type=int, default=0,
                        help="OpenCV VideoCapture index")
    parser.add_argument("--video", type=Path, default=None,
                        help="Read frames from this video file")
    parser.add_argument("--no-flip", action="store_true",
                        help="Disable horizontal image flip")
    parser.add_argument("--headless", action="store_true",
                        help="No display window; log BPM to stdout only")
    parser.add_argument("--verbose", action="store_true",
                        help="Enable debug logging")
    return parser.parse_args(argv)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s – %(message)s",
        datefmt="%H:%M:%S",
    )


# ---------------------------------------------------------------------------
# Main loop
# ---------------------------------------------------------------------------

def run(args: argparse.Namespace) -> int:
    try:
        res_w, res_h = (int(v) for v in args.resolution.lower().split("x"))
    except ValueError:
        logger.error("Invalid --resolution format.  Use WxH, e.g. 640x480.")
        return 1

    try:
        estimator_config = EstimatorConfig(bandpass_mode=args.bandpass_mode)
        camera = Camera(
            source=args.video if args.video is not None else args.camera_index,
            resolution=(res_w, res_h),
            fps=int(args.fps),
            flip_horizontal=not args.no_flip and args.video is None,
        )
        session = MeasurementSession(
            fps=args.fps,
            measure_seconds=args.duration,
            window_seconds=args.window,
            estimator_config=estimator_config,
        )
    except ValueError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 1

    detector = SkinFaceDetector(step=2)
    vis = Visualizer()

    if not args.headless:
        cv2.namedWindow(WINDOW_NAME, cv2.WINDOW_NORMAL)
        cv2.resizeWindow(WINDOW_NAME, res_w, res_h)

    live_interval = max(1, int(args.fps))  # refresh the live readout ~once per second
    estimate = None
    frame_idx = 0
    session.start()
    logger.info("Look at the camera and keep still.  Press 'q' or ESC to quit.")

    try:
        with camera:
            for frame in camera.frames():
                face = roi = None
                if not session.finished:
                    face = detector.detect(frame)
                    if face is None:
                        session.face_lost()
                    else:
                        roi = forehead_roi(face)
                        session.push_roi(roi.crop(frame))

                    if session.finished:
                        estimate = session.result
                        _report(session)
                        if args.headless:
                            break
                    elif frame_idx % live_interval == 0:
                        estimate = session.current_estimate()
                        if args.headless:
                            _log_progress(session, estimate)

                if not args.headless:
                    annotated = vis.draw(
                        frame,
                        estimate=estimate,
                        progress=session.progress,
                        feedback=session.feedback,
                        face=face,
                        roi=roi,
                    )
                    cv2.imshow(WINDOW_NAME, annotated)
                    key = cv2.waitKey(1) & 0xFF
                    if key in (ord("q"), 27):          # q or ESC
                        logger.info("Quit requested by user.")
                        break
                    elif key == ord("r"):
                        session.start()
                        estimate = None
                    elif key == ord("s"):
                        fname = f"snapshot_{int(time.time())}.png"
                        cv2.imwrite(fname, annotated)
                        logger.info("Saved snapshot: %s", fname)

                frame_idx += 1

    except RuntimeError as exc:
        logger.error("%s", exc)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted.")
    finally:
        if not args.headless:
            cv2.destroyAllWindows()

    if not session.finished:
        logger.warning("Stopped after %d of %d frames – no result.",
                       session.frame_count, session.measure_frames)
    return 0


def _log_progress(session: MeasurementSession, estimate) -> None:
    ts = time.strftime("%H:%M:%S")
    if estimate.valid:
        print(f"[{ts}] BPM={estimate.bpm}  conf={estimate.confidence.value}  "
              f"progress={session.progress:.0%}")
    else:
        print(f"[{ts}] {session.feedback}  progress={session.progress:.0%}")


def _report(session: MeasurementSession) -> None:
    result = session.result
    if result is not None and result.valid:
        zone = heart_rate_zone(result.bpm)
        print(f"Heart rate: {result.bpm} BPM ({zone.zone}: {zone.description}), "
              f"confidence {result.confidence.value}")
    else:
        print(session.feedback)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(args.verbose)
    return run(args)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
