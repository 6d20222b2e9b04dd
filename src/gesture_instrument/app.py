"""
Webcam gesture instrument.

Index fingertip height picks one of seven notes, moving the hand towards or
away from the camera shifts octaves, and left/right position scales volume.

Keys: r record | p play all | s play selected | x stop playback | c clear |
a select all | d deselect all | w waveform | +/- volume | q/ESC quit
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import platform
import time
from typing import List, Optional

import cv2

from .audio import ToneGenerator
from .config import WAVEFORMS, InstrumentConfig
from .detector import DFLT_TASKS_MODEL_PATH, HandLandmarkSource
from .drawing import draw_hud, draw_landmarks, draw_note_zones, draw_pointer
from .engine import GestureInstrument
from .errors import InstrumentError
from .pacing import FrameSkipper

logger = logging.getLogger(__name__)


MESSAGE_SECONDS = 2.5
VOLUME_STEP = 5.0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Play notes with your index finger.")
    ap.add_argument("--camera", type=int, default=0, help="Camera index (default: 0)")
    ap.add_argument("--width", type=int, default=1280, help="Capture width (best effort)")
    ap.add_argument("--height", type=int, default=720, help="Capture height (best effort)")
    ap.add_argument(
        "--no-mirror",
        action="store_true",
        help="Disable horizontal mirroring (default is mirrored/selfie mode)",
    )
    ap.add_argument("--waveform", default="sine", choices=list(WAVEFORMS), help="Oscillator shape (default: sine)")
    ap.add_argument("--volume", type=float, default=70.0, help="Base volume, 0 to 100 (default: 70)")
    ap.add_argument("--threshold-px", type=float, default=20.0, help="Note change hysteresis in pixels")
    ap.add_argument("--min-interval-ms", type=float, default=100.0, help="Minimum time between note changes")
    ap.add_argument("--min-z", type=float, default=-0.1, help="Mean depth mapped to -2 octaves")
    ap.add_argument("--max-z", type=float, default=0.05, help="Mean depth mapped to +2 octaves")
    ap.add_argument("--tail-ms", type=float, default=500.0, help="Hold after the last played-back note")
    ap.add_argument("--model-path", default=DFLT_TASKS_MODEL_PATH, help="HandLandmarker .task file (Tasks API only)")
    ap.add_argument(
        "--log-level",
        default="info",
        choices=["debug", "info", "warning", "error"],
        help="Logging verbosity (default: info)",
    )
    return ap


def config_from_args(args: argparse.Namespace) -> InstrumentConfig:
    return InstrumentConfig(
        note_change_threshold_px=args.threshold_px,
        min_note_change_interval_ms=args.min_interval_ms,
        min_z=args.min_z,
        max_z=args.max_z,
        base_volume_percent=args.volume,
        playback_tail_ms=args.tail_ms,
        waveform=args.waveform,
    )


def open_camera(index: int, width: int, height: int) -> cv2.VideoCapture:
    if platform.system() == "Darwin":
        cap = cv2.VideoCapture(index, cv2.CAP_AVFOUNDATION)
    else:
        cap = cv2.VideoCapture(index)

    if not cap.isOpened():
        raise RuntimeError(
            f"Could not open camera index {index}. "
            "On macOS: System Settings -> Privacy & Security -> Camera -> allow your terminal."
        )

    cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
    cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
    return cap


def handle_key(key: int, instrument: GestureInstrument, tone: ToneGenerator) -> Optional[str]:
    """Apply one keyboard command. Returns a status message for the HUD, if any."""
    if key == ord("r"):
        if instrument.toggle_recording():
            return "Recording..."
        return f"Recorded {len(instrument.events)} notes"
    if key == ord("p"):
        instrument.play_all()
    elif key == ord("s"):
        instrument.play_selected()
    elif key == ord("x"):
        instrument.stop_playback()
    elif key == ord("c"):
        instrument.clear_recording()
        return "Recording cleared"
    elif key == ord("a"):
        instrument.select_all()
        return f"{len(instrument.selection)} notes selected"
    elif key == ord("d"):
        instrument.deselect_all()
        return "Selection cleared"
    elif key == ord("w"):
        waveform = WAVEFORMS[(WAVEFORMS.index(tone.waveform) + 1) % len(WAVEFORMS)]
        tone.set_waveform(waveform)
        return f"Waveform: {waveform}"
    elif key in (ord("+"), ord("=")):
        instrument.set_base_volume(instrument.base_volume + VOLUME_STEP)
        return f"Volume: {instrument.base_volume:.0f}%"
    elif key in (ord("-"), ord("_")):
        instrument.set_base_volume(instrument.base_volume - VOLUME_STEP)
        return f"Volume: {instrument.base_volume:.0f}%"
    return None


async def run(args: argparse.Namespace) -> int:
    config = config_from_args(args)
    cap = open_camera(args.camera, args.width, args.height)

    with HandLandmarkSource(tasks_model_path=args.model_path) as source, ToneGenerator(
        waveform=config.waveform, sample_rate=config.sample_rate, volume=config.base_volume_percent
    ) as tone:
        instrument = GestureInstrument(tone, config)
        skipper = FrameSkipper(fps_threshold=config.fps_threshold, recovery_margin=config.fps_recovery_margin)
        snap = instrument.snapshot()
        landmarks: Optional[List] = None
        message: Optional[str] = None
        message_until = 0.0

        logger.info("Move your index finger up and down to play; press q or ESC to quit")
        try:
            while True:
                # Blocking camera and detector calls run off the event loop.
                ok, frame = await asyncio.to_thread(cap.read)
                if not ok:
                    logger.warning("Camera read failed; stopping")
                    break

                if not args.no_mirror:
                    frame = cv2.flip(frame, 1)

                if skipper.should_process():
                    landmarks = await asyncio.to_thread(source.detect, frame)
                    h, w = frame.shape[:2]
                    snap = instrument.process_frame(landmarks, w, h)
                    skipper.observe(snap.fps)

                draw_note_zones(frame, snap.note_index)
                if landmarks:
                    draw_landmarks(frame, landmarks)
                if snap.pointer is not None:
                    draw_pointer(frame, (int(snap.pointer.x), int(snap.pointer.y)))
                if message and time.monotonic() > message_until:
                    message = None
                draw_hud(frame, snap, n_recorded=len(instrument.events), message=message)

                cv2.imshow("gesture instrument", frame)
                key = cv2.waitKey(1) & 0xFF
                if key in (ord("q"), 27):
                    break

                try:
                    status = handle_key(key, instrument, tone)
                except InstrumentError as e:
                    logger.warning("%s", e)
                    status = str(e)
                if status:
                    message = status
                    message_until = time.monotonic() + MESSAGE_SECONDS
        finally:
            instrument.stop()
            cap.release()
            cv2.destroyAllWindows()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )
    return asyncio.run(run(args))


if __name__ == "__main__":
    raise SystemExit(main())
