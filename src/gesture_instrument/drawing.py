from __future__ import annotations

from typing import Optional, Sequence, Tuple

import cv2
import numpy as np

from .notes import NOTES
from .types import FrameSnapshot


def draw_text(frame, text: str, org: Tuple[int, int], color=(255, 255, 255), scale=0.6, thickness=2):
    cv2.putText(frame, text, org, cv2.FONT_HERSHEY_SIMPLEX, scale, (0, 0, 0), thickness + 2, cv2.LINE_AA)
    cv2.putText(frame, text, org, cv2.FONT_HERSHEY_SIMPLEX, scale, color, thickness, cv2.LINE_AA)
    return frame


def draw_note_zones(frame, active_index: int = -1, alpha: float = 0.18):
    """Seven horizontal bands labelled with their note; the active band is tinted."""
    h, w = frame.shape[:2]
    zone_h = h / len(NOTES)
    overlay = frame.copy()
    for idx, note in enumerate(NOTES):
        y0 = int(round(idx * zone_h))
        y1 = int(round((idx + 1) * zone_h))
        if idx == active_index:
            cv2.rectangle(overlay, (0, y0), (w, y1), note.color, -1)
        cv2.line(frame, (0, y0), (w, y0), (90, 90, 90), 1, cv2.LINE_AA)
        draw_text(frame, note.name, (w - 36, y0 + int(zone_h / 2) + 8), color=note.color, scale=0.8)
    cv2.addWeighted(overlay, alpha, frame, 1 - alpha, 0, frame)
    return frame


def draw_pointer(frame, pt: Tuple[int, int], radius=10):
    cv2.circle(frame, pt, radius + 4, (255, 255, 255), 2, cv2.LINE_AA)
    cv2.circle(frame, pt, radius, (0, 200, 255), -1, cv2.LINE_AA)
    return frame


def draw_landmarks(frame, landmarks: Sequence, color=(40, 255, 120)):
    h, w = frame.shape[:2]
    pts = np.array([(int(lm.x * w), int(lm.y * h)) for lm in landmarks], dtype=np.int32)
    for x, y in pts:
        cv2.circle(frame, (int(x), int(y)), 3, color, -1, lineType=cv2.LINE_AA)
    return frame


def draw_hud(frame, snap: FrameSnapshot, *, n_recorded: int = 0, message: Optional[str] = None):
    note = snap.note_name or "-"
    if snap.note_name and snap.octave_shift:
        note = f"{note} ({snap.octave_shift:+d})"
    freq = f"{snap.frequency_hz:.2f} Hz" if snap.frequency_hz else "-"
    draw_text(frame, f"note: {note} | {freq}", (12, 28), scale=0.8)
    draw_text(frame, f"octave: {snap.octave_shift:+d} | volume: {snap.volume_percent:.0f}% | fps: {snap.fps}", (12, 58))

    status = []
    if snap.is_recording:
        status.append(f"REC {n_recorded}")
    elif n_recorded:
        status.append(f"{n_recorded} recorded")
    if snap.is_playing_back:
        status.append("PLAYBACK")
    if not snap.hand_detected:
        status.append("no hand detected")
    if status:
        draw_text(frame, " | ".join(status), (12, 88), color=(80, 80, 255))
    if message:
        draw_text(frame, message, (12, frame.shape[0] - 16), color=(0, 220, 255))
    return frame
