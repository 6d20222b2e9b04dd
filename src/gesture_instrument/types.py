from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple


Color = Tuple[int, int, int]  # BGR
Point2 = Tuple[float, float]


@dataclass(frozen=True)
class Landmark:
    """A single normalized hand landmark (MediaPipe convention, z more negative = closer)."""

    x: float
    y: float
    z: float = 0.0


# 21 landmarks; any objects exposing .x/.y/.z (MediaPipe results included) are accepted.
LandmarkFrame = Sequence[Landmark]


@dataclass(frozen=True)
class PointerSample:
    """Index fingertip in pixel space plus the frame-wide mean depth."""

    x: float
    y: float
    depth: float


@dataclass(frozen=True)
class Note:
    name: str
    frequency_hz: float
    color: Color


@dataclass(frozen=True)
class PlaybackState:
    is_sounding: bool = False
    active_frequency_hz: Optional[float] = None


@dataclass(frozen=True)
class RecordedEvent:
    """A captured note change; timestamp is relative to the recording start."""

    timestamp_ms: float
    note_index: int
    octave_shift: int
    frequency_hz: float


@dataclass(frozen=True)
class FrameSnapshot:
    """Per-tick view of the instrument for a UI layer."""

    note_name: Optional[str]
    frequency_hz: Optional[float]
    octave_shift: int
    volume_percent: float
    fps: int
    hand_detected: bool = False
    pointer: Optional[PointerSample] = None
    note_index: int = -1
    is_recording: bool = False
    is_playing_back: bool = False
