from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from .types import Note
from .utils import clamp_int

logger = logging.getLogger(__name__)


# Ordered top of the frame (index 0, highest pitch) to bottom (index 6, lowest).
NOTES: Tuple[Note, ...] = (
    Note("B", 493.88, (182, 89, 155)),
    Note("A", 440.00, (219, 152, 52)),
    Note("G", 392.00, (156, 188, 26)),
    Note("F", 349.23, (113, 204, 46)),
    Note("E", 329.63, (15, 196, 241)),
    Note("D", 293.66, (34, 126, 230)),
    Note("C", 261.63, (60, 76, 231)),
)

DFLT_NOTE_CHANGE_THRESHOLD_PX = 20.0
DFLT_MIN_NOTE_CHANGE_INTERVAL_MS = 100.0


def zone_index(y: float, height: float, n_zones: int = len(NOTES)) -> int:
    """Index of the equal-height horizontal band containing ``y`` (0 = top)."""
    if height <= 0:
        return 0
    zone_height = height / n_zones
    return clamp_int(int(math.floor(y / zone_height)), 0, n_zones - 1)


@dataclass
class NoteSelector:
    """
    Stable note selection from a noisy vertical position.

    Two independent guards:
    - hysteresis: while a note is held, moves of less than ``threshold_px`` from
      the point of the last change never switch notes
    - rate limit: at most one change per ``min_interval_ms``; a change refused by
      the limiter is dropped and re-evaluated on the next frame
    """

    threshold_px: float = DFLT_NOTE_CHANGE_THRESHOLD_PX
    min_interval_ms: float = DFLT_MIN_NOTE_CHANGE_INTERVAL_MS
    n_notes: int = len(NOTES)
    current_index: int = -1
    last_change_y: Optional[float] = None
    last_change_time_ms: Optional[float] = None

    @property
    def has_note(self) -> bool:
        return self.current_index != -1

    def update(self, y: float, height: float, now_ms: float) -> Optional[int]:
        """
        Feed one pointer position. Returns the new note index when a change is
        committed, None otherwise.
        """
        index = zone_index(y, height, self.n_notes)

        if self.has_note and self.last_change_y is not None:
            if abs(y - self.last_change_y) < self.threshold_px and index != self.current_index:
                index = self.current_index

        if index == self.current_index:
            return None

        if self.last_change_time_ms is not None:
            if now_ms - self.last_change_time_ms < self.min_interval_ms:
                return None

        self.current_index = index
        self.last_change_y = y
        self.last_change_time_ms = now_ms
        logger.debug("Note change -> index %d (y=%.1f)", index, y)
        return index

    def reset(self) -> None:
        self.current_index = -1
        self.last_change_y = None
        self.last_change_time_ms = None
