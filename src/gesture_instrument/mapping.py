"""Pure mappings from hand landmarks to pointer, octave and volume."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from .types import PointerSample
from .utils import clamp, round_half_up

logger = logging.getLogger(__name__)


INDEX_FINGER_TIP = 8

DFLT_MIN_Z = -0.1
DFLT_MAX_Z = 0.05

MIN_OCTAVE_SHIFT = -2
MAX_OCTAVE_SHIFT = 2


def _xyz(lm):
    if isinstance(lm, (tuple, list)):
        x, y = lm[0], lm[1]
        z = lm[2] if len(lm) > 2 else 0.0
        return float(x), float(y), float(z)
    return float(lm.x), float(lm.y), float(getattr(lm, "z", 0.0))


def mean_depth(landmarks: Sequence) -> float:
    """Arithmetic mean of z over every landmark of the frame."""
    zs = [_xyz(lm)[2] for lm in landmarks]
    return sum(zs) / len(zs)


def extract_pointer(landmarks: Optional[Sequence], width: float, height: float) -> Optional[PointerSample]:
    """
    Pointer sample for one landmark frame, or None when no hand was reported.

    The pointer is the index fingertip scaled to pixels; depth is averaged over
    all landmarks, not just the fingertip.
    """
    if not landmarks or len(landmarks) <= INDEX_FINGER_TIP:
        return None
    x, y, _ = _xyz(landmarks[INDEX_FINGER_TIP])
    return PointerSample(x=x * width, y=y * height, depth=mean_depth(landmarks))


def depth_to_octave_shift(depth: float, min_z: float = DFLT_MIN_Z, max_z: float = DFLT_MAX_Z) -> int:
    """
    Quantize a mean depth into an octave shift in [-2, 2].

    >>> depth_to_octave_shift(-0.1), depth_to_octave_shift(0.05)
    (-2, 2)
    >>> depth_to_octave_shift(-0.025)
    0
    """
    span = max_z - min_z
    if span == 0:
        return 0
    normalized = clamp((depth - min_z) / span, 0.0, 1.0)
    octave = round_half_up(normalized * 4 - 2)
    return int(clamp(octave, MIN_OCTAVE_SHIFT, MAX_OCTAVE_SHIFT))


def volume_multiplier(
    x: float,
    width: float,
    *,
    left_multiplier: float = 0.5,
    right_multiplier: float = 1.5,
) -> float:
    """
    Volume multiplier from the horizontal pointer position.

    Left edge gives ``left_multiplier``, the centre 1.0 and the right edge
    ``right_multiplier``, linearly on each side. A zero-width frame is neutral.

    >>> volume_multiplier(0, 640), volume_multiplier(320, 640), volume_multiplier(640, 640)
    (0.5, 1.0, 1.5)
    """
    center = width / 2.0
    if center == 0:
        return 1.0
    ratio = clamp((x - center) / center, -1.0, 1.0)
    if ratio >= 0:
        multiplier = 1.0 + ratio * (right_multiplier - 1.0)
    else:
        multiplier = 1.0 + ratio * (1.0 - left_multiplier)
    lo = min(left_multiplier, right_multiplier)
    hi = max(left_multiplier, right_multiplier)
    return clamp(multiplier, lo, hi)


def effective_volume(base_volume_percent: float, multiplier: float) -> float:
    return clamp(base_volume_percent * multiplier, 0.0, 100.0)


@dataclass
class OctaveTracker:
    """Remembers the last emitted octave so changes are only reported once."""

    min_z: float = DFLT_MIN_Z
    max_z: float = DFLT_MAX_Z
    current: int = 0

    def update(self, depth: float) -> bool:
        octave = depth_to_octave_shift(depth, self.min_z, self.max_z)
        if octave == self.current:
            return False
        self.current = octave
        logger.debug("Octave shift: %+d (avg depth: %.3f)", octave, depth)
        return True
