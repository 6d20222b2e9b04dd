from __future__ import annotations

import math


def clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))


def clamp_int(v: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, v))


def round_half_up(v: float) -> int:
    """Round to nearest integer, ties towards +inf (unlike the builtin banker's rounding)."""
    return int(math.floor(v + 0.5))


def frequency_with_octave(base_frequency_hz: float, octave_shift: int = 0) -> float:
    """
    Shift a frequency by whole octaves.

    >>> frequency_with_octave(440.0, 1)
    880.0
    >>> frequency_with_octave(440.0, -1)
    220.0
    """
    return base_frequency_hz * (2.0 ** octave_shift)


def percent_to_gain(percent: float) -> float:
    """
    Convert a 0..100 volume percentage to linear gain.

    100% is 0 dB and 0% is -40 dB, with a hard mute at 0.
    """
    percent = clamp(percent, 0.0, 100.0)
    if percent <= 0.0:
        return 0.0
    db = ((percent - 100.0) / 100.0) * 40.0
    return 10.0 ** (db / 20.0)
