from __future__ import annotations

from dataclasses import dataclass


WAVEFORMS = ("sine", "triangle", "sawtooth", "square")


@dataclass(frozen=True)
class InstrumentConfig:
    """Tunables for the gesture-to-music mapping, the recorder and the synth."""

    # Note selection
    note_change_threshold_px: float = 20.0
    min_note_change_interval_ms: float = 100.0

    # Depth -> octave. min_z reads as "far", max_z as "close".
    min_z: float = -0.1
    max_z: float = 0.05

    # Horizontal position -> volume multiplier
    left_volume_multiplier: float = 0.5
    right_volume_multiplier: float = 1.5
    base_volume_percent: float = 70.0

    # Playback
    playback_tail_ms: float = 500.0

    # Adaptive frame skipping
    fps_threshold: int = 20
    fps_recovery_margin: int = 5

    # Synth
    waveform: str = "sine"
    sample_rate: int = 44100

    def __post_init__(self) -> None:
        if self.max_z <= self.min_z:
            raise ValueError(f"max_z ({self.max_z}) must be greater than min_z ({self.min_z})")
        if self.note_change_threshold_px < 0:
            raise ValueError("note_change_threshold_px must be >= 0")
        if self.min_note_change_interval_ms < 0:
            raise ValueError("min_note_change_interval_ms must be >= 0")
        if not (0.0 <= self.base_volume_percent <= 100.0):
            raise ValueError("base_volume_percent must be within 0..100")
        if self.playback_tail_ms < 0:
            raise ValueError("playback_tail_ms must be >= 0")
        if self.waveform not in WAVEFORMS:
            raise ValueError(f"Unknown waveform '{self.waveform}'. Available: {list(WAVEFORMS)}")
