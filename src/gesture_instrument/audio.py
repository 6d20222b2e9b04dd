from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, Optional

import numpy as np
import sounddevice as sd

from .config import WAVEFORMS
from .utils import percent_to_gain

logger = logging.getLogger(__name__)


TWO_PI = 2.0 * np.pi

DFLT_ATTACK_S = 0.05
DFLT_DECAY_S = 0.1
DFLT_SUSTAIN = 0.7
DFLT_RELEASE_S = 0.3
DFLT_GLIDE_S = 0.02


def _saw(phase: np.ndarray) -> np.ndarray:
    return 2.0 * ((phase / TWO_PI) % 1.0) - 1.0


OSCILLATORS: Dict[str, Callable[[np.ndarray], np.ndarray]] = {
    "sine": np.sin,
    "triangle": lambda phase: 2.0 * np.abs(_saw(phase)) - 1.0,
    "sawtooth": _saw,
    "square": lambda phase: np.where(np.sin(phase) >= 0.0, 1.0, -1.0),
}


class _Envelope:
    """Linear ADSR envelope rendered block by block."""

    IDLE, ATTACK, DECAY, SUSTAIN, RELEASE = "idle", "attack", "decay", "sustain", "release"

    def __init__(self, sample_rate: int, attack_s: float, decay_s: float, sustain: float, release_s: float) -> None:
        self.sustain = sustain
        self._attack_rate = 1.0 / max(1.0, attack_s * sample_rate)
        self._decay_rate = (1.0 - sustain) / max(1.0, decay_s * sample_rate)
        self._release_samples = max(1.0, release_s * sample_rate)
        self._release_rate = 0.0
        self.stage = self.IDLE
        self.level = 0.0

    @property
    def is_active(self) -> bool:
        return self.stage != self.IDLE

    def gate_on(self) -> None:
        self.stage = self.ATTACK

    def gate_off(self) -> None:
        if self.stage == self.IDLE:
            return
        self.stage = self.RELEASE
        self._release_rate = max(self.level, 1e-6) / self._release_samples

    def _ramp(self, out: np.ndarray, start: int, target: float, rate: float) -> int:
        """Ramp linearly towards target; returns the number of samples written."""
        remaining = out.shape[0] - start
        distance = abs(target - self.level)
        n = min(remaining, max(1, int(np.ceil(distance / rate)))) if rate > 0 else remaining
        direction = 1.0 if target >= self.level else -1.0
        seg = self.level + direction * rate * np.arange(1, n + 1)
        seg = np.minimum(seg, target) if direction > 0 else np.maximum(seg, target)
        out[start : start + n] = seg
        self.level = float(seg[-1])
        return n

    def render(self, frames: int) -> np.ndarray:
        out = np.zeros(frames, dtype=np.float64)
        i = 0
        while i < frames:
            if self.stage == self.IDLE:
                self.level = 0.0
                break
            if self.stage == self.SUSTAIN:
                out[i:] = self.sustain
                self.level = self.sustain
                break
            if self.stage == self.ATTACK:
                i += self._ramp(out, i, 1.0, self._attack_rate)
                if self.level >= 1.0:
                    self.stage = self.DECAY
            elif self.stage == self.DECAY:
                i += self._ramp(out, i, self.sustain, self._decay_rate)
                if self.level <= self.sustain:
                    self.stage = self.SUSTAIN
            elif self.stage == self.RELEASE:
                i += self._ramp(out, i, 0.0, self._release_rate)
                if self.level <= 0.0:
                    self.stage = self.IDLE
        return out


class ToneGenerator:
    """
    Real-time monophonic tone generator, usable as the instrument's tone sink.

    ``attack`` starts the ADSR envelope, ``retarget`` glides the pitch of the
    sounding note without restarting the envelope and ``release`` lets it fade
    out. Volume is a 0..100 percentage mapped to -40..0 dB.
    """

    def __init__(
        self,
        waveform: str = "sine",
        sample_rate: int = 44100,
        volume: float = 70.0,
        *,
        attack_s: float = DFLT_ATTACK_S,
        decay_s: float = DFLT_DECAY_S,
        sustain: float = DFLT_SUSTAIN,
        release_s: float = DFLT_RELEASE_S,
        glide_s: float = DFLT_GLIDE_S,
        blocksize: int = 512,
    ) -> None:
        """
        Initialize the tone generator.

        Args:
            waveform: One of ``sine``, ``triangle``, ``sawtooth``, ``square``
            sample_rate: Audio sample rate in Hz
            volume: Initial volume percentage (0 to 100)
            glide_s: Time constant of the pitch glide used by ``retarget``
        """
        if waveform not in OSCILLATORS:
            raise ValueError(f"Unknown waveform '{waveform}'. Available: {list(WAVEFORMS)}")

        self.sample_rate = sample_rate
        self.blocksize = blocksize
        self._waveform = waveform
        self._glide_samples = max(1.0, glide_s * sample_rate)
        self._envelope = _Envelope(sample_rate, attack_s, decay_s, sustain, release_s)

        # Audio stream state
        self._stream: Optional[sd.OutputStream] = None
        self._lock = threading.Lock()
        self._gain = percent_to_gain(volume)
        self._frequency = 0.0
        self._target_frequency = 0.0
        self._phase = 0.0

    @property
    def is_ready(self) -> bool:
        return self._stream is not None

    @property
    def waveform(self) -> str:
        return self._waveform

    @property
    def is_sounding(self) -> bool:
        with self._lock:
            return self._envelope.is_active

    def start(self) -> None:
        """Start the audio stream."""
        if self._stream is not None:
            return

        self._stream = sd.OutputStream(
            samplerate=self.sample_rate,
            channels=1,
            dtype="float32",
            callback=self._audio_callback,
            blocksize=self.blocksize,
        )
        self._stream.start()
        logger.info("Audio started (%s, %d Hz)", self._waveform, self.sample_rate)

    def stop(self) -> None:
        """Stop the audio stream."""
        if self._stream is None:
            return
        try:
            self._stream.stop()
            self._stream.close()
        finally:
            self._stream = None

    def attack(self, frequency_hz: float) -> None:
        with self._lock:
            self._frequency = self._target_frequency = float(frequency_hz)
            self._envelope.gate_on()

    def retarget(self, frequency_hz: float) -> None:
        with self._lock:
            self._target_frequency = float(frequency_hz)

    def release(self) -> None:
        with self._lock:
            self._envelope.gate_off()

    def set_volume(self, percent: float) -> None:
        with self._lock:
            self._gain = percent_to_gain(percent)

    def set_waveform(self, waveform: str) -> None:
        """Switch oscillator shape; a sounding note keeps playing at the same pitch."""
        if waveform not in OSCILLATORS:
            raise ValueError(f"Unknown waveform '{waveform}'. Available: {list(WAVEFORMS)}")
        with self._lock:
            self._waveform = waveform
        logger.info("Waveform: %s", waveform)

    def render(self, frames: int) -> np.ndarray:
        """Synthesize the next ``frames`` mono samples (float32)."""
        with self._lock:
            env = self._envelope.render(frames)
            if not env.any():
                return np.zeros(frames, dtype=np.float32)

            start = self._frequency
            end = self._target_frequency + (start - self._target_frequency) * np.exp(-frames / self._glide_samples)
            freqs = np.linspace(start, end, frames, endpoint=False)
            self._frequency = float(end)

            phases = self._phase + np.cumsum(TWO_PI * freqs / self.sample_rate)
            self._phase = float(phases[-1] % TWO_PI)

            wave = OSCILLATORS[self._waveform](phases)
            return (wave * env * self._gain).astype(np.float32)

    def _audio_callback(self, outdata, frames, time_info, status) -> None:
        """
        Audio callback for sounddevice stream.

        Args:
            outdata: Output buffer to fill with audio samples
            frames: Number of frames to generate
            time_info: Timing information from the audio system
            status: Stream status flags indicating errors or warnings
        """
        if status:
            logger.debug("Audio stream status: %s", status)
        outdata[:, 0] = self.render(frames)

    def __enter__(self) -> "ToneGenerator":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
