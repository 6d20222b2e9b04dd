from __future__ import annotations

import logging
from typing import Protocol

from .types import PlaybackState
from .utils import clamp

logger = logging.getLogger(__name__)


class ToneSink(Protocol):
    """What the trigger needs from a synth. Calls before ``is_ready`` may be ignored."""

    @property
    def is_ready(self) -> bool: ...

    def attack(self, frequency_hz: float) -> None: ...

    def retarget(self, frequency_hz: float) -> None: ...

    def release(self) -> None: ...

    def set_volume(self, percent: float) -> None: ...


class PlaybackTrigger:
    """
    Monophonic Silent / Sounding state machine in front of a tone sink.

    The trigger is the only writer of ``PlaybackState``; the frame path and the
    playback scheduler both go through it and the last call wins.
    """

    def __init__(self, sink: ToneSink) -> None:
        self._sink = sink
        self._state = PlaybackState()

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def is_sounding(self) -> bool:
        return self._state.is_sounding

    @property
    def sink(self) -> ToneSink:
        return self._sink

    def attack(self, frequency_hz: float) -> None:
        if not self._sink.is_ready:
            return
        if self._state.is_sounding:
            self.retarget(frequency_hz)
            return
        self._sink.attack(frequency_hz)
        self._state = PlaybackState(is_sounding=True, active_frequency_hz=frequency_hz)
        logger.debug("attack %.2f Hz", frequency_hz)

    def retarget(self, frequency_hz: float) -> None:
        """Glide the sounding note to a new frequency without re-attacking."""
        if not self._sink.is_ready or not self._state.is_sounding:
            return
        self._sink.retarget(frequency_hz)
        self._state = PlaybackState(is_sounding=True, active_frequency_hz=frequency_hz)

    def play(self, frequency_hz: float) -> None:
        """Attack when silent, retarget when already sounding."""
        if self._state.is_sounding:
            self.retarget(frequency_hz)
        else:
            self.attack(frequency_hz)

    def release(self) -> None:
        if not self._state.is_sounding:
            return
        if self._sink.is_ready:
            self._sink.release()
        self._state = PlaybackState()
        logger.debug("release")

    def set_volume(self, percent: float) -> None:
        if not self._sink.is_ready:
            return
        self._sink.set_volume(clamp(percent, 0.0, 100.0))
