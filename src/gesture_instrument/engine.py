"""The gesture-to-music engine: one ``process_frame`` call per detector tick."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Iterable, Optional, Sequence, Tuple

from .config import InstrumentConfig
from .mapping import (
    OctaveTracker,
    effective_volume,
    extract_pointer,
    volume_multiplier,
)
from .notes import NOTES, NoteSelector
from .playback import PlaybackScheduler, Sleep
from .recording import RecordingBuffer
from .trigger import PlaybackTrigger, ToneSink
from .types import FrameSnapshot, Note, PlaybackState, PointerSample, RecordedEvent
from .utils import clamp, frequency_with_octave

logger = logging.getLogger(__name__)


def _perf_ms() -> float:
    return time.perf_counter() * 1000.0


class GestureInstrument:
    """
    Maps landmark frames to notes and drives a tone sink, with recording and playback.

    The caller owns frame delivery (cadence, skipping); this class owns every
    piece of musical state. While a playback run is active, live frames still
    select notes (and record) but leave the trigger to the scheduler.
    """

    def __init__(
        self,
        sink: ToneSink,
        config: Optional[InstrumentConfig] = None,
        *,
        clock: Optional[Callable[[], float]] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.config = config or InstrumentConfig()
        self._clock = clock or _perf_ms

        self.selector = NoteSelector(
            threshold_px=self.config.note_change_threshold_px,
            min_interval_ms=self.config.min_note_change_interval_ms,
        )
        self.octave = OctaveTracker(min_z=self.config.min_z, max_z=self.config.max_z)
        self.trigger = PlaybackTrigger(sink)
        self.recording = RecordingBuffer(clock=self._clock)
        self.scheduler = PlaybackScheduler(
            self.recording,
            self.trigger,
            tail_ms=self.config.playback_tail_ms,
            sleep=sleep,
            on_event=self._on_playback_event,
        )

        self._base_volume = self.config.base_volume_percent
        self._multiplier = 1.0
        self._pointer: Optional[PointerSample] = None
        self._playback_event: Optional[RecordedEvent] = None
        self._last_frame_ms: Optional[float] = None
        self._fps = 0

    # ------------------------------------------------------------------ frames

    @property
    def fps(self) -> int:
        return self._fps

    @property
    def current_note(self) -> Optional[Note]:
        if not self.selector.has_note:
            return None
        return NOTES[self.selector.current_index]

    @property
    def playback_state(self) -> PlaybackState:
        return self.trigger.state

    @property
    def volume_percent(self) -> float:
        return effective_volume(self._base_volume, self._multiplier)

    def process_frame(self, landmarks: Optional[Sequence], width: float, height: float) -> FrameSnapshot:
        """Consume one detector output (None or empty when no hand) and return a snapshot."""
        now = self._clock()
        if self._last_frame_ms is not None:
            delta = now - self._last_frame_ms
            if delta > 0:
                self._fps = int(round(1000.0 / delta))
        self._last_frame_ms = now

        pointer = extract_pointer(landmarks, width, height)
        self._pointer = pointer
        live = not self.scheduler.is_playing

        if pointer is None:
            self.selector.reset()
            self._multiplier = 1.0
            if live:
                self.trigger.release()
            self.trigger.set_volume(self.volume_percent)
            return self.snapshot()

        self.octave.update(pointer.depth)
        changed = self.selector.update(pointer.y, height, now)
        self._multiplier = volume_multiplier(
            pointer.x,
            width,
            left_multiplier=self.config.left_volume_multiplier,
            right_multiplier=self.config.right_volume_multiplier,
        )
        self.trigger.set_volume(self.volume_percent)

        note = self.current_note
        if note is not None:
            frequency = frequency_with_octave(note.frequency_hz, self.octave.current)
            if changed is not None:
                self.recording.append(changed, self.octave.current, frequency)
            if live:
                self.trigger.play(frequency)

        return self.snapshot()

    def snapshot(self) -> FrameSnapshot:
        event = self._playback_event
        if self.scheduler.is_playing and event is not None:
            note_index = event.note_index
            octave_shift = event.octave_shift
            frequency: Optional[float] = event.frequency_hz
        else:
            note_index = self.selector.current_index
            octave_shift = self.octave.current
            frequency = None
            if note_index != -1:
                frequency = frequency_with_octave(NOTES[note_index].frequency_hz, octave_shift)

        return FrameSnapshot(
            note_name=NOTES[note_index].name if note_index != -1 else None,
            frequency_hz=frequency,
            octave_shift=octave_shift,
            volume_percent=self.volume_percent,
            fps=self._fps,
            hand_detected=self._pointer is not None,
            pointer=self._pointer,
            note_index=note_index,
            is_recording=self.recording.is_recording,
            is_playing_back=self.scheduler.is_playing,
        )

    def set_base_volume(self, percent: float) -> None:
        self._base_volume = clamp(percent, 0.0, 100.0)
        self.trigger.set_volume(self.volume_percent)

    @property
    def base_volume(self) -> float:
        return self._base_volume

    def stop(self) -> None:
        """Silence everything and forget live state (recording buffer is kept)."""
        logger.info("Instrument stopped")
        self.scheduler.stop()
        self.trigger.release()
        self.selector.reset()
        self._multiplier = 1.0
        self._pointer = None
        self._last_frame_ms = None
        self._fps = 0

    # --------------------------------------------------------------- recording

    @property
    def is_recording(self) -> bool:
        return self.recording.is_recording

    def start_recording(self) -> None:
        self.recording.start()

    def stop_recording(self) -> None:
        self.recording.stop()

    def toggle_recording(self) -> bool:
        """Start or stop recording; returns whether recording is now active."""
        if self.recording.is_recording:
            self.recording.stop()
        else:
            self.recording.start()
        return self.recording.is_recording

    def clear_recording(self) -> None:
        self.recording.clear()

    @property
    def events(self) -> Tuple[RecordedEvent, ...]:
        return self.recording.events

    @property
    def selection(self) -> Tuple[int, ...]:
        return self.recording.selection

    def set_selection(self, indices: Iterable[int]) -> None:
        self.recording.set_selection(indices)

    def toggle_selection(self, index: int) -> bool:
        return self.recording.toggle_selection(index)

    def select_all(self) -> None:
        self.recording.select_all()

    def deselect_all(self) -> None:
        self.recording.deselect_all()

    # ---------------------------------------------------------------- playback

    @property
    def is_playing_back(self) -> bool:
        return self.scheduler.is_playing

    def play_all(self) -> Optional["asyncio.Task[None]"]:
        return self.scheduler.play_all()

    def play_selected(self) -> Optional["asyncio.Task[None]"]:
        return self.scheduler.play_selected()

    def stop_playback(self) -> None:
        self.scheduler.stop()

    def _on_playback_event(self, event: RecordedEvent) -> None:
        self._playback_event = event
