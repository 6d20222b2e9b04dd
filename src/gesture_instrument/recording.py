from __future__ import annotations

import logging
import time
from typing import Callable, Iterable, List, Optional, Set, Tuple

from .errors import EmptyRecordingError
from .notes import NOTES
from .types import RecordedEvent

logger = logging.getLogger(__name__)


def _perf_ms() -> float:
    return time.perf_counter() * 1000.0


class RecordingBuffer:
    """
    Timestamped note-change capture plus the selection used for playback.

    Events are only ever appended while recording, or replaced wholesale by a
    new recording or ``clear()``.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None) -> None:
        self._clock = clock or _perf_ms
        self._events: List[RecordedEvent] = []
        self._selection: Set[int] = set()
        self._start_ms = 0.0
        self._is_recording = False

    @property
    def is_recording(self) -> bool:
        return self._is_recording

    @property
    def events(self) -> Tuple[RecordedEvent, ...]:
        return tuple(self._events)

    @property
    def selection(self) -> Tuple[int, ...]:
        """Selected buffer indices in ascending (recording) order."""
        return tuple(sorted(self._selection))

    def __len__(self) -> int:
        return len(self._events)

    def start(self) -> None:
        self._events = []
        self._selection = set()
        self._start_ms = self._clock()
        self._is_recording = True
        logger.info("Recording started")

    def stop(self) -> None:
        if not self._is_recording:
            return
        self._is_recording = False
        logger.info("Recording stopped: %d notes captured", len(self._events))

    def append(self, note_index: int, octave_shift: int, frequency_hz: float) -> Optional[RecordedEvent]:
        if not self._is_recording:
            return None
        event = RecordedEvent(
            timestamp_ms=self._clock() - self._start_ms,
            note_index=note_index,
            octave_shift=octave_shift,
            frequency_hz=frequency_hz,
        )
        self._events.append(event)
        self._selection.add(len(self._events) - 1)
        return event

    def clear(self) -> None:
        if not self._events:
            raise EmptyRecordingError("No recording to clear")
        self._events = []
        self._selection = set()
        logger.info("Recording cleared")

    def _check_index(self, index: int) -> int:
        if not 0 <= index < len(self._events):
            raise IndexError(f"No recorded note at index {index} (have {len(self._events)})")
        return index

    def set_selection(self, indices: Iterable[int]) -> None:
        self._selection = {self._check_index(i) for i in indices}

    def toggle_selection(self, index: int) -> bool:
        """Flip one note in or out of the selection; returns whether it is now selected."""
        self._check_index(index)
        if index in self._selection:
            self._selection.discard(index)
            return False
        self._selection.add(index)
        return True

    def select_all(self) -> None:
        self._selection = set(range(len(self._events)))

    def deselect_all(self) -> None:
        self._selection = set()

    def describe(self, index: int) -> str:
        """List label for a recorded note, e.g. ``'G (+1)  1.25s'``."""
        event = self._events[self._check_index(index)]
        name = NOTES[event.note_index].name
        if event.octave_shift:
            name = f"{name} ({event.octave_shift:+d})"
        return f"{name}  {event.timestamp_ms / 1000.0:.2f}s"
