"""Replay of recorded note events with their original relative timing."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Sequence

from .errors import EmptyRecordingError, EmptySelectionError
from .recording import RecordingBuffer
from .trigger import PlaybackTrigger
from .types import RecordedEvent

logger = logging.getLogger(__name__)


DFLT_TAIL_MS = 500.0

Sleep = Callable[[float], Awaitable[None]]


@dataclass
class _PlaybackRun:
    """Cancellation token owned by a single playback run."""

    events: Sequence[RecordedEvent]
    cancelled: bool = False
    task: Optional["asyncio.Task[None]"] = None

    def cancel(self) -> None:
        self.cancelled = True
        if self.task is not None and not self.task.done():
            self.task.cancel()


class PlaybackScheduler:
    """
    Plays a subset of a ``RecordingBuffer`` through a ``PlaybackTrigger``.

    The first event fires as soon as playback starts; each following event fires
    ``ts[k+1] - ts[k]`` after the previous one, so playback can start at any time.
    After the last event the note is held for ``tail_ms`` and then released.

    Only one run is ever active. Starting while a run is active stops it instead
    (toggle), and stopping a run leaves the trigger silent.
    """

    def __init__(
        self,
        buffer: RecordingBuffer,
        trigger: PlaybackTrigger,
        *,
        tail_ms: float = DFLT_TAIL_MS,
        sleep: Sleep = asyncio.sleep,
        on_event: Optional[Callable[[RecordedEvent], None]] = None,
    ) -> None:
        self._buffer = buffer
        self._trigger = trigger
        self._tail_ms = tail_ms
        self._sleep = sleep
        self._on_event = on_event
        self._run: Optional[_PlaybackRun] = None

    @property
    def is_playing(self) -> bool:
        return self._run is not None

    def play_all(self) -> Optional["asyncio.Task[None]"]:
        if self._run is not None:
            self.stop()
            return None
        if not len(self._buffer):
            raise EmptyRecordingError("No notes recorded yet")
        return self.play(range(len(self._buffer)))

    def play_selected(self) -> Optional["asyncio.Task[None]"]:
        if self._run is not None:
            self.stop()
            return None
        selected = self._buffer.selection
        if not selected:
            raise EmptySelectionError("No notes selected")
        return self.play(selected)

    def play(self, indices) -> Optional["asyncio.Task[None]"]:
        """
        Start replaying the given buffer indices (played in ascending order).

        Returns the task driving the run, or None when the call stopped an active
        run instead. Must be called from within a running event loop.
        """
        if self._run is not None:
            self.stop()
            return None

        all_events = self._buffer.events
        events = [all_events[i] for i in sorted(indices)]
        if not events:
            raise EmptySelectionError("No notes selected")

        run = _PlaybackRun(events=events)
        self._run = run
        run.task = asyncio.get_running_loop().create_task(self._play_run(run))
        logger.info("Playback started: %d notes", len(events))
        return run.task

    def stop(self) -> None:
        """Cancel the active run, if any, and silence it. A live note is left alone."""
        run, self._run = self._run, None
        if run is None:
            return
        run.cancel()
        self._trigger.release()
        logger.info("Playback stopped")

    async def _play_run(self, run: _PlaybackRun) -> None:
        try:
            previous: Optional[RecordedEvent] = None
            for event in run.events:
                if previous is not None:
                    await self._sleep(max(0.0, event.timestamp_ms - previous.timestamp_ms) / 1000.0)
                if run.cancelled:
                    return
                self._trigger.play(event.frequency_hz)
                if self._on_event is not None:
                    self._on_event(event)
                previous = event

            await self._sleep(self._tail_ms / 1000.0)
            if run.cancelled:
                return
            self._trigger.release()
            logger.info("Playback finished")
        finally:
            if self._run is run:
                self._run = None
