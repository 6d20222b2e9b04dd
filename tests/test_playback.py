"""Tests for the cancellable playback scheduler."""

import asyncio

import pytest

from gesture_instrument.errors import EmptyRecordingError, EmptySelectionError
from gesture_instrument.playback import PlaybackScheduler
from gesture_instrument.recording import RecordingBuffer
from gesture_instrument.trigger import PlaybackTrigger
from gesture_instrument.types import PlaybackState

# (offset from previous event in ms, note index, frequency)
TAKE = [(0, 3, 349.23), (120, 2, 392.0), (280, 1, 440.0), (50, 0, 493.88)]


@pytest.fixture
def buffer(clock):
    buf = RecordingBuffer(clock=clock)
    buf.start()
    for delay_ms, note_index, freq in TAKE:
        clock.advance(delay_ms)
        buf.append(note_index, 0, freq)
    buf.stop()
    return buf


@pytest.fixture
def trigger(sink):
    return PlaybackTrigger(sink)


@pytest.fixture
def scheduler(buffer, trigger, fake_sleep):
    return PlaybackScheduler(buffer, trigger, tail_ms=500, sleep=fake_sleep)


async def _settle(n: int = 10) -> None:
    for _ in range(n):
        await asyncio.sleep(0)


class TestPlaybackScheduler:

    @pytest.mark.asyncio
    async def test_play_all_preserves_relative_timing(self, scheduler, sink, fake_sleep):
        task = scheduler.play_all()
        assert scheduler.is_playing

        await task

        assert fake_sleep.delays == pytest.approx([0.12, 0.28, 0.05, 0.5])
        assert sink.calls == [
            ("attack", 349.23),
            ("retarget", 392.0),
            ("retarget", 440.0),
            ("retarget", 493.88),
            ("release",),
        ]
        assert not scheduler.is_playing

    @pytest.mark.asyncio
    async def test_selected_subset_uses_gaps_between_selected(self, scheduler, buffer, sink, fake_sleep):
        buffer.set_selection([3, 0])

        await scheduler.play_selected()

        # 0 -> 3 spans 120 + 280 + 50 ms
        assert fake_sleep.delays == pytest.approx([0.45, 0.5])
        assert sink.calls == [("attack", 349.23), ("retarget", 493.88), ("release",)]

    @pytest.mark.asyncio
    async def test_first_selected_event_fires_immediately(self, scheduler, buffer, sink, fake_sleep):
        buffer.set_selection([2])

        await scheduler.play_selected()

        assert fake_sleep.delays == pytest.approx([0.5])
        assert sink.calls[0] == ("attack", 440.0)

    @pytest.mark.asyncio
    async def test_runs_are_deterministic(self, buffer, trigger, sink, fake_sleep):
        scheduler = PlaybackScheduler(buffer, trigger, sleep=fake_sleep)

        await scheduler.play_all()
        first_delays, first_calls = list(fake_sleep.delays), list(sink.calls)
        fake_sleep.delays.clear()
        sink.calls.clear()
        await scheduler.play_all()

        assert fake_sleep.delays == first_delays
        assert sink.calls == first_calls

    @pytest.mark.asyncio
    async def test_stop_mid_run_silences_and_halts(self, scheduler, trigger, sink):
        task = scheduler.play_all()
        await asyncio.sleep(0)
        assert sink.calls == [("attack", 349.23)]

        scheduler.stop()

        assert trigger.state == PlaybackState()
        assert not scheduler.is_playing
        await _settle()
        assert task.done()
        assert sink.calls == [("attack", 349.23), ("release",)]

    @pytest.mark.asyncio
    async def test_stop_is_idempotent(self, scheduler, sink):
        scheduler.play_all()
        await asyncio.sleep(0)

        scheduler.stop()
        scheduler.stop()
        await _settle()

        assert sink.kinds == ["attack", "release"]

    @pytest.mark.asyncio
    async def test_play_while_playing_toggles_off(self, scheduler, trigger, sink):
        task = scheduler.play_all()
        await asyncio.sleep(0)

        assert scheduler.play_all() is None
        assert not scheduler.is_playing
        assert trigger.state == PlaybackState()
        await _settle()
        assert task.done()
        assert sink.kinds == ["attack", "release"]

    @pytest.mark.asyncio
    async def test_play_selected_toggles_off_with_empty_selection(self, scheduler, buffer, sink):
        task = scheduler.play_selected()
        await asyncio.sleep(0)
        buffer.deselect_all()

        assert scheduler.play_selected() is None
        assert not scheduler.is_playing
        await _settle()
        assert task.done()
        assert sink.kinds == ["attack", "release"]

    @pytest.mark.asyncio
    async def test_play_all_toggles_off_after_buffer_cleared(self, scheduler, buffer, sink):
        scheduler.play_all()
        await asyncio.sleep(0)
        buffer.clear()

        assert scheduler.play_all() is None
        assert not scheduler.is_playing
        assert sink.kinds == ["attack", "release"]

    def test_stop_without_run_leaves_live_note(self, scheduler, trigger, sink):
        trigger.play(440.0)

        scheduler.stop()

        assert trigger.is_sounding
        assert sink.kinds == ["attack"]

    @pytest.mark.asyncio
    async def test_restart_begins_from_start_of_new_selection(self, scheduler, buffer, sink):
        scheduler.play_all()
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        scheduler.stop()
        await _settle()
        sink.calls.clear()

        buffer.set_selection([1, 3])
        await scheduler.play_selected()

        assert sink.calls == [("attack", 392.0), ("retarget", 493.88), ("release",)]

    @pytest.mark.asyncio
    async def test_on_event_callback(self, buffer, trigger, fake_sleep):
        seen = []
        scheduler = PlaybackScheduler(buffer, trigger, sleep=fake_sleep, on_event=seen.append)

        await scheduler.play_all()

        assert [e.note_index for e in seen] == [3, 2, 1, 0]

    @pytest.mark.asyncio
    async def test_empty_recording(self, clock, trigger, fake_sleep):
        scheduler = PlaybackScheduler(RecordingBuffer(clock=clock), trigger, sleep=fake_sleep)

        with pytest.raises(EmptyRecordingError):
            scheduler.play_all()
        assert not scheduler.is_playing

    @pytest.mark.asyncio
    async def test_empty_selection(self, scheduler, buffer):
        buffer.deselect_all()

        with pytest.raises(EmptySelectionError):
            scheduler.play_selected()
        assert not scheduler.is_playing

    @pytest.mark.asyncio
    async def test_real_sleep_timing(self, clock, trigger, sink):
        buf = RecordingBuffer(clock=clock)
        buf.start()
        buf.append(3, 0, 349.23)
        clock.advance(30)
        buf.append(2, 0, 392.0)
        buf.stop()
        scheduler = PlaybackScheduler(buf, trigger, tail_ms=20)

        loop = asyncio.get_running_loop()
        start = loop.time()
        await scheduler.play_all()
        elapsed = loop.time() - start

        assert elapsed >= 0.045
        assert sink.kinds == ["attack", "retarget", "release"]
