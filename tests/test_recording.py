"""Tests for the recording buffer and its selection set."""

import pytest

from gesture_instrument.errors import EmptyRecordingError, InstrumentError
from gesture_instrument.recording import RecordingBuffer


@pytest.fixture
def buffer(clock):
    return RecordingBuffer(clock=clock)


def record(buffer, clock, entries):
    buffer.start()
    for delay_ms, note_index, octave, freq in entries:
        clock.advance(delay_ms)
        buffer.append(note_index, octave, freq)
    buffer.stop()


class TestRecordingBuffer:

    def test_append_ignored_when_not_recording(self, buffer):
        assert buffer.append(3, 0, 349.23) is None
        assert len(buffer) == 0

    def test_round_trip(self, buffer, clock):
        record(buffer, clock, [(10, 3, 0, 349.23), (150, 2, 0, 392.0), (0, 1, 1, 880.0), (300, 6, -1, 130.815)])

        events = buffer.events
        assert len(events) == 4
        assert [e.timestamp_ms for e in events] == [10, 160, 160, 460]
        assert all(b.timestamp_ms >= a.timestamp_ms for a, b in zip(events, events[1:]))
        assert (events[2].note_index, events[2].octave_shift, events[2].frequency_hz) == (1, 1, 880.0)

    def test_new_events_are_selected(self, buffer, clock):
        record(buffer, clock, [(10, 3, 0, 349.23), (150, 2, 0, 392.0)])

        assert buffer.selection == (0, 1)

    def test_stop_keeps_buffer(self, buffer, clock):
        record(buffer, clock, [(10, 3, 0, 349.23)])

        assert not buffer.is_recording
        assert buffer.append(2, 0, 392.0) is None
        assert len(buffer) == 1

    def test_second_session_replaces_first(self, buffer, clock):
        record(buffer, clock, [(10, 3, 0, 349.23), (150, 2, 0, 392.0)])
        record(buffer, clock, [(5, 6, 0, 261.63)])

        assert [e.note_index for e in buffer.events] == [6]
        assert buffer.events[0].timestamp_ms == 5
        assert buffer.selection == (0,)

    def test_clear(self, buffer, clock):
        record(buffer, clock, [(10, 3, 0, 349.23)])

        buffer.clear()

        assert len(buffer) == 0
        assert buffer.selection == ()

    def test_clear_empty_raises(self, buffer):
        with pytest.raises(EmptyRecordingError):
            buffer.clear()

    def test_workflow_errors_share_a_base(self):
        assert issubclass(EmptyRecordingError, InstrumentError)

    def test_selection_operations(self, buffer, clock):
        record(buffer, clock, [(10, 3, 0, 349.23), (10, 2, 0, 392.0), (10, 1, 0, 440.0)])

        buffer.deselect_all()
        assert buffer.selection == ()

        buffer.set_selection([2, 0])
        assert buffer.selection == (0, 2)

        assert buffer.toggle_selection(1) is True
        assert buffer.toggle_selection(0) is False
        assert buffer.selection == (1, 2)

        buffer.select_all()
        assert buffer.selection == (0, 1, 2)

    def test_invalid_selection_index(self, buffer, clock):
        record(buffer, clock, [(10, 3, 0, 349.23)])

        with pytest.raises(IndexError):
            buffer.set_selection([0, 5])
        assert buffer.selection == (0,)

    def test_describe(self, buffer, clock):
        record(buffer, clock, [(1250, 2, 1, 784.0), (250, 6, 0, 261.63)])

        assert buffer.describe(0) == "G (+1)  1.25s"
        assert buffer.describe(1) == "C  1.50s"
