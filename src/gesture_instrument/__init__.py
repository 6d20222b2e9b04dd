from .config import InstrumentConfig
from .engine import GestureInstrument
from .errors import EmptyRecordingError, EmptySelectionError, InstrumentError
from .notes import NOTES, NoteSelector
from .types import FrameSnapshot, Landmark, Note, PlaybackState, PointerSample, RecordedEvent

__all__ = [
    "GestureInstrument",
    "InstrumentConfig",
    "InstrumentError",
    "EmptyRecordingError",
    "EmptySelectionError",
    "NOTES",
    "NoteSelector",
    "FrameSnapshot",
    "Landmark",
    "Note",
    "PlaybackState",
    "PointerSample",
    "RecordedEvent",
]
