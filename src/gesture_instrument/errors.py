from __future__ import annotations


class InstrumentError(Exception):
    """A user-workflow condition the presentation layer should report, not a fault."""


class EmptyRecordingError(InstrumentError):
    """Raised when playing back or clearing while nothing has been recorded."""


class EmptySelectionError(InstrumentError):
    """Raised when playing the selection while no recorded note is selected."""
