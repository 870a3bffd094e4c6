"""Exceptions raised while reading a live MIDI stream."""

from __future__ import annotations


class MidiStreamError(Exception):
    """Base class for everything the stream reader raises."""


class EndOfStream(MidiStreamError, EOFError):
    """The source is exhausted.  Terminal; partial messages are dropped."""


class SourceError(MidiStreamError, OSError):
    """The underlying source failed with an I/O error."""


class ProtocolError(MidiStreamError, ValueError):
    """A decoder did not honour its contract (integration bug, not bad data)."""


class TruncatedMessage(MidiStreamError):
    """A status byte arrived where a data byte was expected.

    The partial message is abandoned and ``status`` becomes the next lead
    byte.  Raised by the sub-decoders and handled inside the reader; it
    never reaches callers of ``StreamReader.read()``.
    """

    def __init__(self, status: int, expected: str) -> None:
        super().__init__(
            f"status byte 0x{status:02X} interrupted {expected}"
        )
        self.status = status
