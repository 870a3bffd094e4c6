"""Byte source that strips System Realtime bytes out of the stream.

Realtime messages (0xF8-0xFF) may appear between any two bytes, even in
the middle of another message.  ``RealtimeFilter`` removes them before
anything downstream sees the byte, handing each one to an optional
callback synchronously, inside the ``read_byte()`` call that met it.
"""

from __future__ import annotations

from typing import BinaryIO, Callable, Optional

from .errors import EndOfStream, SourceError, TruncatedMessage
from .messages import Realtime

RealtimeHandler = Callable[[Realtime], None]


def is_status_byte(value: int) -> bool:
    return value >= 0x80


def is_realtime_byte(value: int) -> bool:
    return value >= 0xF8


class RealtimeFilter:
    """Pull bytes one at a time from ``src``, skipping realtime bytes.

    ``src`` is anything with a ``read(n)`` method returning bytes: a file
    opened in binary mode, ``io.BytesIO``, ``sys.stdin.buffer`` or a
    ``serial.Serial`` port.  An empty read means end of stream.  The
    filter never buffers and never closes ``src``.
    """

    def __init__(self, src: BinaryIO, handler: Optional[RealtimeHandler] = None) -> None:
        if not callable(getattr(src, "read", None)):
            raise TypeError(f"source must have a read() method, got {type(src).__name__}")
        self._src = src
        self._handler = handler

    def _read_raw(self) -> int:
        try:
            chunk = self._src.read(1)
        except OSError as exc:
            raise SourceError(f"reading MIDI source failed: {exc}") from exc
        if not chunk:
            raise EndOfStream("MIDI source exhausted")
        return chunk[0]

    def read_byte(self) -> int:
        """Return the next non-realtime byte."""
        while True:
            value = self._read_raw()
            if not is_realtime_byte(value):
                return value
            if self._handler is not None:
                self._handler(Realtime(value))

    def read_data_byte(self, expected: str) -> int:
        """Return the next byte, which must be a data byte.

        Raises ``TruncatedMessage`` carrying the status byte otherwise.
        """
        value = self.read_byte()
        if is_status_byte(value):
            raise TruncatedMessage(value, expected)
        return value
