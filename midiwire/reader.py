"""Read "live" MIDI messages from an unbounded byte stream.

One call to ``StreamReader.read()`` returns exactly one message.  The
lead byte is resolved through running status and dispatched by range:

  0x00-0xEF  channel voice (directly or via running status)
  0xF0       system exclusive
  0xF1-0xF6  system common
  0xF7       stray end-of-exclusive, skipped
  0xF8-0xFF  realtime, already removed by RealtimeFilter

A message that cannot be decoded (undefined status, data byte without a
running status) is thrown away together with all data bytes after it, up
to the next status byte, and reading resumes there.  Retries happen in a
loop inside ``read()`` so a long run of garbage never grows the stack.
"""

from __future__ import annotations

import io
import logging
from typing import BinaryIO, Iterator, List, Optional

from .channel import read_channel_message
from .errors import EndOfStream, ProtocolError, TruncatedMessage
from .messages import Message
from .running_status import RunningStatus, is_channel_status
from .source import RealtimeFilter, RealtimeHandler, is_status_byte
from .syscommon import read_system_common
from .sysex import END_OF_EXCLUSIVE, START_OF_EXCLUSIVE, read_sysex

log = logging.getLogger(__name__)

_SKIP = object()


class StreamReader:
    """Decode messages from ``src`` one at a time.

    Parameters
    ----------
    src : binary file-like
        Anything with ``read(n) -> bytes``.  Never closed by the reader.
    realtime_handler : callable, optional
        Called with each ``Realtime`` message as it is filtered out of the
        stream.  Realtime bytes are dropped silently when None.
    note_off_pedantic : bool
        Keep NoteOn velocity 0 as ``NoteOffPedantic`` instead of folding
        it into ``NoteOff``.
    """

    def __init__(
        self,
        src: BinaryIO,
        realtime_handler: Optional[RealtimeHandler] = None,
        *,
        note_off_pedantic: bool = False,
    ) -> None:
        self._input = RealtimeFilter(src, realtime_handler)
        self._running_status = RunningStatus()
        self._note_off_pedantic = note_off_pedantic
        # System status that ended a sysex, still to be dispatched.
        self._pending: Optional[int] = None

    @property
    def note_off_pedantic(self) -> bool:
        return self._note_off_pedantic

    def read(self) -> Message:
        """Return the next message.

        Raises ``EndOfStream`` when the source is exhausted (also in the
        middle of a message), ``SourceError`` on I/O failure and
        ``ProtocolError`` if a decoder rejects its own status byte.
        """
        if self._pending is not None:
            lead, self._pending = self._pending, None
        else:
            lead = self._input.read_byte()

        while True:
            try:
                msg = self._dispatch(lead)
            except TruncatedMessage as exc:
                log.debug("dropping partial message: %s", exc)
                lead = exc.status
                continue

            if msg is _SKIP:
                lead = self._input.read_byte()
            elif msg is None:
                lead = self._discard_until_status(lead)
            else:
                return msg

    def __iter__(self) -> Iterator[Message]:
        """Yield messages until the source is exhausted."""
        while True:
            try:
                msg = self.read()
            except EndOfStream:
                return
            yield msg

    def _dispatch(self, lead: int) -> object:
        """Return a message, None for unrecognized input, or _SKIP."""
        status = self._running_status.resolve(lead)
        if status:
            first = None if is_status_byte(lead) else lead
            msg = read_channel_message(
                self._input, status, first, note_off_pedantic=self._note_off_pedantic
            )
            if msg is None:
                raise ProtocolError(
                    f"channel decoder did not recognize status 0x{status:02X}"
                )
            return msg

        if lead == START_OF_EXCLUSIVE:
            msg, interrupt = read_sysex(self._input)
            if interrupt:
                log.debug("sysex ended by status 0x%02X", interrupt)
                self._running_status.feed(interrupt)
                if not is_channel_status(interrupt):
                    self._pending = interrupt
            return msg

        if lead == END_OF_EXCLUSIVE:
            log.debug("ignoring 0xF7 outside of a sysex")
            return _SKIP

        return read_system_common(self._input, lead)

    def _discard_until_status(self, lead: int) -> int:
        """Throw away data bytes up to the next status byte and return it."""
        discarded = 0
        while True:
            value = self._input.read_byte()
            if is_status_byte(value):
                log.debug(
                    "skipped unrecognized 0x%02X and %d data byte(s), resuming at 0x%02X",
                    lead,
                    discarded,
                    value,
                )
                return value
            discarded += 1


def read_all(data: bytes, **kwargs) -> List[Message]:
    """Decode every complete message in ``data``.

    Keyword arguments are passed to ``StreamReader``.  A trailing partial
    message is dropped.
    """
    return list(StreamReader(io.BytesIO(data), **kwargs))
