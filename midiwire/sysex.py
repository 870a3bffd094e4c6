"""Read System Exclusive payloads from a live stream.

On the wire a sysex is ``F0 <data...> F7``.  Live senders may also end
one implicitly by sending any other status byte; the byte that did so
has then already been consumed and is handed back to the caller.
"""

from __future__ import annotations

from typing import Tuple

from .messages import SysEx
from .source import RealtimeFilter, is_status_byte

START_OF_EXCLUSIVE = 0xF0
END_OF_EXCLUSIVE = 0xF7


def read_sysex(src: RealtimeFilter) -> Tuple[SysEx, int]:
    """Read bytes after an 0xF0 up to the terminator.

    Returns ``(message, status)`` where ``status`` is 0 if the sysex ended
    with 0xF7, otherwise the status byte that interrupted it.
    """
    payload = bytearray()
    while True:
        value = src.read_byte()
        if value == END_OF_EXCLUSIVE:
            return SysEx(bytes(payload)), 0
        if is_status_byte(value):
            return SysEx(bytes(payload)), value
        payload.append(value)
