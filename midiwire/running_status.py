"""Running status cache for live MIDI input.

A channel voice message may omit its status byte when it repeats the
previous one.  ``RunningStatus`` remembers the last channel status and
resolves each lead byte:

  0x80-0xEF  channel status   → cached and returned
  0xF0-0xF7  sysex / common   → cache cleared, returns 0
  0x00-0x7F  data byte        → cached status (0 if none)
  0xF8-0xFF  realtime         → returns 0, cache untouched
"""

from __future__ import annotations


def is_channel_status(value: int) -> bool:
    return 0x80 <= value <= 0xEF


class RunningStatus:
    """Owned by exactly one reader; not thread-safe."""

    __slots__ = ("_status",)

    def __init__(self) -> None:
        self._status = 0

    @property
    def current(self) -> int:
        return self._status

    def resolve(self, lead: int) -> int:
        """Return the channel status that ``lead`` belongs to, or 0."""
        if lead < 0x80:
            return self._status
        if lead >= 0xF8:
            return 0
        self.feed(lead)
        return self._status

    def feed(self, status: int) -> None:
        """Register ``status`` as already read (e.g. the byte that ended a sysex)."""
        if is_channel_status(status):
            self._status = status
        elif status < 0xF8:
            self._status = 0
