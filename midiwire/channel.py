"""Decode channel voice messages (status 0x80-0xEF).

Data byte counts by status high nibble:

  0x8 NoteOff         key, velocity
  0x9 NoteOn          key, velocity   (velocity 0 = note off)
  0xA PolyAftertouch  key, pressure
  0xB ControlChange   controller, value
  0xC ProgramChange   program
  0xD Aftertouch      pressure
  0xE PitchBend       lsb, msb
"""

from __future__ import annotations

from typing import Optional

from .messages import (
    PITCH_BEND_CENTER,
    Aftertouch,
    ChannelMessage,
    ControlChange,
    NoteOff,
    NoteOffPedantic,
    NoteOn,
    PitchBend,
    PolyAftertouch,
    ProgramChange,
)
from .source import RealtimeFilter

ONE_DATA_BYTE = frozenset({0xC0, 0xD0})


def data_length(status: int) -> int:
    return 1 if (status & 0xF0) in ONE_DATA_BYTE else 2


def read_channel_message(
    src: RealtimeFilter,
    status: int,
    first: Optional[int] = None,
    *,
    note_off_pedantic: bool = False,
) -> Optional[ChannelMessage]:
    """Read the data bytes for ``status`` and build the message.

    Parameters
    ----------
    src : RealtimeFilter
        Filtered byte source.
    status : int
        Resolved channel status byte.
    first : int, optional
        First data byte when it was already consumed as the lead byte of
        a running-status message.
    note_off_pedantic : bool
        Return NoteOn with velocity 0 as ``NoteOffPedantic`` instead of
        ``NoteOff``.

    Returns None when ``status`` is not a channel status.
    """
    kind = status & 0xF0
    if not 0x80 <= kind <= 0xE0:
        return None
    channel = status & 0x0F

    data1 = first if first is not None else src.read_data_byte(f"0x{kind:02X} data")
    if data_length(status) == 1:
        if kind == 0xC0:
            return ProgramChange(channel=channel, program=data1)
        return Aftertouch(channel=channel, pressure=data1)

    data2 = src.read_data_byte(f"0x{kind:02X} data")

    if kind == 0x80:
        return NoteOff(channel=channel, key=data1, velocity=data2)
    if kind == 0x90:
        if data2 == 0:
            if note_off_pedantic:
                return NoteOffPedantic(channel=channel, key=data1)
            return NoteOff(channel=channel, key=data1)
        return NoteOn(channel=channel, key=data1, velocity=data2)
    if kind == 0xA0:
        return PolyAftertouch(channel=channel, key=data1, pressure=data2)
    if kind == 0xB0:
        return ControlChange(channel=channel, controller=data1, value=data2)
    # 0xE0: LSB first
    return PitchBend(channel=channel, value=((data2 << 7) | data1) - PITCH_BEND_CENTER)
