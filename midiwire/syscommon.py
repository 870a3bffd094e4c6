"""Decode System Common messages (0xF1-0xF6)."""

from __future__ import annotations

from typing import Optional

from .messages import (
    Message,
    MTCQuarterFrame,
    SongPositionPointer,
    SongSelect,
    TuneRequest,
)
from .source import RealtimeFilter

MTC_QUARTER_FRAME = 0xF1
SONG_POSITION_POINTER = 0xF2
SONG_SELECT = 0xF3
TUNE_REQUEST = 0xF6


def read_system_common(src: RealtimeFilter, status: int) -> Optional[Message]:
    """Read the payload following ``status``.

    Returns None for anything that is not a known system common status,
    without consuming further bytes; the caller resynchronizes.
    """
    if status == TUNE_REQUEST:
        return TuneRequest()
    if status == MTC_QUARTER_FRAME:
        data = src.read_data_byte("MTC quarter frame")
        return MTCQuarterFrame(frame_type=data >> 4, value=data & 0x0F)
    if status == SONG_SELECT:
        return SongSelect(song=src.read_data_byte("song select"))
    if status == SONG_POSITION_POINTER:
        lsb = src.read_data_byte("song position")
        msb = src.read_data_byte("song position")
        return SongPositionPointer(position=(msb << 7) | lsb)
    return None
