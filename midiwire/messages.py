"""Typed MIDI messages produced by the live stream reader.

Every message is an immutable dataclass.  The variants mirror the wire
families:

  0x80-0xEF  channel voice (status high nibble = kind, low nibble = channel)
  0xF0       system exclusive (payload only, framing bytes stripped)
  0xF1-0xF6  system common
  0xF8-0xFF  system realtime (only ever handed to the realtime callback)

``to_mido()`` converts a message into the equivalent ``mido.Message`` so
decoded streams can be handed to code built on mido.
"""

from __future__ import annotations

from dataclasses import dataclass

import mido


PITCH_BEND_CENTER = 0x2000

CLOCK = 0xF8
TICK = 0xF9
START = 0xFA
CONTINUE = 0xFB
STOP = 0xFC
UNDEFINED = 0xFD
ACTIVE_SENSING = 0xFE
RESET = 0xFF

REALTIME_NAMES = {
    CLOCK: "clock",
    TICK: "tick",
    START: "start",
    CONTINUE: "continue",
    STOP: "stop",
    UNDEFINED: "undefined",
    ACTIVE_SENSING: "active_sensing",
    RESET: "reset",
}

# mido has no message type for 0xF9 / 0xFD
_MIDO_REALTIME = {
    CLOCK: "clock",
    START: "start",
    CONTINUE: "continue",
    STOP: "stop",
    ACTIVE_SENSING: "active_sensing",
    RESET: "reset",
}


def _check_data(name: str, value: int) -> None:
    if not 0 <= value <= 0x7F:
        raise ValueError(f"{name} out of range: {value} (need 0-127)")


def _check_channel(channel: int) -> None:
    if not 0 <= channel <= 0x0F:
        raise ValueError(f"channel out of range: {channel} (need 0-15)")


class Message:
    """Base class for every decoded message."""

    __slots__ = ()

    @property
    def status(self) -> int:
        raise NotImplementedError

    def to_mido(self) -> mido.Message:
        raise NotImplementedError


# ── channel voice ──────────────────────────────────────────────────


@dataclass(frozen=True)
class ChannelMessage(Message):
    channel: int

    KIND = 0x00

    def __post_init__(self) -> None:
        _check_channel(self.channel)

    @property
    def status(self) -> int:
        return self.KIND | self.channel


@dataclass(frozen=True)
class NoteOff(ChannelMessage):
    key: int
    velocity: int = 0

    KIND = 0x80

    def __post_init__(self) -> None:
        super().__post_init__()
        _check_data("key", self.key)
        _check_data("velocity", self.velocity)

    def to_mido(self) -> mido.Message:
        return mido.Message(
            "note_off", channel=self.channel, note=self.key, velocity=self.velocity
        )

    def __str__(self) -> str:
        return f"NoteOff ch={self.channel} key={self.key} vel={self.velocity}"


@dataclass(frozen=True)
class NoteOn(ChannelMessage):
    key: int
    velocity: int

    KIND = 0x90

    def __post_init__(self) -> None:
        super().__post_init__()
        _check_data("key", self.key)
        _check_data("velocity", self.velocity)

    def to_mido(self) -> mido.Message:
        return mido.Message(
            "note_on", channel=self.channel, note=self.key, velocity=self.velocity
        )

    def __str__(self) -> str:
        return f"NoteOn ch={self.channel} key={self.key} vel={self.velocity}"


@dataclass(frozen=True)
class NoteOffPedantic(ChannelMessage):
    """A NoteOn with velocity 0, kept apart from a real NoteOff (0x8n)."""

    key: int
    velocity: int = 0

    KIND = 0x90

    def __post_init__(self) -> None:
        super().__post_init__()
        _check_data("key", self.key)
        if self.velocity != 0:
            raise ValueError(f"NoteOffPedantic velocity must be 0, got {self.velocity}")

    def to_mido(self) -> mido.Message:
        return mido.Message("note_on", channel=self.channel, note=self.key, velocity=0)

    def __str__(self) -> str:
        return f"NoteOffPedantic ch={self.channel} key={self.key}"


@dataclass(frozen=True)
class PolyAftertouch(ChannelMessage):
    key: int
    pressure: int

    KIND = 0xA0

    def __post_init__(self) -> None:
        super().__post_init__()
        _check_data("key", self.key)
        _check_data("pressure", self.pressure)

    def to_mido(self) -> mido.Message:
        return mido.Message(
            "polytouch", channel=self.channel, note=self.key, value=self.pressure
        )

    def __str__(self) -> str:
        return f"PolyAftertouch ch={self.channel} key={self.key} pressure={self.pressure}"


@dataclass(frozen=True)
class ControlChange(ChannelMessage):
    controller: int
    value: int

    KIND = 0xB0

    def __post_init__(self) -> None:
        super().__post_init__()
        _check_data("controller", self.controller)
        _check_data("value", self.value)

    def to_mido(self) -> mido.Message:
        return mido.Message(
            "control_change",
            channel=self.channel,
            control=self.controller,
            value=self.value,
        )

    def __str__(self) -> str:
        return f"ControlChange ch={self.channel} cc={self.controller} value={self.value}"


@dataclass(frozen=True)
class ProgramChange(ChannelMessage):
    program: int

    KIND = 0xC0

    def __post_init__(self) -> None:
        super().__post_init__()
        _check_data("program", self.program)

    def to_mido(self) -> mido.Message:
        return mido.Message("program_change", channel=self.channel, program=self.program)

    def __str__(self) -> str:
        return f"ProgramChange ch={self.channel} program={self.program}"


@dataclass(frozen=True)
class Aftertouch(ChannelMessage):
    pressure: int

    KIND = 0xD0

    def __post_init__(self) -> None:
        super().__post_init__()
        _check_data("pressure", self.pressure)

    def to_mido(self) -> mido.Message:
        return mido.Message("aftertouch", channel=self.channel, value=self.pressure)

    def __str__(self) -> str:
        return f"Aftertouch ch={self.channel} pressure={self.pressure}"


@dataclass(frozen=True)
class PitchBend(ChannelMessage):
    """Pitch bend; ``value`` is signed, 0 = center (-8192..8191)."""

    value: int

    KIND = 0xE0

    def __post_init__(self) -> None:
        super().__post_init__()
        if not -PITCH_BEND_CENTER <= self.value < PITCH_BEND_CENTER:
            raise ValueError(f"pitch bend out of range: {self.value}")

    @property
    def absolute(self) -> int:
        """The raw 14-bit wire value (0..16383, 8192 = center)."""
        return self.value + PITCH_BEND_CENTER

    def to_mido(self) -> mido.Message:
        return mido.Message("pitchwheel", channel=self.channel, pitch=self.value)

    def __str__(self) -> str:
        return f"PitchBend ch={self.channel} value={self.value}"


# ── system exclusive ───────────────────────────────────────────────


@dataclass(frozen=True)
class SysEx(Message):
    data: bytes

    def __post_init__(self) -> None:
        if any(b > 0x7F for b in self.data):
            raise ValueError("sysex payload must contain data bytes only")

    @property
    def status(self) -> int:
        return 0xF0

    def to_mido(self) -> mido.Message:
        return mido.Message("sysex", data=tuple(self.data))

    def __str__(self) -> str:
        return f"SysEx len={len(self.data)} data={self.data.hex(' ')}"


# ── system common ──────────────────────────────────────────────────


@dataclass(frozen=True)
class MTCQuarterFrame(Message):
    frame_type: int  # 0-7
    value: int  # 0-15

    def __post_init__(self) -> None:
        if not 0 <= self.frame_type <= 7:
            raise ValueError(f"MTC frame type out of range: {self.frame_type}")
        if not 0 <= self.value <= 0x0F:
            raise ValueError(f"MTC value out of range: {self.value}")

    @property
    def status(self) -> int:
        return 0xF1

    def to_mido(self) -> mido.Message:
        return mido.Message(
            "quarter_frame", frame_type=self.frame_type, frame_value=self.value
        )

    def __str__(self) -> str:
        return f"MTCQuarterFrame type={self.frame_type} value={self.value}"


@dataclass(frozen=True)
class SongPositionPointer(Message):
    position: int  # 14-bit, in MIDI beats (6 clocks)

    def __post_init__(self) -> None:
        if not 0 <= self.position <= 0x3FFF:
            raise ValueError(f"song position out of range: {self.position}")

    @property
    def status(self) -> int:
        return 0xF2

    def to_mido(self) -> mido.Message:
        return mido.Message("songpos", pos=self.position)

    def __str__(self) -> str:
        return f"SongPositionPointer position={self.position}"


@dataclass(frozen=True)
class SongSelect(Message):
    song: int

    def __post_init__(self) -> None:
        _check_data("song", self.song)

    @property
    def status(self) -> int:
        return 0xF3

    def to_mido(self) -> mido.Message:
        return mido.Message("song_select", song=self.song)

    def __str__(self) -> str:
        return f"SongSelect song={self.song}"


@dataclass(frozen=True)
class TuneRequest(Message):
    @property
    def status(self) -> int:
        return 0xF6

    def to_mido(self) -> mido.Message:
        return mido.Message("tune_request")

    def __str__(self) -> str:
        return "TuneRequest"


# ── system realtime ────────────────────────────────────────────────


@dataclass(frozen=True)
class Realtime(Message):
    """Single-byte realtime message, identified by its status byte."""

    code: int

    def __post_init__(self) -> None:
        if self.code not in REALTIME_NAMES:
            raise ValueError(f"not a realtime status byte: 0x{self.code:02X}")

    @property
    def status(self) -> int:
        return self.code

    @property
    def name(self) -> str:
        return REALTIME_NAMES[self.code]

    def to_mido(self) -> mido.Message:
        kind = _MIDO_REALTIME.get(self.code)
        if kind is None:
            raise ValueError(f"realtime 0x{self.code:02X} has no mido equivalent")
        return mido.Message(kind)

    def __str__(self) -> str:
        return f"Realtime {self.name}"
