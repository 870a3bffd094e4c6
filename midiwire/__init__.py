"""Decode live MIDI byte streams (serial ports, virtual ports) into messages."""

from .errors import (  # noqa: F401
    EndOfStream,
    MidiStreamError,
    ProtocolError,
    SourceError,
)
from .messages import (  # noqa: F401
    ACTIVE_SENSING,
    CLOCK,
    CONTINUE,
    RESET,
    START,
    STOP,
    TICK,
    UNDEFINED,
    Aftertouch,
    ChannelMessage,
    ControlChange,
    Message,
    MTCQuarterFrame,
    NoteOff,
    NoteOffPedantic,
    NoteOn,
    PitchBend,
    PolyAftertouch,
    ProgramChange,
    Realtime,
    SongPositionPointer,
    SongSelect,
    SysEx,
    TuneRequest,
)
from .reader import StreamReader, read_all  # noqa: F401
from .running_status import RunningStatus  # noqa: F401
from .source import RealtimeFilter  # noqa: F401
