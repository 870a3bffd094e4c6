"""Tests for the live stream reader: dispatch, running status, recovery."""

import io

import mido
import pytest

from midiwire.errors import EndOfStream, ProtocolError, SourceError
from midiwire.messages import (
    CLOCK,
    START,
    ControlChange,
    MTCQuarterFrame,
    NoteOff,
    NoteOffPedantic,
    NoteOn,
    PitchBend,
    ProgramChange,
    Realtime,
    SongSelect,
    SysEx,
    TuneRequest,
)
from midiwire.reader import StreamReader, read_all


def _reader(data: bytes, **kwargs) -> StreamReader:
    return StreamReader(io.BytesIO(data), **kwargs)


class _FailingSource:
    """Yields ``data`` and then raises OSError."""

    def __init__(self, data: bytes):
        self._data = io.BytesIO(data)

    def read(self, n: int) -> bytes:
        chunk = self._data.read(n)
        if not chunk:
            raise OSError("port unplugged")
        return chunk


# ── complete, valid streams ────────────────────────────────────────


def test_valid_stream_decodes_in_order():
    data = bytes(
        [
            0x90, 0x3C, 0x64,  # NoteOn ch0
            0x81, 0x3C, 0x20,  # NoteOff ch1 with release velocity
            0xB2, 0x07, 0x7F,  # CC ch2
            0xC3, 0x05,  # program change ch3
            0xE4, 0x00, 0x40,  # pitch bend center ch4
            0xF3, 0x02,  # song select
            0xF6,  # tune request
        ]
    )
    assert read_all(data) == [
        NoteOn(channel=0, key=0x3C, velocity=0x64),
        NoteOff(channel=1, key=0x3C, velocity=0x20),
        ControlChange(channel=2, controller=7, value=127),
        ProgramChange(channel=3, program=5),
        PitchBend(channel=4, value=0),
        SongSelect(song=2),
        TuneRequest(),
    ]


def test_matches_messages_encoded_by_mido():
    sent = [
        mido.Message("note_on", channel=9, note=36, velocity=110),
        mido.Message("control_change", channel=0, control=64, value=127),
        mido.Message("pitchwheel", channel=1, pitch=-8192),
        mido.Message("aftertouch", channel=2, value=33),
        mido.Message("polytouch", channel=3, note=60, value=12),
        mido.Message("sysex", data=(0x7E, 0x7F, 0x06, 0x01)),
        mido.Message("quarter_frame", frame_type=3, frame_value=9),
        mido.Message("songpos", pos=1000),
        mido.Message("note_off", channel=9, note=36, velocity=64),
    ]
    data = b"".join(bytes(msg.bytes()) for msg in sent)
    decoded = read_all(data)
    assert [msg.to_mido() for msg in decoded] == sent


def test_iteration_stops_at_end_of_stream():
    reader = _reader(bytes([0xC0, 0x01, 0xC0, 0x02]))
    assert [m.program for m in reader] == [1, 2]


# ── running status ─────────────────────────────────────────────────


def test_running_status_reuses_previous_status():
    reader = _reader(bytes([0x90, 0x40, 0x7F, 0x40, 0x00]))
    assert reader.read() == NoteOn(channel=0, key=0x40, velocity=0x7F)
    assert reader.read() == NoteOff(channel=0, key=0x40)


def test_running_status_pedantic():
    reader = _reader(bytes([0x90, 0x40, 0x7F, 0x40, 0x00]), note_off_pedantic=True)
    assert reader.read() == NoteOn(channel=0, key=0x40, velocity=0x7F)
    assert reader.read() == NoteOffPedantic(channel=0, key=0x40, velocity=0)


def test_running_status_single_data_byte_messages():
    assert read_all(bytes([0xC5, 0x01, 0x02, 0x03])) == [
        ProgramChange(channel=5, program=1),
        ProgramChange(channel=5, program=2),
        ProgramChange(channel=5, program=3),
    ]


def test_system_common_cancels_running_status():
    # After F6 the bare data bytes have no status to inherit and are skipped.
    data = bytes([0x90, 0x3C, 0x40, 0xF6, 0x3C, 0x40, 0x80, 0x3C, 0x00])
    assert read_all(data) == [
        NoteOn(channel=0, key=0x3C, velocity=0x40),
        TuneRequest(),
        NoteOff(channel=0, key=0x3C, velocity=0),
    ]


def test_realtime_does_not_cancel_running_status():
    data = bytes([0x90, 0x3C, 0x40, 0xF8, 0x3E, 0x40])
    assert read_all(data) == [
        NoteOn(channel=0, key=0x3C, velocity=0x40),
        NoteOn(channel=0, key=0x3E, velocity=0x40),
    ]


# ── pedantic note off ──────────────────────────────────────────────


def test_note_on_zero_velocity_is_note_off_by_default():
    reader = _reader(bytes([0x90, 0x3C, 0x00]))
    assert not reader.note_off_pedantic
    assert reader.read() == NoteOff(channel=0, key=0x3C)


def test_note_on_zero_velocity_pedantic():
    reader = _reader(bytes([0x90, 0x3C, 0x00]), note_off_pedantic=True)
    msg = reader.read()
    assert msg == NoteOffPedantic(channel=0, key=0x3C, velocity=0)
    assert msg != NoteOff(channel=0, key=0x3C)


def test_real_note_off_unaffected_by_pedantic():
    assert read_all(bytes([0x85, 0x3C, 0x10]), note_off_pedantic=True) == [
        NoteOff(channel=5, key=0x3C, velocity=0x10)
    ]


# ── sysex ──────────────────────────────────────────────────────────


def test_sysex_terminated():
    assert read_all(bytes([0xF0, 0x01, 0x02, 0xF7])) == [SysEx(b"\x01\x02")]


def test_sysex_interrupted_by_channel_status():
    reader = _reader(bytes([0xF0, 0x01, 0x02, 0x90, 0x3C, 0x40]))
    assert reader.read() == SysEx(b"\x01\x02")
    # 0x90 was consumed by the sysex; the next read starts at the data byte.
    assert reader.read() == NoteOn(channel=0, key=0x3C, velocity=0x40)
    with pytest.raises(EndOfStream):
        reader.read()


def test_sysex_interrupted_then_running_status_continues():
    data = bytes([0xF0, 0x7D, 0x90, 0x3C, 0x40, 0x3E, 0x41])
    assert read_all(data) == [
        SysEx(b"\x7d"),
        NoteOn(channel=0, key=0x3C, velocity=0x40),
        NoteOn(channel=0, key=0x3E, velocity=0x41),
    ]


def test_sysex_interrupted_by_system_common_keeps_it():
    data = bytes([0xF0, 0x01, 0xF3, 0x04, 0xF0, 0x05, 0xF0, 0x06, 0xF7])
    assert read_all(data) == [
        SysEx(b"\x01"),
        SongSelect(song=4),
        SysEx(b"\x05"),
        SysEx(b"\x06"),
    ]


def test_sysex_interrupt_clears_stale_running_status():
    # The F1 that ends the sysex also cancels the earlier 0x90.
    data = bytes([0x90, 0x3C, 0x40, 0xF0, 0x01, 0xF1, 0x23, 0x3C, 0x40, 0xF6])
    assert read_all(data) == [
        NoteOn(channel=0, key=0x3C, velocity=0x40),
        SysEx(b"\x01"),
        MTCQuarterFrame(frame_type=2, value=3),
        TuneRequest(),
    ]


def test_empty_sysex():
    assert read_all(bytes([0xF0, 0xF7])) == [SysEx(b"")]


def test_standalone_end_of_exclusive_is_skipped():
    reader = _reader(bytes([0xF7, 0xF7, 0x90, 0x3C, 0x40]))
    assert reader.read() == NoteOn(channel=0, key=0x3C, velocity=0x40)


def test_standalone_end_of_exclusive_keeps_running_status_rules():
    # F7 cancels running status, so the data bytes after it are discarded.
    data = bytes([0x90, 0x3C, 0x40, 0xF7, 0x3C, 0x00, 0xC0, 0x01])
    assert read_all(data) == [
        NoteOn(channel=0, key=0x3C, velocity=0x40),
        ProgramChange(channel=0, program=1),
    ]


def test_standalone_end_of_exclusive_at_end_of_stream():
    with pytest.raises(EndOfStream):
        _reader(bytes([0xF7])).read()


# ── resynchronization ──────────────────────────────────────────────


@pytest.mark.parametrize("undefined", [0xF4, 0xF5])
def test_undefined_status_is_discarded(undefined):
    reader = _reader(bytes([undefined, 0x11, 0x22, 0x33, 0x80, 0x3C, 0x40]))
    assert reader.read() == NoteOff(channel=0, key=0x3C, velocity=0x40)
    with pytest.raises(EndOfStream):
        reader.read()


def test_data_bytes_without_status_are_discarded():
    assert read_all(bytes([0x01, 0x02, 0x03, 0xC1, 0x07])) == [
        ProgramChange(channel=1, program=7)
    ]


def test_resync_lands_on_sysex():
    data = bytes([0xF4, 0x01, 0xF0, 0x11, 0xF7])
    assert read_all(data) == [SysEx(b"\x11")]


def test_resync_lands_on_undefined_again():
    data = bytes([0xF4, 0x01, 0xF5, 0x02, 0xF4, 0xF6])
    assert read_all(data) == [TuneRequest()]


def test_long_garbage_run_does_not_recurse():
    data = bytes([0xF4]) + bytes([0x55]) * 50_000 + bytes([0xF6])
    assert read_all(data) == [TuneRequest()]


def test_many_stray_terminators_do_not_recurse():
    data = bytes([0xF7]) * 50_000 + bytes([0xF6])
    assert read_all(data) == [TuneRequest()]


def test_resync_end_of_stream_raises():
    reader = _reader(bytes([0xF4, 0x01, 0x02]))
    with pytest.raises(EndOfStream):
        reader.read()


# ── truncated messages ─────────────────────────────────────────────


def test_status_byte_inside_channel_message_restarts():
    data = bytes([0x90, 0x3C, 0xB0, 0x07, 0x64])
    assert read_all(data) == [ControlChange(channel=0, controller=7, value=0x64)]


def test_status_byte_inside_system_common_restarts():
    data = bytes([0xF2, 0x10, 0xC0, 0x03])
    assert read_all(data) == [ProgramChange(channel=0, program=3)]


# ── realtime interleaving ──────────────────────────────────────────


def test_realtime_inside_channel_message_goes_to_callback():
    seen = []
    reader = StreamReader(io.BytesIO(bytes([0x90, 0xF8, 0x3C, 0x40])), seen.append)
    assert reader.read() == NoteOn(channel=0, key=0x3C, velocity=0x40)
    assert seen == [Realtime(CLOCK)]


def test_realtime_inside_sysex_goes_to_callback():
    seen = []
    reader = StreamReader(
        io.BytesIO(bytes([0xF0, 0x01, 0xFA, 0x02, 0xF8, 0xF7])), seen.append
    )
    assert reader.read() == SysEx(b"\x01\x02")
    assert [m.status for m in seen] == [START, CLOCK]


def test_realtime_without_handler_is_dropped():
    assert read_all(bytes([0xF8, 0xF8, 0xC0, 0xF8, 0x01, 0xFE])) == [
        ProgramChange(channel=0, program=1)
    ]


def test_realtime_only_stream_is_end_of_stream():
    seen = []
    reader = StreamReader(io.BytesIO(bytes([0xF8, 0xFC])), seen.append)
    with pytest.raises(EndOfStream):
        reader.read()
    assert len(seen) == 2


# ── errors ─────────────────────────────────────────────────────────


def test_end_of_stream_mid_message():
    reader = _reader(bytes([0x90, 0x3C]))
    with pytest.raises(EndOfStream):
        reader.read()


def test_end_of_stream_mid_sysex():
    with pytest.raises(EndOfStream):
        _reader(bytes([0xF0, 0x01, 0x02])).read()


def test_source_error_propagates():
    reader = StreamReader(_FailingSource(bytes([0x90, 0x3C])))
    with pytest.raises(SourceError, match="port unplugged"):
        reader.read()


def test_source_error_during_resync_propagates():
    reader = StreamReader(_FailingSource(bytes([0xF5, 0x00])))
    with pytest.raises(SourceError):
        reader.read()


def test_source_error_is_an_oserror():
    reader = StreamReader(_FailingSource(b""))
    with pytest.raises(OSError):
        reader.read()


def test_channel_decoder_contract_violation(monkeypatch):
    monkeypatch.setattr(
        "midiwire.reader.read_channel_message", lambda *args, **kwargs: None
    )
    with pytest.raises(ProtocolError, match="0x90"):
        _reader(bytes([0x90, 0x3C, 0x40])).read()


def test_readers_do_not_share_running_status():
    first = _reader(bytes([0x90, 0x3C, 0x40]))
    second = _reader(bytes([0x3C, 0x40, 0xF6]))
    first.read()
    assert second.read() == TuneRequest()
