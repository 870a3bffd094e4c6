#!/usr/bin/env python3
"""Print the MIDI messages arriving on a serial port, file or stdin.

Usage:
  # Raw bytes captured from a port:
  python tools/midi_monitor.py capture.bin

  # Hex text on stdin:
  echo "90 3C 40 3C 00" | python tools/midi_monitor.py --hex -

  # A 5-pin DIN interface on a USB serial adapter:
  python tools/midi_monitor.py --serial /dev/ttyUSB0 --realtime
"""

from __future__ import annotations

import argparse
import io
import logging
from pathlib import Path
import sys
from typing import BinaryIO

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from midiwire.errors import SourceError  # noqa: E402
from midiwire.messages import Message, Realtime  # noqa: E402
from midiwire.reader import StreamReader  # noqa: E402

MIDI_BAUD = 31250


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Decode a live MIDI byte stream and print each message",
    )
    parser.add_argument(
        "input",
        nargs="?",
        default="-",
        help="File with raw MIDI bytes, or '-' for stdin (default)",
    )
    parser.add_argument(
        "--serial",
        metavar="PORT",
        default=None,
        help="Read from a serial port (device path or pyserial URL) instead of a file",
    )
    parser.add_argument(
        "--baud",
        type=int,
        default=MIDI_BAUD,
        help=f"Serial baud rate (default {MIDI_BAUD})",
    )
    parser.add_argument(
        "--hex",
        action="store_true",
        help="Input is whitespace-separated hex text instead of raw bytes",
    )
    parser.add_argument(
        "--pedantic",
        action="store_true",
        help="Report NoteOn velocity 0 as NoteOffPedantic",
    )
    parser.add_argument(
        "--realtime",
        action="store_true",
        help="Also print realtime messages (clock, start, stop, ...)",
    )
    parser.add_argument(
        "--mido",
        action="store_true",
        help="Print the mido representation of each message",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Stop after this many messages",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log discarded bytes and other recoveries to stderr",
    )
    return parser


def _open_source(args: argparse.Namespace) -> BinaryIO:
    if args.serial is not None:
        import serial

        # No timeout: an empty read would look like end of stream.
        return serial.serial_for_url(args.serial, args.baud)
    if not args.hex:
        return sys.stdin.buffer if args.input == "-" else open(args.input, "rb")
    if args.input == "-":
        raw = sys.stdin.buffer.read()
    else:
        with open(args.input, "rb") as fh:
            raw = fh.read()
    return io.BytesIO(bytes.fromhex(raw.decode("ascii")))


def _format(msg: Message, use_mido: bool) -> str:
    if use_mido:
        try:
            return str(msg.to_mido())
        except ValueError:
            pass
    return str(msg)


def main() -> int:
    parser = _build_arg_parser()
    args = parser.parse_args()
    if args.limit is not None and args.limit < 1:
        parser.error("--limit must be at least 1")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        src = _open_source(args)
    except (OSError, ValueError) as exc:
        parser.error(str(exc))

    def on_realtime(msg: Realtime) -> None:
        print(f"RT  {_format(msg, args.mido)}", flush=True)

    reader = StreamReader(
        src,
        on_realtime if args.realtime else None,
        note_off_pedantic=args.pedantic,
    )

    count = 0
    try:
        for msg in reader:
            print(_format(msg, args.mido), flush=True)
            count += 1
            if args.limit is not None and count >= args.limit:
                break
    except KeyboardInterrupt:
        pass
    except SourceError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    finally:
        if src is not sys.stdin.buffer:
            src.close()

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
