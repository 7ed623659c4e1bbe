#!/usr/bin/env python3
"""
Generate the matching 2‑hour audio track: a short beep at the start of
every second, as raw PCM (16‑bit little‑endian, mono, 48 kHz by default).
Output goes to stdout unless -o is given.

The tone is a sine scaled to ±127 and stored in the high byte of each
sample, the low byte is always zero.

Example:
    python make_audio.py > beeps.pcm
    ffmpeg -f s16le -ar 48000 -ac 1 -i beeps.pcm ...
"""
import argparse
import sys
from typing import BinaryIO, List, Optional

import numpy as np

from generate_pattern import OutputIOError
from render_frame import DURATION_SECONDS

RATE = 48000
TONE = 261.62           # middle C
BEEP_FRACTION = 10      # beep lasts 1/10 s


def second_block(rate: int = RATE, tone: float = TONE) -> bytes:
    """One second of audio: the beep followed by silence."""
    beep_len = rate // BEEP_FRACTION
    i = np.arange(beep_len)
    v = (np.sin(i * 2 * np.pi / rate * tone) * 127.0).astype(np.int16)  # truncates
    samples = np.zeros(rate, dtype="<i2")
    samples[:beep_len] = v * 256
    return samples.tobytes()


def write_audio(stream: BinaryIO, seconds: int = DURATION_SECONDS,
                rate: int = RATE, tone: float = TONE) -> int:
    block = second_block(rate, tone)
    try:
        for _ in range(seconds):
            stream.write(block)
        stream.flush()
    except OSError as exc:
        raise OutputIOError(f"writing audio failed: {exc}") from exc
    return seconds * len(block)


def main(argv: Optional[List[str]] = None) -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("-o", "--output", default=None,
                    help="Output file (default: stdout)")
    ap.add_argument("--seconds", type=int, default=DURATION_SECONDS)
    ap.add_argument("--rate", type=int, default=RATE)
    ap.add_argument("--tone", type=float, default=TONE,
                    help="Beep frequency in Hz")
    args = ap.parse_args(argv)
    if args.seconds < 0 or args.rate < BEEP_FRACTION:
        ap.error("--seconds must be >= 0 and --rate >= 10")

    try:
        if args.output:
            with open(args.output, "wb") as fh:
                size = write_audio(fh, args.seconds, args.rate, args.tone)
        else:
            size = write_audio(sys.stdout.buffer, args.seconds, args.rate, args.tone)
    except OutputIOError as exc:
        print(f"✖ {exc}", file=sys.stderr)
        sys.exit(1)
    print(f"Wrote {args.seconds} s ({size} bytes) to {args.output or 'stdout'}",
          file=sys.stderr)


if __name__ == "__main__":
    main()
