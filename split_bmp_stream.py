#!/usr/bin/env python3
"""
Split a stream of concatenated BMP files (as written by generate_pattern.py)
back into individual frames.

Each bitmap starts with a 14‑byte file header: the magic ``BM`` followed by
the total file size as a little‑endian uint32.  That size is the only
framing in the stream.

Prints the number of frames found.  Debug lines go to stderr so scripts
see only the final integer.

Example:
    python split_bmp_stream.py -i pattern_720.bmps -o frames/
"""
import argparse
import sys
from pathlib import Path
from typing import BinaryIO, Iterator, Optional

import cv2
import numpy as np

HEADER = 6          # magic + size; the rest of the header is read with the body


# ───────────────────────── stream parsing ──────────────────────────────
def iter_bitmaps(stream: BinaryIO) -> Iterator[bytes]:
    """Yield each complete BMP in ``stream``; raise ValueError on damage."""
    index = 0
    while True:
        head = stream.read(HEADER)
        if not head:
            return
        if len(head) < HEADER or head[:2] != b"BM":
            raise ValueError(f"frame {index}: not a bitmap header")
        size = int.from_bytes(head[2:6], "little")
        if size < 14:
            raise ValueError(f"frame {index}: bogus size {size}")
        body = stream.read(size - HEADER)
        if len(body) != size - HEADER:
            raise ValueError(f"frame {index}: truncated ({len(body) + HEADER}/{size} bytes)")
        yield head + body
        index += 1


def decode(bitmap: bytes) -> np.ndarray:
    img = cv2.imdecode(np.frombuffer(bitmap, dtype=np.uint8), cv2.IMREAD_COLOR)
    if img is None:
        raise ValueError("undecodable bitmap")
    return img


# ───────────────────────── main split routine ──────────────────────────
def split(stream: BinaryIO, out_dir: Optional[Path], debug: bool) -> int:
    if out_dir is not None:
        out_dir.mkdir(parents=True, exist_ok=True)

    count = 0
    for count, bitmap in enumerate(iter_bitmaps(stream), start=1):
        if out_dir is not None:
            (out_dir / f"frame_{count - 1:06d}.bmp").write_bytes(bitmap)
        if debug:
            h, w = decode(bitmap).shape[:2]
            print(f"{count - 1:06d}: {w}x{h}  {len(bitmap)} bytes", file=sys.stderr)
    return count


# ───────────────────────── argument glue ───────────────────────────────
def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("-i", "--input", default="-",
                    help="BMP stream (default: stdin)")
    ap.add_argument("-o", "--out-dir", default=None,
                    help="Write frame_NNNNNN.bmp files here")
    ap.add_argument("--debug", action="store_true")
    args = ap.parse_args()

    out_dir = Path(args.out_dir) if args.out_dir else None
    if args.input == "-":
        print(split(sys.stdin.buffer, out_dir, args.debug))
    else:
        with open(args.input, "rb") as fh:
            print(split(fh, out_dir, args.debug))


if __name__ == "__main__":
    main()
