#!/usr/bin/env python3
"""
Stream the 2‑hour clock test pattern as back‑to‑back uncompressed BMPs
(default to stdout) for later assembly into a video by an external tool.

Example:
    python generate_pattern.py 720 > pattern_720.bmps
    python generate_pattern.py 1080 -o pattern_1080.bmps --preview
"""
import argparse
import os
import sys
from typing import BinaryIO, List, Optional, Protocol

import cv2
import numpy as np

from render_frame import (ConfigurationError, RenderConfig,
                          RenderingResourceError, render)


class OutputIOError(IOError):
    """A frame could not be encoded or written; the run cannot continue."""


class FrameSink(Protocol):
    def write(self, raster: np.ndarray) -> None: ...


def open_output(path: str) -> BinaryIO:
    try:
        return open(path, "wb")
    except OSError as exc:
        raise OutputIOError(f"cannot open {path}: {exc}") from exc


class BmpStreamSink:
    """Encode each raster as a BMP and append it to a binary stream."""

    def __init__(self, stream: BinaryIO) -> None:
        self.stream = stream
        self.written = 0

    def write(self, raster: np.ndarray) -> None:
        ok, buf = cv2.imencode(".bmp", raster)
        if not ok:
            raise OutputIOError(f"BMP encoding failed for frame {self.written}")
        try:
            self.stream.write(buf.tobytes())
            self.stream.flush()
        except OSError as exc:
            raise OutputIOError(f"writing frame {self.written} failed: {exc}") from exc
        self.written += 1


class FramePreview:
    """
    Best‑effort window mirroring the latest frame.  The first OpenCV error
    (typically: no display) turns it off for the rest of the run.
    """

    def __init__(self, window: str = "pattern") -> None:
        self.window = window
        self.enabled = True
        self.opened = False

    def show(self, raster: np.ndarray) -> None:
        if not self.enabled:
            return
        try:
            cv2.imshow(self.window, raster)
            self.opened = True
            cv2.waitKey(1)
        except cv2.error as exc:
            print(f"Preview disabled: {exc}", file=sys.stderr)
            self.enabled = False

    def close(self) -> None:
        # only a window that imshow actually created can be destroyed
        if self.opened:
            try:
                cv2.destroyWindow(self.window)
            except cv2.error as exc:
                print(f"Preview close failed: {exc}", file=sys.stderr)
            self.opened = False
        self.enabled = False


def run(config: RenderConfig,
        sink: FrameSink,
        preview: Optional[FramePreview] = None,
        last_frame: Optional[int] = None,
        debug: bool = False) -> int:
    """
    Render frames 0..last_frame (default: every frame, inclusive) in order
    and hand each to ``sink.write``.  A failing write propagates at once.
    Returns the number of frames written.
    """
    if last_frame is None:
        last_frame = config.total_frames
    if not 0 <= last_frame <= config.total_frames:
        raise ValueError(f"last frame must be within 0..{config.total_frames}")

    per_minute = config.fps * 60
    written = 0
    for frame in range(last_frame + 1):
        raster = render(config, frame)
        sink.write(raster)
        written += 1
        if preview is not None:
            preview.show(raster)
        if debug and frame % per_minute == 0:
            print(f"frame {frame}/{last_frame}", file=sys.stderr)
    return written


def _silence_stdout() -> None:
    # stdout is gone (broken pipe); stop the interpreter flushing into it
    devnull = os.open(os.devnull, os.O_WRONLY)
    os.dup2(devnull, sys.stdout.fileno())


def main(argv: Optional[List[str]] = None) -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("height", type=int, help="480, 720 or 1080")
    ap.add_argument("-o", "--output", default=None,
                    help="Output file (default: stdout)")
    ap.add_argument("--preview", action="store_true",
                    help="Mirror frames in a window while rendering")
    ap.add_argument("--last-frame", type=int, default=None,
                    help="Stop after this frame (default: the whole 2 hours)")
    ap.add_argument("--debug", action="store_true")
    args = ap.parse_args(argv)

    try:
        config = RenderConfig.for_height(args.height)
    except ConfigurationError as exc:
        ap.error(str(exc))
    except RenderingResourceError as exc:
        print(f"✖ {exc}", file=sys.stderr)
        sys.exit(1)
    if args.last_frame is not None and not 0 <= args.last_frame <= config.total_frames:
        ap.error(f"--last-frame must be within 0..{config.total_frames}")

    preview = FramePreview() if args.preview else None
    target = args.output or "stdout"
    try:
        if args.output:
            with open_output(args.output) as stream:
                written = run(config, BmpStreamSink(stream), preview,
                              args.last_frame, args.debug)
        else:
            written = run(config, BmpStreamSink(sys.stdout.buffer), preview,
                          args.last_frame, args.debug)
    except OSError as exc:
        # OutputIOError, or the final flush when the file is closed
        print(f"✖ {exc}", file=sys.stderr)
        if args.output is None and isinstance(exc.__cause__, BrokenPipeError):
            _silence_stdout()
        sys.exit(1)
    finally:
        if preview is not None:
            preview.close()
    print(f"Wrote {written} frames to {target}", file=sys.stderr)


if __name__ == "__main__":
    main()
