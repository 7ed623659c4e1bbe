#!/usr/bin/env python3
"""
Render one frame of the 2‑hour clock test pattern.

Every frame carries a grid, four "hands" (seconds, frames, minutes, hours)
drawn as thin pie slices inside their circles, a progress bar, the timecode
and the resolution.  Rendering is a pure function of (config, frame index),
so any frame of the stream can be regenerated on its own.

Example:
    python render_frame.py 720 1800 -o frame.png
"""
import argparse
import sys
from dataclasses import dataclass, field
from typing import Dict, List, NamedTuple, Optional, Tuple

import cv2
import numpy as np

FPS = 30
DURATION_SECONDS = 60 * 60 * 2          # 2 hours
TICKS_PER_TURN = 60                     # 6° per tick on the S/M/H dials

# supported height → width (16:9)
RESOLUTIONS: Dict[int, int] = {480: 854, 720: 1280, 1080: 1920}

# BGR
BACKGROUND = (64, 64, 64)
WHITE = (255, 255, 255)
GREY = (128, 128, 128)
RED = (0, 0, 255)
GREEN = (0, 255, 0)
BLUE = (255, 0, 0)
YELLOW = (0, 255, 255)


class ConfigurationError(ValueError):
    """Unsupported resolution requested at startup."""


class RenderingResourceError(RuntimeError):
    """Drawing or font resources could not be acquired."""


# ───────────────────────── fonts ───────────────────────────────────────
class FontSpec(NamedTuple):
    face: int
    scale: float
    thickness: int


class FontSet(NamedTuple):
    small: FontSpec
    timecode: FontSpec
    resolution: FontSpec


DEFAULT_FONTS = FontSet(
    small=FontSpec(cv2.FONT_HERSHEY_SIMPLEX, 0.5, 1),
    timecode=FontSpec(cv2.FONT_HERSHEY_SIMPLEX, 0.8, 2),
    resolution=FontSpec(cv2.FONT_HERSHEY_SIMPLEX, 1.2, 2),
)


def load_fonts(fonts: FontSet = DEFAULT_FONTS) -> FontSet:
    """
    Probe every font once so a broken font setup fails at startup rather
    than in the middle of a two hour run.
    """
    for name, font in zip(fonts._fields, fonts):
        try:
            (w, h), _ = cv2.getTextSize("HH:00 0123456789", font.face,
                                        font.scale, font.thickness)
        except cv2.error as exc:
            raise RenderingResourceError(f"{name} font unusable: {exc}") from exc
        if w <= 0 or h <= 0:
            raise RenderingResourceError(f"{name} font renders nothing")
    return fonts


def text_size(text: str, font: FontSpec) -> Tuple[int, int, int]:
    """Return (width, height, baseline) of ``text`` in pixels."""
    (w, h), baseline = cv2.getTextSize(text, font.face, font.scale, font.thickness)
    return w, h, baseline


def line_height(font: FontSpec) -> int:
    _, h, baseline = text_size("0", font)
    return h + baseline


# ───────────────────────── configuration ───────────────────────────────
@dataclass(frozen=True)
class RenderConfig:
    width: int
    height: int
    fps: int = FPS
    total_frames: int = FPS * DURATION_SECONDS
    fonts: FontSet = field(default=DEFAULT_FONTS, compare=False)

    @property
    def grid_size(self) -> int:
        return self.height // 9

    @classmethod
    def for_height(cls, height: int, fonts: FontSet = DEFAULT_FONTS) -> "RenderConfig":
        if height not in RESOLUTIONS:
            supported = ", ".join(str(h) for h in sorted(RESOLUTIONS))
            raise ConfigurationError(
                f"unsupported height {height} (expected one of {supported})")
        return cls(width=RESOLUTIONS[height], height=height,
                   fonts=load_fonts(fonts))


@dataclass(frozen=True)
class FrameState:
    frame_index: int
    elapsed: int            # whole seconds
    hours: int
    minutes: int
    seconds: int
    frame_in_second: int

    @classmethod
    def from_index(cls, config: RenderConfig, frame_index: int) -> "FrameState":
        elapsed = frame_index // config.fps
        return cls(frame_index=frame_index,
                   elapsed=elapsed,
                   hours=elapsed // 3600,
                   minutes=elapsed % 3600 // 60,
                   seconds=elapsed % 60,
                   frame_in_second=frame_index % config.fps)


# ───────────────────────── per‑frame quantities ────────────────────────
class HandTicks(NamedTuple):
    """Clockwise sweep of each hand in degrees, 0 = 12 o'clock."""
    seconds: int
    frame: int
    minute: int
    hour: int


def hand_ticks(config: RenderConfig, frame_index: int) -> HandTicks:
    # S/M/H advance in whole ticks; the seconds hand holds for a full second
    step = 360 // TICKS_PER_TURN
    fps = config.fps
    return HandTicks(seconds=(frame_index // fps * step) % 360,
                     frame=frame_index % 360,
                     minute=(frame_index // (fps * 60) * step) % 360,
                     hour=(frame_index // (fps * 3600) * step) % 360)


def progress_width(config: RenderConfig, frame_index: int) -> int:
    return config.width * frame_index // config.total_frames


def timecode_text(state: FrameState) -> str:
    return (f"HH:{state.hours:02d} MM:{state.minutes:02d} "
            f"SS:{state.seconds:02d} F:{state.frame_in_second:02d}")


def resolution_text(config: RenderConfig) -> str:
    return f"{config.width} x {config.height}"


# ───────────────────────── geometry helpers ────────────────────────────
class Box(NamedTuple):
    x: int
    y: int
    w: int
    h: int

    @property
    def centre(self) -> Tuple[int, int]:
        return self.x + self.w // 2, self.y + self.h // 2


def dial_boxes(config: RenderConfig) -> Dict[str, Box]:
    """Bounding boxes of the four dials, keyed by hand name."""
    w, h = config.width, config.height
    stroke = h // 120
    small = h // 5
    left = w // 2 - h // 2 + stroke
    return {
        "seconds": Box(left, stroke, h - 2 * stroke, h - 2 * stroke),
        "frame": Box(left, h // 2 - small // 2, small, small),
        "minute": Box(left + (h - 2 * stroke) - small, h // 2 - small // 2,
                      small, small),
        "hour": Box(w // 2 - small // 2, h // 2 + small // 2, small, small),
    }


def text_baselines(config: RenderConfig) -> Tuple[int, int]:
    """Baselines of (resolution label, timecode); the label sits higher."""
    step = line_height(config.fonts.timecode)
    timecode_y = config.height // 2 - 4 * step
    return timecode_y - 2 * step, timecode_y


def centred_x(text: str, font: FontSpec, centre_x: int) -> int:
    return centre_x - text_size(text, font)[0] // 2


def draw_text(img: np.ndarray, text: str, font: FontSpec, centre_x: int,
              baseline_y: int, colour: Tuple[int, int, int]) -> None:
    cv2.putText(img, text, (centred_x(text, font, centre_x), baseline_y),
                font.face, font.scale, colour, font.thickness, cv2.LINE_AA)


def draw_grid(img: np.ndarray, grid: int) -> None:
    h, w = img.shape[:2]
    for x in list(range(0, w, grid)) + [w - 1]:
        img[:, x] = WHITE
    for y in list(range(0, h, grid)) + [h - 1]:
        img[y, :] = WHITE


def draw_dial(img: np.ndarray, box: Box, tick: int, arm: int, stroke: int,
              colour: Tuple[int, int, int], label: str, font: FontSpec) -> None:
    centre = box.centre
    axes = (box.w // 2, box.h // 2)
    cv2.ellipse(img, centre, axes, 0, 0, 360, WHITE, stroke, cv2.LINE_AA)

    # start/extent in the east‑zero counter‑clockwise convention, then
    # mirrored into OpenCV's clockwise (y‑down) angles
    start = 90 - arm // 2 - tick
    cv_start = -(start + arm) % 360
    cv2.ellipse(img, centre, axes, 0, cv_start, cv_start + arm, colour,
                -1, cv2.LINE_AA)

    draw_text(img, label, font, centre[0], centre[1], GREY)


# ───────────────────────── main render routine ─────────────────────────
def render(config: RenderConfig, frame_index: int) -> np.ndarray:
    if not 0 <= frame_index <= config.total_frames:
        raise ValueError(f"frame {frame_index} outside 0..{config.total_frames}")

    w, h = config.width, config.height
    grid = config.grid_size
    fonts = config.fonts
    state = FrameState.from_index(config, frame_index)
    ticks = hand_ticks(config, frame_index)

    img = np.full((h, w, 3), BACKGROUND, dtype=np.uint8)
    draw_grid(img, grid)

    arm = h // 90
    stroke = h // 120
    boxes = dial_boxes(config)
    draw_dial(img, boxes["seconds"], ticks.seconds, arm, stroke, RED,
              f"S:{state.seconds}", fonts.small)
    draw_dial(img, boxes["frame"], ticks.frame, arm, stroke, GREEN,
              f"F:{frame_index}", fonts.small)
    draw_dial(img, boxes["minute"], ticks.minute, arm, stroke, BLUE,
              f"M:{state.minutes}", fonts.small)
    draw_dial(img, boxes["hour"], ticks.hour, arm, stroke, YELLOW,
              f"H:{state.hours}", fonts.small)

    bar_top = h - (3 * grid) // 4
    img[bar_top:bar_top + grid // 2, :progress_width(config, frame_index)] = GREEN

    resolution_y, timecode_y = text_baselines(config)
    draw_text(img, timecode_text(state), fonts.timecode, w // 2, timecode_y, WHITE)
    draw_text(img, resolution_text(config), fonts.resolution, w // 2,
              resolution_y, WHITE)
    return img


def main(argv: Optional[List[str]] = None) -> None:
    ap = argparse.ArgumentParser(description="Render a single pattern frame")
    ap.add_argument("height", type=int)
    ap.add_argument("frame", type=int)
    ap.add_argument("-o", "--output", default="frame.png")
    args = ap.parse_args(argv)

    try:
        config = RenderConfig.for_height(args.height)
    except ConfigurationError as exc:
        ap.error(str(exc))
    except RenderingResourceError as exc:
        print(f"✖ {exc}", file=sys.stderr)
        sys.exit(1)
    if not 0 <= args.frame <= config.total_frames:
        ap.error(f"frame must be within 0..{config.total_frames}")

    if not cv2.imwrite(args.output, render(config, args.frame)):
        raise SystemExit(f"Could not write {args.output}")
    print(f"Wrote frame {args.frame} to {args.output}")


if __name__ == "__main__":
    main()
