"""Hue track: spectrum strip plus one triangular marker per stop."""

from __future__ import annotations

from functools import lru_cache
from typing import Optional, Sequence

import numpy as np
from coloraide import Color
from PIL import Image, ImageDraw, ImageFont

from .markers import marker_x
from .stops import ColorStop

TRACK_WIDTH = 600
TRACK_HEIGHT = 80

BACKGROUND = (0xF8, 0xF9, 0xFA)
BORDER = (0xDE, 0xE2, 0xE6)
ACTIVE_STROKE = (0x3B, 0x82, 0xF6, 255)
MARKER_STROKE = (0, 0, 0, 77)  # rgba(0,0,0,0.3)
LABEL_DARK = (0, 0, 0, 179)
LABEL_LIGHT = (255, 255, 255, 230)

SPECTRUM_Y = 10
SPECTRUM_HEIGHT = 40
TRIANGLE_WIDTH = 10
TRIANGLE_HEIGHT = 15


@lru_cache(maxsize=8)
def spectrum_row(width: int) -> np.ndarray:
    """One row of the strip: column x shows hsl((x/width)*360, 100%, 50%)."""
    row = np.empty((width, 3), dtype=np.uint8)
    for x in range(width):
        hue = (x / width) * 360.0
        rgb = Color(f"hsl({hue} 100% 50%)").convert("srgb").fit().coords()
        row[x] = [round(c * 255) for c in rgb]
    row.setflags(write=False)
    return row


def _marker_polygon(x: float) -> list[tuple[float, float]]:
    top = SPECTRUM_Y + SPECTRUM_HEIGHT + 2
    half = TRIANGLE_WIDTH / 2
    return [
        (x, top),
        (x - half, top + TRIANGLE_HEIGHT),
        (x + half, top + TRIANGLE_HEIGHT),
    ]


def render_track(
    stops: Sequence[ColorStop],
    active_index: Optional[int] = None,
    width: int = TRACK_WIDTH,
    height: int = TRACK_HEIGHT,
) -> np.ndarray:
    """
    Draw the hue track for already-resolved stops. Returns (height, width, 3) uint8.
    """
    pixels = np.empty((height, width, 3), dtype=np.uint8)
    pixels[:] = BACKGROUND
    img = Image.fromarray(pixels)
    draw = ImageDraw.Draw(img, "RGBA")

    strip = np.broadcast_to(spectrum_row(width), (SPECTRUM_HEIGHT, width, 3))
    img.paste(Image.fromarray(np.ascontiguousarray(strip)), (0, SPECTRUM_Y))
    # outline goes on top so the strip does not hide its left and right edges
    draw.rectangle(
        [0, SPECTRUM_Y - 1, width - 1, SPECTRUM_Y + SPECTRUM_HEIGHT], outline=BORDER
    )

    font = ImageFont.load_default()
    label_base = SPECTRUM_Y + SPECTRUM_HEIGHT + 2 + TRIANGLE_HEIGHT - 4
    for i, stop in enumerate(stops):
        x = marker_x(stop.hue, width)
        active = i == active_index
        draw.polygon(
            _marker_polygon(x),
            fill=stop.rgb(),
            outline=ACTIVE_STROKE if active else MARKER_STROKE,
            width=2 if active else 1,
        )
        label = str(i + 1)
        left, top, right, bottom = draw.textbbox((0, 0), label, font=font)
        draw.text(
            (x - (right - left) / 2 - left, label_base - bottom),
            label,
            font=font,
            fill=LABEL_DARK if stop.brightness > 0.5 else LABEL_LIGHT,
        )

    return np.asarray(img)


__all__ = ["TRACK_HEIGHT", "TRACK_WIDTH", "render_track", "spectrum_row"]
