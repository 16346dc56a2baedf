# hsb.py – HSB (a.k.a. HSV) → 8-bit sRGB, plus hex formatting
#   - six-sector table, hue in degrees, saturation/brightness in [0,1]
#   - inputs are normalized here: hue wraps modulo 360, s/v are clamped
#   - scalar path for swatches, NumPy path for whole rasters

from __future__ import annotations

import math
from typing import Tuple

import numpy as np

RGB = Tuple[int, int, int]


def normalize_hue(hue: float) -> float:
    """Wrap a hue into the half-open range [0, 360)."""
    h = float(hue) % 360.0
    # -1e-17 % 360 rounds up to exactly 360.0
    return 0.0 if h >= 360.0 else h


def clamp01(x: float) -> float:
    return 0.0 if x <= 0.0 else 1.0 if x >= 1.0 else float(x)


def _to_byte(c: float) -> int:
    # Math.round semantics (half away from zero for positives)
    return max(0, min(255, int(math.floor(c * 255.0 + 0.5))))


def hsb_to_rgb(hue: float, saturation: float, brightness: float) -> RGB:
    h = normalize_hue(hue)
    s = clamp01(saturation)
    v = clamp01(brightness)

    i = int(math.floor(h / 60.0)) % 6
    f = h / 60.0 - math.floor(h / 60.0)
    p = v * (1.0 - s)
    q = v * (1.0 - f * s)
    t = v * (1.0 - (1.0 - f) * s)

    if i == 0:
        r, g, b = v, t, p
    elif i == 1:
        r, g, b = q, v, p
    elif i == 2:
        r, g, b = p, v, t
    elif i == 3:
        r, g, b = p, q, v
    elif i == 4:
        r, g, b = t, p, v
    else:
        r, g, b = v, p, q

    return _to_byte(r), _to_byte(g), _to_byte(b)


def hsb_to_rgb_array(hsb: np.ndarray) -> np.ndarray:
    """
    Vectorised hsb_to_rgb over an (..., 3) array of (hue°, s, v).
    Returns uint8 with the same leading shape; matches the scalar path exactly.
    """
    hsb = np.asarray(hsb, dtype=np.float64)
    h = np.mod(hsb[..., 0], 360.0)
    h = np.where(h >= 360.0, 0.0, h)
    s = np.clip(hsb[..., 1], 0.0, 1.0)
    v = np.clip(hsb[..., 2], 0.0, 1.0)

    h60 = h / 60.0
    base = np.floor(h60)
    i = base.astype(np.int64) % 6
    f = h60 - base
    p = v * (1.0 - s)
    q = v * (1.0 - f * s)
    t = v * (1.0 - (1.0 - f) * s)

    # rows: sector 0..5, columns: r, g, b
    table = np.stack(
        [
            np.stack([v, t, p], axis=-1),
            np.stack([q, v, p], axis=-1),
            np.stack([p, v, t], axis=-1),
            np.stack([p, q, v], axis=-1),
            np.stack([t, p, v], axis=-1),
            np.stack([v, p, q], axis=-1),
        ],
        axis=0,
    )
    rgb = np.take_along_axis(table, i[None, ..., None], axis=0)[0]
    return np.clip(np.floor(rgb * 255.0 + 0.5), 0, 255).astype(np.uint8)


def rgb_to_hex(r: int, g: int, b: int) -> str:
    return f"#{int(r):02x}{int(g):02x}{int(b):02x}"


def hsb_to_hex(hue: float, saturation: float, brightness: float) -> str:
    return rgb_to_hex(*hsb_to_rgb(hue, saturation, brightness))


__all__ = [
    "RGB",
    "clamp01",
    "hsb_to_hex",
    "hsb_to_rgb",
    "hsb_to_rgb_array",
    "normalize_hue",
    "rgb_to_hex",
]
