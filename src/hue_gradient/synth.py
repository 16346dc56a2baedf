# synth.py – stop list → square RGBA raster
#   - four interchangeable strategies: noise, linear, radial, angular
#   - stops are used in index order; consecutive pairs define the ramp segments
#   - all per-pixel work is whole-array NumPy, no Python pixel loop

from __future__ import annotations

import enum
import io
import logging
from typing import Callable, Dict, Optional, Sequence

import numpy as np
from PIL import Image

from .hsb import hsb_to_rgb_array
from .stops import MIN_STOPS, ColorStop

log = logging.getLogger(__name__)

# --- noise constants ---------------------------------------------------------
NOISE_FREQUENCY = 0.01
NOISE_SCALE = 0.05
NOISE_GAIN = 0.35
NOISE_OFFSET = 0.5
OCTAVES = ((1.0, 1.0), (2.0, 0.5), (4.0, 0.25))  # (frequency mult, weight)


class GradientMode(enum.Enum):
    NOISE = "noise"
    LINEAR = "linear"
    RADIAL = "radial"
    ANGULAR = "angular"


def parse_mode(val: Optional[str]) -> GradientMode:
    """External tag → mode; anything unrecognized renders as noise."""
    m = (val or "").strip().lower()
    for mode in GradientMode:
        if mode.value == m:
            return mode
    return GradientMode.NOISE


# --- shared helpers ----------------------------------------------------------


def stop_rgbs(stops: Sequence[ColorStop]) -> np.ndarray:
    """(N, 3) float array of each stop's 8-bit RGB."""
    hsb = np.array([[s.hue, s.saturation, s.brightness] for s in stops], dtype=np.float64)
    return hsb_to_rgb_array(hsb).astype(np.float64)


def ramp_colors(t: np.ndarray, rgbs: np.ndarray) -> np.ndarray:
    """
    Sample the piecewise-linear ramp through `rgbs` at positions t ∈ [0,1].
    [0,1] is split into N-1 equal segments mapped to index pairs (i, i+1).
    Returns uint8 (..., 3).
    """
    t = np.clip(np.asarray(t, dtype=np.float64), 0.0, 1.0)
    rgbs = np.asarray(rgbs, dtype=np.float64)
    n = len(rgbs)
    if n < MIN_STOPS:
        raise ValueError(f"need at least {MIN_STOPS} stops, got {n}")

    seg_size = 1.0 / (n - 1)
    seg = np.minimum(np.floor(t / seg_size), n - 2).astype(np.int64)
    local = (t - seg * seg_size) / seg_size

    c1 = rgbs[seg]
    c2 = rgbs[seg + 1]
    out = c1 + local[..., None] * (c2 - c1)
    return np.clip(np.rint(out), 0, 255).astype(np.uint8)


def _with_alpha(rgb: np.ndarray, alpha: np.ndarray | int = 255) -> np.ndarray:
    a = np.broadcast_to(np.asarray(alpha, dtype=np.uint8), rgb.shape[:-1])
    return np.concatenate([rgb, a[..., None]], axis=-1)


def _grid(size: int) -> tuple[np.ndarray, np.ndarray]:
    # (yy, xx) pixel indices, row-major like a canvas ImageData
    return np.mgrid[0:size, 0:size].astype(np.float64)


# --- noise -------------------------------------------------------------------


def _noise(nx: np.ndarray, ny: np.ndarray) -> np.ndarray:
    f = NOISE_FREQUENCY
    return np.sin(nx * f) * np.cos(ny * f) + np.sin((nx + ny) * f * 1.5) * 0.5


def noise_field(size: int) -> np.ndarray:
    """Per-pixel ramp position t ∈ [0,1] for the noise texture, shape (S, S)."""
    yy, xx = _grid(size)
    nx = xx * NOISE_SCALE
    ny = yy * NOISE_SCALE
    total = sum(_noise(nx * mult, ny * mult) * w for mult, w in OCTAVES)
    return np.clip(total * NOISE_GAIN + NOISE_OFFSET, 0.0, 1.0)


def render_noise(stops: Sequence[ColorStop], size: int) -> np.ndarray:
    return _with_alpha(ramp_colors(noise_field(size), stop_rgbs(stops)))


# --- linear / radial ---------------------------------------------------------


def linear_field(size: int) -> np.ndarray:
    """Ramp from pixel (0,0) at t=0 to pixel (S-1,S-1) at t=1, along the diagonal."""
    yy, xx = _grid(size)
    if size <= 1:
        return np.zeros((size, size))
    return (xx + yy) / (2.0 * (size - 1))


def radial_field(size: int) -> np.ndarray:
    """Distance from the centre over the half-width; corners pad at t=1."""
    yy, xx = _grid(size)
    c = size / 2.0
    dist = np.hypot(xx + 0.5 - c, yy + 0.5 - c)
    return np.minimum(dist / c, 1.0)


def render_linear(stops: Sequence[ColorStop], size: int) -> np.ndarray:
    return _with_alpha(ramp_colors(linear_field(size), stop_rgbs(stops)))


def render_radial(stops: Sequence[ColorStop], size: int) -> np.ndarray:
    return _with_alpha(ramp_colors(radial_field(size), stop_rgbs(stops)))


# --- angular -----------------------------------------------------------------


def sector_index(angle_deg, n: int):
    """
    Sector for an angle in degrees, measured from +x towards +y (screen space).
    Works on scalars and arrays.
    """
    step = 360.0 / n
    a = np.mod(angle_deg, 360.0)
    idx = np.minimum(np.floor(a / step), n - 1).astype(np.int64)
    return int(idx) if np.ndim(idx) == 0 else idx


def angular_color_at(stops: Sequence[ColorStop], angle_deg: float) -> tuple[int, int, int]:
    rgb = stop_rgbs(stops)[sector_index(angle_deg, len(stops))]
    return int(rgb[0]), int(rgb[1]), int(rgb[2])


def render_angular(stops: Sequence[ColorStop], size: int) -> np.ndarray:
    yy, xx = _grid(size)
    c = size / 2.0
    dx = xx + 0.5 - c
    dy = yy + 0.5 - c
    angle = np.degrees(np.arctan2(dy, dx))
    sectors = sector_index(angle, len(stops))
    rgb = stop_rgbs(stops).astype(np.uint8)[sectors]
    # wedges stop at the inscribed circle; corners stay transparent
    inside = np.hypot(dx, dy) <= c
    return _with_alpha(rgb, np.where(inside, 255, 0).astype(np.uint8))


# --- dispatch ----------------------------------------------------------------
Renderer = Callable[[Sequence[ColorStop], int], np.ndarray]

RENDERERS: Dict[GradientMode, Renderer] = {
    GradientMode.NOISE: render_noise,
    GradientMode.LINEAR: render_linear,
    GradientMode.RADIAL: render_radial,
    GradientMode.ANGULAR: render_angular,
}


def render(stops: Sequence[ColorStop], mode: GradientMode, size: int) -> np.ndarray:
    """
    Render resolved (override-applied) stops as an (S, S, 4) uint8 RGBA buffer.
    Fewer than two stops is a caller error.
    """
    if len(stops) < MIN_STOPS:
        raise ValueError(f"need at least {MIN_STOPS} stops, got {len(stops)}")
    if size < 1:
        raise ValueError(f"size must be ≥ 1, got {size}")
    log.debug("render %s: %d stops, %dx%d", mode.value, len(stops), size, size)
    return RENDERERS[mode](tuple(stops), int(size))


def to_png(buf: np.ndarray) -> bytes:
    out = io.BytesIO()
    Image.fromarray(np.ascontiguousarray(buf, dtype=np.uint8)).save(out, format="PNG")
    return out.getvalue()


__all__ = [
    "GradientMode",
    "RENDERERS",
    "angular_color_at",
    "linear_field",
    "noise_field",
    "parse_mode",
    "radial_field",
    "ramp_colors",
    "render",
    "sector_index",
    "stop_rgbs",
    "to_png",
]
