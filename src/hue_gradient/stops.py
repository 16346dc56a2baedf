from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Literal

from .hsb import RGB, clamp01, hsb_to_rgb, normalize_hue, rgb_to_hex

MIN_STOPS = 2
MAX_STOPS = 8

StopProperty = Literal["saturation", "brightness"]


@dataclass(frozen=True)
class ColorStop:
    hue: float
    saturation: float
    brightness: float

    def __post_init__(self) -> None:
        # hue wraps to [0, 360), s/v clamp to [0, 1] on every construction
        object.__setattr__(self, "hue", normalize_hue(self.hue))
        object.__setattr__(self, "saturation", clamp01(self.saturation))
        object.__setattr__(self, "brightness", clamp01(self.brightness))

    @classmethod
    def of(cls, hue: float, saturation: float, brightness: float) -> "ColorStop":
        return cls(hue, saturation, brightness)

    def rgb(self) -> RGB:
        return hsb_to_rgb(self.hue, self.saturation, self.brightness)

    def hex(self) -> str:
        return rgb_to_hex(*self.rgb())


@dataclass(frozen=True)
class GlobalOverride:
    enabled: bool = True
    saturation: float = 0.8
    brightness: float = 0.8

    def __post_init__(self) -> None:
        object.__setattr__(self, "saturation", clamp01(self.saturation))
        object.__setattr__(self, "brightness", clamp01(self.brightness))

    def apply(self, stop: ColorStop) -> ColorStop:
        if not self.enabled:
            return stop
        return replace(stop, saturation=self.saturation, brightness=self.brightness)


@dataclass(frozen=True)
class StopList:
    stops: tuple[ColorStop, ...]

    def __post_init__(self) -> None:
        n = len(self.stops)
        if not MIN_STOPS <= n <= MAX_STOPS:
            raise ValueError(f"stop count must be in [{MIN_STOPS}, {MAX_STOPS}], got {n}")

    def __len__(self) -> int:
        return len(self.stops)

    def __getitem__(self, index: int) -> ColorStop:
        return self.stops[index]

    def __iter__(self):
        return iter(self.stops)

    @property
    def hues(self) -> list[float]:
        return [s.hue for s in self.stops]

    def replace_at(self, index: int, stop: ColorStop) -> "StopList":
        if not 0 <= index < len(self.stops):
            raise IndexError(f"stop index {index} out of range")
        items = list(self.stops)
        items[index] = stop
        return StopList(tuple(items))


def clamp_count(count: int) -> int:
    return max(MIN_STOPS, min(MAX_STOPS, int(count)))


def regenerate(count: int, saturation: float, brightness: float) -> StopList:
    """
    Fresh list of `count` stops spread evenly around the hue circle.
    Previous per-stop edits are discarded: changing the count is a hard reset.
    """
    n = clamp_count(count)
    return StopList(
        tuple(ColorStop.of((360.0 / n) * i, saturation, brightness) for i in range(n))
    )


def distribute_evenly(stops: StopList) -> StopList:
    n = len(stops)
    return StopList(
        tuple(replace(s, hue=(360.0 / n) * i) for i, s in enumerate(stops))
    )


def set_stop_hue(stops: StopList, index: int, hue: float) -> StopList:
    # drag path clamps to [0, 360]; storage is half-open so 360 lands on 0
    h = max(0.0, min(360.0, float(hue)))
    return stops.replace_at(index, replace(stops[index], hue=normalize_hue(h)))


def set_stop_property(
    stops: StopList, index: int, name: StopProperty, value: float
) -> StopList:
    if name not in ("saturation", "brightness"):
        raise ValueError(f"unknown stop property '{name}'")
    updated = replace(stops[index], **{name: clamp01(float(value))})
    return stops.replace_at(index, updated)


def resolve(stops: StopList, override: GlobalOverride) -> tuple[ColorStop, ...]:
    """Effective stops for rendering; stored per-stop values are left alone."""
    return tuple(override.apply(s) for s in stops)


def hex_values(stops: StopList, override: GlobalOverride) -> list[str]:
    return [s.hex() for s in resolve(stops, override)]


def swatches(stops: StopList, override: GlobalOverride) -> list[dict]:
    out = []
    for i, (stored, eff) in enumerate(zip(stops, resolve(stops, override))):
        out.append(
            {
                "index": i,
                "hue": stored.hue,
                "hue_deg": int(math.floor(stored.hue + 0.5)),
                "saturation": eff.saturation,
                "brightness": eff.brightness,
                "stored_saturation": stored.saturation,
                "stored_brightness": stored.brightness,
                "hex": eff.hex(),
            }
        )
    return out


__all__ = [
    "ColorStop",
    "GlobalOverride",
    "MAX_STOPS",
    "MIN_STOPS",
    "StopList",
    "clamp_count",
    "distribute_evenly",
    "hex_values",
    "regenerate",
    "resolve",
    "set_stop_hue",
    "set_stop_property",
    "swatches",
]
