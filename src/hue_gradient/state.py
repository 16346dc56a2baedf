"""
Whole-tool state as one immutable snapshot.

Every user action is a function `StudioState -> StudioState`; both renderers
only ever read a finished snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Optional

import numpy as np

from .config import Settings
from .markers import MarkerController
from .stops import (
    ColorStop,
    GlobalOverride,
    StopList,
    StopProperty,
    clamp_count,
    distribute_evenly,
    hex_values,
    regenerate,
    resolve,
    set_stop_property,
    swatches,
)
from .synth import GradientMode, parse_mode, render
from .track import render_track


@dataclass(frozen=True)
class StudioState:
    stops: StopList
    override: GlobalOverride = field(default_factory=GlobalOverride)
    mode: GradientMode = GradientMode.NOISE
    controller: MarkerController = field(default_factory=MarkerController)
    track_height: int = 80

    @property
    def count(self) -> int:
        return len(self.stops)

    @property
    def active_index(self) -> Optional[int]:
        return self.controller.active_index

    def effective_stops(self) -> tuple[ColorStop, ...]:
        return resolve(self.stops, self.override)

    def render_gradient(self, size: int) -> np.ndarray:
        return render(self.effective_stops(), self.mode, size)

    def render_track(self) -> np.ndarray:
        return render_track(
            self.effective_stops(),
            self.active_index,
            width=int(self.controller.track_width),
            height=self.track_height,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "count": self.count,
            "mode": self.mode.value,
            "override": {
                "enabled": self.override.enabled,
                "saturation": self.override.saturation,
                "brightness": self.override.brightness,
            },
            "active_index": self.active_index,
            "hex": hex_values(self.stops, self.override),
            "stops": swatches(self.stops, self.override),
        }


def initial_state(settings: Optional[Settings] = None) -> StudioState:
    s = settings or Settings()
    return StudioState(
        stops=regenerate(s.default_count, s.default_saturation, s.default_brightness),
        override=GlobalOverride(
            s.default_override, s.default_saturation, s.default_brightness
        ),
        mode=parse_mode(s.default_mode),
        controller=MarkerController(float(s.track_width), s.marker_tolerance),
        track_height=s.track_height,
    )


# --- actions -----------------------------------------------------------------


def set_count(state: StudioState, count: int) -> StudioState:
    n = clamp_count(count)
    stops = regenerate(n, state.override.saturation, state.override.brightness)
    # a regenerated list invalidates any drag in progress
    return replace(state, stops=stops, controller=state.controller.cancel())


def set_mode(state: StudioState, mode: GradientMode | str) -> StudioState:
    if not isinstance(mode, GradientMode):
        mode = parse_mode(mode)
    return replace(state, mode=mode)


def set_global(
    state: StudioState,
    saturation: Optional[float] = None,
    brightness: Optional[float] = None,
) -> StudioState:
    o = state.override
    return replace(
        state,
        override=GlobalOverride(
            o.enabled,
            o.saturation if saturation is None else saturation,
            o.brightness if brightness is None else brightness,
        ),
    )


def set_override(state: StudioState, enabled: bool) -> StudioState:
    return replace(state, override=replace(state.override, enabled=bool(enabled)))


def distribute(state: StudioState) -> StudioState:
    return replace(state, stops=distribute_evenly(state.stops))


def edit_stop(
    state: StudioState, index: int, name: StopProperty, value: float
) -> StudioState:
    return replace(state, stops=set_stop_property(state.stops, index, name, value))


def pointer_down(state: StudioState, x: float) -> StudioState:
    controller, stops = state.controller.pointer_down(state.stops, x)
    return replace(state, controller=controller, stops=stops)


def pointer_move(state: StudioState, x: float) -> StudioState:
    controller, stops = state.controller.pointer_move(state.stops, x)
    return replace(state, controller=controller, stops=stops)


def pointer_up(state: StudioState) -> StudioState:
    return replace(state, controller=state.controller.pointer_up())


__all__ = [
    "StudioState",
    "distribute",
    "edit_stop",
    "initial_state",
    "pointer_down",
    "pointer_move",
    "pointer_up",
    "set_count",
    "set_global",
    "set_mode",
    "set_override",
]
