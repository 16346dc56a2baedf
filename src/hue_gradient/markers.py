"""Pointer → hue mapping for the stop markers on the hue track.

The controller is a tiny immutable state machine::

    Idle --pointer_down(on marker)--> Tracking --pointer_up / cancel--> Idle

Every transition returns a new controller together with the (possibly new)
stop list, so callers can swap both in one step.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from .stops import StopList, set_stop_hue

log = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 20.0  # px


def marker_x(hue: float, track_width: float) -> float:
    return (hue / 360.0) * track_width


def hue_at(x: float, track_width: float) -> float:
    if track_width <= 0:
        return 0.0
    return max(0.0, min(360.0, (x / track_width) * 360.0))


def nearest_marker(
    stops: StopList,
    x: float,
    track_width: float,
    tolerance: float = DEFAULT_TOLERANCE,
) -> Optional[int]:
    """
    Index of the marker closest to `x`, or None if none lies strictly within
    `tolerance` pixels. Equal distances keep the lower index.
    """
    best: Optional[int] = None
    best_d = float("inf")
    for i, stop in enumerate(stops):
        d = abs(x - marker_x(stop.hue, track_width))
        if d < best_d and d < tolerance:
            best, best_d = i, d
    return best


@dataclass(frozen=True)
class DragSession:
    index: int


@dataclass(frozen=True)
class MarkerController:
    track_width: float = 600.0
    tolerance: float = DEFAULT_TOLERANCE
    session: Optional[DragSession] = None

    @property
    def tracking(self) -> bool:
        return self.session is not None

    @property
    def active_index(self) -> Optional[int]:
        return self.session.index if self.session is not None else None

    def pointer_down(
        self, stops: StopList, x: float
    ) -> Tuple["MarkerController", StopList]:
        if self.session is not None:
            # single pointer: a second press cannot start another drag
            return self, stops
        idx = nearest_marker(stops, x, self.track_width, self.tolerance)
        if idx is None:
            return self, stops
        log.debug("drag start: marker %d at x=%.1f", idx, x)
        return self._with(DragSession(idx)), stops

    def pointer_move(
        self, stops: StopList, x: float
    ) -> Tuple["MarkerController", StopList]:
        if self.session is None:
            return self, stops
        hue = hue_at(x, self.track_width)
        return self, set_stop_hue(stops, self.session.index, hue)

    def pointer_up(self) -> "MarkerController":
        if self.session is not None:
            log.debug("drag end: marker %d", self.session.index)
        return self._with(None)

    # pointer lost (left the window, blur, pointercancel): same teardown as up
    cancel = pointer_up

    def _with(self, session: Optional[DragSession]) -> "MarkerController":
        return MarkerController(self.track_width, self.tolerance, session)


__all__ = [
    "DEFAULT_TOLERANCE",
    "DragSession",
    "MarkerController",
    "hue_at",
    "marker_x",
    "nearest_marker",
]
