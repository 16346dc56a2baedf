import pytest

from hue_gradient.markers import (
    DragSession,
    MarkerController,
    hue_at,
    marker_x,
    nearest_marker,
)
from hue_gradient.stops import ColorStop, StopList

WIDTH = 600


def _stops(*hues):
    return StopList(tuple(ColorStop.of(h, 0.8, 0.8) for h in hues))


def test_geometry():
    assert marker_x(0, WIDTH) == 0
    assert marker_x(120, WIDTH) == pytest.approx(200)
    assert marker_x(240, WIDTH) == pytest.approx(400)
    assert hue_at(300, WIDTH) == 180
    assert hue_at(-50, WIDTH) == 0
    assert hue_at(700, WIDTH) == 360


def test_pointer_near_first_marker_selects_it():
    assert nearest_marker(_stops(0, 120, 240), 5, WIDTH) == 0


def test_pointer_between_markers_beyond_tolerance_selects_nothing():
    # markers at x=200 and x=400; x=300 is 100px from both
    assert nearest_marker(_stops(0, 120, 240), 300, WIDTH) is None


def test_tolerance_is_strict():
    stops = _stops(0, 180)
    assert nearest_marker(stops, 19.9, WIDTH) == 0
    assert nearest_marker(stops, 20, WIDTH) is None


def test_tie_keeps_lower_index():
    # markers at x=150 and x=300, pointer at 225
    stops = _stops(90, 180)
    assert nearest_marker(stops, 225, WIDTH, tolerance=100) == 0
    assert nearest_marker(_stops(180, 90), 225, WIDTH, tolerance=100) == 0


def test_drag_lifecycle():
    stops = _stops(0, 120, 240)
    ctl = MarkerController(WIDTH)
    assert not ctl.tracking

    ctl, stops = ctl.pointer_down(stops, 205)
    assert ctl.session == DragSession(1)
    assert ctl.active_index == 1

    ctl, stops = ctl.pointer_move(stops, 300)
    assert stops.hues == [0, 180, 240]
    ctl, stops = ctl.pointer_move(stops, 450)
    assert stops.hues == [0, 270, 240]

    ctl = ctl.pointer_up()
    assert ctl.active_index is None
    ctl, after = ctl.pointer_move(stops, 10)
    assert after is stops


def test_pointer_down_off_marker_stays_idle():
    stops = _stops(0, 120, 240)
    ctl, out = MarkerController(WIDTH).pointer_down(stops, 300)
    assert not ctl.tracking
    assert out is stops


def test_second_pointer_down_is_ignored_while_tracking():
    stops = _stops(0, 120, 240)
    ctl, stops = MarkerController(WIDTH).pointer_down(stops, 0)
    ctl, stops = ctl.pointer_down(stops, 400)
    assert ctl.active_index == 0


def test_drag_past_end_clamps_and_wraps():
    stops = _stops(0, 120, 240)
    ctl, stops = MarkerController(WIDTH).pointer_down(stops, 400)
    ctl, stops = ctl.pointer_move(stops, 2000)
    # clamped to 360, stored as the equivalent hue 0
    assert stops.hues[2] == 0
    ctl, stops = ctl.pointer_move(stops, -80)
    assert stops.hues[2] == 0


def test_cancel_ends_session():
    stops = _stops(0, 180)
    ctl, stops = MarkerController(WIDTH).pointer_down(stops, 2)
    assert ctl.cancel().session is None
