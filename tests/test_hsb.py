import numpy as np
from colour.models import HSV_to_RGB

from hue_gradient.hsb import hsb_to_hex, hsb_to_rgb, hsb_to_rgb_array, rgb_to_hex


def test_primaries():
    assert hsb_to_rgb(0, 1, 1) == (255, 0, 0)
    assert hsb_to_rgb(120, 1, 1) == (0, 255, 0)
    assert hsb_to_rgb(240, 1, 1) == (0, 0, 255)


def test_zero_saturation_is_achromatic():
    for h in (0, 37.5, 120, 199, 300, 359.9):
        r, g, b = hsb_to_rgb(h, 0, 0.42)
        assert r == g == b


def test_channel_bounds():
    for h in np.linspace(0, 359.99, 37):
        for s in (0, 0.3, 1):
            for v in (0, 0.5, 1):
                assert all(0 <= c <= 255 for c in hsb_to_rgb(h, s, v))


def test_input_is_normalized():
    # hue wraps modulo 360, s/v are clamped
    assert hsb_to_rgb(360, 1, 1) == hsb_to_rgb(0, 1, 1)
    assert hsb_to_rgb(-120, 1, 1) == hsb_to_rgb(240, 1, 1)
    assert hsb_to_rgb(480, 1, 1) == hsb_to_rgb(120, 1, 1)
    assert hsb_to_rgb(60, 2.0, -1.0) == (0, 0, 0)
    assert hsb_to_rgb(0, -0.5, 1.5) == (255, 255, 255)


def test_matches_colour_science_reference():
    rng = np.random.default_rng(7)
    hsv = rng.random((200, 3))
    ref = np.round(HSV_to_RGB(hsv) * 255.0)
    ours = np.array([hsb_to_rgb(h * 360.0, s, v) for h, s, v in hsv])
    assert np.all(np.abs(ours - ref) <= 1)


def test_vectorised_matches_scalar():
    rng = np.random.default_rng(3)
    hsb = np.column_stack(
        [rng.uniform(-400, 800, 300), rng.uniform(-0.2, 1.2, 300), rng.uniform(-0.2, 1.2, 300)]
    )
    fast = hsb_to_rgb_array(hsb)
    slow = np.array([hsb_to_rgb(*row) for row in hsb], dtype=np.uint8)
    assert fast.dtype == np.uint8
    assert np.array_equal(fast, slow)


def test_hex():
    assert rgb_to_hex(255, 0, 0) == "#ff0000"
    assert rgb_to_hex(0, 0, 0) == "#000000"
    assert rgb_to_hex(10, 171, 205) == "#0aabcd"
    assert hsb_to_hex(240, 1, 1) == "#0000ff"
