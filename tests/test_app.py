import io

import pytest
from PIL import Image

from hue_gradient.app import create_app
from hue_gradient.config import Settings


@pytest.fixture
def client():
    app = create_app(Settings(raster_size=32))
    app.config["TESTING"] = True
    return app.test_client()


def _png(resp):
    assert resp.status_code == 200
    assert resp.mimetype == "image/png"
    return Image.open(io.BytesIO(resp.data))


def test_index_page(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert b"/api/pointer/down" in resp.data


def test_state_and_count(client):
    data = client.get("/api/state").get_json()
    assert data["count"] == 3
    assert data["mode"] == "noise"
    data = client.post("/api/count", json={"count": 4}).get_json()
    assert [s["hue"] for s in data["stops"]] == [0, 90, 180, 270]
    # out-of-range counts are clamped, not rejected
    assert client.post("/api/count", json={"count": 99}).get_json()["count"] == 8


def test_mode_fallback(client):
    assert client.post("/api/mode", json={"mode": "angular"}).get_json()["mode"] == "angular"
    assert client.post("/api/mode", json={"mode": "bogus"}).get_json()["mode"] == "noise"


def test_global_and_override(client):
    data = client.post("/api/global", json={"saturation": 1, "brightness": 1}).get_json()
    assert data["hex"] == ["#ff0000", "#00ff00", "#0000ff"]
    data = client.post("/api/override", json={"enabled": False}).get_json()
    assert data["override"]["enabled"] is False
    # stored per-stop values were initialised from the 0.8 defaults
    assert data["hex"][0] == "#cc2929"


def test_stop_edit(client):
    client.post("/api/override", json={"enabled": False})
    data = client.post("/api/stops/2", json={"brightness": 0.5}).get_json()
    assert data["stops"][2]["brightness"] == 0.5
    assert client.post("/api/stops/7", json={"brightness": 0.5}).status_code == 404
    assert client.post("/api/stops/0", json={}).status_code == 400


def test_pointer_drag(client):
    data = client.post("/api/pointer/down", json={"x": 402}).get_json()
    assert data["active_index"] == 2
    data = client.post("/api/pointer/move", json={"x": 300}).get_json()
    assert data["stops"][2]["hue"] == 180
    data = client.post("/api/pointer/up").get_json()
    assert data["active_index"] is None
    data = client.post("/api/distribute").get_json()
    assert [s["hue"] for s in data["stops"]] == [0, 120, 240]


def test_pointer_cancel_and_miss(client):
    data = client.post("/api/pointer/down", json={"x": 300}).get_json()
    assert data["active_index"] is None
    client.post("/api/pointer/down", json={"x": 0})
    data = client.post("/api/pointer/cancel").get_json()
    assert data["active_index"] is None


def test_bad_input(client):
    assert client.post("/api/count", json={}).status_code == 400
    assert client.post("/api/count", json={"count": "many"}).status_code == 400
    assert client.post("/api/pointer/move", json={"x": "nan"}).status_code == 400
    assert client.post("/api/override", json={"enabled": "maybe"}).status_code == 400
    assert "error" in client.post("/api/global", json={"saturation": "x"}).get_json()


def test_gradient_and_track_png(client):
    img = _png(client.get("/gradient.png"))
    assert img.size == (32, 32)
    img = _png(client.get("/gradient.png?size=8"))
    assert img.size == (8, 8)
    img = _png(client.get("/track.png"))
    assert img.size == (600, 80)


def test_zero_size_clamps_to_one_pixel(client):
    assert _png(client.get("/gradient.png?size=0")).size == (1, 1)
    assert _png(client.get("/render.png?hues=0,180&size=0")).size == (1, 1)
    assert _png(client.get("/render.png?hues=0,180&size=-5")).size == (1, 1)


def test_stateless_render(client):
    img = _png(client.get("/render.png?hues=0,120,240&s=0.8&v=0.8&mode=linear&size=2"))
    px = img.convert("RGBA").load()
    assert px[0, 0] == (204, 41, 41, 255)
    assert px[1, 1] == (41, 41, 204, 255)
    assert client.get("/render.png?hues=10").status_code == 400
    assert client.get("/render.png?hues=a,b").status_code == 400


def test_reset(client):
    client.post("/api/count", json={"count": 6})
    assert client.post("/api/reset").get_json()["count"] == 3


def test_move_after_release_leaves_stops_alone(client):
    client.post("/api/pointer/down", json={"x": 0})
    client.post("/api/pointer/up")
    data = client.post("/api/pointer/move", json={"x": 300}).get_json()
    assert [s["hue"] for s in data["stops"]] == [0, 120, 240]


def test_page_serializes_pointer_posts(client):
    page = client.get("/").data.decode()
    assert "pointerChain" in page
    # the drag flag is raised before the pointer-down request is sent
    down = page.index('addEventListener("pointerdown"')
    assert page.index("dragging = true", down) < page.index('"/api/pointer/down"', down)
