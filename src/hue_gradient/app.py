from __future__ import annotations

import logging
import math
import threading
from typing import Any, Callable, Mapping, Optional

from flask import Flask, Response, jsonify, render_template_string, request

from . import state as actions
from .config import Settings
from .state import StudioState, initial_state
from .stops import ColorStop, GlobalOverride, StopList, resolve
from .synth import parse_mode, render, to_png

log = logging.getLogger(__name__)


class InvalidInput(ValueError):
    pass


class StateStore:
    """Holds the current snapshot; writers swap it whole under a lock."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._lock = threading.Lock()
        self._state = initial_state(settings)

    @property
    def current(self) -> StudioState:
        return self._state

    def apply(self, fn: Callable[[StudioState], StudioState]) -> StudioState:
        with self._lock:
            self._state = fn(self._state)
            return self._state

    def reset(self) -> StudioState:
        return self.apply(lambda _: initial_state(self.settings))


# ----------------------------- input parsing --------------------------------


def _number(
    payload: Mapping[str, Any], key: str, *, required: bool = True
) -> Optional[float]:
    raw = payload.get(key)
    if raw is None or raw == "":
        if required:
            raise InvalidInput(f"missing '{key}'")
        return None
    if isinstance(raw, bool):
        raise InvalidInput(f"'{key}' must be a number")
    try:
        val = float(raw)
    except (TypeError, ValueError):
        raise InvalidInput(f"'{key}' must be a number") from None
    if not math.isfinite(val):
        raise InvalidInput(f"'{key}' must be finite")
    return val


def _flag(payload: Mapping[str, Any], key: str) -> bool:
    raw = payload.get(key)
    if isinstance(raw, bool):
        return raw
    v = str(raw).strip().lower() if raw is not None else ""
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    raise InvalidInput(f"'{key}' must be a boolean")


def parse_hues(val: Optional[str]) -> list[float]:
    parts = [p for p in (val or "").split(",") if p.strip()]
    if len(parts) < 2:
        raise InvalidInput("need at least 2 hues")
    try:
        hues = [float(p) for p in parts]
    except ValueError:
        raise InvalidInput("hues must be comma-separated numbers") from None
    if not all(math.isfinite(h) for h in hues):
        raise InvalidInput("hues must be finite")
    return hues


def _payload() -> Mapping[str, Any]:
    body = request.get_json(silent=True)
    if isinstance(body, dict):
        return body
    return request.form or request.args


def _png(data: bytes) -> Response:
    resp = Response(data, mimetype="image/png")
    resp.headers["Cache-Control"] = "no-store"
    return resp


# ----------------------------- Flask app ------------------------------------


def create_app(settings: Optional[Settings] = None) -> Flask:
    settings = settings or Settings.from_env()
    app = Flask(__name__)
    app.config.from_prefixed_env("HUE_GRADIENT_FLASK")
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(levelname)s: %(message)s",
    )

    store = StateStore(settings)
    app.extensions["hue_gradient"] = store

    @app.errorhandler(InvalidInput)
    def bad_request(exc: InvalidInput):
        return jsonify({"error": str(exc)}), 400

    def requested_size(args: Mapping[str, Any]) -> int:
        size = _number(args, "size", required=False)
        return settings.clamp_size(settings.raster_size if size is None else size)

    def act(fn: Callable[[StudioState], StudioState]):
        try:
            new = store.apply(fn)
        except InvalidInput:
            raise
        except IndexError as exc:
            return jsonify({"error": str(exc)}), 404
        except Exception as exc:
            log.exception("State update failed")
            return jsonify({"error": str(exc)}), 500
        return jsonify(new.to_dict())

    @app.route("/")
    def index():
        return render_template_string(
            INDEX_HTML,
            size=settings.raster_size,
            track_width=settings.track_width,
            track_height=settings.track_height,
        )

    @app.route("/api/state")
    def get_state():
        return jsonify(store.current.to_dict())

    @app.route("/api/reset", methods=["POST"])
    def reset():
        return jsonify(store.reset().to_dict())

    @app.route("/api/count", methods=["POST"])
    def count():
        n = _number(_payload(), "count")
        return act(lambda s: actions.set_count(s, int(n)))

    @app.route("/api/mode", methods=["POST"])
    def mode():
        tag = _payload().get("mode")
        return act(lambda s: actions.set_mode(s, parse_mode(tag)))

    @app.route("/api/global", methods=["POST"])
    def global_values():
        p = _payload()
        sat = _number(p, "saturation", required=False)
        bri = _number(p, "brightness", required=False)
        return act(lambda s: actions.set_global(s, sat, bri))

    @app.route("/api/override", methods=["POST"])
    def override():
        enabled = _flag(_payload(), "enabled")
        return act(lambda s: actions.set_override(s, enabled))

    @app.route("/api/distribute", methods=["POST"])
    def distribute():
        return act(actions.distribute)

    @app.route("/api/stops/<int:index>", methods=["POST"])
    def edit_stop(index: int):
        p = _payload()
        edits = [
            (name, _number(p, name, required=False))
            for name in ("saturation", "brightness")
        ]
        edits = [(name, v) for name, v in edits if v is not None]
        if not edits:
            raise InvalidInput("expected 'saturation' and/or 'brightness'")
        if index >= store.current.count:
            return jsonify({"error": f"stop index {index} out of range"}), 404

        def apply(s: StudioState) -> StudioState:
            for name, v in edits:
                s = actions.edit_stop(s, index, name, v)
            return s

        return act(apply)

    @app.route("/api/pointer/down", methods=["POST"])
    def pointer_down():
        x = _number(_payload(), "x")
        return act(lambda s: actions.pointer_down(s, x))

    @app.route("/api/pointer/move", methods=["POST"])
    def pointer_move():
        x = _number(_payload(), "x")
        return act(lambda s: actions.pointer_move(s, x))

    @app.route("/api/pointer/up", methods=["POST"])
    @app.route("/api/pointer/cancel", methods=["POST"])
    def pointer_up():
        return act(actions.pointer_up)

    @app.route("/gradient.png")
    def gradient_png():
        size = requested_size(request.args)
        snapshot = store.current
        try:
            data = to_png(snapshot.render_gradient(size))
        except Exception as exc:
            log.exception("Gradient render failed")
            return jsonify({"error": str(exc)}), 500
        return _png(data)

    @app.route("/track.png")
    def track_png():
        snapshot = store.current
        try:
            data = to_png(snapshot.render_track())
        except Exception as exc:
            log.exception("Track render failed")
            return jsonify({"error": str(exc)}), 500
        return _png(data)

    @app.route("/render.png")
    def render_png():
        """Stateless preview: /render.png?hues=0,120,240&s=0.8&v=0.8&mode=radial"""
        args = request.args
        hues = parse_hues(args.get("hues"))
        if len(hues) > 8:
            raise InvalidInput("at most 8 hues")
        sat = _number(args, "s", required=False)
        bri = _number(args, "v", required=False)
        sat = settings.default_saturation if sat is None else sat
        bri = settings.default_brightness if bri is None else bri
        size = requested_size(args)
        stops = StopList(tuple(ColorStop.of(h, sat, bri) for h in hues))
        try:
            buf = render(
                resolve(stops, GlobalOverride(enabled=False)),
                parse_mode(args.get("mode")),
                size,
            )
            data = to_png(buf)
        except Exception as exc:
            log.exception("Stateless render failed")
            return jsonify({"error": str(exc)}), 500
        return _png(data)

    return app


INDEX_HTML = """
<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width,initial-scale=1" />
    <title>Hue Gradient</title>
    <style>
      body { font-family: system-ui, sans-serif; background: #fff; color: #1f2937;
             max-width: 64rem; margin: 0 auto; padding: 2rem 1rem; }
      section { border: 1px solid #d1d5db; border-radius: 0.5rem; padding: 1rem;
                margin-bottom: 1.5rem; }
      .row { display: flex; flex-wrap: wrap; gap: 0.5rem; justify-content: center; }
      button { padding: 0.4rem 0.9rem; border: 0; border-radius: 0.375rem;
               background: #e5e7eb; cursor: pointer; text-transform: capitalize; }
      button.on { background: #3b82f6; color: #fff; }
      #track { cursor: pointer; max-width: 100%; user-select: none; }
      #swatches { display: grid; grid-template-columns: repeat(auto-fill, minmax(12rem, 1fr));
                  gap: 1rem; }
      .swatch { border: 1px solid #e5e7eb; border-radius: 0.5rem; padding: 0.75rem; }
      .chip { width: 3rem; height: 3rem; border-radius: 0.375rem; float: left;
              margin-right: 0.75rem; border: 1px solid #e5e7eb; }
      code { font-size: 0.75rem; background: #f3f4f6; padding: 0.1rem 0.25rem; }
      label { display: block; font-size: 0.8rem; }
      input[type=range] { width: 100%; }
    </style>
  </head>
  <body>
    <section>
      <h2>Number of colors</h2>
      <div class="row" id="counts"></div>
    </section>

    <section>
      <h3>Gradient preview</h3>
      <div class="row" id="modes"></div>
      <div class="row"><img id="preview" width="{{ size }}" height="{{ size }}" alt="gradient" /></div>
    </section>

    <section>
      <div class="row" style="justify-content: space-between">
        <h3>Color selection</h3>
        <button class="on" id="distribute">Distribute evenly</button>
      </div>
      <div class="row">
        <img id="track" width="{{ track_width }}" height="{{ track_height }}"
             draggable="false" alt="hue track" />
      </div>
      <div id="globals">
        <label>Global saturation <input type="range" min="0" max="1" step="0.01" id="gsat" /></label>
        <label>Global brightness <input type="range" min="0" max="1" step="0.01" id="gbri" /></label>
      </div>
      <label><input type="checkbox" id="override" /> Use global saturation &amp; brightness for all colors</label>
    </section>

    <section>
      <h3>Selected colors</h3>
      <div id="swatches"></div>
    </section>

    <script>
      const TRACK_WIDTH = {{ track_width }};
      const $ = (id) => document.getElementById(id);
      let state = null;
      let dragging = false;

      async function post(path, body) {
        const res = await fetch(path, {
          method: "POST",
          headers: { "Content-Type": "application/json" },
          body: JSON.stringify(body || {}),
        });
        const data = await res.json();
        if (!res.ok) throw new Error(data.error || res.statusText);
        show(data);
        return data;
      }

      function refreshImages() {
        const bust = Date.now();
        $("preview").src = "/gradient.png?t=" + bust;
        $("track").src = "/track.png?t=" + bust;
      }

      function buttons(el, values, current, onClick) {
        el.innerHTML = "";
        for (const v of values) {
          const b = document.createElement("button");
          b.textContent = v;
          if (v === current) b.className = "on";
          b.onclick = () => onClick(v);
          el.appendChild(b);
        }
      }

      function show(s) {
        state = s;
        buttons($("counts"), [2, 3, 4, 5, 6, 7, 8], s.count, (n) => post("/api/count", { count: n }));
        buttons($("modes"), ["noise", "linear", "radial", "angular"], s.mode,
                (m) => post("/api/mode", { mode: m }));
        $("override").checked = s.override.enabled;
        $("globals").style.display = s.override.enabled ? "" : "none";
        $("gsat").value = s.override.saturation;
        $("gbri").value = s.override.brightness;

        const box = $("swatches");
        box.innerHTML = "";
        for (const st of s.stops) {
          const d = document.createElement("div");
          d.className = "swatch";
          d.innerHTML =
            `<div class="chip" style="background:${st.hex}"></div>` +
            `<div>Hue: ${st.hue_deg}&deg;</div><code>${st.hex}</code>`;
          if (!s.override.enabled) {
            for (const prop of ["saturation", "brightness"]) {
              const l = document.createElement("label");
              l.textContent = prop;
              const r = document.createElement("input");
              Object.assign(r, { type: "range", min: 0, max: 1, step: 0.01 });
              r.value = st["stored_" + prop];
              r.onchange = () => post(`/api/stops/${st.index}`, { [prop]: parseFloat(r.value) });
              l.appendChild(r);
              d.appendChild(l);
            }
          }
          box.appendChild(d);
        }
        refreshImages();
      }

      function trackX(ev) {
        const rect = $("track").getBoundingClientRect();
        return (ev.clientX - rect.left) * (TRACK_WIDTH / rect.width);
      }

      // pointer posts run one after another so the server sees down, moves
      // and up in order and responses never repaint an older snapshot
      let pointerChain = Promise.resolve();
      function sendPointer(path, body) {
        pointerChain = pointerChain
          .then(() => post(path, body))
          .catch((err) => console.error(path, err));
      }

      $("track").addEventListener("pointerdown", (ev) => {
        dragging = true;
        sendPointer("/api/pointer/down", { x: trackX(ev) });
      });
      // move/up are tracked on the whole document so a drag always ends
      document.addEventListener("pointermove", (ev) => {
        if (dragging) sendPointer("/api/pointer/move", { x: trackX(ev) });
      });
      const endDrag = (path) => {
        if (!dragging) return;
        dragging = false;
        sendPointer(path);
      };
      document.addEventListener("pointerup", () => endDrag("/api/pointer/up"));
      document.addEventListener("pointercancel", () => endDrag("/api/pointer/cancel"));
      window.addEventListener("blur", () => endDrag("/api/pointer/cancel"));

      $("distribute").onclick = () => post("/api/distribute");
      $("override").onchange = (e) => post("/api/override", { enabled: e.target.checked });
      $("gsat").onchange = (e) => post("/api/global", { saturation: parseFloat(e.target.value) });
      $("gbri").onchange = (e) => post("/api/global", { brightness: parseFloat(e.target.value) });

      fetch("/api/state").then((r) => r.json()).then(show);
    </script>
  </body>
</html>
"""


def main() -> None:
    create_app().run(debug=False, threaded=True)


if __name__ == "__main__":
    main()
