"""
Runtime settings. Defaults mirror the reference UI (300px preview, 600x80 track);
any field can be overridden through HUE_GRADIENT_<FIELD> environment variables.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional

log = logging.getLogger(__name__)

ENV_PREFIX = "HUE_GRADIENT_"


@dataclass(frozen=True)
class Settings:
    raster_size: int = 300
    max_raster_size: int = 1024
    track_width: int = 600
    track_height: int = 80
    marker_tolerance: float = 20.0
    default_count: int = 3
    default_saturation: float = 0.8
    default_brightness: float = 0.8
    default_override: bool = True
    default_mode: str = "noise"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for f in fields(cls):
            raw = env.get(ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            try:
                values[f.name] = _coerce(f.default, raw)
            except ValueError:
                log.warning("ignoring %s%s=%r", ENV_PREFIX, f.name.upper(), raw)
        return cls(**values)

    def clamp_size(self, size: int) -> int:
        return max(1, min(self.max_raster_size, int(size)))


def _coerce(default: Any, raw: str) -> Any:
    if isinstance(default, bool):
        v = raw.strip().lower()
        if v in {"1", "true", "yes", "on"}:
            return True
        if v in {"0", "false", "no", "off"}:
            return False
        raise ValueError(raw)
    if isinstance(default, int):
        return int(raw)
    if isinstance(default, float):
        return float(raw)
    return raw.strip()


__all__ = ["ENV_PREFIX", "Settings"]
