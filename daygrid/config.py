"""Grid configuration.

The hour height is shared by the hour gutter, the gridlines and every event
block, so it is validated once here rather than on each layout call.
"""

from __future__ import annotations

import datetime as dt
import math
import os
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from .util.tz import normalize_tz_name, resolve_tz

HOUR_HEIGHT = 64
SNAP_MIN = 15
GUTTER_WIDTH_PX = 4.5 * 16
DEFAULT_SCROLL_HOUR = 8
MIN_VISIBLE_MIN = 15


class GridConfigError(ValueError):
    """Raised when a grid configuration is unusable."""


@dataclass(frozen=True)
class GridConfig:
    hour_height: float = HOUR_HEIGHT
    snap_min: int = SNAP_MIN
    tz: str = "local"
    gutter_width_px: float = GUTTER_WIDTH_PX
    default_scroll_hour: int = DEFAULT_SCROLL_HOUR

    def __post_init__(self) -> None:
        hh = self.hour_height
        if isinstance(hh, bool) or not isinstance(hh, (int, float)) or not math.isfinite(hh) or hh <= 0:
            raise GridConfigError(f"hour_height must be a positive number; got {hh!r}")

        sm = self.snap_min
        if isinstance(sm, bool) or not isinstance(sm, int) or sm <= 0 or 60 % sm != 0:
            raise GridConfigError(f"snap_min must be a positive divisor of 60; got {sm!r}")

        if not (0 <= int(self.default_scroll_hour) <= 23):
            raise GridConfigError(f"default_scroll_hour must be 0..23; got {self.default_scroll_hour!r}")

        object.__setattr__(self, "tz", normalize_tz_name(self.tz))
        try:
            resolve_tz(self.tz)
        except ValueError as ex:
            raise GridConfigError(str(ex)) from ex

    @property
    def tzinfo(self) -> dt.tzinfo:
        return resolve_tz(self.tz)

    @property
    def column_height(self) -> float:
        return 24 * self.hour_height

    @property
    def snap_px(self) -> float:
        return self.hour_height * self.snap_min / 60.0

    def with_overrides(self, **kw: Any) -> "GridConfig":
        return replace(self, **{k: v for k, v in kw.items() if v is not None})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hour_height": self.hour_height,
            "snap_min": self.snap_min,
            "tz": self.tz,
            "gutter_width_px": self.gutter_width_px,
            "default_scroll_hour": self.default_scroll_hour,
        }


def _env_number(name: str, conv) -> Optional[Any]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        return conv(raw.strip())
    except ValueError as ex:
        raise GridConfigError(f"{name} must be a number; got {raw!r}") from ex


def grid_config_from_env(**overrides: Any) -> GridConfig:
    """Defaults <- env (DAYGRID_HOUR_HEIGHT, DAYGRID_SNAP_MIN, DAYGRID_TZ) <- explicit overrides."""
    base: Dict[str, Any] = {}
    hh = _env_number("DAYGRID_HOUR_HEIGHT", float)
    if hh is not None:
        base["hour_height"] = hh
    sm = _env_number("DAYGRID_SNAP_MIN", int)
    if sm is not None:
        base["snap_min"] = sm
    tz = os.getenv("DAYGRID_TZ")
    if tz:
        base["tz"] = tz

    base.update({k: v for k, v in overrides.items() if v is not None})
    return GridConfig(**base)


def grid_config_from_dict(cfg: Optional[Dict[str, Any]], *, base: Optional[GridConfig] = None) -> GridConfig:
    """Build a GridConfig from a JSON `cfg` object; unknown keys are ignored."""
    grid = base or GridConfig()
    if not cfg:
        return grid
    if not isinstance(cfg, dict):
        raise GridConfigError("cfg must be an object")

    known = ("hour_height", "snap_min", "tz", "gutter_width_px", "default_scroll_hour")
    return grid.with_overrides(**{k: cfg.get(k) for k in known})


__all__ = [
    "DEFAULT_SCROLL_HOUR",
    "GUTTER_WIDTH_PX",
    "GridConfig",
    "GridConfigError",
    "HOUR_HEIGHT",
    "MIN_VISIBLE_MIN",
    "SNAP_MIN",
    "grid_config_from_dict",
    "grid_config_from_env",
]
