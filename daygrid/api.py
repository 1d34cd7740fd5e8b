"""daygrid.api

Stable *library* entrypoint for daygrid.

Policy:
  - Only names listed in __all__ are considered public API.
  - Everything else is internal and may change without notice.
"""

from __future__ import annotations

import datetime as dt
import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from daygrid.config import (
    GridConfig,
    GridConfigError,
    grid_config_from_dict,
    grid_config_from_env,
)
from daygrid.layout import (
    block_geometry,
    current_time_style,
    current_time_top,
    events_for_day,
    hour_rows,
    initial_scroll_top,
    interval_geometry,
    layout_day,
    layout_week,
    overlaps_day,
    week_days,
    week_initial_scroll_top,
)
from daygrid.model import BlockGeometry, CalendarEvent, LayoutPreconditionError, PlacedBlock
from daygrid.snap import (
    column_instant_ms,
    drag_reschedule,
    minutes_to_pixels,
    pixels_to_minutes,
    pointer_to_minutes,
    pointer_to_time,
    snap_minutes,
    snap_pixels,
)
from daygrid.validate import EventsValidationError, load_events, validate_events_payload
from daygrid.util.tz import Instant

try:
    import orjson  # type: ignore
except Exception:  # pragma: no cover
    orjson = None  # type: ignore

JsonPath = Union[str, Path]
Document = Dict[str, Any]


def load_events_document(
    path: JsonPath,
    *,
    grid: Optional[GridConfig] = None,
    skipped: Optional[List[str]] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> Tuple[GridConfig, List[CalendarEvent]]:
    """Read an events JSON file.

    Its optional `cfg` object is layered over `grid`, and non-None `overrides`
    (explicit command-line values) over that. Naive event times are read in
    the resulting timezone.
    """
    p = Path(path)
    obj = json.loads(p.read_text(encoding="utf-8", errors="replace"))
    if not isinstance(obj, dict):
        raise EventsValidationError(f"events document must be a JSON object; got {type(obj).__name__}")
    g = grid_config_from_dict(obj.get("cfg") if isinstance(obj.get("cfg"), dict) else None, base=grid)
    if overrides:
        g = g.with_overrides(**overrides)
    return g, load_events(obj, g.tzinfo, skipped=skipped)


def build_layout_document(
    events: Iterable[CalendarEvent],
    days: Iterable[dt.date],
    grid: GridConfig,
    *,
    now: Optional[Instant] = None,
) -> Document:
    """JSON-ready layout of `events` over the columns of `days`.

    With `now`, the document also carries the initial scroll offset and the
    current-time line.
    """
    day_list = list(days)
    by_day = layout_week(events, day_list, grid)
    doc: Document = {
        "cfg": grid.to_dict(),
        "column_height": grid.column_height,
        "days": [
            {
                "day": d.isoformat(),
                "blocks": [b.to_dict() for b in blocks],
            }
            for d, blocks in by_day.items()
        ],
    }
    if now is not None:
        doc["scroll_top"] = week_initial_scroll_top(day_list, now, grid)
        doc["now_line"] = current_time_style(now, grid)
    return doc


def dumps_json(doc: Any) -> str:
    if orjson is not None:
        return orjson.dumps(doc, option=orjson.OPT_INDENT_2).decode("utf-8")
    return json.dumps(doc, ensure_ascii=False, indent=2)


# --- Public API exports (locked by contract tests) ------------------------
# Keep changes intentional and reviewable.
_PUBLIC_EXPORTS = (
    "BlockGeometry",
    "CalendarEvent",
    "EventsValidationError",
    "GridConfig",
    "GridConfigError",
    "LayoutPreconditionError",
    "PlacedBlock",
    "block_geometry",
    "build_layout_document",
    "column_instant_ms",
    "current_time_style",
    "current_time_top",
    "drag_reschedule",
    "dumps_json",
    "events_for_day",
    "grid_config_from_dict",
    "grid_config_from_env",
    "hour_rows",
    "initial_scroll_top",
    "interval_geometry",
    "layout_day",
    "layout_week",
    "load_events",
    "load_events_document",
    "minutes_to_pixels",
    "overlaps_day",
    "pixels_to_minutes",
    "pointer_to_minutes",
    "pointer_to_time",
    "snap_minutes",
    "snap_pixels",
    "validate_events_payload",
    "week_days",
    "week_initial_scroll_top",
)

__all__ = [n for n in _PUBLIC_EXPORTS if n in globals()]
# --- /Public API exports --------------------------------------------------
