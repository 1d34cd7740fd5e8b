# daygrid/snap.py
"""Pixel <-> time mapping for a day column.

Forward (time -> px) is used by block placement and the now indicator;
the inverse (px -> time) is used by click-to-create and drop-to-reschedule.
Both use the same scale, so a snapped pixel offset maps to a time and back
to the same pixel offset.
"""

from __future__ import annotations

import datetime as dt
import math
from typing import Tuple

from .config import MIN_VISIBLE_MIN, SNAP_MIN, GridConfig
from .model import CalendarEvent, LayoutPreconditionError
from .util.tz import DAY_MIN, day_bounds_ms


def minutes_to_pixels(minutes: float, grid: GridConfig) -> float:
    return (minutes / 60) * grid.hour_height


def pixels_to_minutes(px: float, grid: GridConfig) -> float:
    return (px / grid.hour_height) * 60


def _round_half_up(x: float) -> int:
    # Half-up like the browser's Math.round; round() would bank to even.
    return int(math.floor(x + 0.5))


def snap_minutes(minutes: float, step: int = SNAP_MIN) -> int:
    if step <= 0:
        raise ValueError(f"snap step must be positive; got {step!r}")
    return _round_half_up(minutes / step) * step


def snap_pixels(px: float, grid: GridConfig) -> float:
    step_px = grid.snap_px
    return _round_half_up(px / step_px) * step_px


def column_instant_ms(day: dt.date, minutes: float, tz: dt.tzinfo) -> int:
    """Epoch ms `minutes` of elapsed time after local midnight of `day`."""
    col_start, _col_end = day_bounds_ms(day, tz)
    return col_start + int(round(minutes * 60000))


def pointer_to_minutes(offset_y: float, grid: GridConfig) -> int:
    """Pointer offset from the top of a day column -> snapped minutes in [0, 1440]."""
    m = snap_minutes(pixels_to_minutes(offset_y, grid), grid.snap_min)
    return max(0, min(DAY_MIN, m))


def pointer_to_time(offset_y: float, day: dt.date, grid: GridConfig) -> int:
    """Pointer offset within the column of `day` -> epoch ms, snapped to the grid step."""
    col_start, col_end = day_bounds_ms(day, grid.tzinfo)
    m = pointer_to_minutes(offset_y, grid)
    if m >= DAY_MIN:
        return col_end
    # A 23-hour column has rows past its end.
    return min(col_start + int(round(m * 60000)), col_end)


def drag_reschedule(
    event: CalendarEvent,
    drop_top_px: float,
    day: dt.date,
    grid: GridConfig,
) -> Tuple[int, int]:
    """
    New (start_ms, end_ms) for `event` dropped with its top edge at `drop_top_px`.

    The duration is kept. The drop position is snapped, then clamped so the
    visible block stays inside the column. If the moved event would still run
    past the column end it is pulled back to end there, but never to start
    before the column start.
    """
    dur_ms = int(event.end_ms) - int(event.start_ms)
    if dur_ms <= 0:
        raise LayoutPreconditionError(
            f"cannot reschedule reversed interval {event.id!r}: end_ms={event.end_ms} <= start_ms={event.start_ms}"
        )

    tz = grid.tzinfo
    col_start, col_end = day_bounds_ms(day, tz)

    visual_min = max(MIN_VISIBLE_MIN, dur_ms // 60000)
    max_top = grid.column_height - minutes_to_pixels(visual_min, grid)

    top = snap_pixels(drop_top_px, grid)
    top = max(0.0, min(top, max_top))

    new_start = col_start + int(round(pixels_to_minutes(top, grid) * 60000))
    new_end = new_start + dur_ms

    if new_end > col_end:
        new_end = col_end
        new_start = col_end - dur_ms
        if new_start < col_start:
            new_start = col_start
            new_end = min(col_start + dur_ms, col_end)

    return new_start, new_end


__all__ = [
    "column_instant_ms",
    "drag_reschedule",
    "minutes_to_pixels",
    "pixels_to_minutes",
    "pointer_to_minutes",
    "pointer_to_time",
    "snap_minutes",
    "snap_pixels",
    ]
