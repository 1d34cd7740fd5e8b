# daygrid/layout.py
from __future__ import annotations

import datetime as dt
from typing import Dict, Iterable, List, Optional

from .config import MIN_VISIBLE_MIN, GridConfig
from .model import BlockGeometry, CalendarEvent, LayoutPreconditionError, PlacedBlock
from .snap import minutes_to_pixels
from .util.tz import DAY_MIN, Instant, day_bounds_ms, from_ms, to_ms, wall_minutes

WEEK_SCROLL_HOUR = 7
TIME_RANGE_MIN_DURATION = 20
LOCATION_MIN_DURATION = 35
LOCATION_MAX_CHARS = 25


def _offset_min(ms: int, col_start: int) -> int:
    # Elapsed whole minutes since the column start, capped to one grid day.
    if ms <= col_start:
        return 0
    return min(DAY_MIN, (ms - col_start) // 60000)


def interval_geometry(
    start: Instant,
    end: Instant,
    day: dt.date,
    grid: GridConfig,
    *,
    check: bool = __debug__,
) -> BlockGeometry:
    """
    Pixel geometry of the interval [start, end) inside the column of `day`.

    - The interval is clipped to [local midnight of day, local midnight of day+1).
    - An end on the next midnight is the end of this day (1440 min), not 00:00.
    - The block is never shorter than a quarter hour.

    With `check` on, a reversed interval or one that misses the day raises
    LayoutPreconditionError. With it off those inputs yield a 15-minute
    block and no error.
    """
    start_ms = to_ms(start)
    end_ms = to_ms(end)
    col_start, col_end = day_bounds_ms(day, grid.tzinfo)

    if check:
        if end_ms <= start_ms:
            raise LayoutPreconditionError(f"reversed interval: end_ms={end_ms} <= start_ms={start_ms}")
        if not (start_ms < col_end and end_ms > col_start):
            raise LayoutPreconditionError(f"interval [{start_ms}, {end_ms}) does not overlap {day.isoformat()}")

    eff_start = max(start_ms, col_start)
    eff_end = min(end_ms, col_end)

    start_off = _offset_min(eff_start, col_start)
    if eff_end == col_end:
        end_off = DAY_MIN
    else:
        end_off = _offset_min(eff_end, col_start)

    top = minutes_to_pixels(start_off, grid)
    visible_min = max(MIN_VISIBLE_MIN, end_off - start_off)
    height = max(grid.hour_height / 4, minutes_to_pixels(visible_min, grid))

    return BlockGeometry(top=top, height=height)


def block_geometry(
    event: CalendarEvent,
    day: dt.date,
    grid: GridConfig,
    *,
    check: bool = __debug__,
) -> BlockGeometry:
    return interval_geometry(event.start_ms, event.end_ms, day, grid, check=check)


def overlaps_day(event: CalendarEvent, day: dt.date, grid: GridConfig) -> bool:
    col_start, col_end = day_bounds_ms(day, grid.tzinfo)
    return event.start_ms < col_end and event.end_ms > col_start


def events_for_day(events: Iterable[CalendarEvent], day: dt.date, grid: GridConfig) -> List[CalendarEvent]:
    """Events with a valid interval that is visible in the column of `day`."""
    col_start, col_end = day_bounds_ms(day, grid.tzinfo)
    out: List[CalendarEvent] = []
    for ev in events:
        if ev.end_ms <= ev.start_ms:
            continue
        if ev.start_ms < col_end and ev.end_ms > col_start:
            out.append(ev)
    out.sort(key=lambda e: (e.start_ms, e.end_ms, e.id))
    return out


def _place(event: CalendarEvent, day: dt.date, grid: GridConfig) -> PlacedBlock:
    dur = event.duration_min
    loc = (event.location or "").strip()
    return PlacedBlock(
        event=event,
        day=day,
        geometry=block_geometry(event, day, grid),
        show_time_range=dur > TIME_RANGE_MIN_DURATION,
        show_location=bool(loc) and dur > LOCATION_MIN_DURATION and len(loc) < LOCATION_MAX_CHARS,
    )


def layout_day(events: Iterable[CalendarEvent], day: dt.date, grid: GridConfig) -> List[PlacedBlock]:
    return [_place(ev, day, grid) for ev in events_for_day(events, day, grid)]


def week_days(start: dt.date, count: int = 7) -> List[dt.date]:
    if count < 1:
        raise ValueError(f"count must be >= 1; got {count!r}")
    return [start + dt.timedelta(days=i) for i in range(count)]


def layout_week(
    events: Iterable[CalendarEvent],
    days: Iterable[dt.date],
    grid: GridConfig,
) -> Dict[dt.date, List[PlacedBlock]]:
    evs = list(events)
    return {d: layout_day(evs, d, grid) for d in days}


def hour_rows(day: dt.date, grid: GridConfig) -> List[dt.datetime]:
    """The 24 hour-label instants of a day column, top to bottom."""
    tz = grid.tzinfo
    return [dt.datetime(day.year, day.month, day.day, h, tzinfo=tz) for h in range(24)]


def current_time_top(now: Instant, grid: GridConfig) -> float:
    """Offset of the current-time line; minute resolution."""
    return minutes_to_pixels(wall_minutes(to_ms(now), grid.tzinfo), grid)


def initial_scroll_top(
    day: dt.date,
    now: Instant,
    grid: GridConfig,
    *,
    default_hour: Optional[int] = None,
) -> float:
    """Scroll offset when a column opens: half an hour before now on today, else the default hour."""
    now_local = from_ms(to_ms(now), grid.tzinfo)
    if now_local.date() == day:
        minute = now_local.hour * 60 + now_local.minute
        return minutes_to_pixels(max(0, minute - 30), grid)
    hour = grid.default_scroll_hour if default_hour is None else int(default_hour)
    return hour * grid.hour_height


def week_initial_scroll_top(days: Iterable[dt.date], now: Instant, grid: GridConfig) -> float:
    """Scroll offset of a multi-day grid: as for today when it is shown, else 7 AM."""
    now_day = from_ms(to_ms(now), grid.tzinfo).date()
    if now_day in set(days):
        return initial_scroll_top(now_day, now, grid)
    return WEEK_SCROLL_HOUR * grid.hour_height


def current_time_style(now: Instant, grid: GridConfig) -> Dict[str, object]:
    """Placement of the current-time line, starting right of the hour-label gutter."""
    return {
        "top": current_time_top(now, grid),
        "left": f"{grid.gutter_width_px:g}px",
        "right": "0px",
    }


__all__ = [
    "block_geometry",
    "current_time_style",
    "current_time_top",
    "events_for_day",
    "hour_rows",
    "initial_scroll_top",
    "interval_geometry",
    "layout_day",
    "layout_week",
    "overlaps_day",
    "week_days",
    "week_initial_scroll_top",
]
