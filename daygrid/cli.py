from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .api import build_layout_document, dumps_json, load_events_document
from .config import GridConfigError, grid_config_from_env
from .layout import week_days
from .snap import pointer_to_minutes, pointer_to_time
from .util.console import warn
from .util.timeparse import parse_date_yyyy_mm_dd
from .util.tz import from_ms, now_ms, resolve_tz, today_date


def main(argv: list[str] | None = None) -> None:
    ap = argparse.ArgumentParser(
        prog="daygrid",
        description="Lay out calendar events on a day/week time grid and print the block geometry as JSON.",
    )
    ap.add_argument("--events", default=None, help="Events JSON file ({\"cfg\": {...}, \"events\": [...]})")
    ap.add_argument("--start", default=None, help="First day YYYY-MM-DD (default: today in --tz)")
    ap.add_argument("--days", type=int, default=1, help="Number of day columns (default: 1, use 7 for a week)")
    ap.add_argument("--hour-height", type=float, default=None, help="Pixels per hour; wins over the events file cfg (default: env DAYGRID_HOUR_HEIGHT or 64)")
    ap.add_argument("--snap", type=int, default=None, help="Snap minutes for pointer conversion (default: 15)")
    ap.add_argument(
        "--tz",
        default=None,
        help="Timezone for day boundaries; wins over the events file cfg (default: env DAYGRID_TZ or 'local')",
    )
    ap.add_argument(
        "--pointer-y",
        type=float,
        default=None,
        help="Convert this pixel offset in the first day's column to a snapped time instead of laying out events",
    )
    ap.add_argument("--out", default="-", help="Output path (default: stdout)")

    args = ap.parse_args(argv)

    if args.tz is not None:
        try:
            resolve_tz(args.tz)
        except ValueError as e:
            raise SystemExit(f"Invalid --tz value: {e}")

    # Precedence: built-in defaults < env < events file cfg < explicit flags.
    flags = dict(hour_height=args.hour_height, snap_min=args.snap, tz=args.tz)
    try:
        base = grid_config_from_env()
        grid = base.with_overrides(**flags)
    except GridConfigError as e:
        raise SystemExit(f"Invalid grid configuration: {e}")

    events = []
    if args.events and args.pointer_y is None:
        skipped: list[str] = []
        try:
            grid, events = load_events_document(Path(args.events), grid=base, skipped=skipped, overrides=flags)
        except (OSError, ValueError) as e:
            raise SystemExit(f"Failed to load events: {e}")
        for eid in skipped:
            warn(f"skipping event {eid!r}: end is not after start")

    if args.start:
        try:
            start_date = parse_date_yyyy_mm_dd(args.start)
        except ValueError as e:
            raise SystemExit(f"Invalid --start value: {e}")
    else:
        start_date = today_date(grid.tzinfo)

    try:
        days = week_days(start_date, int(args.days))
    except ValueError as e:
        raise SystemExit(f"Invalid --days value: {e}")

    if args.pointer_y is not None:
        ms = pointer_to_time(args.pointer_y, days[0], grid)
        doc = {
            "day": days[0].isoformat(),
            "pointer_y": args.pointer_y,
            "minutes": pointer_to_minutes(args.pointer_y, grid),
            "time_ms": ms,
            "time": from_ms(ms, grid.tzinfo).isoformat(),
        }
    else:
        if not args.events:
            warn("no --events given; laying out an empty grid")
        doc = build_layout_document(events, days, grid, now=now_ms())

    text = dumps_json(doc)
    if args.out == "-":
        sys.stdout.write(text + "\n")
        return

    out_path = Path(args.out).resolve()
    try:
        out_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise SystemExit(f"Cannot create output directory '{out_path.parent}': {e}")
    out_path.write_text(text + "\n", encoding="utf-8")
    print(str(out_path))


if __name__ == "__main__":
    main()
