#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, List

from daygrid.config import GridConfigError, grid_config_from_dict
from daygrid.util.console import report
from daygrid.validate import validate_events_payload


PROG = "daygrid-validate-events"


def _die(msg: str, rc: int = 2) -> int:
    report("error", msg, tag=PROG)
    return rc


def _load_json(p: Path) -> Any:
    return json.loads(p.read_text(encoding="utf-8", errors="replace"))


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(
        prog=PROG,
        description="Validate an events JSON document (cfg + events) before layout.",
    )
    ap.add_argument("--in", dest="in_json", required=True, help="Input events JSON path")
    ap.add_argument("--quiet", action="store_true", help="Only set the exit code")
    args = ap.parse_args(argv)

    try:
        payload = _load_json(Path(args.in_json))
    except (OSError, ValueError) as e:
        return _die(f"cannot read {args.in_json}: {e}")

    errs = validate_events_payload(payload)
    if not errs and isinstance(payload, dict) and isinstance(payload.get("cfg"), dict):
        try:
            grid_config_from_dict(payload["cfg"])
        except GridConfigError as e:
            errs.append(f"events: cfg invalid: {e}")

    if errs:
        if not args.quiet:
            for e in errs:
                report("fail", e, tag=PROG)
        return 1

    if not args.quiet:
        n = len(payload.get("events") or [])
        report("ok", f"{n} event(s)", tag=PROG, stream=sys.stdout)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
