# daygrid/util/console.py
"""Tagged diagnostic lines on stderr: `[tag] LEVEL: message`."""
from __future__ import annotations

import sys
from typing import TextIO


def report(level: str, msg: str, *, tag: str = "daygrid", stream: TextIO | None = None) -> None:
    print(f"[{tag}] {level.upper()}: {msg}", file=stream or sys.stderr)


def warn(msg: str, *, tag: str = "daygrid") -> None:
    report("warn", msg, tag=tag)
