# daygrid/util/timeparse.py
from __future__ import annotations

import datetime as dt
from typing import Any


def parse_date_yyyy_mm_dd(s: str) -> dt.date:
    return dt.datetime.strptime(s, "%Y-%m-%d").date()


def parse_instant(value: Any, tz: dt.tzinfo) -> int:
    """Parse an event timestamp into epoch ms.

    Accepts:
      - int epoch milliseconds
      - ISO-8601 strings with "Z" or an explicit offset
      - naive ISO-8601 strings, interpreted as wall time in `tz`
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid timestamp: {value!r}")
    if isinstance(value, int):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Invalid timestamp: {value!r}")

    s = value.strip()
    if s.endswith(("Z", "z")):
        s = s[:-1] + "+00:00"
    try:
        t = dt.datetime.fromisoformat(s)
    except ValueError as ex:
        raise ValueError(f"Invalid timestamp: {value!r}") from ex

    if t.tzinfo is None:
        t = t.replace(tzinfo=tz)
    return int(t.timestamp() * 1000)
