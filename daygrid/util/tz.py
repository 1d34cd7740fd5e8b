# daygrid/util/tz.py
from __future__ import annotations

import datetime as dt
import os
import re
from typing import Optional, Tuple, Union

try:
    from zoneinfo import ZoneInfo  # py3.9+
except Exception:  # pragma: no cover
    ZoneInfo = None  # type: ignore

DAY_MIN = 24 * 60

_OFFSET_RE = re.compile(r"^([+-])(\d{2}):?(\d{2})$")

Instant = Union[int, dt.datetime]


def normalize_tz_name(name: Optional[str]) -> str:
    """Normalize a timezone identifier.

    Supported forms:
      - None/"" -> "local"
      - "local" / "system" -> "local" (the machine's timezone)
      - "UTC" / "Z" / "GMT" -> "UTC"
      - IANA names, e.g. "Europe/Bucharest"
      - Fixed offsets: "+02:00", "+0200", "-05:00"
    """
    if name is None:
        return "local"
    s = str(name).strip()
    if not s:
        return "local"

    low = s.lower()
    if low in {"local", "system", "native"}:
        return "local"
    if low in {"utc", "z", "gmt", "utc0", "utc+0"}:
        return "UTC"
    return s


class SystemLocalTz(dt.tzinfo):
    """The machine's own zone, with the UTC offset looked up per date.

    `datetime.astimezone()` treats naive values as local time under the OS
    rules for that instant, so a midnight on the far side of a DST change
    lands on the right UTC instant.
    """

    def _aware(self, d: dt.datetime) -> dt.datetime:
        return d.replace(tzinfo=None).astimezone()

    def utcoffset(self, d: Optional[dt.datetime]) -> dt.timedelta:
        if d is None:
            return dt.datetime.now().astimezone().utcoffset() or dt.timedelta(0)
        return self._aware(d).utcoffset() or dt.timedelta(0)

    def dst(self, d: Optional[dt.datetime]) -> Optional[dt.timedelta]:
        return None

    def tzname(self, d: Optional[dt.datetime]) -> Optional[str]:
        if d is None:
            return None
        return self._aware(d).tzname()

    def fromutc(self, d: dt.datetime) -> dt.datetime:
        local = d.replace(tzinfo=dt.timezone.utc).astimezone()
        naive = local.replace(tzinfo=None)
        # The second pass through a repeated hour needs fold=1.
        for fold in (0, 1):
            cand = naive.replace(fold=fold)
            if cand.astimezone().utcoffset() == local.utcoffset():
                return cand.replace(tzinfo=self)
        return naive.replace(tzinfo=self)

    def __repr__(self) -> str:
        return "SystemLocalTz()"


def _local_tz() -> dt.tzinfo:
    # An IANA key in TZ resolves through zoneinfo; POSIX rule strings and an
    # unset TZ are left to the OS, per date.
    key = (os.environ.get("TZ") or "").strip().lstrip(":")
    if key and ZoneInfo is not None:
        try:
            return ZoneInfo(key)  # type: ignore[misc]
        except (KeyError, ValueError, OSError):
            # Not a zoneinfo key (e.g. "CET-1CEST,M3.5.0,M10.5.0/3"); the OS parses it.
            return SystemLocalTz()
    return SystemLocalTz()


def resolve_tz(name: Optional[str]) -> dt.tzinfo:
    """Resolve a timezone name into a tzinfo.

    "local" follows DST: TZ=<IANA key> when set, else the OS zone rules.
    Raises ValueError for invalid timezone identifiers.
    """
    tz_name = normalize_tz_name(name)

    if tz_name == "UTC":
        return dt.timezone.utc

    if tz_name == "local":
        return _local_tz()

    m = _OFFSET_RE.match(tz_name)
    if m:
        sign_s, hh_s, mm_s = m.groups()
        hh = int(hh_s)
        mm = int(mm_s)
        if hh > 23 or mm > 59:
            raise ValueError(f"Invalid timezone offset: {tz_name!r}")
        sign = 1 if sign_s == "+" else -1
        return dt.timezone(dt.timedelta(minutes=sign * (hh * 60 + mm)))

    if ZoneInfo is not None:
        try:
            return ZoneInfo(tz_name)  # type: ignore[misc]
        except Exception as ex:
            raise ValueError(f"Invalid timezone identifier: {tz_name!r}") from ex

    raise ValueError(f"Invalid timezone identifier: {tz_name!r} (zoneinfo unavailable)")


def to_ms(value: Instant) -> int:
    """Epoch milliseconds for an int (passed through) or an aware datetime."""
    if isinstance(value, bool):
        raise TypeError("instant must be epoch ms or datetime, not bool")
    if isinstance(value, int):
        return value
    if isinstance(value, dt.datetime):
        if value.tzinfo is None:
            raise ValueError(f"naive datetime is ambiguous: {value.isoformat()}")
        return int(value.timestamp() * 1000)
    raise TypeError(f"instant must be epoch ms or datetime; got {type(value).__name__}")


def from_ms(ms: int, tz: dt.tzinfo) -> dt.datetime:
    return dt.datetime.fromtimestamp(int(ms) / 1000.0, tz=tz)


def midnight_epoch_ms(d: dt.date, tz: dt.tzinfo) -> int:
    aware = dt.datetime(d.year, d.month, d.day, 0, 0, 0, tzinfo=tz)
    return int(aware.timestamp() * 1000)


def day_bounds_ms(d: dt.date, tz: dt.tzinfo) -> Tuple[int, int]:
    """Return (column_start_ms, column_end_ms): local midnight of `d` and of the next day."""
    return midnight_epoch_ms(d, tz), midnight_epoch_ms(d + dt.timedelta(days=1), tz)


def wall_minutes(ms: int, tz: dt.tzinfo) -> int:
    """Local clock minutes since midnight; seconds are truncated."""
    t = from_ms(ms, tz)
    return t.hour * 60 + t.minute


def today_date(tz: dt.tzinfo) -> dt.date:
    return dt.datetime.now(tz=tz).date()


def now_ms() -> int:
    return int(dt.datetime.now(tz=dt.timezone.utc).timestamp() * 1000)
