"""Events payload validation and loading (library-facing)."""

from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List, Optional

from daygrid.model import CalendarEvent
from daygrid.util.timeparse import parse_instant


class EventsValidationError(ValueError):
    """Raised when an events payload fails validation."""


def _require(cond: bool, msg: str, errs: List[str]) -> None:
    if not cond:
        errs.append(msg)


def _instant_ok(v: Any) -> bool:
    if isinstance(v, bool):
        return False
    if isinstance(v, int):
        return True
    if isinstance(v, str) and v.strip():
        try:
            parse_instant(v, dt.timezone.utc)
        except ValueError:
            return False
        return True
    return False


def validate_events_payload(payload: Any, *, label: str = "events") -> List[str]:
    """Return human-readable issues (empty means OK).

    Keep error strings stable: tests and CLI output rely on them.
    """
    if not isinstance(payload, dict):
        return [f"{label}: payload must be a dict/object"]

    errs: List[str] = []

    cfg = payload.get("cfg")
    if cfg is not None:
        _require(isinstance(cfg, dict), f"{label}: cfg must be dict", errs)

    events = payload.get("events")
    _require(isinstance(events, list), f"{label}: events must be list", errs)
    if not isinstance(events, list):
        return errs

    seen: set[str] = set()
    for i, ev in enumerate(events):
        if not isinstance(ev, dict):
            errs.append(f"{label}: events[{i}] must be dict")
            continue

        eid = ev.get("id")
        if not (isinstance(eid, str) and eid.strip()):
            errs.append(f"{label}: events[{i}].id must be non-empty string")
        elif eid in seen:
            errs.append(f"{label}: events[{i}].id is duplicated: {eid!r}")
        else:
            seen.add(eid)

        title = ev.get("title")
        _require(title is None or isinstance(title, str), f"{label}: events[{i}].title must be string", errs)

        for k in ("start", "end"):
            _require(_instant_ok(ev.get(k)), f"{label}: events[{i}].{k} must be ISO-8601 string or epoch ms int", errs)

        for k in ("location", "color"):
            v = ev.get(k)
            _require(v is None or isinstance(v, str), f"{label}: events[{i}].{k} must be string when provided", errs)

    return errs


def assert_valid_events_payload(payload: Any) -> None:
    errs = validate_events_payload(payload)
    if errs:
        raise EventsValidationError(errs[0])


def event_from_dict(obj: Dict[str, Any], tz: dt.tzinfo) -> CalendarEvent:
    return CalendarEvent(
        id=str(obj["id"]),
        title=str(obj.get("title") or ""),
        start_ms=parse_instant(obj.get("start"), tz),
        end_ms=parse_instant(obj.get("end"), tz),
        location=obj.get("location") or None,
        color=obj.get("color") or None,
    )


def load_events(payload: Dict[str, Any], tz: dt.tzinfo, *, skipped: Optional[List[str]] = None) -> List[CalendarEvent]:
    """
    Validate `payload` and return its events.

    Events whose end is not after their start are dropped (they cannot be
    laid out); their ids are appended to `skipped` when given.
    """
    assert_valid_events_payload(payload)

    out: List[CalendarEvent] = []
    for obj in payload["events"]:
        ev = event_from_dict(obj, tz)
        if ev.end_ms <= ev.start_ms:
            if skipped is not None:
                skipped.append(ev.id)
            continue
        out.append(ev)
    return out


__all__ = [
    "EventsValidationError",
    "assert_valid_events_payload",
    "event_from_dict",
    "load_events",
    "validate_events_payload",
]
