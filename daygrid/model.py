# daygrid/model.py
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Dict, Optional


class LayoutPreconditionError(AssertionError):
    """Programmer error: a layout call received an interval it must never see.

    Reversed intervals and intervals outside the rendered day are filtered
    upstream; reaching the engine with one is a caller bug.
    """


@dataclass(frozen=True)
class CalendarEvent:
    id: str
    title: str
    start_ms: int          # absolute instant, inclusive
    end_ms: int            # absolute instant, exclusive

    location: Optional[str] = None
    color: Optional[str] = None

    @property
    def duration_min(self) -> int:
        return int((self.end_ms - self.start_ms) // 60000)


@dataclass(frozen=True)
class BlockGeometry:
    top: float             # px from the top of the day column (0 = midnight)
    height: float          # px, never below a quarter hour

    # Static layout hints for the rendering layer.
    position: str = "absolute"
    left: str = "4px"
    right: str = "4px"
    z_index: int = 10

    @property
    def bottom(self) -> float:
        return self.top + self.height

    def as_style(self) -> Dict[str, object]:
        return {
            "top": self.top,
            "height": self.height,
            "position": self.position,
            "left": self.left,
            "right": self.right,
            "zIndex": self.z_index,
        }


@dataclass(frozen=True)
class PlacedBlock:
    event: CalendarEvent
    day: dt.date
    geometry: BlockGeometry

    show_time_range: bool
    show_location: bool

    def to_dict(self) -> Dict[str, object]:
        ev = self.event
        return {
            "id": ev.id,
            "title": ev.title,
            "start_ms": ev.start_ms,
            "end_ms": ev.end_ms,
            "location": ev.location,
            "color": ev.color,
            "day": self.day.isoformat(),
            "top": self.geometry.top,
            "height": self.geometry.height,
            "style": self.geometry.as_style(),
            "show_time_range": self.show_time_range,
            "show_location": self.show_location,
        }


__all__ = [
    "LayoutPreconditionError",
    "CalendarEvent",
    "BlockGeometry",
    "PlacedBlock",
]
