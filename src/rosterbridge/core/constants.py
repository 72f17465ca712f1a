"""Roster event type names."""

from __future__ import annotations

from typing import Literal

RosterEventType = Literal["entries_added", "entries_updated", "entries_deleted", "presence_changed"]
EVENT_TYPES: tuple[RosterEventType, ...] = (
    "entries_added",
    "entries_updated",
    "entries_deleted",
    "presence_changed",
)

Availability = Literal["available", "chat", "away", "xa", "dnd", "unavailable"]
AVAILABILITIES: tuple[Availability, ...] = ("available", "chat", "away", "xa", "dnd", "unavailable")
