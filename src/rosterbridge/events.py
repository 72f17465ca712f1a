"""Roster event types: a closed union of four variants, plus typed factories."""

from __future__ import annotations

import functools
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Union

from rosterbridge.core.constants import Availability, RosterEventType


@dataclass(frozen=True)
class Presence:
    """Snapshot of one contact's availability."""

    jid: str
    availability: Availability | str
    status: str | None = None  # Free-text status message
    priority: int | None = None


@dataclass(frozen=True)
class EntriesAdded:
    """Contacts were added to the roster."""

    entries: frozenset[str]


@dataclass(frozen=True)
class EntriesUpdated:
    """Existing roster contacts changed (name, groups, subscription)."""

    entries: frozenset[str]


@dataclass(frozen=True)
class EntriesDeleted:
    """Contacts were removed from the roster."""

    entries: frozenset[str]


@dataclass(frozen=True)
class PresenceChanged:
    """A contact's presence changed."""

    presence: Presence


RosterEvent = Union[EntriesAdded, EntriesUpdated, EntriesDeleted, PresenceChanged]

_EVENT_TYPE_NAMES: dict[type, RosterEventType] = {
    EntriesAdded: "entries_added",
    EntriesUpdated: "entries_updated",
    EntriesDeleted: "entries_deleted",
    PresenceChanged: "presence_changed",
}


def event_type_of(evt: object) -> RosterEventType:
    """Return the type name for a roster event variant; TypeError for anything else."""
    try:
        return _EVENT_TYPE_NAMES[type(evt)]
    except KeyError:
        raise TypeError(f"Not a roster event: {type(evt).__name__}") from None


def event(type_name: str):
    """Decorator to mark a factory as producing an event with a given type."""

    def decorator(f: Any) -> Any:
        @functools.wraps(f)
        def wrapper(*args: Any, **kwargs: Any) -> tuple[str, object]:
            evt = f(*args, **kwargs)
            return (type_name, evt)

        wrapper.TYPE = type_name  # type: ignore[attr-defined]
        return wrapper

    return decorator


@event("entries_added")
def entries_added(entries: Iterable[str]) -> EntriesAdded:
    return EntriesAdded(entries=frozenset(entries))


@event("entries_updated")
def entries_updated(entries: Iterable[str]) -> EntriesUpdated:
    return EntriesUpdated(entries=frozenset(entries))


@event("entries_deleted")
def entries_deleted(entries: Iterable[str]) -> EntriesDeleted:
    return EntriesDeleted(entries=frozenset(entries))


@event("presence_changed")
def presence_changed(
    jid: str,
    availability: Availability | str,
    *,
    status: str | None = None,
    priority: int | None = None,
) -> PresenceChanged:
    return PresenceChanged(
        presence=Presence(jid=jid, availability=availability, status=status, priority=priority)
    )
