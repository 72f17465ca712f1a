"""Roster listener that traces each notification and forwards it to its endpoint."""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import asdict
from typing import Protocol

from rosterbridge.events import (
    Presence,
    PresenceChanged,
    RosterEvent,
    entries_added,
    entries_deleted,
    entries_updated,
)
from rosterbridge.trace import TraceRecord, TraceSink


class EventForwarder(Protocol):
    """Owner of the listener (normally a SubscriptionEndpoint)."""

    def forward(self, event: RosterEvent) -> None: ...


class PresenceEventListener:
    """Implements the RosterListener capability for one endpoint.

    Failures from ``forward`` are not handled here; they propagate to the
    roster source's delivery mechanism.
    """

    def __init__(self, owner: EventForwarder, trace: TraceSink) -> None:
        self._owner = owner
        self._trace = trace

    def entries_added(self, entries: Collection[str]) -> None:
        self._forward_entries(*entries_added(entries))

    def entries_updated(self, entries: Collection[str]) -> None:
        self._forward_entries(*entries_updated(entries))

    def entries_deleted(self, entries: Collection[str]) -> None:
        self._forward_entries(*entries_deleted(entries))

    def presence_changed(self, presence: Presence) -> None:
        self._trace.trace(TraceRecord("presence_changed", repr(presence), asdict(presence)))
        self._owner.forward(PresenceChanged(presence=presence))

    def _forward_entries(self, type_name: str, evt: RosterEvent) -> None:
        jids = sorted(evt.entries)  # type: ignore[union-attr]
        self._trace.trace(TraceRecord(type_name, ",".join(jids), {"entries": jids}))
        self._owner.forward(evt)
