"""Inbound boundary: roster listener capability, roster source and presence session."""

from __future__ import annotations

from collections.abc import Collection
from typing import Protocol

from rosterbridge.events import Presence


class RosterListener(Protocol):
    """Callbacks a roster source invokes, possibly from its own thread."""

    def entries_added(self, entries: Collection[str]) -> None: ...

    def entries_updated(self, entries: Collection[str]) -> None: ...

    def entries_deleted(self, entries: Collection[str]) -> None: ...

    def presence_changed(self, presence: Presence) -> None: ...


class RosterSource(Protocol):
    """Roster that delivers change notifications to registered listeners."""

    def add_roster_listener(self, listener: RosterListener) -> None: ...

    def remove_roster_listener(self, listener: RosterListener) -> None: ...


class PresenceSession(Protocol):
    """Active connection handle that exposes its roster."""

    def get_roster(self) -> RosterSource: ...
