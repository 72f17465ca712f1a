"""XMPP roster source: slixmpp roster pushes and presence changes as roster listener calls."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any

from loguru import logger
from slixmpp import JID
from slixmpp.clientxmpp import ClientXMPP

from rosterbridge.events import Presence
from rosterbridge.roster import RosterListener


def presence_from_stanza(stanza: Any) -> Presence:
    """Snapshot a slixmpp presence stanza (type folds in <show>, e.g. 'away')."""
    status = stanza["status"] or None
    priority = stanza["priority"]
    return Presence(
        jid=str(stanza["from"]),
        availability=stanza["type"] or "available",
        status=status,
        priority=int(priority) if priority not in (None, "") else None,
    )


class XMPPRoster:
    """RosterSource over a slixmpp client.

    Attaches to the client's ``roster_update`` and ``changed_status`` events while
    at least one listener is registered. Roster pushes are split into added,
    updated and deleted entries against the bare JIDs seen so far.
    """

    def __init__(self, client: ClientXMPP) -> None:
        self._client = client
        self._listeners: list[RosterListener] = []
        self._known: set[str] = set()
        self._attached = False
        self._lock = threading.Lock()

    @property
    def listeners(self) -> list[RosterListener]:
        with self._lock:
            return list(self._listeners)

    def add_roster_listener(self, listener: RosterListener) -> None:
        with self._lock:
            if listener in self._listeners:
                return
            self._listeners.append(listener)
            if not self._attached:
                self._client.add_event_handler("roster_update", self._on_roster_update)
                self._client.add_event_handler("changed_status", self._on_changed_status)
                self._attached = True

    def remove_roster_listener(self, listener: RosterListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)
            if self._attached and not self._listeners:
                self._client.del_event_handler("roster_update", self._on_roster_update)
                self._client.del_event_handler("changed_status", self._on_changed_status)
                self._attached = False

    def _on_roster_update(self, iq: Any) -> None:
        """Classify roster items of a roster result or push.

        A result carries the whole roster, so known contacts missing from it
        were removed while nobody was listening. An empty result is a roster
        versioning "unchanged" reply and is not reconciled.
        """
        added: set[str] = set()
        updated: set[str] = set()
        deleted: set[str] = set()
        items = iq["roster"]["items"]
        with self._lock:
            seen: set[str] = set()
            for jid, item in items.items():
                bare = JID(str(jid)).bare
                seen.add(bare)
                if item.get("subscription") == "remove":
                    if bare in self._known:
                        self._known.discard(bare)
                        deleted.add(bare)
                elif bare in self._known:
                    updated.add(bare)
                else:
                    self._known.add(bare)
                    added.add(bare)
            if iq["type"] == "result" and items:
                missing = self._known - seen
                self._known -= missing
                deleted |= missing
        if added:
            self._deliver("entries_added", lambda listener: listener.entries_added(added))
        if updated:
            self._deliver("entries_updated", lambda listener: listener.entries_updated(updated))
        if deleted:
            self._deliver("entries_deleted", lambda listener: listener.entries_deleted(deleted))

    def _on_changed_status(self, stanza: Any) -> None:
        presence = presence_from_stanza(stanza)
        self._deliver("presence_changed", lambda listener: listener.presence_changed(presence))

    def _deliver(self, kind: str, call: Callable[[RosterListener], None]) -> None:
        for listener in self.listeners:
            try:
                call(listener)
            except Exception as exc:
                logger.exception("Roster listener {} failed on {}: {}", listener, kind, exc)


class XMPPSession:
    """PresenceSession for a slixmpp client; one roster source per client."""

    def __init__(self, client: ClientXMPP) -> None:
        self._client = client
        self._roster = XMPPRoster(client)

    @property
    def client(self) -> ClientXMPP:
        return self._client

    def get_roster(self) -> XMPPRoster:
        return self._roster


class XMPPClient(ClientXMPP):
    """Presence client: requests the roster and announces availability on session start."""

    def __init__(self, jid: str, password: str) -> None:
        ClientXMPP.__init__(self, jid, password)

        self.register_plugin("xep_0030")  # Service Discovery
        self.register_plugin("xep_0199")  # XMPP Ping

        # Enable keepalive pings to detect dead connections
        self.plugin["xep_0199"].enable_keepalive(interval=180, timeout=30)

        self.add_event_handler("session_start", self._on_session_start)

    async def _on_session_start(self, event: Any) -> None:
        """Fetch roster (fires roster_update) and send initial presence."""
        await self.get_roster()
        self.send_presence()
        logger.info("XMPP session started: {}", self.boundjid.bare)
