"""Tests for outbound message construction."""

from __future__ import annotations

import dataclasses
import time

import pytest

from rosterbridge.events import EntriesAdded, Presence, PresenceChanged
from rosterbridge.message import build_message


class TestBuildMessage:
    def test_payload_preserved(self):
        evt = PresenceChanged(Presence(jid="alice", availability="away"))
        message = build_message(evt)
        assert message.payload is evt

    def test_generated_headers(self):
        # Arrange
        before = time.time()

        # Act
        message = build_message(EntriesAdded(frozenset({"alice"})))

        # Assert
        assert len(message.id) == 32
        assert before <= message.timestamp <= time.time()
        assert message.event_type == "entries_added"

    def test_ids_are_unique(self):
        evt = EntriesAdded(frozenset({"alice"}))
        assert build_message(evt).id != build_message(evt).id

    def test_custom_headers_copied(self):
        # Arrange
        headers = {"source": "roster-a"}

        # Act
        message = build_message(EntriesAdded(frozenset()), headers)
        headers["source"] = "changed"

        # Assert
        assert message.headers["source"] == "roster-a"

    def test_reserved_headers_rejected(self):
        with pytest.raises(ValueError, match="Reserved message headers: id, timestamp"):
            build_message(EntriesAdded(frozenset()), {"timestamp": 0, "id": "x"})

    def test_non_event_payload_rejected(self):
        with pytest.raises(TypeError):
            build_message(["alice"])  # type: ignore[arg-type]

    def test_message_is_immutable(self):
        message = build_message(EntriesAdded(frozenset()))
        with pytest.raises(dataclasses.FrozenInstanceError):
            message.payload = EntriesAdded(frozenset({"x"}))  # type: ignore[misc]
        with pytest.raises(TypeError):
            message.headers["id"] = "other"  # type: ignore[index]
