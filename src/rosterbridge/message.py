"""Outbound message: a roster event payload plus immutable headers."""

from __future__ import annotations

import time
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from rosterbridge.events import RosterEvent, event_type_of

ID_HEADER = "id"
TIMESTAMP_HEADER = "timestamp"
EVENT_TYPE_HEADER = "event_type"
SOURCE_HEADER = "source"

RESERVED_HEADERS = frozenset({ID_HEADER, TIMESTAMP_HEADER, EVENT_TYPE_HEADER})


@dataclass(frozen=True)
class OutboundMessage:
    """Message published to the outbound channel. Built once via build_message."""

    payload: RosterEvent
    headers: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def id(self) -> str:
        return self.headers[ID_HEADER]

    @property
    def timestamp(self) -> float:
        return self.headers[TIMESTAMP_HEADER]

    @property
    def event_type(self) -> str:
        return self.headers[EVENT_TYPE_HEADER]


def build_message(
    payload: RosterEvent,
    headers: Mapping[str, Any] | None = None,
) -> OutboundMessage:
    """Wrap a roster event; assigns id, timestamp and event_type headers.

    Caller headers are copied; they may not override the generated ones.
    Raises TypeError if payload is not one of the four roster event variants.
    """
    event_type = event_type_of(payload)
    merged: dict[str, Any] = {}
    if headers:
        clash = RESERVED_HEADERS.intersection(headers)
        if clash:
            raise ValueError(f"Reserved message headers: {', '.join(sorted(clash))}")
        merged.update(headers)
    merged[ID_HEADER] = uuid.uuid4().hex
    merged[TIMESTAMP_HEADER] = time.time()
    merged[EVENT_TYPE_HEADER] = event_type
    return OutboundMessage(payload=payload, headers=MappingProxyType(merged))
