"""Outbound channels: the destination a roster endpoint sends messages to."""

from __future__ import annotations

import queue
from typing import Protocol

from loguru import logger

from rosterbridge.gateway.bus import Bus
from rosterbridge.message import OutboundMessage


class OutboundChannel(Protocol):
    """Accepts messages for downstream processing. False means not delivered."""

    def send(self, message: OutboundMessage) -> bool: ...


class QueueChannel:
    """Thread-safe in-memory channel; consumers poll with receive()."""

    def __init__(self, capacity: int = 0) -> None:
        self._queue: queue.Queue[OutboundMessage] = queue.Queue(maxsize=capacity)

    def send(self, message: OutboundMessage, timeout: float | None = None) -> bool:
        """Enqueue message. With a bounded queue, wait up to timeout (None: block)."""
        try:
            self._queue.put(message, timeout=timeout)
        except queue.Full:
            logger.warning("Queue channel full; message {} not accepted", message.id)
            return False
        return True

    def receive(self, timeout: float | None = None) -> OutboundMessage | None:
        """Next message, or None if nothing arrives within timeout (0: don't wait)."""
        try:
            if timeout == 0:
                return self._queue.get_nowait()
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def purge(self) -> list[OutboundMessage]:
        """Drain and return every queued message."""
        drained: list[OutboundMessage] = []
        while True:
            try:
                drained.append(self._queue.get_nowait())
            except queue.Empty:
                return drained

    def __len__(self) -> int:
        return self._queue.qsize()


class BusChannel:
    """Channel publishing each message on an event bus."""

    def __init__(self, bus: Bus, source: str = "roster") -> None:
        self._bus = bus
        self._source = source

    def send(self, message: OutboundMessage) -> bool:
        """True only if at least one bus target accepted the message."""
        delivered = self._bus.publish(self._source, message)
        if not delivered:
            logger.warning("No bus target took message {} ({})", message.id, message.event_type)
        return delivered > 0
