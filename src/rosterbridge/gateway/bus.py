"""Event bus: central dispatcher for downstream message consumers."""

from __future__ import annotations

import threading
from typing import Protocol

from loguru import logger


class EventTarget(Protocol):
    """Consumer interface: accept_event + push_event."""

    def accept_event(self, source: str, evt: object) -> bool:
        """Return True if this target wants the event."""
        ...

    def push_event(self, source: str, evt: object) -> None:
        """Handle the event (may hand it off to a queue)."""
        ...


class Dispatcher:
    """Central event dispatcher; targets filter by type and receive events."""

    def __init__(self) -> None:
        self._targets: list[EventTarget] = []
        self._lock = threading.Lock()

    def register(self, target: EventTarget) -> None:
        """Register an event target."""
        with self._lock:
            if target not in self._targets:
                self._targets.append(target)

    def unregister(self, target: EventTarget) -> None:
        """Unregister an event target."""
        with self._lock:
            if target in self._targets:
                self._targets.remove(target)

    @property
    def targets(self) -> list[EventTarget]:
        """Snapshot of registered targets."""
        with self._lock:
            return list(self._targets)

    def dispatch(self, source: str, evt: object) -> int:
        """Dispatch event to all targets that accept it.

        Returns the number of targets that took the event without raising.
        """
        delivered = 0
        for target in self.targets:
            try:
                if target.accept_event(source, evt):
                    target.push_event(source, evt)
                    delivered += 1
            except Exception as exc:
                logger.exception("Failed to pass event to target {}: {}", target, exc)
        return delivered


class Bus:
    """Event bus wrapping the central dispatcher. Consumers register and receive events."""

    def __init__(self) -> None:
        self._dispatcher = Dispatcher()

    def register(self, target: EventTarget) -> None:
        """Register a consumer as event target."""
        self._dispatcher.register(target)

    def unregister(self, target: EventTarget) -> None:
        """Unregister a consumer."""
        self._dispatcher.unregister(target)

    @property
    def targets(self) -> list[EventTarget]:
        """Registered targets."""
        return self._dispatcher.targets

    def publish(self, source: str, evt: object) -> int:
        """Publish event to all targets that accept it; returns delivery count."""
        return self._dispatcher.dispatch(source, evt)
