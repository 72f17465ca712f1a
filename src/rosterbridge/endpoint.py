"""Subscription endpoint: subscribes to a roster and republishes its events on a channel."""

from __future__ import annotations

import threading
from collections.abc import Mapping
from enum import Enum
from typing import Any

from loguru import logger

from rosterbridge.core.errors import (
    ConfigurationError,
    ForwardingError,
    IllegalStateError,
    MessagingError,
)
from rosterbridge.events import RosterEvent
from rosterbridge.gateway.channel import OutboundChannel
from rosterbridge.gateway.template import ChannelTemplate
from rosterbridge.listener import PresenceEventListener
from rosterbridge.message import RESERVED_HEADERS, SOURCE_HEADER, OutboundMessage, build_message
from rosterbridge.roster import PresenceSession, RosterSource
from rosterbridge.trace import LoguruTraceSink, TraceSink


class EndpointState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    STARTED = "started"
    STOPPED = "stopped"


def _is_valid_session(session: object) -> bool:
    return session is not None and callable(getattr(session, "get_roster", None))


class SubscriptionEndpoint:
    """Inbound endpoint that emits a message for every roster or presence change.

    Lifecycle: ``configure`` -> ``init`` -> ``start`` -> ``stop`` (-> ``start`` ...).
    ``start`` registers a listener with the session's roster and ``stop`` removes
    it. Lifecycle verbs are serialized; ``forward`` is safe to call concurrently
    and does not look at the lifecycle state, so an event already being delivered
    when ``stop`` runs is still sent.
    """

    def __init__(
        self,
        session: PresenceSession | None = None,
        *,
        name: str = "roster-endpoint",
        trace: TraceSink | None = None,
        send_timeout: float | None = None,
        headers: Mapping[str, Any] | None = None,
        auto_startup: bool = True,
    ) -> None:
        self._session = session
        self._name = name
        self._send_timeout = send_timeout
        self._headers = {SOURCE_HEADER: name, **(headers or {})}
        self.auto_startup = auto_startup
        self._channel: OutboundChannel | None = None
        self._template: ChannelTemplate | None = None
        self._state = EndpointState.UNINITIALIZED
        self._roster: RosterSource | None = None
        self._lock = threading.RLock()
        self._listener = PresenceEventListener(self, trace or LoguruTraceSink(name))

    @property
    def name(self) -> str:
        return self._name

    @property
    def state(self) -> EndpointState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is EndpointState.STARTED

    @property
    def is_registered(self) -> bool:
        return self._roster is not None

    @property
    def channel(self) -> OutboundChannel | None:
        return self._channel

    @property
    def listener(self) -> PresenceEventListener:
        return self._listener

    def configure(self, channel: OutboundChannel, *, session: PresenceSession | None = None) -> None:
        """Set the outbound channel (and optionally the presence session).

        Once initialized the configuration is fixed: passing the same objects again
        is a no-op, anything else raises ConfigurationError.
        """
        with self._lock:
            if self._state is not EndpointState.UNINITIALIZED:
                same_session = session is None or session is self._session
                if channel is self._channel and same_session:
                    return
                raise ConfigurationError(
                    f"{self._name}: channel and session cannot change after initialization",
                    code="already_initialized",
                    details={"state": self._state.value},
                )
            self._channel = channel
            if session is not None:
                self._session = session

    def init(self) -> None:
        """Validate configuration and bind the channel as default destination."""
        with self._lock:
            if self._state is not EndpointState.UNINITIALIZED:
                logger.debug("{} already initialized", self._name)
                return
            if self._channel is None:
                raise ConfigurationError(f"{self._name}: no outbound channel configured", code="no_channel")
            if not _is_valid_session(self._session):
                raise ConfigurationError(
                    f"{self._name}: no valid presence session (needs get_roster())",
                    code="no_session",
                )
            clash = RESERVED_HEADERS.intersection(self._headers)
            if clash:
                raise ConfigurationError(
                    f"{self._name}: headers {sorted(clash)} are assigned per message",
                    code="reserved_headers",
                )
            self._template = ChannelTemplate(self._channel, send_timeout=self._send_timeout)
            self._state = EndpointState.INITIALIZED
            logger.debug("{} initialized", self._name)

    def start(self) -> None:
        """Register the roster listener. No-op when already started."""
        with self._lock:
            if self._state is EndpointState.UNINITIALIZED:
                raise IllegalStateError(f"{self._name} must be initialized", code="not_initialized")
            if self._state is EndpointState.STARTED:
                return
            if self._roster is None:
                roster = self._session.get_roster()  # type: ignore[union-attr]
                roster.add_roster_listener(self._listener)
                self._roster = roster
            self._state = EndpointState.STARTED
            logger.info("{} started: listening for roster events", self._name)

    def stop(self) -> None:
        """Remove the roster listener. No-op unless started."""
        with self._lock:
            if self._state is not EndpointState.STARTED:
                logger.debug("{} not running; stop ignored ({})", self._name, self._state.value)
                return
            if self._roster is not None:
                self._roster.remove_roster_listener(self._listener)
                self._roster = None
            self._state = EndpointState.STOPPED
            logger.info("{} stopped", self._name)

    def forward(self, event: RosterEvent) -> None:
        """Build a message for event and send it to the configured channel.

        MessagingError from the channel propagates unchanged; any other failure is
        raised as ForwardingError carrying the event.
        """
        message: OutboundMessage | None = None
        try:
            template = self._template
            if template is None:
                raise IllegalStateError(f"{self._name} must be initialized", code="not_initialized")
            message = build_message(event, self._headers)
            template.send(message)
        except MessagingError:
            raise
        except Exception as exc:
            raise ForwardingError(
                "Failed to send roster event message",
                event=event,
                failed_message=message,
                original_error=exc,
            ) from exc

    def __enter__(self) -> SubscriptionEndpoint:
        self.init()
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def __repr__(self) -> str:
        return f"<SubscriptionEndpoint {self._name} {self._state.value}>"
