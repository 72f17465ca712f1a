"""Roster bridge domain exceptions."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rosterbridge.events import RosterEvent
    from rosterbridge.message import OutboundMessage


class RosterBridgeError(Exception):
    """Base for roster bridge domain errors."""

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: dict[str, object] | None = None,
        original_error: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}
        self.original_error = original_error


class ConfigurationError(RosterBridgeError):
    """Endpoint asked to initialize without required collaborators."""


class IllegalStateError(RosterBridgeError):
    """Lifecycle verb invoked in a state that does not permit it."""


class MessagingError(RosterBridgeError):
    """Messaging-layer failure raised by a channel or the channel template.

    Propagated unchanged out of ``SubscriptionEndpoint.forward`` so callers can
    apply their own retry policy.
    """

    def __init__(
        self,
        message: str,
        *,
        failed_message: OutboundMessage | None = None,
        code: str | None = None,
        details: dict[str, object] | None = None,
        original_error: BaseException | None = None,
    ) -> None:
        super().__init__(message, code=code, details=details, original_error=original_error)
        self.failed_message = failed_message


class MessageDeliveryError(MessagingError):
    """Channel refused the message (send returned False)."""


class ForwardingError(RosterBridgeError):
    """Any non-messaging failure while building or sending a roster event message.

    ``event`` is always the roster event being forwarded; ``failed_message`` is None
    when the outbound message could not be built.
    """

    def __init__(
        self,
        message: str,
        *,
        event: RosterEvent | None,
        failed_message: OutboundMessage | None = None,
        original_error: BaseException | None = None,
    ) -> None:
        super().__init__(message, code="forwarding_failed", original_error=original_error)
        self.event = event
        self.failed_message = failed_message
