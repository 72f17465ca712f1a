"""Channel template: sends to a default channel and turns refusals into errors."""

from __future__ import annotations

import inspect

from rosterbridge.core.errors import ConfigurationError, MessageDeliveryError
from rosterbridge.gateway.channel import OutboundChannel
from rosterbridge.message import OutboundMessage


def _accepts_timeout(channel: OutboundChannel) -> bool:
    try:
        return "timeout" in inspect.signature(channel.send).parameters
    except (TypeError, ValueError):
        return False


class ChannelTemplate:
    """Sends messages to a default (or explicit) channel.

    A channel whose ``send`` returns False raises MessageDeliveryError; exceptions
    raised by the channel itself propagate unchanged.
    """

    def __init__(
        self,
        default_channel: OutboundChannel | None = None,
        send_timeout: float | None = None,
    ) -> None:
        self.default_channel = default_channel
        self.send_timeout = send_timeout

    def send(self, message: OutboundMessage, channel: OutboundChannel | None = None) -> None:
        target = channel if channel is not None else self.default_channel
        if target is None:
            raise ConfigurationError("No channel specified and no default channel configured")
        if self.send_timeout is not None and _accepts_timeout(target):
            sent = target.send(message, timeout=self.send_timeout)  # type: ignore[call-arg]
        else:
            sent = target.send(message)
        if not sent:
            raise MessageDeliveryError(
                f"Failed to send message to channel {target!r}",
                failed_message=message,
                code="delivery_failed",
            )
