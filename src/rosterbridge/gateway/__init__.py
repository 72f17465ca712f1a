"""Gateway: event bus, outbound channels, channel template."""

from rosterbridge.gateway.bus import Bus, Dispatcher, EventTarget
from rosterbridge.gateway.channel import BusChannel, OutboundChannel, QueueChannel
from rosterbridge.gateway.template import ChannelTemplate

__all__ = [
    "Bus",
    "BusChannel",
    "ChannelTemplate",
    "Dispatcher",
    "EventTarget",
    "OutboundChannel",
    "QueueChannel",
]
