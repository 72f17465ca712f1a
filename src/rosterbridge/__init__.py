"""Roster bridge: republish XMPP roster and presence changes on an outbound channel."""

__version__ = "0.1.0"
