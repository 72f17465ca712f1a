"""Protocol adapters providing roster sources."""

from rosterbridge.adapters.xmpp import XMPPClient, XMPPRoster, XMPPSession, presence_from_stanza

__all__ = ["XMPPClient", "XMPPRoster", "XMPPSession", "presence_from_stanza"]
