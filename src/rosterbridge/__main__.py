"""Roster bridge entrypoint. Loads config, connects XMPP, republishes roster events on the bus."""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys
from pathlib import Path

from loguru import logger

from rosterbridge import __version__
from rosterbridge.adapters.xmpp import XMPPClient, XMPPSession
from rosterbridge.config import Config, cfg, load_config_with_env
from rosterbridge.core.errors import ConfigurationError
from rosterbridge.endpoint import SubscriptionEndpoint
from rosterbridge.gateway import Bus, BusChannel
from rosterbridge.message import OutboundMessage
from rosterbridge.trace import LoguruTraceSink


def setup_logging(verbose: bool = False) -> None:
    """Configure loguru. Replace default logging."""
    logger.remove()
    logger.configure(extra={"component": "main"})
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else "INFO",
        format=(
            "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
            "<cyan>{extra[component]}</cyan> | {message}"
        ),
    )


def reload_config(config_path: Path) -> Config:
    """Load config from path and update global cfg."""
    data = load_config_with_env(config_path)
    cfg.reload(data)
    return cfg


class MessageLogger:
    """Bus target that logs every roster message it receives."""

    def accept_event(self, source: str, evt: object) -> bool:
        return isinstance(evt, OutboundMessage)

    def push_event(self, source: str, evt: object) -> None:
        if not isinstance(evt, OutboundMessage):
            return
        logger.info("{} [{}]: {}", evt.event_type, evt.headers.get("source", source), evt.payload)


def build_endpoint(config: Config, session: XMPPSession, bus: Bus) -> SubscriptionEndpoint:
    """Wire an endpoint that publishes roster events on the bus."""
    try:
        trace = LoguruTraceSink(config.endpoint_name, level=config.trace_level)
    except ValueError as exc:
        raise ConfigurationError(
            f"Invalid trace level: {config.trace_level}",
            code="invalid_trace_level",
            original_error=exc,
        ) from exc
    endpoint = SubscriptionEndpoint(
        session,
        name=config.endpoint_name,
        trace=trace,
        send_timeout=config.send_timeout_seconds,
        headers=config.message_headers,
        auto_startup=config.auto_startup,
    )
    endpoint.configure(BusChannel(bus, source=config.endpoint_name))
    endpoint.init()
    return endpoint


def main() -> None:
    """Main entrypoint."""
    parser = argparse.ArgumentParser(
        description="Roster bridge: republish XMPP roster and presence changes"
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=Path("config.yaml"),
        help="Path to config file (default: config.yaml)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging (includes per-event traces)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    args = parser.parse_args()

    setup_logging(args.verbose)

    if not args.config.exists():
        logger.error("Config file not found: {}", args.config)
        sys.exit(1)

    config = reload_config(args.config)
    logger.info("Config loaded from {}", args.config)

    if not config.xmpp_jid or not config.xmpp_password:
        logger.error("XMPP account not configured (BRIDGE_XMPP_JID / BRIDGE_XMPP_PASSWORD)")
        sys.exit(1)

    asyncio.run(_run(config))


async def _run(config: Config) -> None:
    """Connect, start the endpoint on session start, stop it on disconnect."""
    bus = Bus()
    bus.register(MessageLogger())

    # slixmpp binds the running loop at construction
    client = XMPPClient(config.xmpp_jid, config.xmpp_password)  # type: ignore[arg-type]
    endpoint = build_endpoint(config, XMPPSession(client), bus)

    def on_session_start(event: object) -> None:
        if endpoint.auto_startup:
            endpoint.start()

    def on_disconnected(event: object) -> None:
        endpoint.stop()

    client.add_event_handler("session_start", on_session_start)
    client.add_event_handler("disconnected", on_disconnected)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, client.disconnect)

    client.connect()
    logger.info("Roster bridge connecting as {}", config.xmpp_jid)
    try:
        await client.disconnected
    finally:
        endpoint.stop()
        logger.info("Roster bridge shut down")


if __name__ == "__main__":
    main()
