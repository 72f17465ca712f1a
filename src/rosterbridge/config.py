"""Configuration: YAML + env overlay."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from rosterbridge.core.errors import ConfigurationError


def _deep_update(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_update(result[key], value)
        else:
            result[key] = value
    return result


def load_config(path: str | Path) -> dict[str, Any]:
    """Load config from YAML file. Use SafeLoader. Returns raw dict."""
    path = Path(path)
    if not path.exists():
        logger.warning("Config file not found: {}", path)
        return {}

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
        if not isinstance(data, dict):
            logger.warning("Config file {} has invalid structure (expected dict)", path)
            return {}
        return data
    except yaml.YAMLError as exc:
        logger.error("Failed to parse config {}: {}", path, exc)
        raise


def load_config_with_env(path: str | Path) -> dict[str, Any]:
    """Load config from YAML after loading .env into the process environment.

    Env values (BRIDGE_XMPP_JID, BRIDGE_XMPP_PASSWORD) are read by Config itself.
    """
    from dotenv import load_dotenv

    load_dotenv()
    return load_config(path)


class Config:
    """Config accessor with attribute-style access for nested keys."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data = data or {}

    def reload(self, data: dict[str, Any]) -> None:
        """Replace config data."""
        self._data = data or {}
        logger.debug("Config reloaded: endpoint={}", self.endpoint_name)

    @property
    def raw(self) -> dict[str, Any]:
        """Raw config dict."""
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        """Get value by dot-separated path (e.g. 'endpoint.name')."""
        parts = key.split(".")
        obj: Any = self._data
        for part in parts:
            if isinstance(obj, dict) and part in obj:
                obj = obj[part]
            else:
                return default
        return obj

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __contains__(self, key: str) -> bool:
        return key in self._data

    @property
    def endpoint_name(self) -> str:
        """Endpoint name; used in logs and as the message 'source' header."""
        return str(self.get("endpoint.name", "roster-endpoint"))

    @property
    def auto_startup(self) -> bool:
        """Start the endpoint as soon as the XMPP session is up."""
        return bool(self.get("endpoint.auto_startup", True))

    @property
    def send_timeout_seconds(self) -> float | None:
        """Seconds a bounded channel may block on send. None = channel default."""
        val = self.get("endpoint.send_timeout_seconds")
        if val is None:
            return None
        try:
            return float(val)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(
                f"endpoint.send_timeout_seconds must be a number, got {val!r}",
                code="invalid_send_timeout",
                original_error=exc,
            ) from exc

    @property
    def trace_level(self) -> str:
        """Log level for per-event listener traces."""
        return str(self.get("endpoint.trace_level", "DEBUG")).upper()

    @property
    def message_headers(self) -> dict[str, Any]:
        """Static headers stamped onto every outbound message."""
        val = self.get("endpoint.headers")
        return dict(val) if isinstance(val, dict) else {}

    @property
    def xmpp_jid(self) -> str | None:
        """Account JID (env: BRIDGE_XMPP_JID)."""
        return os.environ.get("BRIDGE_XMPP_JID") or self.get("xmpp.jid")

    @property
    def xmpp_password(self) -> str | None:
        """Account password (env: BRIDGE_XMPP_PASSWORD)."""
        return os.environ.get("BRIDGE_XMPP_PASSWORD") or self.get("xmpp.password")


# Global config instance (set by __main__)
cfg: Config = Config({})
