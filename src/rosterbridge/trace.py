"""Diagnostic trace sinks injected into the roster listener."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from loguru import logger


@dataclass(frozen=True)
class TraceRecord:
    """One structured diagnostic record (e.g. kind='entries_added', summary='alice,bob')."""

    kind: str
    summary: str
    fields: dict[str, Any] = field(default_factory=dict)


class TraceSink(Protocol):
    """Accepts structured trace records."""

    def trace(self, record: TraceRecord) -> None: ...


class LoguruTraceSink:
    """Trace sink writing to loguru, bound to a component name."""

    def __init__(self, component: str, level: str = "DEBUG") -> None:
        logger.level(level)  # ValueError for an unknown level name
        self._logger = logger.bind(component=component)
        self._level = level

    def trace(self, record: TraceRecord) -> None:
        self._logger.bind(**record.fields).log(
            self._level, "{}: {}", record.kind.replace("_", " "), record.summary
        )


class NullTraceSink:
    """Discards every record."""

    def trace(self, record: TraceRecord) -> None:
        pass
