"""Leveled report sinks.

The orchestrator writes everything a user should see through a ``Reports``
object rather than printing. The CLI supplies a rich console sink; tests use
``RecordingReports``; embedding tools can use ``LoggingReports``.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)

LEVELS = ("error", "warning", "info", "verbose", "quiet")


@runtime_checkable
class Reports(Protocol):
    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def verbose(self, message: str) -> None: ...

    def quiet(self, message: str) -> None: ...


class RecordingReports:
    """Keep every message in memory as ``(level, message)`` pairs."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def _record(self, level: str, message: str) -> None:
        self.messages.append((level, message))

    def error(self, message: str) -> None:
        self._record("error", message)

    def warning(self, message: str) -> None:
        self._record("warning", message)

    def info(self, message: str) -> None:
        self._record("info", message)

    def verbose(self, message: str) -> None:
        self._record("verbose", message)

    def quiet(self, message: str) -> None:
        self._record("quiet", message)

    def at(self, level: str) -> list[str]:
        """Messages written at *level*, in order."""
        return [message for lvl, message in self.messages if lvl == level]

    def text(self) -> str:
        return "\n".join(message for _, message in self.messages)


class LoggingReports:
    """Forward reports to a ``logging`` logger.

    ``verbose`` maps to DEBUG and ``quiet`` to INFO.
    """

    def __init__(self, target: logging.Logger | None = None) -> None:
        self._logger = target or logger

    def error(self, message: str) -> None:
        self._logger.error(message)

    def warning(self, message: str) -> None:
        self._logger.warning(message)

    def info(self, message: str) -> None:
        self._logger.info(message)

    def verbose(self, message: str) -> None:
        self._logger.debug(message)

    def quiet(self, message: str) -> None:
        self._logger.info(message)
