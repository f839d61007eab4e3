"""Reporting consoles — line-oriented sinks for user-facing messages.

Feedback actions and endpoints report progress through a console rather than
printing directly. ``RichConsole`` is used by the CLI; ``CapturingConsole``
keeps messages in memory so callers (and tests) can inspect them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol

from rich.console import Console as _RichOutput
from rich.markup import escape

logger = logging.getLogger("refsync")


class Severity:
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Console(Protocol):
    """What refsync needs from a reporting sink."""

    def info(self, message: str) -> None: ...

    def warn(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def info_fmt(self, fmt: str, *args: object) -> None: ...

    def error_fmt(self, fmt: str, *args: object) -> None: ...


class _FormattingMixin:
    def info_fmt(self, fmt: str, *args: object) -> None:
        self.info(fmt % args)

    def error_fmt(self, fmt: str, *args: object) -> None:
        self.error(fmt % args)


class RichConsole(_FormattingMixin):
    """Console that prints through ``rich`` and mirrors lines to logging."""

    _PREFIXES = {
        Severity.INFO: "[blue]INFO:[/]",
        Severity.WARNING: "[yellow]WARN:[/]",
        Severity.ERROR: "[red]ERROR:[/]",
    }

    def __init__(self, output: _RichOutput | None = None):
        self.output = output or _RichOutput()

    def _emit(self, severity: str, message: str) -> None:
        self.output.print(f"{self._PREFIXES[severity]} {escape(message)}")

    def info(self, message: str) -> None:
        logger.info(message)
        self._emit(Severity.INFO, message)

    def warn(self, message: str) -> None:
        logger.warning(message)
        self._emit(Severity.WARNING, message)

    def error(self, message: str) -> None:
        logger.error(message)
        self._emit(Severity.ERROR, message)


@dataclass
class CapturingConsole(_FormattingMixin):
    """Console that keeps every message as a ``(severity, message)`` pair."""

    messages: list[tuple[str, str]] = field(default_factory=list)

    def info(self, message: str) -> None:
        self.messages.append((Severity.INFO, message))

    def warn(self, message: str) -> None:
        self.messages.append((Severity.WARNING, message))

    def error(self, message: str) -> None:
        self.messages.append((Severity.ERROR, message))

    def lines(self, severity: str | None = None) -> list[str]:
        """Return captured messages, optionally only those of one severity."""
        return [m for s, m in self.messages if severity is None or s == severity]
