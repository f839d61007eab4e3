"""Endpoints — handles on the origin and destination of a migration.

Concrete endpoints (code review systems, issue trackers, remote
repositories) live outside refsync. Feedback actions only ever see them
through this interface, re-bound to the console of the running action.
"""

from __future__ import annotations

from typing import Any, Protocol

from refsync.console import CapturingConsole, Console


class Endpoint(Protocol):
    def describe(self) -> dict[str, Any]:
        """Return a small, serializable description of the endpoint."""
        ...

    def with_console(self, console: Console) -> "Endpoint":
        """Return an endpoint that reports through *console*."""
        ...


class NoopEndpoint:
    """Endpoint that does nothing. Used when no endpoint is configured."""

    def __init__(self, console: Console | None = None):
        self.console = console or CapturingConsole()

    def describe(self) -> dict[str, Any]:
        return {"type": "noop"}

    def with_console(self, console: Console) -> "NoopEndpoint":
        return NoopEndpoint(console)

    def __repr__(self) -> str:
        return "NoopEndpoint()"
