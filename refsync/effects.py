"""Destination effects — audit records of changes an action made.

Every effect names what changed on the destination (``DestinationRef``),
which origin refs caused it (``OriginRef``), and any errors hit on the way.
Effects are immutable; the feedback context collects them in recording order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable

from refsync.exceptions import check_condition


class EffectType(Enum):
    """Kind of change made on the destination."""

    NOOP = "noop"
    CREATED = "created"
    UPDATED = "updated"
    INSUFFICIENT_APPROVALS = "insufficient_approvals"
    ERROR = "error"
    TEMPORARY_ERROR = "temporary_error"
    STARTED = "started"


@dataclass(frozen=True)
class OriginRef:
    """A reference in the origin that caused an effect."""

    ref: str


@dataclass(frozen=True)
class DestinationRef:
    """The destination entity that was changed."""

    id: str
    type: str  # e.g. "commit", "pull_request", "comment"
    url: str | None = None


@dataclass(frozen=True)
class DestinationEffect:
    """A single change to the destination, recorded by an action."""

    type: EffectType
    summary: str
    destination_ref: DestinationRef
    origin_refs: tuple[OriginRef, ...] = ()
    errors: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        check_condition(bool(self.summary), "Effect summary cannot be empty")
        check_condition(
            isinstance(self.destination_ref, DestinationRef),
            "Effect '%s' needs a destination ref, got: %r",
            self.summary,
            self.destination_ref,
        )
        # Accept any iterable but store immutable sequences.
        object.__setattr__(self, "origin_refs", tuple(self.origin_refs))
        object.__setattr__(self, "errors", tuple(self.errors))

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "summary": self.summary,
            "origin_refs": [r.ref for r in self.origin_refs],
            "destination_ref": {
                "id": self.destination_ref.id,
                "type": self.destination_ref.type,
                "url": self.destination_ref.url,
            },
            "errors": list(self.errors),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DestinationEffect":
        dest = data["destination_ref"]
        return cls(
            type=EffectType(data.get("type", EffectType.UPDATED.value)),
            summary=data["summary"],
            destination_ref=DestinationRef(
                id=dest["id"], type=dest["type"], url=dest.get("url")
            ),
            origin_refs=tuple(OriginRef(r) for r in data.get("origin_refs", [])),
            errors=tuple(data.get("errors", [])),
        )


def updated_effect(
    summary: str,
    destination_ref: DestinationRef,
    origin_refs: Iterable[OriginRef] = (),
    errors: Iterable[str] = (),
) -> DestinationEffect:
    """Build an ``UPDATED`` effect, the only kind feedback actions record."""
    return DestinationEffect(
        type=EffectType.UPDATED,
        summary=summary,
        destination_ref=destination_ref,
        origin_refs=tuple(origin_refs),
        errors=tuple(errors),
    )
