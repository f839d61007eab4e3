"""Fetch results — which references a fetch deleted, inserted, or moved.

``diff_refs`` is a set comparison over reference names, not a sequence diff.
Every name in either snapshot ends up in exactly one of four buckets:
unchanged, deleted, inserted, or updated.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from refsync.git.refs import NamedReference, RefSnapshot


@dataclass(frozen=True)
class RefUpdate:
    """A reference that moved. Only built for differing revisions."""

    before: NamedReference
    after: NamedReference

    def __post_init__(self) -> None:
        if self.before == self.after:
            raise ValueError(
                f"RefUpdate needs differing references, got {self.before.as_string()} twice"
            )

    def __str__(self) -> str:
        return f"{self.before.as_string()} -> {self.after.as_string()}"


def _frozen(data: dict | None = None) -> Mapping:
    return MappingProxyType(dict(data or {}))


@dataclass(frozen=True)
class RefDiff:
    """Result of comparing a "before" and an "after" snapshot."""

    deleted: Mapping[str, NamedReference] = field(default_factory=_frozen)
    inserted: Mapping[str, NamedReference] = field(default_factory=_frozen)
    updated: Mapping[str, RefUpdate] = field(default_factory=_frozen)

    @property
    def has_changes(self) -> bool:
        return bool(self.deleted or self.inserted or self.updated)

    def summary(self) -> str:
        if not self.has_changes:
            return "no reference changes"
        return (
            f"{len(self.inserted)} inserted, {len(self.updated)} updated, "
            f"{len(self.deleted)} deleted"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "deleted": {name: ref.sha for name, ref in self.deleted.items()},
            "inserted": {name: ref.sha for name, ref in self.inserted.items()},
            "updated": {
                name: {"before": u.before.sha, "after": u.after.sha}
                for name, u in self.updated.items()
            },
        }


def diff_refs(before: RefSnapshot, after: RefSnapshot) -> RefDiff:
    """Classify every reference name of two snapshots.

    Args:
        before: References as they were before the fetch.
        after: References as they are after the fetch.

    Returns:
        A :class:`RefDiff`. Names present in both snapshots with equal
        references appear in none of its mappings.
    """
    deleted: dict[str, NamedReference] = {}
    inserted: dict[str, NamedReference] = {}
    updated: dict[str, RefUpdate] = {}

    for name, old in before.items():
        new = after.get(name)
        if new is None:
            deleted[name] = old
        elif old != new:
            updated[name] = RefUpdate(old, new)
    for name, new in after.items():
        if name not in before:
            inserted[name] = new

    return RefDiff(
        deleted=_frozen(deleted),
        inserted=_frozen(inserted),
        updated=_frozen(updated),
    )
