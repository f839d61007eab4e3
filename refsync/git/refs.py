"""Named references and point-in-time snapshots of them."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from types import MappingProxyType


class RefKind:
    BRANCH = "branch"
    TAG = "tag"
    REMOTE = "remote"
    OTHER = "other"


_KIND_PREFIXES = (
    ("refs/heads/", RefKind.BRANCH),
    ("refs/tags/", RefKind.TAG),
    ("refs/remotes/", RefKind.REMOTE),
)


@dataclass(frozen=True, eq=False)
class NamedReference:
    """A reference name resolved to a revision.

    Two references are equal when they point at the same revision. The name
    only says where the reference was found, so it takes no part in equality.
    """

    name: str
    sha: str

    @property
    def kind(self) -> str:
        for prefix, kind in _KIND_PREFIXES:
            if self.name.startswith(prefix):
                return kind
        return RefKind.OTHER

    def as_string(self) -> str:
        return f"{self.sha} {self.name}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NamedReference):
            return NotImplemented
        return self.sha == other.sha

    def __hash__(self) -> int:
        return hash(self.sha)


class RefSnapshot(Mapping[str, NamedReference]):
    """Read-only mapping of reference name to :class:`NamedReference`.

    Values may be given as references or as bare revision strings, in which
    case the reference takes the key as its name.
    """

    def __init__(
        self,
        refs: Mapping[str, NamedReference | str] | None = None,
        captured_at: str = "",
    ):
        resolved: dict[str, NamedReference] = {}
        for name, value in sorted((refs or {}).items()):
            if isinstance(value, NamedReference):
                resolved[name] = value
            elif isinstance(value, str):
                resolved[name] = NamedReference(name=name, sha=value)
            else:
                raise TypeError(
                    f"Reference '{name}' must be a NamedReference or a revision string, "
                    f"got {type(value).__name__}"
                )
        self._refs = MappingProxyType(resolved)
        self.captured_at = captured_at or datetime.now(timezone.utc).isoformat()

    @classmethod
    def of(cls, *refs: NamedReference) -> "RefSnapshot":
        """Build a snapshot keyed by each reference's own name."""
        return cls({r.name: r for r in refs})

    def __getitem__(self, name: str) -> NamedReference:
        return self._refs[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._refs)

    def __len__(self) -> int:
        return len(self._refs)

    def __repr__(self) -> str:
        return f"RefSnapshot({dict(self._refs)!r})"
