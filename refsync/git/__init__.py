"""Git references — snapshots of named refs and the diff a fetch produces."""

from refsync.git.fetch import RefDiff, RefUpdate, diff_refs
from refsync.git.refs import NamedReference, RefKind, RefSnapshot

__all__ = [
    "NamedReference",
    "RefDiff",
    "RefKind",
    "RefSnapshot",
    "RefUpdate",
    "diff_refs",
]
