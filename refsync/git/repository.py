"""Git repository access — capture reference snapshots and fetch."""

from __future__ import annotations

import logging
from pathlib import Path

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo

from refsync.exceptions import RepositoryError
from refsync.git.fetch import RefDiff, diff_refs
from refsync.git.refs import NamedReference, RefSnapshot

logger = logging.getLogger(__name__)


def open_repo(repo_path: str | Path) -> Repo:
    """Open a local git repository.

    Raises:
        RepositoryError: If the path does not exist or is not a git repository.
    """
    try:
        return Repo(repo_path)
    except (InvalidGitRepositoryError, NoSuchPathError):
        raise RepositoryError(f"Not a git repository: {repo_path}")


def capture_snapshot(repo: Repo | str | Path) -> RefSnapshot:
    """Read every reference of *repo* into a :class:`RefSnapshot`.

    Symbolic ``HEAD`` entries are skipped; they always mirror another ref.
    """
    if not isinstance(repo, Repo):
        repo = open_repo(repo)

    refs: dict[str, NamedReference] = {}
    for ref in repo.references:
        if ref.path.endswith("/HEAD"):
            continue
        try:
            sha = ref.object.hexsha
        except ValueError:
            # Dangling ref, e.g. a branch pointing at a pruned object.
            logger.debug("Skipping unresolvable ref %s", ref.path)
            continue
        refs[ref.path] = NamedReference(name=ref.path, sha=sha)

    logger.debug("Captured %d refs from %s", len(refs), repo.working_dir)
    return RefSnapshot(refs)


def fetch_and_diff(
    repo_path: str | Path,
    remote: str = "origin",
    refspecs: tuple[str, ...] | list[str] = (),
    prune: bool = False,
) -> RefDiff:
    """Fetch from *remote* and report which references changed.

    Args:
        repo_path: Path to the local git repository.
        remote: Name of the remote to fetch from.
        refspecs: Refspecs to fetch. Empty means the remote's configured ones.
        prune: Remove remote-tracking refs that no longer exist on the remote.

    Raises:
        RepositoryError: If the repository or remote is unusable, or the
            fetch itself fails.
    """
    repo = open_repo(repo_path)
    try:
        git_remote = repo.remote(remote)
    except ValueError:
        raise RepositoryError(f"Remote '{remote}' not found in {repo_path}")

    before = capture_snapshot(repo)
    try:
        git_remote.fetch(list(refspecs) or None, prune=prune)
    except GitCommandError as e:
        raise RepositoryError(f"Fetch from '{remote}' failed: {e.stderr.strip() or e}")
    after = capture_snapshot(repo)

    diff = diff_refs(before, after)
    logger.info("Fetch from %s: %s", remote, diff.summary())
    return diff
