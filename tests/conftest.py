"""Shared fixtures for refsync tests."""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest
from git import Repo


@pytest.fixture(autouse=True)
def _git_identity(monkeypatch):
    """Give git commits a fixed identity regardless of the host config."""
    monkeypatch.setenv("GIT_AUTHOR_NAME", "test")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "t@t")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "test")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "t@t")


def commit_file(repo: Repo, name: str, content: str, message: str = "update") -> str:
    """Write a file in the work tree, commit it and return the commit SHA."""
    path = Path(repo.working_dir) / name
    path.write_text(content)
    repo.index.add([name])
    return repo.index.commit(message).hexsha


@pytest.fixture
def commit():
    return commit_file


@pytest.fixture
def git_repo(tmp_path) -> Repo:
    """A repository with one commit on its default branch and a ``v1`` tag."""
    repo = Repo.init(tmp_path / "repo")
    commit_file(repo, "README.md", "hello\n", "initial")
    repo.create_tag("v1")
    return repo


@pytest.fixture
def action_module(tmp_path, monkeypatch):
    """An importable module of feedback action bodies, named ``sample_actions``."""
    module_dir = tmp_path / "modules"
    module_dir.mkdir()
    (module_dir / "sample_actions.py").write_text(
        textwrap.dedent(
            '''
            from refsync.effects import DestinationRef, OriginRef

            NOT_CALLABLE = 42


            def comment(ctx):
                ctx.record_effect(
                    "Commented with " + ctx.params.get("label", "none"),
                    [OriginRef(ctx.ref or "unknown")],
                    DestinationRef(id="1", type="comment"),
                )
                return ctx.success()


            def skip(ctx):
                return ctx.noop("nothing to do")


            def fail(ctx):
                return ctx.error("destination unavailable")


            def forget(ctx):
                ctx.record_effect("half done", [], DestinationRef(id="2", type="comment"))
            '''
        )
    )
    monkeypatch.syspath_prepend(str(module_dir))
    return "sample_actions"
