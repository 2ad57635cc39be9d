"""Shared pytest fixtures for upm-git tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from support import FakeVcs, commit_version, git, write_manifest


@pytest.fixture
def unity_project(tmp_path: Path) -> Path:
    """A minimal Unity project with one registry dependency."""
    project = tmp_path / "MyGame"
    (project / "ProjectSettings").mkdir(parents=True)
    (project / "ProjectSettings" / "ProjectVersion.txt").write_text(
        "m_EditorVersion: 2022.3.22f1\nm_EditorVersionWithRevision: 2022.3.22f1 (887be4894c44)\n",
        encoding="utf-8",
    )
    write_manifest(
        project,
        {
            "dependencies": {"com.unity.textmeshpro": "3.0.6"},
            "scopedRegistries": [{"name": "npm", "url": "https://registry.npmjs.org", "scopes": ["com.foo"]}],
            "testables": ["com.unity.textmeshpro"],
        },
    )
    return project


@pytest.fixture
def fake_vcs() -> FakeVcs:
    return FakeVcs(
        refs={"default": "1.3.0", "tag:1.0.0": "1.0.0", "tag:1.2.0": "1.2.0", "branch:develop": "2.0.0-dev"}
    )


@pytest.fixture
def remote_repo(tmp_path: Path) -> Path:
    """A local git repository standing in for a package's origin.

    History on ``main``: 1.0.0 (lightweight tag), 1.2.0 (annotated tag),
    1.3.0-dev (tip). Branch ``develop`` carries 2.0.0-dev.
    """
    repo = tmp_path / "remote" / "foo"
    repo.mkdir(parents=True)
    git(repo, "init", "-q")
    git(repo, "symbolic-ref", "HEAD", "refs/heads/main")
    commit_version(repo, "1.0.0")
    git(repo, "tag", "1.0.0")
    commit_version(repo, "1.2.0")
    git(repo, "tag", "-a", "1.2.0", "-m", "1.2.0")
    commit_version(repo, "1.3.0-dev")
    git(repo, "checkout", "-q", "-b", "develop")
    commit_version(repo, "2.0.0-dev")
    git(repo, "checkout", "-q", "main")
    return repo
