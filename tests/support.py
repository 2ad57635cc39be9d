"""Test helpers shared across the suite: fake ports and git repository builders."""

from __future__ import annotations

import json
import os
import shutil
import subprocess
from pathlib import Path
from typing import Any

import pytest

from upm_git.adapters.errors import BranchNotFound, TagNotFound, VcsError


def write_manifest(project: Path, document: dict[str, Any]) -> Path:
    path = project / "Packages" / "manifest.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(document, indent=2), encoding="utf-8")
    return path


def read_manifest(project: Path) -> dict[str, Any]:
    return json.loads((project / "Packages" / "manifest.json").read_text(encoding="utf-8"))


def write_package_json(directory: Path, data: dict[str, Any]) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "package.json").write_text(json.dumps(data), encoding="utf-8")


class FakeVcs:
    """In-memory stand-in for the git driver.

    ``refs`` maps ``tag:<t>`` / ``branch:<b>`` / ``default`` to the version the
    checkout's package.json reports after that ref is selected.
    """

    def __init__(self, refs: dict[str, str] | None = None, fail_clone: bool = False) -> None:
        self.refs = refs or {"default": "1.0.0"}
        self.fail_clone = fail_clone
        self.calls: list[tuple[str, ...]] = []

    def _write(self, repo_dir: Path, version: str) -> None:
        write_package_json(repo_dir, {"name": "fake", "version": version})

    def clone(self, url: str, dest: Path) -> None:
        self.calls.append(("clone", url, str(dest)))
        assert not dest.exists(), "clone target must not pre-exist"
        dest.mkdir(parents=True)
        (dest / ".git").mkdir()
        if self.fail_clone:
            raise VcsError(f"Failed to clone repository from {url}", details={"url": url})
        self._write(dest, self.refs["default"])

    def list_tags(self, repo_dir: Path) -> list[str]:
        self.calls.append(("list_tags", str(repo_dir)))
        return sorted(ref[4:] for ref in self.refs if ref.startswith("tag:"))

    def checkout_tag(self, repo_dir: Path, tag: str) -> None:
        self.calls.append(("checkout_tag", str(repo_dir), tag))
        if f"tag:{tag}" not in self.refs:
            raise TagNotFound(f"Tag '{tag}' not found even after fetching from origin", details={"tag": tag})
        self._write(repo_dir, self.refs[f"tag:{tag}"])

    def checkout_branch(self, repo_dir: Path, branch: str) -> None:
        self.calls.append(("checkout_branch", str(repo_dir), branch))
        if f"branch:{branch}" not in self.refs:
            raise BranchNotFound(f"Branch '{branch}' not found", details={"branch": branch})
        self._write(repo_dir, self.refs[f"branch:{branch}"])

    def read_version(self, repo_dir: Path) -> str:
        data = json.loads((repo_dir / "package.json").read_text(encoding="utf-8"))
        return data["version"]

    def called(self, name: str) -> list[tuple[str, ...]]:
        return [c for c in self.calls if c[0] == name]


requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")

_GIT_ENV = {
    "GIT_AUTHOR_NAME": "upm-git tests",
    "GIT_AUTHOR_EMAIL": "tests@example.com",
    "GIT_COMMITTER_NAME": "upm-git tests",
    "GIT_COMMITTER_EMAIL": "tests@example.com",
    "GIT_CONFIG_NOSYSTEM": "1",
}


def git(repo: Path, *args: str) -> str:
    proc = subprocess.run(
        ["git", "-c", "commit.gpgsign=false", "-c", "tag.gpgsign=false", *args],
        cwd=repo,
        env={**os.environ, **_GIT_ENV},
        check=True,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
    )
    return proc.stdout.strip()


def commit_version(repo: Path, version: str) -> str:
    write_package_json(
        repo,
        {
            "name": "com.foo.bar",
            "version": version,
            "repository": {"type": "git", "url": "https://example.com/foo.git"},
        },
    )
    git(repo, "add", "-A")
    git(repo, "commit", "-q", "-m", f"Release {version}")
    return git(repo, "rev-parse", "HEAD")


def add_remote_commit(repo: Path, version: str, tag: str | None = None, branch: str = "main") -> str:
    """Commit ``version`` on ``branch`` of ``repo``, optionally tag it, and restore HEAD."""
    current = git(repo, "rev-parse", "--abbrev-ref", "HEAD")
    if current != branch:
        exists = git(repo, "branch", "--list", branch)
        git(repo, "checkout", "-q", *([branch] if exists else ["-b", branch]))
    sha = commit_version(repo, version)
    if tag:
        git(repo, "tag", tag)
    if current != branch:
        git(repo, "checkout", "-q", current)
    return sha
