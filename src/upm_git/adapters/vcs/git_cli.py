from __future__ import annotations

from pathlib import Path

from upm_git.adapters.errors import BranchNotFound, CommandNotFound, CommandTimeout, TagNotFound, VcsError
from upm_git.adapters.manifest.package_metadata import read_package_version
from upm_git.adapters.runner.subprocess_runner import SubprocessCommandRunner
from upm_git.domain.json_types import as_json_dict
from upm_git.ports.command_runner import CommandResult, CommandRunnerPort

REMOTE = "origin"
ALL_TAGS_REFSPEC = "+refs/tags/*:refs/tags/*"
ALL_REFS_REFSPEC = "+refs/*:refs/*"
ALL_BRANCHES_REFSPEC = f"+refs/heads/*:refs/remotes/{REMOTE}/*"


class GitCliDriver:
    """Clone, fetch and pin package checkouts by shelling out to ``git``.

    Tag and branch checkouts first look for the ref locally. A default clone
    does not guarantee every ref is present, so on a miss the driver fetches
    from ``origin`` and looks again exactly once before giving up. Pinning
    detaches HEAD at the resolved commit and hard-resets the working tree, so
    local edits inside the checkout are discarded.
    """

    def __init__(self, runner: CommandRunnerPort | None = None, executable: str = "git") -> None:
        self.runner = runner or SubprocessCommandRunner()
        self.executable = executable

    def _git(self, args: list[str], cwd: Path | None = None) -> CommandResult:
        try:
            return self.runner.run([self.executable, *args], cwd=cwd)
        except (CommandNotFound, CommandTimeout) as e:
            raise VcsError(e.message, details=e.details, hint=e.hint, cause=e)

    def _git_checked(self, args: list[str], cwd: Path | None, message: str) -> CommandResult:
        result = self._git(args, cwd=cwd)
        if not result.succeeded:
            raise VcsError(
                message,
                details=as_json_dict(
                    {
                        "command": ["git", *args],
                        "cwd": str(cwd) if cwd is not None else None,
                        "exit_code": result.exit_code,
                        "stderr": result.stderr.strip(),
                    }
                ),
            )
        return result

    def _resolve_commit(self, repo_dir: Path, ref: str) -> str | None:
        result = self._git(["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"], cwd=repo_dir)
        if not result.succeeded:
            return None
        return result.stdout.strip() or None

    def _resolve_with_refetch(self, repo_dir: Path, ref: str, refspec: str) -> str | None:
        commit = self._resolve_commit(repo_dir, ref)
        if commit is not None:
            return commit
        self._git_checked(
            ["fetch", "--update-head-ok", REMOTE, refspec],
            repo_dir,
            f"Failed to fetch {refspec} from {REMOTE}",
        )
        return self._resolve_commit(repo_dir, ref)

    def _pin(self, repo_dir: Path, commit: str, label: str) -> None:
        self._git_checked(
            ["-c", "advice.detachedHead=false", "checkout", "--force", "--detach", commit],
            repo_dir,
            f"Failed to detach HEAD at {label}",
        )
        self._git_checked(
            ["reset", "--hard", commit],
            repo_dir,
            f"Failed to reset working tree to {label}",
        )

    def clone(self, url: str, dest: Path) -> None:
        dest.parent.mkdir(parents=True, exist_ok=True)
        self._git_checked(["clone", "--", url, str(dest)], None, f"Failed to clone repository from {url}")
        self._git_checked(
            ["fetch", REMOTE, ALL_TAGS_REFSPEC],
            dest,
            f"Failed to fetch tags from {url}",
        )

    def checkout_tag(self, repo_dir: Path, tag: str) -> None:
        commit = self._resolve_with_refetch(repo_dir, f"refs/tags/{tag}", ALL_REFS_REFSPEC)
        if commit is None:
            raise TagNotFound(
                f"Tag '{tag}' not found even after fetching from {REMOTE}",
                details=as_json_dict({"path": str(repo_dir), "tag": tag}),
                hint="Check that the version's git_tag exists in the repository",
            )
        self._pin(repo_dir, commit, f"tag {tag}")

    def checkout_branch(self, repo_dir: Path, branch: str) -> None:
        commit = self._resolve_with_refetch(
            repo_dir, f"refs/remotes/{REMOTE}/{branch}", ALL_BRANCHES_REFSPEC
        )
        if commit is None:
            raise BranchNotFound(
                f"Branch '{branch}' not found even after fetching from {REMOTE}",
                details=as_json_dict({"path": str(repo_dir), "branch": branch}),
            )
        self._pin(repo_dir, commit, f"branch {branch}")

    def list_tags(self, repo_dir: Path) -> list[str]:
        result = self._git_checked(["tag", "--list"], repo_dir, "Failed to list tags")
        return sorted(line.strip() for line in result.stdout.splitlines() if line.strip())

    def head_commit(self, repo_dir: Path) -> str:
        result = self._git_checked(["rev-parse", "HEAD"], repo_dir, "Failed to read HEAD")
        return result.stdout.strip()

    def read_version(self, repo_dir: Path) -> str:
        return read_package_version(repo_dir)
