from pathlib import Path
from typing import Protocol


class VcsPort(Protocol):
    def clone(self, url: str, dest: Path) -> None: ...

    def checkout_tag(self, repo_dir: Path, tag: str) -> None: ...

    def checkout_branch(self, repo_dir: Path, branch: str) -> None: ...

    def list_tags(self, repo_dir: Path) -> list[str]: ...

    def read_version(self, repo_dir: Path) -> str: ...
