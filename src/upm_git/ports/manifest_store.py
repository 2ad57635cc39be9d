from pathlib import Path
from typing import Protocol

from upm_git.domain.manifest import Manifest


class ManifestStorePort(Protocol):
    def manifest_path(self, project_root: Path) -> Path: ...

    def load(self, project_root: Path) -> Manifest: ...

    def save(self, project_root: Path, manifest: Manifest) -> None: ...
