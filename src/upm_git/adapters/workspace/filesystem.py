from pathlib import Path
import os
import shutil
import stat
import sys
import tempfile
from typing import Any, Callable

from upm_git.adapters.errors import FilesystemError
from upm_git.domain.json_types import as_json_dict


def _clear_readonly_and_retry(func: Callable[[str], Any], path: str, _exc: object) -> None:
    # git marks pack files read-only; Windows refuses to unlink them otherwise.
    os.chmod(path, stat.S_IWRITE)
    func(path)


def remove_tree(path: Path) -> None:
    try:
        if path.is_symlink() or path.is_file():
            path.unlink()
        elif sys.version_info >= (3, 12):
            shutil.rmtree(path, onexc=_clear_readonly_and_retry)
        else:
            shutil.rmtree(path, onerror=_clear_readonly_and_retry)
    except OSError as e:
        raise FilesystemError(
            f"Failed to remove directory: {path}",
            details=as_json_dict({"path": str(path)}),
            cause=e,
        )


def write_text_atomic(path: Path, content: str) -> None:
    """Replace ``path`` with ``content`` so readers never see a half-written file."""
    tmp_name: str | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.name}-",
            suffix=".tmp",
            delete=False,
        ) as handle:
            tmp_name = handle.name
            handle.write(content)
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise FilesystemError(
            f"Failed to write file: {path}",
            details=as_json_dict({"path": str(path)}),
            cause=e,
        )


class PackagesDirectory:
    """The ``Packages/`` folder of one Unity project, where checkouts live."""

    def __init__(self, project_root: Path) -> None:
        self.root = project_root / "Packages"

    def path_for(self, directory_name: str) -> Path:
        return self.root / directory_name

    def has_checkout(self, directory_name: str) -> bool:
        return bool(directory_name) and self.path_for(directory_name).exists()

    def _located_inside(self, path: Path) -> bool:
        if path.name in ("", ".", ".."):
            return False
        parent = path.parent.resolve()
        root = self.root.resolve()
        return parent == root or parent.is_relative_to(root)

    def owns(self, directory_name: str) -> bool:
        """True if ``directory_name`` is a checkout directory (or link) inside ``Packages/``.

        ``file:`` references may also name tarballs, absolute paths or
        siblings of the project. Those are never deleted.
        """
        if not directory_name:
            return False
        path = self.path_for(directory_name)
        if not (path.is_dir() or path.is_symlink()):
            return False
        return self._located_inside(path)

    def remove_checkout(self, directory_name: str) -> Path:
        path = self.path_for(directory_name)
        if not self._located_inside(path):
            raise FilesystemError(
                f"Refusing to remove a path outside Packages/: {path}",
                details=as_json_dict({"path": str(path)}),
            )
        remove_tree(path)
        return path
