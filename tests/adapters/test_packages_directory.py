import os
import stat

import pytest

from upm_git.adapters.errors import FilesystemError
from upm_git.adapters.workspace import filesystem
from upm_git.adapters.workspace.filesystem import PackagesDirectory, remove_tree, write_text_atomic


def test_remove_checkout_deletes_readonly_files(tmp_path):
    packages = PackagesDirectory(tmp_path)
    checkout = packages.path_for("com_foo_bar")
    objects = checkout / ".git" / "objects"
    objects.mkdir(parents=True)
    pack = objects / "pack-1.pack"
    pack.write_text("data")
    os.chmod(pack, stat.S_IREAD)

    assert packages.has_checkout("com_foo_bar")
    packages.remove_checkout("com_foo_bar")
    assert not checkout.exists()


def test_has_checkout_ignores_empty_directory_name(tmp_path):
    (tmp_path / "Packages").mkdir()
    assert not PackagesDirectory(tmp_path).has_checkout("")


def test_remove_tree_wraps_os_errors(tmp_path, monkeypatch):
    target = tmp_path / "dir"
    target.mkdir()

    def _boom(*args, **kwargs):
        raise PermissionError("locked")

    monkeypatch.setattr(filesystem.shutil, "rmtree", _boom)
    with pytest.raises(FilesystemError) as exc:
        remove_tree(target)
    assert exc.value.details == {"path": str(target)}


def test_write_text_atomic_keeps_old_content_on_failure(tmp_path, monkeypatch):
    target = tmp_path / "manifest.json"
    target.write_text("old", encoding="utf-8")

    def _boom(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(filesystem.os, "replace", _boom)
    with pytest.raises(FilesystemError):
        write_text_atomic(target, "new")
    assert target.read_text(encoding="utf-8") == "old"
    assert [p.name for p in tmp_path.iterdir()] == ["manifest.json"]


@pytest.mark.parametrize("name", ["../Shared/pkg", "..", "com.foo.bar-1.0.0.tgz"])
def test_owns_only_directories_inside_packages(tmp_path, name):
    (tmp_path / "Shared" / "pkg").mkdir(parents=True)
    packages = PackagesDirectory(tmp_path)
    packages.root.mkdir()
    (packages.root / "com.foo.bar-1.0.0.tgz").write_bytes(b"tarball")
    (packages.root / "com_foo_bar").mkdir()

    assert packages.owns("com_foo_bar")
    assert not packages.owns(name)
    assert not packages.owns(str(tmp_path / "Shared" / "pkg"))


def test_remove_checkout_refuses_paths_outside_packages(tmp_path):
    shared = tmp_path / "Shared" / "pkg"
    shared.mkdir(parents=True)
    packages = PackagesDirectory(tmp_path)
    packages.root.mkdir()

    for name in ("../Shared/pkg", str(shared)):
        with pytest.raises(FilesystemError):
            packages.remove_checkout(name)
    assert shared.exists()


@pytest.mark.skipif(os.name == "nt", reason="symlinks need extra privileges on Windows")
def test_remove_checkout_unlinks_symlink_without_following_it(tmp_path):
    shared = tmp_path / "Shared" / "pkg"
    shared.mkdir(parents=True)
    (shared / "package.json").write_text("{}")
    packages = PackagesDirectory(tmp_path)
    packages.root.mkdir()
    (packages.root / "com_foo_bar").symlink_to(shared, target_is_directory=True)

    assert packages.owns("com_foo_bar")
    packages.remove_checkout("com_foo_bar")
    assert not (packages.root / "com_foo_bar").exists()
    assert (shared / "package.json").exists()
