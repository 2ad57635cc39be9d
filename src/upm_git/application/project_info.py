from __future__ import annotations

from pathlib import Path

from upm_git.adapters.manifest.json_store import JsonManifestStore
from upm_git.adapters.manifest.package_metadata import read_package_metadata
from upm_git.adapters.workspace.filesystem import PackagesDirectory
from upm_git.application.manifest_access import load_manifest_if_present
from upm_git.domain.diagnostics import Diagnostic, FileLocation, Severity
from upm_git.domain.manifest import Manifest
from upm_git.domain.package import UNKNOWN_VERSION, InstalledPackage, ProjectInfo
from upm_git.domain.reference import GitUrlReference, LocalReference
from upm_git.domain.result import Result
from upm_git.ports.manifest_store import ManifestStorePort

PROJECT_VERSION_FILE = Path("ProjectSettings") / "ProjectVersion.txt"
EDITOR_VERSION_KEY = "m_EditorVersion:"
UNKNOWN_PROJECT = "Unknown Project"


def project_name(project_root: Path) -> str:
    return project_root.name or project_root.resolve().name or UNKNOWN_PROJECT


def read_unity_version(project_root: Path, diagnostics: list[Diagnostic] | None = None) -> str | None:
    path = project_root / PROJECT_VERSION_FILE
    if not path.is_file():
        return None
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        if diagnostics is not None:
            diagnostics.append(
                Diagnostic(
                    code="PROJECT_VERSION_UNREADABLE",
                    rule="project.version.read",
                    severity=Severity.WARN,
                    message=f"Failed to read {path}: {e}",
                    location=FileLocation(str(path)),
                )
            )
        return None
    for line in content.splitlines():
        if line.startswith(EDITOR_VERSION_KEY):
            return line[len(EDITOR_VERSION_KEY):].strip()
    return None


def _installed_packages(project_root: Path, manifest: Manifest) -> list[InstalledPackage]:
    packages_dir = PackagesDirectory(project_root)
    packages: list[InstalledPackage] = []
    for name, reference in manifest.entries():
        if isinstance(reference, LocalReference):
            if reference.directory_name:
                metadata = read_package_metadata(packages_dir.path_for(reference.directory_name))
                version, git_url = metadata.version, metadata.repository_url
            else:
                version, git_url = UNKNOWN_VERSION, ""
            packages.append(InstalledPackage(name=name, version=version, git_url=git_url, source="local"))
        elif isinstance(reference, GitUrlReference):
            packages.append(
                InstalledPackage(
                    name=name,
                    version="git",
                    git_url=reference.to_manifest_value(),
                    source="git",
                )
            )
        else:
            packages.append(InstalledPackage(name=name, version=reference.version, source="registry"))
    return packages


def get_project_info(
    project_root: Path,
    *,
    manifest_store: ManifestStorePort | None = None,
) -> Result[ProjectInfo]:
    diagnostics: list[Diagnostic] = []
    unity_version = read_unity_version(project_root, diagnostics)
    store = manifest_store or JsonManifestStore()
    manifest = load_manifest_if_present(store, project_root, diagnostics)
    if any(d.severity == Severity.ERROR for d in diagnostics):
        return Result(diagnostics=diagnostics)
    packages = _installed_packages(project_root, manifest) if manifest is not None else []
    info = ProjectInfo(
        path=str(project_root),
        name=project_name(project_root),
        unity_version=unity_version,
        packages=packages,
    )
    return Result(value=info, diagnostics=diagnostics)


def list_installed_packages(
    project_root: Path,
    *,
    manifest_store: ManifestStorePort | None = None,
) -> Result[list[InstalledPackage]]:
    result = get_project_info(project_root, manifest_store=manifest_store)
    packages = result.value.packages if result.value is not None else None
    return Result(value=packages, diagnostics=result.diagnostics)
