"""Read package catalogs from local files.

A catalog lists packages, each either pinned directly (``git_tag`` /
``git_branch`` on the package) or offering several ``versions``. Versioned
entries are expanded into one descriptor per version, with the version's own
tag, branch, dependencies and Unity version taking over from the package's.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from upm_git.adapters.errors import CatalogReadError
from upm_git.adapters.policy.catalog_validator import validate_catalog_schema
from upm_git.application.manifest_access import adapter_diagnostic
from upm_git.domain.diagnostics import Diagnostic, FileLocation, PackageLocation, Severity
from upm_git.domain.json_types import as_json_dict, is_dict, is_list
from upm_git.domain.package import PackageDescriptor
from upm_git.domain.result import Result

_VERSION_FIELDS = ("version", "git_tag", "git_branch", "dependencies", "unity_version", "is_prerelease")


def read_catalog_document(path: Path) -> object:
    try:
        return yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        raise CatalogReadError(f"Failed to read catalog: {path}", details=as_json_dict({"path": str(path)}), cause=e)
    except yaml.YAMLError as e:
        raise CatalogReadError(f"Failed to parse catalog: {path}", details=as_json_dict({"path": str(path)}), cause=e)


def expand_package(entry: dict[str, Any]) -> list[PackageDescriptor]:
    versions = entry.get("versions")
    if not is_list(versions):
        return [PackageDescriptor.from_dict(entry)]
    base = {k: v for k, v in entry.items() if k != "versions"}
    expanded: list[PackageDescriptor] = []
    for version_info in versions:
        if not is_dict(version_info):
            continue
        merged = dict(base)
        for key in _VERSION_FIELDS:
            merged[key] = version_info.get(key)
        expanded.append(PackageDescriptor.from_dict(merged))
    return expanded


def expand_catalog(document: dict[str, Any]) -> list[PackageDescriptor]:
    packages = document.get("packages")
    descriptors: list[PackageDescriptor] = []
    if not is_list(packages):
        return descriptors
    for entry in packages:
        if is_dict(entry):
            descriptors.extend(expand_package({str(k): v for k, v in entry.items()}))
    return descriptors


def load_catalog(path: Path) -> Result[list[PackageDescriptor]]:
    try:
        document = read_catalog_document(path)
    except CatalogReadError as e:
        return Result(
            diagnostics=[
                adapter_diagnostic(
                    e, "CATALOG_READ_FAILED", "catalog.read", is_execution=False, location=FileLocation(str(path))
                )
            ]
        )
    diagnostics = validate_catalog_schema(document, source=path)
    if diagnostics or not is_dict(document):
        return Result(diagnostics=diagnostics)
    return Result(value=expand_catalog({str(k): v for k, v in document.items()}))


def select_descriptor(
    descriptors: list[PackageDescriptor], name: str, version: str | None = None
) -> Result[PackageDescriptor]:
    """Pick ``name`` at ``version``, or its first stable entry when no version is given."""
    candidates = [d for d in descriptors if d.name == name]
    if version is not None:
        candidates = [d for d in candidates if d.version == version]
    if not candidates:
        wanted = f"{name} {version}" if version else name
        return Result(
            diagnostics=[
                Diagnostic(
                    code="CATALOG_PACKAGE_NOT_FOUND",
                    rule="catalog.select",
                    severity=Severity.ERROR,
                    message=f"Package not found in catalog: {wanted}",
                    location=PackageLocation(name, version),
                )
            ]
        )
    stable = [d for d in candidates if not d.is_prerelease]
    return Result(value=(stable or candidates)[0])
