from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from upm_git.domain.json_types import as_str, as_str_list, as_str_map
from upm_git.domain.reference import ReferenceKind

UNKNOWN_VERSION = "unknown"

InstallAction = Literal["installed", "replaced"]


def _new_str_map() -> dict[str, str]:
    return {}


def _new_str_list() -> list[str]:
    return []


def _optional_str(value: object) -> str | None:
    return value if isinstance(value, str) and value else None


@dataclass(frozen=True)
class PackageDescriptor:
    """A package as a registry catalog describes it. Install input only."""

    name: str
    git_url: str
    display_name: str = ""
    description: str = ""
    version: str | None = None
    git_tag: str | None = None
    git_branch: str | None = None
    author: str | None = None
    license: str | None = None
    category: str | None = None
    keywords: list[str] = field(default_factory=_new_str_list)
    unity_version: str | None = None
    is_prerelease: bool = False
    dependencies: dict[str, str] = field(default_factory=_new_str_map)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PackageDescriptor:
        name = as_str(data.get("name"))
        return cls(
            name=name,
            git_url=as_str(data.get("git_url")),
            display_name=as_str(data.get("display_name"), name),
            description=as_str(data.get("description")),
            version=_optional_str(data.get("version")),
            git_tag=_optional_str(data.get("git_tag")),
            git_branch=_optional_str(data.get("git_branch")),
            author=_optional_str(data.get("author")),
            license=_optional_str(data.get("license")),
            category=_optional_str(data.get("category")),
            keywords=as_str_list(data.get("keywords")),
            unity_version=_optional_str(data.get("unity_version")),
            is_prerelease=bool(data.get("is_prerelease", False)),
            dependencies=as_str_map(data.get("dependencies")),
        )

    @property
    def checkout_selector(self) -> str:
        if self.git_tag:
            return f"tag:{self.git_tag}"
        if self.git_branch:
            return f"branch:{self.git_branch}"
        return "default"


@dataclass(frozen=True)
class PackageMetadata:
    version: str = UNKNOWN_VERSION
    repository_url: str = ""


@dataclass(frozen=True)
class InstalledPackage:
    name: str
    version: str
    git_url: str = ""
    source: ReferenceKind = "registry"
    installed_from_registry: str | None = None


@dataclass(frozen=True)
class ProjectInfo:
    path: str
    name: str
    unity_version: str | None
    packages: list[InstalledPackage]


@dataclass(frozen=True)
class InstallOutcome:
    package: str
    directory: str
    action: InstallAction
    checkout: str
    version: str
    manifest_value: str
    prior: str | None = None
    prior_kind: ReferenceKind | None = None


@dataclass(frozen=True)
class RemoveOutcome:
    package: str
    prior: str | None = None
    prior_kind: ReferenceKind | None = None
    directory_removed: str | None = None
