"""Dependency references stored as values in a Unity manifest.

A manifest value is a plain string that means one of three things. The
classification below is purely syntactic and total: every string maps to
exactly one variant.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, TypeAlias

ReferenceKind = Literal["local", "git", "registry"]

LOCAL_PREFIX = "file:"
GIT_PREFIXES = ("https://", "git+")
GIT_MARKER = ".git"
LATEST_VERSION = "latest"


@dataclass(frozen=True)
class LocalReference:
    directory_name: str
    kind: ReferenceKind = "local"

    def to_manifest_value(self) -> str:
        return f"{LOCAL_PREFIX}{self.directory_name}"


@dataclass(frozen=True)
class GitUrlReference:
    url: str
    fragment_version: str | None = None
    kind: ReferenceKind = "git"

    @property
    def version(self) -> str:
        return self.fragment_version or LATEST_VERSION

    def to_manifest_value(self) -> str:
        if self.fragment_version is None:
            return self.url
        return f"{self.url}#{self.fragment_version}"


@dataclass(frozen=True)
class RegistryReference:
    version: str
    kind: ReferenceKind = "registry"

    def to_manifest_value(self) -> str:
        return self.version


DependencyReference: TypeAlias = LocalReference | GitUrlReference | RegistryReference


def is_git_url(raw: str) -> bool:
    return raw.startswith(GIT_PREFIXES) or GIT_MARKER in raw


def classify_reference(raw: str) -> DependencyReference:
    if raw.startswith(LOCAL_PREFIX):
        return LocalReference(directory_name=raw[len(LOCAL_PREFIX):])
    if is_git_url(raw):
        url, sep, fragment = raw.partition("#")
        return GitUrlReference(url=url, fragment_version=fragment if sep else None)
    return RegistryReference(version=raw)
