from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from upm_git.domain.reference import DependencyReference, LocalReference, classify_reference

DEPENDENCIES_KEY = "dependencies"


def _new_document() -> dict[str, Any]:
    return {}


@dataclass
class Manifest:
    """In-memory copy of ``Packages/manifest.json``.

    Only the ``dependencies`` object is interpreted. Every other top-level key
    is carried in ``document`` untouched and written back as-is.
    """

    document: dict[str, Any] = field(default_factory=_new_document)

    @property
    def dependencies(self) -> dict[str, Any]:
        deps = self.document.get(DEPENDENCIES_KEY)
        return deps if isinstance(deps, dict) else {}

    def names(self) -> list[str]:
        return list(self.dependencies.keys())

    def raw(self, package_name: str) -> str | None:
        value = self.dependencies.get(package_name)
        return value if isinstance(value, str) else None

    def classify(self, package_name: str) -> DependencyReference | None:
        raw = self.raw(package_name)
        return classify_reference(raw) if raw is not None else None

    def entries(self) -> list[tuple[str, DependencyReference]]:
        return [
            (name, classify_reference(value))
            for name, value in self.dependencies.items()
            if isinstance(value, str)
        ]

    def upsert_local(self, package_name: str, directory_name: str) -> str:
        deps = self.document.get(DEPENDENCIES_KEY)
        if not isinstance(deps, dict):
            deps = {}
            self.document[DEPENDENCIES_KEY] = deps
        value = LocalReference(directory_name).to_manifest_value()
        deps[package_name] = value
        return value

    def remove(self, package_name: str) -> DependencyReference | None:
        deps = self.document.get(DEPENDENCIES_KEY)
        if not isinstance(deps, dict) or package_name not in deps:
            return None
        value = deps.pop(package_name)
        return classify_reference(value) if isinstance(value, str) else None
