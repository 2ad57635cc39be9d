from __future__ import annotations

import re

from upm_git.domain.diagnostics import Diagnostic, PackageLocation, Severity

# Unity's convention: lowercase reverse-domain, e.g. com.company.package
PACKAGE_NAME_PATTERN = re.compile(r"^[a-z0-9][a-z0-9_-]*(\.[a-z0-9][a-z0-9_-]*)+$")

_UNSAFE_DIRECTORY_CHARS = ("/", "\\", ".")


def package_directory_name(package_name: str) -> str:
    """Directory under ``Packages/`` that holds the checkout for ``package_name``.

    Derived only from the name, so repeated installs of one package reuse the
    same slot. Part of the manifest/filesystem contract: the manifest entry
    for a locally installed package is ``file:<package_directory_name(name)>``.
    """
    directory = package_name
    for char in _UNSAFE_DIRECTORY_CHARS:
        directory = directory.replace(char, "_")
    return directory


def validate_package_name(name: str) -> list[Diagnostic]:
    if not name.strip():
        return [
            Diagnostic(
                code="DESCRIPTOR_INVALID",
                rule="descriptor.name",
                severity=Severity.ERROR,
                message="Package name must not be empty",
            )
        ]
    if PACKAGE_NAME_PATTERN.match(name):
        return []
    return [
        Diagnostic(
            code="PACKAGE_NAME_UNCONVENTIONAL",
            rule="naming.package.format",
            severity=Severity.WARN,
            message=f"Package name is not in reverse-domain form: {name}",
            location=PackageLocation(name),
            hint="Unity expects names like com.company.package",
        )
    ]
