from __future__ import annotations

from pathlib import Path

from upm_git.adapters.errors import AdapterError, FilesystemError, ManifestMissing, ManifestParseError
from upm_git.domain.diagnostics import Diagnostic, Location, FileLocation, Severity
from upm_git.domain.json_types import as_json_dict
from upm_git.domain.manifest import Manifest
from upm_git.ports.manifest_store import ManifestStorePort


def adapter_diagnostic(
    exc: AdapterError,
    code: str,
    rule: str,
    *,
    is_execution: bool,
    location: Location | None = None,
) -> Diagnostic:
    details = dict(exc.details or {})
    if exc.cause is not None and "cause" not in details:
        details["cause"] = str(exc.cause)
    return Diagnostic(
        code=code,
        rule=rule,
        severity=Severity.ERROR,
        message=str(exc),
        location=location,
        hint=exc.hint,
        details=as_json_dict(details) or None,
        is_execution=is_execution,
    )


def load_manifest(
    store: ManifestStorePort, project_root: Path, diagnostics: list[Diagnostic]
) -> Manifest | None:
    location = FileLocation(str(store.manifest_path(project_root)))
    try:
        return store.load(project_root)
    except ManifestMissing as e:
        diagnostics.append(
            adapter_diagnostic(
                e, "PROJECT_NOT_INITIALIZED", "project.manifest.exists", is_execution=False, location=location
            )
        )
    except ManifestParseError as e:
        diagnostics.append(
            adapter_diagnostic(
                e, "MANIFEST_PARSE_FAILED", "project.manifest.parse", is_execution=False, location=location
            )
        )
    except FilesystemError as e:
        diagnostics.append(
            adapter_diagnostic(
                e, "MANIFEST_READ_FAILED", "project.manifest.read", is_execution=True, location=location
            )
        )
    return None


def load_manifest_if_present(
    store: ManifestStorePort, project_root: Path, diagnostics: list[Diagnostic]
) -> Manifest | None:
    """Like ``load_manifest``, but a project without a manifest is not an error."""
    if not store.manifest_path(project_root).exists():
        return None
    return load_manifest(store, project_root, diagnostics)
