"""Install, update and remove git-backed packages in a Unity project.

The manifest entry is the source of truth for which reference a package uses;
the checkout under ``Packages/`` follows it. The two writes cannot be made
atomic, so the manifest is always written last: a failure part-way through
leaves at worst an unreferenced directory, which the next install of the same
package finds and deletes before cloning. When a failed reinstall has already
deleted the checkout an existing ``file:`` entry named, that entry is dropped
from the manifest rather than left pointing at nothing.
"""
from __future__ import annotations

from pathlib import Path

from upm_git.adapters.errors import BranchNotFound, FilesystemError, TagNotFound, VcsError
from upm_git.adapters.manifest.json_store import JsonManifestStore
from upm_git.adapters.manifest.package_metadata import read_package_version
from upm_git.adapters.runner.subprocess_runner import SubprocessCommandRunner
from upm_git.adapters.vcs.git_cli import GitCliDriver
from upm_git.adapters.workspace.filesystem import PackagesDirectory
from upm_git.application.manifest_access import adapter_diagnostic, load_manifest, load_manifest_if_present
from upm_git.application.settings import TIMEOUT_ENV, command_timeout, git_executable
from upm_git.domain.diagnostics import Diagnostic, FileLocation, PackageLocation, Severity
from upm_git.domain.json_types import as_json_dict
from upm_git.domain.manifest import Manifest
from upm_git.domain.naming import package_directory_name, validate_package_name
from upm_git.domain.package import InstallOutcome, PackageDescriptor, RemoveOutcome, UNKNOWN_VERSION
from upm_git.domain.reference import DependencyReference, LocalReference, ReferenceKind
from upm_git.domain.result import Result
from upm_git.ports.manifest_store import ManifestStorePort
from upm_git.ports.vcs import VcsPort


def default_vcs() -> VcsPort:
    return GitCliDriver(SubprocessCommandRunner(timeout=command_timeout()), executable=git_executable())


def _validate_descriptor(descriptor: PackageDescriptor) -> list[Diagnostic]:
    diagnostics = validate_package_name(descriptor.name)
    if not descriptor.git_url.strip():
        diagnostics.append(
            Diagnostic(
                code="DESCRIPTOR_INVALID",
                rule="descriptor.git_url",
                severity=Severity.ERROR,
                message=f"Package has no git_url: {descriptor.name}",
                location=PackageLocation(descriptor.name),
            )
        )
    if descriptor.git_tag and descriptor.git_branch:
        diagnostics.append(
            Diagnostic(
                code="CHECKOUT_SELECTOR_AMBIGUOUS",
                rule="descriptor.checkout",
                severity=Severity.WARN,
                message=(
                    f"Both tag '{descriptor.git_tag}' and branch '{descriptor.git_branch}' "
                    "were given; the tag is used"
                ),
                location=PackageLocation(descriptor.name, descriptor.git_tag),
            )
        )
    return diagnostics


def _remove_checkout(
    packages: PackagesDirectory,
    directory: str,
    package: str,
    diagnostics: list[Diagnostic],
    reason: str,
) -> bool:
    try:
        path = packages.remove_checkout(directory)
    except FilesystemError as e:
        diagnostics.append(
            adapter_diagnostic(
                e,
                "CHECKOUT_REMOVE_FAILED",
                "checkout.remove",
                is_execution=True,
                location=FileLocation(str(packages.path_for(directory))),
            )
        )
        return False
    diagnostics.append(
        Diagnostic(
            code="CHECKOUT_REMOVED",
            rule="checkout.remove",
            severity=Severity.INFO,
            message=f"Removed {reason} for {package}: {path}",
            location=FileLocation(str(path)),
        )
    )
    return True


def _kept_diagnostic(packages: PackagesDirectory, prior: LocalReference, package: str) -> Diagnostic:
    path = packages.path_for(prior.directory_name)
    return Diagnostic(
        code="PRIOR_CHECKOUT_KEPT",
        rule="checkout.remove",
        severity=Severity.WARN,
        message=f"Left {path} in place for {package}: it is not a checkout directory inside Packages/",
        location=FileLocation(str(path)),
    )


def _save_manifest(
    store: ManifestStorePort, project_root: Path, manifest: Manifest, diagnostics: list[Diagnostic]
) -> bool:
    try:
        store.save(project_root, manifest)
    except FilesystemError as e:
        diagnostics.append(
            adapter_diagnostic(
                e,
                "MANIFEST_WRITE_FAILED",
                "project.manifest.write",
                is_execution=True,
                location=FileLocation(str(store.manifest_path(project_root))),
            )
        )
        return False
    return True


def _drop_dangling_reference(
    store: ManifestStorePort,
    project_root: Path,
    manifest: Manifest,
    prior: DependencyReference | None,
    directory: str,
    packages: PackagesDirectory,
    diagnostics: list[Diagnostic],
    package: str,
) -> None:
    """After a failed install, unregister a local entry whose checkout is gone.

    The target directory is always cleared before cloning, so an entry naming
    it no longer points at the package it was installed from.
    """
    if not isinstance(prior, LocalReference):
        return
    if prior.directory_name != directory and packages.has_checkout(prior.directory_name):
        return
    manifest.remove(package)
    if _save_manifest(store, project_root, manifest, diagnostics):
        diagnostics.append(
            Diagnostic(
                code="DANGLING_REFERENCE_REMOVED",
                rule="manifest.consistency",
                severity=Severity.WARN,
                message=f"Removed {package} ({prior.to_manifest_value()}) from the manifest: its checkout is gone",
                location=PackageLocation(package),
                hint="Rerun install for this package",
            )
        )


def _resolve_prior(
    prior: DependencyReference | None,
    descriptor: PackageDescriptor,
    packages: PackagesDirectory,
    diagnostics: list[Diagnostic],
) -> bool:
    """Clear the way for a new local reference. Returns False if that failed."""
    if prior is None:
        return True
    if isinstance(prior, LocalReference):
        if packages.owns(prior.directory_name):
            return _remove_checkout(
                packages, prior.directory_name, descriptor.name, diagnostics, "previous checkout"
            )
        if packages.has_checkout(prior.directory_name):
            diagnostics.append(_kept_diagnostic(packages, prior, descriptor.name))
        return True
    diagnostics.append(
        Diagnostic(
            code="PRIOR_REFERENCE_REPLACED",
            rule="manifest.conflict",
            severity=Severity.INFO,
            message=(
                f"Replacing {prior.kind} reference '{prior.to_manifest_value()}' "
                f"for {descriptor.name} with a local checkout"
            ),
            location=PackageLocation(descriptor.name),
        )
    )
    return True


def _checkout(
    vcs: VcsPort, target: Path, descriptor: PackageDescriptor, diagnostics: list[Diagnostic]
) -> None:
    vcs.clone(descriptor.git_url, target)
    if descriptor.git_tag:
        tags = vcs.list_tags(target)
        if descriptor.git_tag not in tags:
            diagnostics.append(
                Diagnostic(
                    code="TAG_NOT_LISTED",
                    rule="vcs.checkout.tag",
                    severity=Severity.WARN,
                    message=f"Tag '{descriptor.git_tag}' is not among the cloned tags; fetching from origin",
                    location=PackageLocation(descriptor.name, descriptor.git_tag),
                    details=as_json_dict({"available_tags": tags}),
                )
            )
        vcs.checkout_tag(target, descriptor.git_tag)
    elif descriptor.git_branch:
        vcs.checkout_branch(target, descriptor.git_branch)


def _vcs_diagnostic(exc: VcsError, descriptor: PackageDescriptor) -> Diagnostic:
    if isinstance(exc, TagNotFound):
        return adapter_diagnostic(
            exc,
            "TAG_NOT_FOUND",
            "vcs.checkout.tag",
            is_execution=False,
            location=PackageLocation(descriptor.name, descriptor.git_tag),
        )
    if isinstance(exc, BranchNotFound):
        return adapter_diagnostic(
            exc,
            "BRANCH_NOT_FOUND",
            "vcs.checkout.branch",
            is_execution=False,
            location=PackageLocation(descriptor.name, descriptor.git_branch),
        )
    return adapter_diagnostic(
        exc,
        "VCS_FAILED",
        "vcs.transport",
        is_execution=True,
        location=PackageLocation(descriptor.name, descriptor.git_url),
    )


def install_package(
    project_root: Path,
    descriptor: PackageDescriptor,
    *,
    vcs: VcsPort | None = None,
    manifest_store: ManifestStorePort | None = None,
) -> Result[InstallOutcome]:
    diagnostics = _validate_descriptor(descriptor)
    if any(d.severity == Severity.ERROR for d in diagnostics):
        return Result(diagnostics=diagnostics)

    try:
        vcs_impl = vcs or default_vcs()
    except ValueError as e:
        diagnostics.append(
            Diagnostic(
                code="SETTINGS_INVALID",
                rule="settings.environment",
                severity=Severity.ERROR,
                message=str(e),
                hint=f"Unset {TIMEOUT_ENV} or set it to a number of seconds",
            )
        )
        return Result(diagnostics=diagnostics)

    store = manifest_store or JsonManifestStore()
    manifest = load_manifest(store, project_root, diagnostics)
    if manifest is None:
        return Result(diagnostics=diagnostics)

    prior = manifest.classify(descriptor.name)
    prior_raw = manifest.raw(descriptor.name)
    packages = PackagesDirectory(project_root)
    directory = package_directory_name(descriptor.name)
    target = packages.path_for(directory)

    if not _resolve_prior(prior, descriptor, packages, diagnostics):
        return Result(diagnostics=diagnostics)

    if target.exists() or target.is_symlink():
        try:
            packages.remove_checkout(directory)
        except FilesystemError as e:
            diagnostics.append(
                adapter_diagnostic(
                    e,
                    "CHECKOUT_REMOVE_FAILED",
                    "checkout.remove",
                    is_execution=True,
                    location=FileLocation(str(target)),
                )
            )
            _drop_dangling_reference(
                store, project_root, manifest, prior, directory, packages, diagnostics, descriptor.name
            )
            return Result(diagnostics=diagnostics)
        diagnostics.append(
            Diagnostic(
                code="STALE_CHECKOUT_REMOVED",
                rule="checkout.stale",
                severity=Severity.INFO,
                message=f"Removed leftover directory before cloning: {target}",
                location=FileLocation(str(target)),
            )
        )

    try:
        _checkout(vcs_impl, target, descriptor, diagnostics)
    except VcsError as e:
        diagnostics.append(_vcs_diagnostic(e, descriptor))
        if target.exists():
            try:
                packages.remove_checkout(directory)
            except FilesystemError as cleanup_error:
                diagnostics.append(
                    Diagnostic(
                        code="PARTIAL_CHECKOUT_LEFT",
                        rule="checkout.cleanup",
                        severity=Severity.WARN,
                        message=f"Could not remove partial checkout {target}: {cleanup_error}",
                        location=FileLocation(str(target)),
                        hint="Rerun install for this package or delete the directory by hand",
                    )
                )
        _drop_dangling_reference(
            store, project_root, manifest, prior, directory, packages, diagnostics, descriptor.name
        )
        return Result(diagnostics=diagnostics)

    version = vcs_impl.read_version(target) or UNKNOWN_VERSION
    manifest_value = manifest.upsert_local(descriptor.name, directory)
    if not _save_manifest(store, project_root, manifest, diagnostics):
        return Result(diagnostics=diagnostics)

    outcome = InstallOutcome(
        package=descriptor.name,
        directory=directory,
        action="installed" if prior is None else "replaced",
        checkout=descriptor.checkout_selector,
        version=version,
        manifest_value=manifest_value,
        prior=prior_raw,
        prior_kind=prior.kind if prior is not None else None,
    )
    if prior_raw is None:
        message = f"Installed {descriptor.name} {version} into {directory}"
    else:
        message = f"Replaced {descriptor.name} (was: {prior_raw}, now: {manifest_value} version: {version})"
    diagnostics.append(
        Diagnostic(
            code="PACKAGE_INSTALLED",
            rule="package.install",
            severity=Severity.INFO,
            message=message,
            location=PackageLocation(descriptor.name, descriptor.checkout_selector),
        )
    )
    return Result(value=outcome, diagnostics=diagnostics)


def update_package(
    project_root: Path,
    descriptor: PackageDescriptor,
    *,
    vcs: VcsPort | None = None,
    manifest_store: ManifestStorePort | None = None,
) -> Result[InstallOutcome]:
    """An update is a full reinstall pinned to the new descriptor's tag or branch."""
    return install_package(project_root, descriptor, vcs=vcs, manifest_store=manifest_store)


def remove_package(
    project_root: Path,
    package_name: str,
    *,
    manifest_store: ManifestStorePort | None = None,
) -> Result[RemoveOutcome]:
    diagnostics: list[Diagnostic] = []
    store = manifest_store or JsonManifestStore()
    manifest = load_manifest(store, project_root, diagnostics)
    if manifest is None:
        return Result(diagnostics=diagnostics)

    if package_name not in manifest.dependencies:
        diagnostics.append(
            Diagnostic(
                code="PACKAGE_NOT_INSTALLED",
                rule="package.remove",
                severity=Severity.WARN,
                message=f"Package is not in the manifest: {package_name}",
                location=PackageLocation(package_name),
            )
        )
        return Result(value=RemoveOutcome(package=package_name), diagnostics=diagnostics)

    prior = manifest.remove(package_name)
    removed_dir: str | None = None
    packages = PackagesDirectory(project_root)
    if isinstance(prior, LocalReference):
        if packages.owns(prior.directory_name):
            # A failed delete is reported but does not stop the manifest write.
            if _remove_checkout(packages, prior.directory_name, package_name, diagnostics, "checkout"):
                removed_dir = prior.directory_name
        elif packages.has_checkout(prior.directory_name):
            diagnostics.append(_kept_diagnostic(packages, prior, package_name))

    if not _save_manifest(store, project_root, manifest, diagnostics):
        return Result(diagnostics=diagnostics)

    diagnostics.append(
        Diagnostic(
            code="PACKAGE_REMOVED",
            rule="package.remove",
            severity=Severity.INFO,
            message=f"Removed package: {package_name}",
            location=PackageLocation(package_name),
        )
    )
    outcome = RemoveOutcome(
        package=package_name,
        prior=prior.to_manifest_value() if prior is not None else None,
        prior_kind=prior.kind if prior is not None else None,
        directory_removed=removed_dir,
    )
    return Result(value=outcome, diagnostics=diagnostics)


def check_conflict(
    project_root: Path,
    package_name: str,
    *,
    manifest_store: ManifestStorePort | None = None,
) -> Result[str]:
    """Raw manifest value already registered for ``package_name``, if any.

    A missing manifest and a missing entry both mean "no conflict".
    """
    diagnostics: list[Diagnostic] = []
    manifest = load_manifest_if_present(manifest_store or JsonManifestStore(), project_root, diagnostics)
    if manifest is None:
        return Result(diagnostics=diagnostics)
    return Result(value=manifest.raw(package_name), diagnostics=diagnostics)


def get_installed_package_info(
    project_root: Path,
    package_name: str,
    *,
    manifest_store: ManifestStorePort | None = None,
) -> Result[tuple[str, ReferenceKind]]:
    diagnostics: list[Diagnostic] = []
    manifest = load_manifest_if_present(manifest_store or JsonManifestStore(), project_root, diagnostics)
    if manifest is None:
        return Result(diagnostics=diagnostics)
    reference = manifest.classify(package_name)
    if reference is None:
        return Result(diagnostics=diagnostics)
    if isinstance(reference, LocalReference):
        if not reference.directory_name:
            return Result(value=(UNKNOWN_VERSION, "local"), diagnostics=diagnostics)
        package_dir = PackagesDirectory(project_root).path_for(reference.directory_name)
        return Result(value=(read_package_version(package_dir), "local"), diagnostics=diagnostics)
    return Result(value=(reference.version, reference.kind), diagnostics=diagnostics)
