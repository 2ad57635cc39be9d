from dataclasses import replace
from pathlib import Path
import json as _json
from typing import Any

import typer

from upm_git.application.catalog import load_catalog, select_descriptor
from upm_git.application.installer import (
    check_conflict,
    get_installed_package_info,
    install_package,
    remove_package,
    update_package,
)
from upm_git.application.project_info import get_project_info, list_installed_packages
from upm_git.application.result_serialization import serialize_result
from upm_git.domain.diagnostics import Severity
from upm_git.domain.package import PackageDescriptor
from upm_git.domain.result import Result

app = typer.Typer(add_completion=False, help="Install Unity packages as git checkouts.")

_SEVERITY_LABELS = {Severity.ERROR: "error", Severity.WARN: "warning", Severity.INFO: "info"}


def _finish(result: Result[Any], command: str, args: list[str], json: bool, summary: str | None) -> None:
    if json:
        typer.echo(_json.dumps(serialize_result(result, command=command, args=args)))
    else:
        for d in result.diagnostics:
            typer.echo(f"{_SEVERITY_LABELS[d.severity]}: [{d.code}] {d.message}", err=True)
            if d.hint and d.severity != Severity.INFO:
                typer.echo(f"  hint: {d.hint}", err=True)
        if summary:
            typer.echo(summary)
    raise typer.Exit(result.exit_code)


def _descriptor(
    name: str,
    git_url: str | None,
    tag: str | None,
    branch: str | None,
    catalog: Path | None,
    version: str | None,
) -> Result[PackageDescriptor]:
    if catalog is None:
        return Result(value=PackageDescriptor(name=name, git_url=git_url or "", git_tag=tag, git_branch=branch))
    loaded = load_catalog(catalog)
    if loaded.value is None:
        return Result(diagnostics=loaded.diagnostics)
    selected = select_descriptor(loaded.value, name, version)
    if selected.value is None:
        return selected
    descriptor = selected.value
    if git_url:
        descriptor = replace(descriptor, git_url=git_url)
    if tag or branch:
        descriptor = replace(descriptor, git_tag=tag, git_branch=branch)
    return Result(value=descriptor, diagnostics=loaded.diagnostics + selected.diagnostics)


def _install(
    command: str,
    project: Path,
    name: str,
    git_url: str | None,
    tag: str | None,
    branch: str | None,
    catalog: Path | None,
    version: str | None,
    json: bool,
) -> None:
    args = [str(project), name]
    chosen = _descriptor(name, git_url, tag, branch, catalog, version)
    if chosen.value is None:
        _finish(chosen, command, args, json, None)
        return
    use_case = update_package if command == "update" else install_package
    result = use_case(project, chosen.value)
    result.diagnostics[:0] = chosen.diagnostics
    outcome = result.value
    summary = f"{outcome.package} {outcome.version} -> {outcome.manifest_value}" if outcome else None
    _finish(result, command, args, json, summary)


@app.command()
def info(project: Path = typer.Argument(...), json: bool = False):
    """Show the Unity version and installed packages of a project."""
    result = get_project_info(project)
    summary = None
    if result.value is not None:
        lines = [f"{result.value.name} (Unity {result.value.unity_version or 'unknown'})"]
        lines.extend(f"  {p.name} {p.version} [{p.source}]" for p in result.value.packages)
        summary = "\n".join(lines)
    _finish(result, "info", [str(project)], json, summary)


@app.command("list")
def list_packages(project: Path = typer.Argument(...), json: bool = False):
    """List installed packages."""
    result = list_installed_packages(project)
    summary = "\n".join(f"{p.name}\t{p.version}\t{p.source}\t{p.git_url}" for p in result.value or [])
    _finish(result, "list", [str(project)], json, summary or None)


@app.command()
def install(
    project: Path = typer.Argument(...),
    name: str = typer.Option(..., "--name"),
    git_url: str | None = typer.Option(None, "--git-url"),
    tag: str | None = typer.Option(None, "--tag"),
    branch: str | None = typer.Option(None, "--branch"),
    catalog: Path | None = typer.Option(None, "--catalog", help="Catalog file to take the package from"),
    version: str | None = typer.Option(None, "--version", help="Catalog version to install"),
    json: bool = False,
):
    """Clone a package into Packages/ and point the manifest at it."""
    _install("install", project, name, git_url, tag, branch, catalog, version, json)


@app.command()
def update(
    project: Path = typer.Argument(...),
    name: str = typer.Option(..., "--name"),
    git_url: str | None = typer.Option(None, "--git-url"),
    tag: str | None = typer.Option(None, "--tag"),
    branch: str | None = typer.Option(None, "--branch"),
    catalog: Path | None = typer.Option(None, "--catalog"),
    version: str | None = typer.Option(None, "--version"),
    json: bool = False,
):
    """Reinstall a package at a new tag or branch."""
    _install("update", project, name, git_url, tag, branch, catalog, version, json)


@app.command()
def remove(project: Path = typer.Argument(...), name: str = typer.Argument(...), json: bool = False):
    """Remove a package from the manifest and delete its checkout."""
    result = remove_package(project, name)
    _finish(result, "remove", [str(project), name], json, None)


@app.command()
def conflict(project: Path = typer.Argument(...), name: str = typer.Argument(...), json: bool = False):
    """Print the manifest value already registered for a package, if any."""
    result = check_conflict(project, name)
    _finish(result, "conflict", [str(project), name], json, result.value)


@app.command()
def status(project: Path = typer.Argument(...), name: str = typer.Argument(...), json: bool = False):
    """Print the installed version and origin of a package."""
    result = get_installed_package_info(project, name)
    summary = f"{result.value[0]}\t{result.value[1]}" if result.value is not None else None
    _finish(result, "status", [str(project), name], json, summary)
