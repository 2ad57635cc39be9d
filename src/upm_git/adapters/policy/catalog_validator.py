from __future__ import annotations

import json
from pathlib import Path

import jsonschema

from upm_git.domain.diagnostics import Diagnostic, FileLocation, Severity
from upm_git.domain.json_types import JsonDict, as_json_dict


def schema_path() -> Path:
    return Path(__file__).resolve().parents[2] / "schemas" / "catalog.schema.v1.json"


def load_schema() -> JsonDict:
    return as_json_dict(json.loads(schema_path().read_text(encoding="utf-8")))


def validate_catalog_schema(document: object, source: Path | None = None) -> list[Diagnostic]:
    validator = jsonschema.Draft202012Validator(load_schema())
    diagnostics: list[Diagnostic] = []
    for err in sorted(validator.iter_errors(document), key=lambda e: list(e.absolute_path)):
        pointer = "/".join(str(part) for part in err.absolute_path)
        diagnostics.append(
            Diagnostic(
                code="CATALOG_SCHEMA_INVALID",
                rule="catalog.schema",
                severity=Severity.ERROR,
                message=f"{pointer or '<root>'}: {err.message}",
                location=FileLocation(str(source)) if source is not None else None,
            )
        )
    return diagnostics
