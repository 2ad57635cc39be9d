#!/usr/bin/env python3
from __future__ import annotations

from pathlib import Path
from typing import TypeGuard

import yaml


REPO_ROOT = Path(__file__).resolve().parents[1]
CODES_RELATIVE = Path("src") / "upm_git" / "diagnostics" / "codes.yaml"
OUTPUT_RELATIVE = Path("docs") / "reference" / "diagnostic-codes.md"
SEVERITIES = {"error", "warn", "info"}


def _is_dict(value: object) -> TypeGuard[dict[object, object]]:
    return isinstance(value, dict)


def _is_list(value: object) -> TypeGuard[list[object]]:
    return isinstance(value, list)


def _cell(value: object) -> str:
    return str(value or "").strip().replace("\n", " ").replace("|", "\\|")


def load_codes(src: Path) -> list[dict[str, object]]:
    data: object = yaml.safe_load(src.read_text(encoding="utf-8")) or {}
    if not _is_dict(data) or data.get("version") != 1:
        raise SystemExit(f"Unsupported diagnostics file: {src}")
    raw_codes = data.get("codes")
    if not _is_list(raw_codes):
        raise SystemExit("Invalid codes.yaml: expected top-level 'codes' list")
    codes: list[dict[str, object]] = []
    seen: set[str] = set()
    for entry in raw_codes:
        if not _is_dict(entry):
            raise SystemExit("Invalid codes.yaml: entries must be mappings")
        item = {str(k): v for k, v in entry.items()}
        code = _cell(item.get("code"))
        if not code or not item.get("rule") or item.get("severity") not in SEVERITIES:
            raise SystemExit(f"Invalid diagnostic entry: {item}")
        if code in seen:
            raise SystemExit(f"Duplicate diagnostic code: {code}")
        seen.add(code)
        codes.append(item)
    return codes


def render(codes: list[dict[str, object]]) -> str:
    lines = [
        "> **Generated file. Do not edit directly.**",
        "> Run: `python scripts/generate_diagnostic_codes.py`",
        "",
        "# Diagnostic codes",
        "",
        f"Source: `{CODES_RELATIVE.as_posix()}`. Execution errors exit with 3, other errors with 2.",
        "",
        "| Code | Severity | Execution | Rule | Meaning | Hint |",
        "|---|---|---|---|---|---|",
    ]
    for item in sorted(codes, key=lambda x: str(x.get("code"))):
        execution = "yes" if item.get("execution") else ""
        lines.append(
            f"| `{_cell(item.get('code'))}` | `{_cell(item.get('severity'))}` | {execution} "
            f"| `{_cell(item.get('rule'))}` | {_cell(item.get('message'))} | {_cell(item.get('hint'))} |"
        )
    return "\n".join(lines) + "\n"


def generate(repo_root: Path = REPO_ROOT) -> Path:
    src = repo_root / CODES_RELATIVE
    if not src.exists():
        raise SystemExit(f"Diagnostics source not found: {src}")
    out = repo_root / OUTPUT_RELATIVE
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(render(load_codes(src)), encoding="utf-8")
    return out


if __name__ == "__main__":
    print(f"Generated {generate()}")
