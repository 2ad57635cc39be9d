from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, TypeVar

from upm_git.domain.diagnostics import Diagnostic, Severity
from upm_git.domain.json_types import JsonDict

T = TypeVar("T")


def _new_diagnostics() -> list[Diagnostic]:
    return []


def _new_artifacts() -> list[JsonDict]:
    return []


@dataclass
class Result(Generic[T]):
    value: T | None = None
    diagnostics: list[Diagnostic] = field(default_factory=_new_diagnostics)
    artifacts: list[JsonDict] = field(default_factory=_new_artifacts)

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.ERROR]

    @property
    def ok(self) -> bool:
        return not self.errors

    def codes(self) -> list[str]:
        return [d.code for d in self.diagnostics]

    @property
    def exit_code(self) -> int:
        if any(d.is_execution for d in self.errors):
            return 3
        if self.errors:
            return 2
        return 0
