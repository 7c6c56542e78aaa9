from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

Severity = Literal["error", "warning"]


@dataclass(frozen=True, slots=True)
class Finding:
    line: int
    original: str
    suggestion: str
    severity: Severity
    rule_id: str = ""
    column: int | None = None


@dataclass(frozen=True, slots=True)
class ScanStats:
    total: int
    errors: int
    warnings: int

    def to_dict(self) -> dict[str, int]:
        return {"total": self.total, "errors": self.errors, "warnings": self.warnings}


@dataclass(slots=True)
class Issue:
    rule_id: str
    severity: Severity
    original: str
    suggestion: str
    file_path: str
    line: int
    column: int

    @classmethod
    def from_finding(cls, finding: Finding, file_path: str) -> Issue:
        return cls(
            rule_id=finding.rule_id,
            severity=finding.severity,
            original=finding.original,
            suggestion=finding.suggestion,
            file_path=file_path,
            line=finding.line,
            column=finding.column or 1,
        )

    @property
    def message(self) -> str:
        return f"Replace physical '{self.original}' with logical '{self.suggestion}'."


@dataclass(slots=True)
class ScanResult:
    issues: list[Issue]
    files_scanned: int
    read_errors: list[tuple[str, str]] = field(default_factory=list)


@dataclass(slots=True)
class FixResult:
    files_changed: list[str]
    fixes_applied: int
    remaining: ScanResult
