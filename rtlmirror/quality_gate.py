from __future__ import annotations

from collections import Counter

from rtlmirror.models import ScanResult, Severity


SEVERITY_ORDER: dict[Severity, int] = {
    "warning": 1,
    "error": 2,
}


def evaluate_gate(
    result: ScanResult,
    fail_on: Severity | None = None,
    max_findings: int | None = None,
    max_files_with_findings: int | None = None,
    max_errors: int | None = None,
    max_warnings: int | None = None,
) -> tuple[bool, list[str]]:
    failed_reasons: list[str] = []
    severity_counts = Counter(issue.severity for issue in result.issues)

    if fail_on is not None:
        threshold = SEVERITY_ORDER[fail_on]
        if any(SEVERITY_ORDER[issue.severity] >= threshold for issue in result.issues):
            failed_reasons.append(f"Detected finding severity >= '{fail_on}'")

    if max_findings is not None and len(result.issues) > max_findings:
        failed_reasons.append(f"Finding count {len(result.issues)} exceeds max_findings={max_findings}")

    if max_files_with_findings is not None:
        files_with_findings = len({issue.file_path for issue in result.issues})
        if files_with_findings > max_files_with_findings:
            failed_reasons.append(
                f"Files with findings {files_with_findings} exceeds max_files_with_findings={max_files_with_findings}"
            )

    per_severity_limits: dict[str, tuple[Severity, int | None]] = {
        "max_errors": ("error", max_errors),
        "max_warnings": ("warning", max_warnings),
    }
    for gate_name, (severity, limit) in per_severity_limits.items():
        if limit is not None and severity_counts.get(severity, 0) > limit:
            failed_reasons.append(f"{severity} count {severity_counts[severity]} exceeds {gate_name}={limit}")

    return (len(failed_reasons) == 0, failed_reasons)
