from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from rtlmirror.models import Issue, ScanResult

Fingerprint = tuple[str, str, int, str]


def load_baseline_fingerprints(path: str) -> set[Fingerprint]:
    payload = _read_json(path)
    issues = payload.get("issues")
    if not isinstance(issues, list):
        raise ValueError("Baseline report must contain an 'issues' array.")

    fingerprints: set[Fingerprint] = set()
    for issue in issues:
        if not isinstance(issue, dict):
            continue
        rule_id = issue.get("rule_id")
        file_path = issue.get("file_path")
        line = issue.get("line")
        original = issue.get("original")
        if not isinstance(rule_id, str) or not isinstance(file_path, str) or not isinstance(original, str):
            continue
        if not isinstance(line, int):
            continue
        fingerprints.add((file_path, rule_id, line, original))
    return fingerprints


def fingerprint(issue: Issue) -> Fingerprint:
    return (issue.file_path, issue.rule_id, issue.line, issue.original)


def filter_new_issues(result: ScanResult, baseline_fingerprints: set[Fingerprint]) -> tuple[ScanResult, int]:
    new_issues = [issue for issue in result.issues if fingerprint(issue) not in baseline_fingerprints]
    baseline_matched = len(result.issues) - len(new_issues)
    return (
        ScanResult(issues=new_issues, files_scanned=result.files_scanned, read_errors=result.read_errors),
        baseline_matched,
    )


def _read_json(path: str) -> dict[str, Any]:
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError("Baseline report must be a JSON object.")
    return payload
