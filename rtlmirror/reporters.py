from __future__ import annotations

from collections import Counter
from itertools import groupby
import json
from pathlib import Path
from typing import Any

from rtlmirror import __version__
from rtlmirror.models import Issue, ScanResult
from rtlmirror.rules import RULES


def _issue_to_dict(issue: Issue) -> dict[str, Any]:
    return {
        "rule_id": issue.rule_id,
        "severity": issue.severity,
        "original": issue.original,
        "suggestion": issue.suggestion,
        "message": issue.message,
        "file_path": issue.file_path,
        "line": issue.line,
        "column": issue.column,
    }


def to_json_report(result: ScanResult) -> dict[str, Any]:
    counts = Counter(issue.severity for issue in result.issues)
    rule_counts = Counter(issue.rule_id for issue in result.issues)
    files_with_issues = len({issue.file_path for issue in result.issues})
    return {
        "files_scanned": result.files_scanned,
        "files_with_issues": files_with_issues,
        "issues_total": len(result.issues),
        "severity_counts": {
            "error": counts.get("error", 0),
            "warning": counts.get("warning", 0),
        },
        "rule_counts": dict(sorted(rule_counts.items())),
        "issues": [_issue_to_dict(issue) for issue in result.issues],
        "read_errors": [{"file_path": path, "message": message} for path, message in result.read_errors],
    }


def to_sarif_report(result: ScanResult) -> dict[str, Any]:
    sarif_results: list[dict[str, Any]] = []
    for issue in result.issues:
        sarif_results.append(
            {
                "ruleId": issue.rule_id,
                "level": issue.severity,
                "message": {"text": issue.message},
                "locations": [
                    {
                        "physicalLocation": {
                            "artifactLocation": {"uri": issue.file_path},
                            "region": {
                                "startLine": issue.line,
                                "startColumn": issue.column,
                                "endColumn": issue.column + len(issue.original),
                            },
                        }
                    }
                ],
                "fixes": [
                    {
                        "description": {"text": f"Use '{issue.suggestion}'"},
                        "artifactChanges": [
                            {
                                "artifactLocation": {"uri": issue.file_path},
                                "replacements": [
                                    {
                                        "deletedRegion": {
                                            "startLine": issue.line,
                                            "startColumn": issue.column,
                                            "endColumn": issue.column + len(issue.original),
                                        },
                                        "insertedContent": {"text": issue.suggestion},
                                    }
                                ],
                            }
                        ],
                    }
                ],
            }
        )

    driver_rules = [
        {
            "id": rule.rule_id,
            "shortDescription": {"text": rule.title},
            "fullDescription": {"text": f"Replace '{rule.physical}' with '{rule.logical}'."},
            "defaultConfiguration": {"level": rule.severity},
        }
        for rule in RULES
    ]
    return {
        "$schema": "https://json.schemastore.org/sarif-2.1.0.json",
        "version": "2.1.0",
        "runs": [
            {
                "tool": {"driver": {"name": "rtlmirror", "version": __version__, "rules": driver_rules}},
                "results": sarif_results,
            }
        ],
    }


def to_pretty_report(result: ScanResult) -> str:
    counts = Counter(issue.severity for issue in result.issues)
    lines = [
        "Summary:",
        f"  files scanned: {result.files_scanned}",
        f"  findings: {len(result.issues)} (errors={counts.get('error', 0)}, warnings={counts.get('warning', 0)})",
    ]
    for file_path, file_issues in groupby(result.issues, key=lambda issue: issue.file_path):
        lines.append("")
        lines.append(f"FILE {file_path}")
        for issue in file_issues:
            lines.append(
                f"  {issue.line}:{issue.column} [{issue.severity.upper()}] {issue.rule_id} "
                f"{issue.original} -> {issue.suggestion}"
            )
    if result.read_errors:
        lines.append("")
        lines.append("Unreadable files:")
        lines.extend(f"  {path}: {message}" for path, message in result.read_errors)
    return "\n".join(lines)


def render_report(result: ScanResult, output_format: str) -> dict[str, Any] | str:
    if output_format == "sarif":
        return to_sarif_report(result)
    if output_format == "json":
        return to_json_report(result)
    if output_format == "pretty":
        return to_pretty_report(result)
    raise ValueError(f"Unsupported report format: {output_format}")


def write_report(payload: dict[str, Any] | str, out: str | None) -> None:
    rendered = payload if isinstance(payload, str) else json.dumps(payload, indent=2)
    if out is None:
        print(rendered)
        return
    output_path = Path(out)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(rendered, encoding="utf-8")
