"""Detection and fix engine for physical direction utilities.

Every function here is pure: text comes in, new findings or new text go out.
Lines are split on ``"\\n"`` only, so fixes never add or remove line breaks and
line numbers from one scan stay valid for every fix derived from it.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence

from rtlmirror.models import Finding, ScanStats
from rtlmirror.rules import RULES, Rule

DEFAULT_MAX_PASSES = 10


def scan(text: str, rules: Sequence[Rule] = RULES) -> list[Finding]:
    """Return findings for ``text`` ordered by line, then rule order, then position.

    A token repeated verbatim on one line yields a single finding, since findings
    are keyed by ``(line, original)``.
    """
    findings: list[Finding] = []
    seen: set[tuple[int, str]] = set()

    for line_number, line in enumerate(text.split("\n"), start=1):
        for rule in rules:
            for match in rule.pattern.finditer(line):
                original = match.group(0)
                key = (line_number, original)
                if key in seen:
                    continue
                seen.add(key)
                findings.append(
                    Finding(
                        line=line_number,
                        original=original,
                        suggestion=rule.transform(original),
                        severity=rule.severity,
                        rule_id=rule.rule_id,
                        column=match.start() + 1,
                    )
                )

    return sorted(findings, key=lambda finding: finding.line)


def apply_fix(text: str, finding: Finding) -> str:
    """Apply one finding. A finding pointing past the text is ignored."""
    lines = text.split("\n")
    index = finding.line - 1
    if index < 0 or index >= len(lines):
        return text
    lines[index] = _replace_in_line(lines[index], finding)
    return "\n".join(lines)


def apply_all_fixes(text: str, rules: Sequence[Rule] = RULES) -> str:
    """Rescan ``text`` and apply every finding from that single snapshot."""
    return apply_findings(text, scan(text, rules))


def apply_findings(text: str, findings: Iterable[Finding]) -> str:
    fixed, _ = apply_findings_counted(text, findings)
    return fixed


def apply_findings_counted(text: str, findings: Iterable[Finding]) -> tuple[str, int]:
    """Apply findings from one snapshot of ``text``; also return how many took effect."""
    lines = text.split("\n")
    by_line: dict[int, list[Finding]] = {}
    for finding in findings:
        if 1 <= finding.line <= len(lines):
            by_line.setdefault(finding.line - 1, []).append(finding)

    applied = 0
    for index, line_findings in by_line.items():
        lines[index], count = _fix_line(lines[index], line_findings)
        applied += count
    return "\n".join(lines), applied


def fix_until_clean(
    text: str,
    rules: Sequence[Rule] = RULES,
    max_passes: int = DEFAULT_MAX_PASSES,
) -> tuple[str, int]:
    """Run ``apply_all_fixes`` until nothing is left to fix.

    Needed for lines repeating the same token, which one pass only fixes once.
    Returns the fixed text and the number of passes that changed it.
    """
    passes = 0
    current = text
    while passes < max_passes:
        fixed = apply_all_fixes(current, rules)
        if fixed == current:
            break
        current = fixed
        passes += 1
    return current, passes


def stats(findings: Iterable[Finding]) -> ScanStats:
    counts = Counter(finding.severity for finding in findings)
    return ScanStats(
        total=sum(counts.values()),
        errors=counts.get("error", 0),
        warnings=counts.get("warning", 0),
    )


def issue_lines(findings: Iterable[Finding]) -> list[int]:
    return sorted({finding.line for finding in findings})


def _fix_line(line: str, findings: list[Finding]) -> tuple[str, int]:
    edits: list[tuple[int, str, str]] = []
    unplaced: list[Finding] = []
    for finding in findings:
        start = (finding.column or 0) - 1
        if start >= 0 and line[start : start + len(finding.original)] == finding.original:
            offset, old, new = _minimal_edit(finding.original, finding.suggestion)
            edits.append((start + offset, old, new))
        else:
            unplaced.append(finding)

    # Trimmed to the changed prefix, a span nested in another (ml-[left-4]) no longer overlaps it.
    # Right to left so a longer replacement never shifts a pending edit.
    applied = 0
    boundary = len(line)
    for start, old, new in sorted(edits, reverse=True):
        if start + len(old) > boundary:
            continue
        line = line[:start] + new + line[start + len(old) :]
        boundary = start
        applied += 1

    for finding in unplaced:
        fixed = _replace_in_line(line, finding)
        if fixed != line:
            applied += 1
        line = fixed
    return line, applied


def _minimal_edit(original: str, suggestion: str) -> tuple[int, str, str]:
    limit = min(len(original), len(suggestion))
    prefix = 0
    while prefix < limit and original[prefix] == suggestion[prefix]:
        prefix += 1
    suffix = 0
    while suffix < limit - prefix and original[-1 - suffix] == suggestion[-1 - suffix]:
        suffix += 1
    return prefix, original[prefix : len(original) - suffix], suggestion[prefix : len(suggestion) - suffix]


def _replace_in_line(line: str, finding: Finding) -> str:
    if finding.column is not None:
        start = finding.column - 1
        end = start + len(finding.original)
        if start >= 0 and line[start:end] == finding.original:
            return line[:start] + finding.suggestion + line[end:]
    return line.replace(finding.original, finding.suggestion, 1)
