from __future__ import annotations

from collections.abc import Iterator, Sequence
import os
from pathlib import Path
import re

from rtlmirror.engine import DEFAULT_MAX_PASSES, apply_findings_counted, scan
from rtlmirror.models import Finding, FixResult, Issue, ScanResult
from rtlmirror.rules import Rule, select_rules

INLINE_IGNORE_PATTERN = re.compile(r"rtlmirror:ignore(?:\s+(RTL\d{3}(?:\s*,\s*RTL\d{3})*))?", re.IGNORECASE)
GENERATED_DIR_NAMES = {
    "node_modules",
    ".next",
    ".nuxt",
    ".svelte-kit",
    ".output",
    ".turbo",
    ".parcel-cache",
    "coverage",
    "storybook-static",
}
GENERATED_FILE_SUFFIXES = {
    ".min.js",
    ".min.css",
    ".map",
    ".bundle.js",
    ".chunk.js",
}


def scan_path(
    root: str,
    excludes: list[str],
    include_extensions: list[str],
    include_filenames: list[str],
    max_file_size_kb: int,
    skip_generated: bool = True,
    enabled_rules: list[str] | None = None,
    disabled_rules: list[str] | None = None,
    inline_ignore: bool = True,
) -> ScanResult:
    root_path = Path(root).resolve()
    rules = select_rules(enabled_rules, disabled_rules)
    issues: list[Issue] = []
    read_errors: list[tuple[str, str]] = []
    files_scanned = 0

    for file_path in _iter_target_files(
        root_path, excludes, include_extensions, include_filenames, max_file_size_kb, skip_generated
    ):
        files_scanned += 1
        relative = _relative_path(file_path, root_path)
        try:
            source = file_path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            read_errors.append((relative, f"Unable to read file during scan: {exc}"))
            continue
        findings = _scan_source(source, rules, inline_ignore)
        issues.extend(Issue.from_finding(finding, relative) for finding in findings)

    return ScanResult(issues=_sort_issues(issues), files_scanned=files_scanned, read_errors=read_errors)


def fix_path(
    root: str,
    excludes: list[str],
    include_extensions: list[str],
    include_filenames: list[str],
    max_file_size_kb: int,
    skip_generated: bool = True,
    enabled_rules: list[str] | None = None,
    disabled_rules: list[str] | None = None,
    inline_ignore: bool = True,
    max_passes: int = DEFAULT_MAX_PASSES,
    dry_run: bool = False,
) -> FixResult:
    """Fix every unsuppressed finding under ``root`` and write the changed files.

    Each pass rescans the current text, so tokens repeated on a line are fixed
    over successive passes. Line endings are preserved as read.
    """
    root_path = Path(root).resolve()
    rules = select_rules(enabled_rules, disabled_rules)
    files_changed: list[str] = []
    remaining: list[Issue] = []
    read_errors: list[tuple[str, str]] = []
    fixes_applied = 0
    files_scanned = 0

    for file_path in _iter_target_files(
        root_path, excludes, include_extensions, include_filenames, max_file_size_kb, skip_generated
    ):
        files_scanned += 1
        relative = _relative_path(file_path, root_path)
        try:
            with file_path.open(encoding="utf-8", newline="") as fh:
                source = fh.read()
        except (OSError, UnicodeDecodeError) as exc:
            read_errors.append((relative, f"Unable to read file for fixing: {exc}"))
            continue

        fixed = source
        for _ in range(max_passes):
            findings = _scan_source(fixed, rules, inline_ignore)
            if not findings:
                break
            fixed, applied = apply_findings_counted(fixed, findings)
            if not applied:
                break
            fixes_applied += applied

        remaining.extend(Issue.from_finding(finding, relative) for finding in _scan_source(fixed, rules, inline_ignore))
        if fixed == source:
            continue
        files_changed.append(relative)
        if not dry_run:
            with file_path.open("w", encoding="utf-8", newline="") as fh:
                fh.write(fixed)

    return FixResult(
        files_changed=files_changed,
        fixes_applied=fixes_applied,
        remaining=ScanResult(issues=_sort_issues(remaining), files_scanned=files_scanned, read_errors=read_errors),
    )


def _scan_source(source: str, rules: Sequence[Rule], inline_ignore: bool) -> list[Finding]:
    findings = scan(source, rules)
    if not inline_ignore or not findings:
        return findings
    inline_map = _build_inline_ignore_map(source)
    allowed: list[Finding] = []
    for finding in findings:
        ignored_rules = inline_map.get(finding.line)
        if ignored_rules is not None and ("*" in ignored_rules or finding.rule_id in ignored_rules):
            continue
        allowed.append(finding)
    return allowed


def _iter_target_files(
    root_path: Path,
    excludes: list[str],
    include_extensions: list[str],
    include_filenames: list[str],
    max_file_size_kb: int,
    skip_generated: bool,
) -> Iterator[Path]:
    include_ext_set = {ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in include_extensions}
    include_name_set = set(include_filenames)

    if root_path.is_file():
        if skip_generated and _is_generated_name(root_path.name):
            return
        if _has_allowed_target(root_path, include_ext_set, include_name_set, max_file_size_kb):
            yield root_path
        return

    for dirpath, dirnames, filenames in os.walk(root_path, topdown=True, followlinks=False):
        dir_path = Path(dirpath)
        dirnames[:] = sorted(
            name
            for name in dirnames
            if not _should_exclude(dir_path / name, root_path, excludes)
            and not (skip_generated and _is_generated_name(name))
        )
        for filename in sorted(filenames):
            file_path = dir_path / filename
            if _should_exclude(file_path, root_path, excludes):
                continue
            if skip_generated and _is_generated_name(filename):
                continue
            if not _has_allowed_target(file_path, include_ext_set, include_name_set, max_file_size_kb):
                continue
            yield file_path


def _should_exclude(path: Path, root: Path, excludes: list[str]) -> bool:
    """Match a bare name against any path segment, or a slashed entry against the path prefix."""
    relative = path.relative_to(root).as_posix()
    parts = relative.split("/")
    for ex in excludes:
        pattern = ex.replace("\\", "/").removeprefix("./").strip("/")
        if "/" not in pattern:
            if pattern in parts:
                return True
        elif relative == pattern or relative.startswith(f"{pattern}/"):
            return True
    return False


def _has_allowed_target(
    path: Path,
    include_extensions: set[str],
    include_filenames: set[str],
    max_file_size_kb: int,
) -> bool:
    if not path.is_file():
        return False
    if max_file_size_kb > 0 and path.stat().st_size > max_file_size_kb * 1024:
        return False
    if path.name in include_filenames:
        return True
    return path.suffix.lower() in include_extensions


def _is_generated_name(name: str) -> bool:
    if name in GENERATED_DIR_NAMES:
        return True
    name_lower = name.lower()
    return any(name_lower.endswith(suffix) for suffix in GENERATED_FILE_SUFFIXES)


def _relative_path(path: Path, root: Path) -> str:
    if root.is_file():
        return path.name
    try:
        return path.resolve().relative_to(root).as_posix()
    except ValueError:
        return str(path)


def _sort_issues(issues: list[Issue]) -> list[Issue]:
    return sorted(issues, key=lambda issue: issue.file_path)


def _build_inline_ignore_map(source: str) -> dict[int, set[str]]:
    rule_map: dict[int, set[str]] = {}
    for idx, line in enumerate(source.split("\n"), start=1):
        match = INLINE_IGNORE_PATTERN.search(line)
        if not match:
            continue
        rules = match.group(1)
        if rules is None:
            rule_map[idx] = {"*"}
            continue
        parsed = {token.strip().upper() for token in rules.split(",") if token.strip()}
        rule_map[idx] = parsed if parsed else {"*"}
    return rule_map
