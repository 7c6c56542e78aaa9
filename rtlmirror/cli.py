from __future__ import annotations

import argparse
from collections import Counter
import sys

from rtlmirror import __version__
from rtlmirror.baseline import filter_new_issues, load_baseline_fingerprints
from rtlmirror.config import REPORT_FORMATS, SEVERITIES, Config, load_config, validate_config
from rtlmirror.models import ScanResult
from rtlmirror.quality_gate import evaluate_gate
from rtlmirror.reporters import render_report, write_report
from rtlmirror.rules import RULES
from rtlmirror.scanner import fix_path, scan_path

MANUAL = """\
Audit Tailwind-style class strings for left/right utilities that break RTL layouts.

Examples:
  rtlmirror scan src/ --pretty
  rtlmirror scan . --fail-on error --format sarif --out rtlmirror.sarif
  rtlmirror fix src/ --dry-run
  rtlmirror rules

Suppress a line with a comment containing 'rtlmirror:ignore' or 'rtlmirror:ignore RTL005'.
Run 'rtlmirror scan -h' for every option.
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rtlmirror",
        description=MANUAL,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan = subparsers.add_parser("scan", help="Report physical direction utilities.")
    _add_selection_arguments(scan)
    scan.add_argument("--format", choices=list(REPORT_FORMATS), help="Report output format.")
    scan.add_argument("--pretty", action="store_true", help="Shortcut for --format pretty.")
    scan.add_argument("--out", help="Write report to file. Defaults to stdout.")
    scan.add_argument("--fail-on", choices=list(SEVERITIES), help="Fail on findings at or above this severity.")
    scan.add_argument("--max-findings", type=int, help="Fail if finding count exceeds this number.")
    scan.add_argument("--max-files-with-findings", type=int, help="Fail if affected file count exceeds this number.")
    scan.add_argument("--max-errors", type=int, help="Maximum allowed error findings.")
    scan.add_argument("--max-warnings", type=int, help="Maximum allowed warning findings.")
    scan.add_argument("--baseline-report", help="Path to a previous rtlmirror JSON report for baseline comparison.")
    scan.add_argument(
        "--gate-new-only",
        action="store_true",
        help="Evaluate quality gates against new findings only when baseline report is set.",
    )

    fix = subparsers.add_parser("fix", help="Rewrite files with logical replacements.")
    _add_selection_arguments(fix)
    fix.add_argument("--dry-run", action="store_true", help="Report what would change without writing files.")
    fix.add_argument("--max-passes", type=int, help="Maximum rescan/fix passes per file.")

    subparsers.add_parser("rules", help="List the detection rules.")
    return parser


def _add_selection_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("path", nargs="?", default=".", help="File or directory to process.")
    parser.add_argument("--config", help="Path to rtlmirror TOML config.")
    parser.add_argument("--exclude", action="append", default=[], help="Extra exclude directory names.")
    parser.add_argument("--include-ext", action="append", default=[], help="Extension to include (repeatable).")
    parser.add_argument("--include-file", action="append", default=[], help="Filename to include (repeatable).")
    parser.add_argument("--enable-rule", action="append", default=[], help="Only allow specific rule IDs.")
    parser.add_argument("--disable-rule", action="append", default=[], help="Disable specific rule IDs.")
    parser.add_argument("--no-inline-ignore", action="store_true", help="Disable inline suppression comments.")
    parser.add_argument(
        "--include-generated",
        action="store_true",
        help="Include build output and vendored bundles (skipped by default).",
    )
    parser.add_argument("--max-file-size-kb", type=int, help="Skip files larger than this size in KB.")


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "scan":
        raise SystemExit(run_scan(args))
    if args.command == "fix":
        raise SystemExit(run_fix(args))
    if args.command == "rules":
        raise SystemExit(run_rules())


def run_scan(args: argparse.Namespace) -> int:
    merged = merge_cli_with_config(args, load_config(args.config))
    validation_errors = validate_config(merged)
    if validation_errors:
        for error in validation_errors:
            print(f"[gate] {error}", file=sys.stderr)
        return 2

    result = scan_path(
        args.path,
        excludes=merged.scan.exclude,
        include_extensions=merged.scan.include_extensions,
        include_filenames=merged.scan.include_filenames,
        max_file_size_kb=merged.scan.max_file_size_kb,
        skip_generated=merged.scan.skip_generated,
        enabled_rules=merged.scan.enabled_rules,
        disabled_rules=merged.scan.disabled_rules,
        inline_ignore=merged.scan.inline_ignore,
    )
    write_report(render_report(result, merged.report.output_format), merged.report.out)
    print_read_errors(result)
    print_summary(result)

    gate_result = result
    if merged.quality_gate.baseline_report:
        fingerprints = load_baseline_fingerprints(merged.quality_gate.baseline_report)
        new_result, baseline_matched = filter_new_issues(result, fingerprints)
        print(
            "[baseline] "
            f"total={len(result.issues)} baseline_matches={baseline_matched} new={len(new_result.issues)}",
            file=sys.stderr,
        )
        if merged.quality_gate.only_new_findings:
            gate_result = new_result

    passed, reasons = evaluate_gate(
        gate_result,
        fail_on=merged.quality_gate.fail_on,
        max_findings=merged.quality_gate.max_findings,
        max_files_with_findings=merged.quality_gate.max_files_with_findings,
        max_errors=merged.quality_gate.max_errors,
        max_warnings=merged.quality_gate.max_warnings,
    )
    if not passed:
        for reason in reasons:
            print(f"[gate] {reason}", file=sys.stderr)
        return 2
    return 0


def run_fix(args: argparse.Namespace) -> int:
    merged = merge_cli_with_config(args, load_config(args.config))
    validation_errors = validate_config(merged)
    if validation_errors:
        for error in validation_errors:
            print(f"[fix] {error}", file=sys.stderr)
        return 2

    outcome = fix_path(
        args.path,
        excludes=merged.scan.exclude,
        include_extensions=merged.scan.include_extensions,
        include_filenames=merged.scan.include_filenames,
        max_file_size_kb=merged.scan.max_file_size_kb,
        skip_generated=merged.scan.skip_generated,
        enabled_rules=merged.scan.enabled_rules,
        disabled_rules=merged.scan.disabled_rules,
        inline_ignore=merged.scan.inline_ignore,
        max_passes=merged.fix.max_passes,
        dry_run=args.dry_run,
    )
    verb = "would change" if args.dry_run else "changed"
    for file_path in outcome.files_changed:
        print(f"[fix] {verb} {file_path}", file=sys.stderr)
    print_read_errors(outcome.remaining)
    print(
        f"[fix] files_changed={len(outcome.files_changed)} fixes={outcome.fixes_applied} "
        f"remaining={len(outcome.remaining.issues)}",
        file=sys.stderr,
    )
    return 0 if not outcome.remaining.issues else 1


def run_rules() -> int:
    for rule in RULES:
        print(f"{rule.rule_id}  {rule.severity:<7}  {rule.physical:<11} -> {rule.logical:<11}  {rule.title}")
    return 0


def merge_cli_with_config(args: argparse.Namespace, config: Config) -> Config:
    merged = config
    if args.exclude:
        merged.scan.exclude = list(dict.fromkeys([*merged.scan.exclude, *args.exclude]))
    if args.include_ext:
        merged.scan.include_extensions = list(dict.fromkeys([*merged.scan.include_extensions, *args.include_ext]))
    if args.include_file:
        merged.scan.include_filenames = list(dict.fromkeys([*merged.scan.include_filenames, *args.include_file]))
    if args.enable_rule:
        merged.scan.enabled_rules = list(
            dict.fromkeys([*(merged.scan.enabled_rules or []), *(rule.upper() for rule in args.enable_rule)])
        )
    if args.disable_rule:
        merged.scan.disabled_rules = list(
            dict.fromkeys([*merged.scan.disabled_rules, *(rule.upper() for rule in args.disable_rule)])
        )
    if args.no_inline_ignore:
        merged.scan.inline_ignore = False
    if args.include_generated:
        merged.scan.skip_generated = False
    if args.max_file_size_kb is not None:
        merged.scan.max_file_size_kb = args.max_file_size_kb

    if args.command == "fix":
        if args.max_passes is not None:
            merged.fix.max_passes = args.max_passes
        return merged

    if args.format:
        merged.report.output_format = args.format
    if args.pretty:
        merged.report.output_format = "pretty"
    if args.out:
        merged.report.out = args.out
    if args.fail_on:
        merged.quality_gate.fail_on = args.fail_on
    if args.max_findings is not None:
        merged.quality_gate.max_findings = args.max_findings
    if args.max_files_with_findings is not None:
        merged.quality_gate.max_files_with_findings = args.max_files_with_findings
    if args.max_errors is not None:
        merged.quality_gate.max_errors = args.max_errors
    if args.max_warnings is not None:
        merged.quality_gate.max_warnings = args.max_warnings
    if args.baseline_report:
        merged.quality_gate.baseline_report = args.baseline_report
    if args.gate_new_only:
        merged.quality_gate.only_new_findings = True
    return merged


def print_summary(result: ScanResult) -> None:
    counts = Counter(issue.severity for issue in result.issues)
    print(
        f"[summary] files={result.files_scanned} findings={len(result.issues)} "
        f"errors={counts.get('error', 0)} warnings={counts.get('warning', 0)}",
        file=sys.stderr,
    )


def print_read_errors(result: ScanResult) -> None:
    for file_path, message in result.read_errors:
        print(f"[read] {file_path}: {message}", file=sys.stderr)


if __name__ == "__main__":
    main()
