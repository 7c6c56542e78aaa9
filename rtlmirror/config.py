from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
try:
    import tomllib
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib

from rtlmirror.engine import DEFAULT_MAX_PASSES
from rtlmirror.models import Severity
from rtlmirror.rules import RULE_IDS


DEFAULT_CONFIG_NAME = "rtlmirror.toml"
DEFAULT_EXCLUDES = [".git", ".venv", "venv", "build", "dist", "__pycache__", "node_modules", ".next"]
DEFAULT_INCLUDE_EXTENSIONS = [
    ".html",
    ".htm",
    ".js",
    ".jsx",
    ".ts",
    ".tsx",
    ".vue",
    ".svelte",
    ".astro",
    ".mdx",
    ".php",
    ".erb",
    ".twig",
    ".jinja",
    ".j2",
    ".css",
    ".scss",
]
DEFAULT_INCLUDE_FILENAMES: list[str] = []
SEVERITIES = ("error", "warning")
REPORT_FORMATS = ("json", "sarif", "pretty")


@dataclass(slots=True)
class ScanConfig:
    exclude: list[str] = field(default_factory=lambda: DEFAULT_EXCLUDES.copy())
    include_extensions: list[str] = field(default_factory=lambda: DEFAULT_INCLUDE_EXTENSIONS.copy())
    include_filenames: list[str] = field(default_factory=lambda: DEFAULT_INCLUDE_FILENAMES.copy())
    max_file_size_kb: int = 1024
    skip_generated: bool = True
    enabled_rules: list[str] | None = None
    disabled_rules: list[str] = field(default_factory=list)
    inline_ignore: bool = True


@dataclass(slots=True)
class QualityGateConfig:
    fail_on: Severity | None = None
    max_findings: int | None = None
    max_files_with_findings: int | None = None
    max_errors: int | None = None
    max_warnings: int | None = None
    baseline_report: str | None = None
    only_new_findings: bool = False


@dataclass(slots=True)
class ReportConfig:
    output_format: str = "json"
    out: str | None = None


@dataclass(slots=True)
class FixConfig:
    max_passes: int = DEFAULT_MAX_PASSES


@dataclass(slots=True)
class Config:
    scan: ScanConfig = field(default_factory=ScanConfig)
    quality_gate: QualityGateConfig = field(default_factory=QualityGateConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    fix: FixConfig = field(default_factory=FixConfig)


def load_config(path: str | None) -> Config:
    if path is None:
        default = Path(DEFAULT_CONFIG_NAME)
        if not default.exists():
            return Config()
        path = str(default)

    cfg_path = Path(path)
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")

    with cfg_path.open("rb") as fh:
        payload = tomllib.load(fh)

    scan = payload.get("scan", {})
    quality_gate = payload.get("quality_gate", {})
    report = payload.get("report", {})
    fix = payload.get("fix", {})

    config = Config()
    config.scan.exclude = list(scan.get("exclude", config.scan.exclude))
    config.scan.include_extensions = list(scan.get("include_extensions", config.scan.include_extensions))
    config.scan.include_filenames = list(scan.get("include_filenames", config.scan.include_filenames))
    config.scan.max_file_size_kb = int(scan.get("max_file_size_kb", config.scan.max_file_size_kb))
    config.scan.skip_generated = bool(scan.get("skip_generated", config.scan.skip_generated))
    enabled_rules = scan.get("enabled_rules")
    config.scan.enabled_rules = [str(rule).upper() for rule in enabled_rules] if enabled_rules is not None else None
    config.scan.disabled_rules = [str(rule).upper() for rule in scan.get("disabled_rules", config.scan.disabled_rules)]
    config.scan.inline_ignore = bool(scan.get("inline_ignore", config.scan.inline_ignore))
    config.quality_gate.fail_on = quality_gate.get("fail_on")
    config.quality_gate.max_findings = quality_gate.get("max_findings")
    config.quality_gate.max_files_with_findings = quality_gate.get("max_files_with_findings")
    config.quality_gate.max_errors = quality_gate.get("max_errors")
    config.quality_gate.max_warnings = quality_gate.get("max_warnings")
    config.quality_gate.baseline_report = quality_gate.get("baseline_report")
    config.quality_gate.only_new_findings = bool(
        quality_gate.get("only_new_findings", config.quality_gate.only_new_findings)
    )
    config.report.output_format = report.get("format", config.report.output_format)
    config.report.out = report.get("out")
    config.fix.max_passes = int(fix.get("max_passes", config.fix.max_passes))
    return config


def validate_config(config: Config) -> list[str]:
    errors: list[str] = []
    if config.quality_gate.fail_on is not None and config.quality_gate.fail_on not in SEVERITIES:
        errors.append("fail_on must be one of: error, warning")

    numeric_gate_values: list[tuple[str, int | None]] = [
        ("max_findings", config.quality_gate.max_findings),
        ("max_files_with_findings", config.quality_gate.max_files_with_findings),
        ("max_errors", config.quality_gate.max_errors),
        ("max_warnings", config.quality_gate.max_warnings),
    ]
    for gate_name, value in numeric_gate_values:
        if value is not None and value < 0:
            errors.append(f"{gate_name} must be >= 0")

    if config.quality_gate.only_new_findings and not config.quality_gate.baseline_report:
        errors.append("only_new_findings requires baseline_report")
    if config.scan.enabled_rules is not None and len(config.scan.enabled_rules) == 0:
        errors.append("enabled_rules must be non-empty when set")
    unknown_rules = sorted({*(config.scan.enabled_rules or []), *config.scan.disabled_rules} - set(RULE_IDS))
    if unknown_rules:
        errors.append(f"unknown rule ids: {', '.join(unknown_rules)}")
    if config.report.output_format not in REPORT_FORMATS:
        errors.append("report format must be one of: json, sarif, pretty")
    if config.fix.max_passes < 1:
        errors.append("max_passes must be >= 1")

    return errors
