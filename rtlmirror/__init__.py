from rtlmirror.engine import apply_all_fixes, apply_fix, fix_until_clean, issue_lines, scan, stats
from rtlmirror.models import Finding, ScanStats
from rtlmirror.rules import RULES, Rule

__version__ = "0.1.0"

__all__ = [
    "Finding",
    "RULES",
    "Rule",
    "ScanStats",
    "apply_all_fixes",
    "apply_fix",
    "fix_until_clean",
    "issue_lines",
    "scan",
    "stats",
]
