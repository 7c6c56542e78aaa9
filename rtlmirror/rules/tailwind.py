from __future__ import annotations

from dataclasses import dataclass
import re

from rtlmirror.models import Severity


SPACING_SIZE = r"(?:[0-3]\.5|\d+|auto|px|full|\[[^\]\s]+\])"
POSITION_SIZE = r"(?:[0-3]\.5|1/2|1/3|2/3|1/4|3/4|\d+|auto|px|full|\[[^\]\s]+\])"
VARIANT = r"(?:-(?:\[[^\]\s]+\]|\w+(?:-\w+)*))?"
TOKEN_START = r"(?<![\w-])"
TOKEN_END = r"(?![\w-])"
# ml-4.5 and pl-1/2 must not be reported as ml-4 and pl-1.
SIZE_END = r"(?![\w./-])"


@dataclass(frozen=True, slots=True)
class Rule:
    rule_id: str
    title: str
    pattern: re.Pattern[str]
    physical: str
    logical: str
    severity: Severity

    def transform(self, matched: str) -> str:
        # Only the direction-bearing prefix changes; size and variant suffixes stay verbatim.
        return matched.replace(self.physical, self.logical, 1)


def _rule(
    rule_id: str,
    title: str,
    physical: str,
    logical: str,
    severity: Severity,
    tail: str = "",
    negative: bool = False,
) -> Rule:
    sign = "-?" if negative else ""
    end = SIZE_END if tail in (SPACING_SIZE, POSITION_SIZE) else TOKEN_END
    pattern = re.compile(f"{TOKEN_START}{sign}{re.escape(physical)}{tail}{end}")
    return Rule(
        rule_id=rule_id,
        title=title,
        pattern=pattern,
        physical=physical,
        logical=logical,
        severity=severity,
    )


RULES: tuple[Rule, ...] = (
    _rule("RTL001", "Physical left margin", "ml-", "ms-", "error", SPACING_SIZE, negative=True),
    _rule("RTL002", "Physical right margin", "mr-", "me-", "error", SPACING_SIZE, negative=True),
    _rule("RTL003", "Physical left padding", "pl-", "ps-", "error", SPACING_SIZE),
    _rule("RTL004", "Physical right padding", "pr-", "pe-", "error", SPACING_SIZE),
    _rule("RTL005", "Physical text alignment", "text-left", "text-start", "warning"),
    _rule("RTL006", "Physical text alignment", "text-right", "text-end", "warning"),
    _rule("RTL007", "Physical border radius", "rounded-l", "rounded-s", "warning", VARIANT),
    _rule("RTL008", "Physical border radius", "rounded-r", "rounded-e", "warning", VARIANT),
    _rule("RTL009", "Physical inset", "left-", "start-", "warning", POSITION_SIZE, negative=True),
    _rule("RTL010", "Physical inset", "right-", "end-", "warning", POSITION_SIZE, negative=True),
    _rule("RTL011", "Physical border side", "border-l", "border-s", "warning", VARIANT),
    _rule("RTL012", "Physical border side", "border-r", "border-e", "warning", VARIANT),
    _rule("RTL013", "Physical scroll margin", "scroll-ml-", "scroll-ms-", "warning", SPACING_SIZE, negative=True),
    _rule("RTL014", "Physical scroll margin", "scroll-mr-", "scroll-me-", "warning", SPACING_SIZE, negative=True),
    _rule("RTL015", "Physical scroll padding", "scroll-pl-", "scroll-ps-", "warning", SPACING_SIZE),
    _rule("RTL016", "Physical scroll padding", "scroll-pr-", "scroll-pe-", "warning", SPACING_SIZE),
)
