from __future__ import annotations

from collections.abc import Iterable

from rtlmirror.rules.tailwind import RULES, Rule

RULE_IDS: tuple[str, ...] = tuple(rule.rule_id for rule in RULES)


def select_rules(
    enabled_rules: Iterable[str] | None = None,
    disabled_rules: Iterable[str] | None = None,
) -> tuple[Rule, ...]:
    """Filter the rule table by id, keeping declaration order."""
    enabled = {rule_id.upper() for rule_id in enabled_rules} if enabled_rules is not None else None
    disabled = {rule_id.upper() for rule_id in disabled_rules or ()}
    return tuple(
        rule
        for rule in RULES
        if rule.rule_id not in disabled and (enabled is None or rule.rule_id in enabled)
    )


__all__ = ["RULES", "RULE_IDS", "Rule", "select_rules"]
