"""
Engine configuration: rule levels and in-source directives.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from greyout.engine.rules import Rule, RuleCategory, RuleLevel


DIRECTIVE_PATTERN = re.compile(r"//\s*greyout:\s*(allow|hint|warn)\(([a-zA-Z0-9_-]+)\)")


def _catalog() -> tuple[Rule, ...]:
    from greyout.rules import CATALOG

    return CATALOG


@dataclass
class EngineConfiguration:
    """
    Configuration for the engine specifying rule levels.

    Allows customizing which rules run and how their findings are reported.
    With ``strict`` set, failures the engine would normally isolate and log
    (invalid spans, faulty rules) are raised instead, which is what tests want.

    Example:
        config = EngineConfiguration()
        config.set_level("add-or-subtract-zero", RuleLevel.ALLOW)
        config.set_level_by_category(RuleCategory.SYNTAX, RuleLevel.WARN)
    """

    rule_levels: dict[str, RuleLevel] = field(default_factory=dict)
    strict: bool = False

    def get_level(self, rule: Rule) -> RuleLevel:
        """Get the effective level for a rule."""
        # Check by code first, then by name
        if rule.code in self.rule_levels:
            return self.rule_levels[rule.code]
        if rule.name in self.rule_levels:
            return self.rule_levels[rule.name]
        return rule.level

    def is_enabled(self, rule: Rule) -> bool:
        return self.get_level(rule) is not RuleLevel.ALLOW

    def set_level(self, rule_id: str, level: RuleLevel) -> None:
        """Set the level for a rule by code or name."""
        self.rule_levels[rule_id] = level

    def set_level_by_category(self, category: RuleCategory, level: RuleLevel) -> None:
        """Set the level for all rules in a category."""
        for rule in _catalog():
            if rule.category == category:
                self.rule_levels[rule.code] = level

    def allow(self, rule_id: str) -> None:
        """Disable a rule."""
        self.set_level(rule_id, RuleLevel.ALLOW)

    def hint(self, rule_id: str) -> None:
        self.set_level(rule_id, RuleLevel.HINT)

    def warn(self, rule_id: str) -> None:
        self.set_level(rule_id, RuleLevel.WARN)

    def allow_all(self) -> None:
        """Disable all rules."""
        for rule in _catalog():
            self.rule_levels[rule.code] = RuleLevel.ALLOW

    @classmethod
    def parse_directive(cls, directive: str) -> tuple[str, str, RuleLevel]:
        """
        Parse a configuration directive from source code.

        Formats:
            // greyout: allow(rule-name)
            // greyout: hint(R0201)
            // greyout: warn(rule-name)

        Returns:
            Tuple of (action, rule_id, level)

        Raises:
            ValueError: If directive format is invalid
        """
        match = DIRECTIVE_PATTERN.fullmatch(directive.strip())
        if not match:
            raise ValueError(f"Invalid greyout directive: {directive}")

        action = match.group(1)
        return action, match.group(2), RuleLevel(action)

    @classmethod
    def from_directives(cls, lines: Iterable[str], strict: bool = False) -> EngineConfiguration:
        """
        Build a configuration from directive lines.

        Lines that do not look like greyout directives are skipped; lines that
        do but are malformed raise ValueError.
        """
        config = cls(strict=strict)
        for line in lines:
            if "greyout:" not in line:
                continue
            _, rule_id, level = cls.parse_directive(line)
            config.set_level(rule_id, level)
        return config
