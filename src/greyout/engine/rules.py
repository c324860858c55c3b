"""
Rule abstraction for the redundancy engine.

A rule is a value object: a code and name, the closed set of node kinds it
subscribes to, and a pure decision function. The dispatcher calls the
decision function once for every node of a subscribed kind. The function
returns one tuple of spans per finding and may look at the node, its direct
children and its parent, but must never walk the tree itself.

Example:
    def check(node, facts):
        if facts.constant_value(node.child("condition")) == Constant(False):
            yield (span_of(node),)

    DEAD_LOOP = Rule(
        code="R0103",
        name="constant-false-while",
        category=RuleCategory.CONTROL_FLOW,
        message="loop body never executes",
        kinds=frozenset({NodeKind.WHILE_STATEMENT}),
        check=check,
    )
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from greyout.engine.spans import Span, SpanClass
from greyout.semantics.facts import FactsHandle
from greyout.syntax.nodes import Node, NodeKind
from greyout.utils.errors import InvalidSpan


class RuleLevel(Enum):
    """
    Reporting level for rules.

    ALLOW: Rule is disabled and never dispatched
    HINT: Findings are shown greyed out
    WARN: Findings are shown as warnings
    """

    ALLOW = "allow"
    HINT = "hint"
    WARN = "warn"


class RuleCategory(Enum):
    """
    Categories of rules for organization and filtering.
    """

    CONTROL_FLOW = "control-flow"  # Constant conditions, dead code, switches, catch clauses
    OPERATORS = "operators"        # Identity arithmetic, tautologies, coalescing, ternaries
    DESIGN = "design"              # Unused parameters, needless modifiers and bases
    QUERIES = "queries"            # No-op query combinators
    FRAMEWORK = "framework"        # Redundant framework calls
    SYNTAX = "syntax"              # Superfluous braces and statements


Check = Callable[[Node, FactsHandle], Iterable[Sequence[Span]]]


@dataclass(frozen=True)
class Finding:
    """
    One rule's verdict on one node.

    Attributes:
        rule: The rule that produced the finding
        node: The node the rule was invoked for
        spans: Classified spans in source order

    Raises:
        InvalidSpan: If there are no spans, or a span starts before the
            previous one ends
    """

    rule: Rule
    node: Node
    spans: tuple[Span, ...]

    def __post_init__(self) -> None:
        if not self.spans:
            raise InvalidSpan(f"{self.rule.code} produced a finding without spans", self.node.location)
        for previous, current in zip(self.spans, self.spans[1:]):
            if current.start < previous.end:
                raise InvalidSpan(
                    f"{self.rule.code} produced out-of-order spans {previous} and {current}",
                    self.node.location,
                )

    @property
    def start(self) -> int:
        return self.spans[0].start

    @property
    def end(self) -> int:
        return self.spans[-1].end

    @property
    def classifications(self) -> frozenset[SpanClass]:
        return frozenset(span.classification for span in self.spans)

    def __str__(self) -> str:
        ranges = ", ".join(str(span) for span in self.spans)
        return f"[{self.rule.code}] {self.node.location}: {ranges}"


@dataclass(frozen=True)
class Rule:
    """
    Definition of a single redundancy rule.

    Attributes:
        code: Unique rule identifier (e.g., "R0201")
        name: Human-readable rule name (e.g., "add-or-subtract-zero")
        category: The category this rule belongs to
        message: Message shown for a finding
        kinds: Node kinds the rule subscribes to
        check: Decision function yielding one span tuple per finding
        level: Default reporting level
        suggestion: Optional hint on how to fix the code
    """

    code: str
    name: str
    category: RuleCategory
    message: str
    kinds: frozenset[NodeKind]
    check: Check = field(repr=False, compare=False)
    level: RuleLevel = RuleLevel.HINT
    suggestion: Optional[str] = None

    def evaluate(self, node: Node, facts: FactsHandle) -> list[Finding]:
        """
        Run the decision function for one node.

        Args:
            node: A node whose kind is in ``kinds``
            facts: The per-pass facts handle

        Returns:
            The findings for the node, possibly empty
        """
        return [Finding(self, node, tuple(spans)) for spans in self.check(node, facts)]

    def __str__(self) -> str:
        return f"{self.code} ({self.name})"
