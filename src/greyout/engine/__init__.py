"""
The greyout redundancy engine.

Spans, rules, configuration, dispatch and aggregation, and the mechanical
removal of unnecessary spans.
"""

from greyout.engine.config import EngineConfiguration
from greyout.engine.dispatch import (
    DispatchTable,
    EngineState,
    Redundancy,
    RedundancyEngine,
    aggregate,
    analyze_tree,
    analyze_trees,
)
from greyout.engine.edits import apply_removals, removable_spans
from greyout.engine.rules import Finding, Rule, RuleCategory, RuleLevel
from greyout.engine.spans import Span, SpanClass, between, merge, overlaps, span_of, touches

__all__ = [
    # Spans
    "Span",
    "SpanClass",
    "span_of",
    "between",
    "merge",
    "overlaps",
    "touches",
    # Rules
    "Rule",
    "RuleLevel",
    "RuleCategory",
    "Finding",
    "EngineConfiguration",
    # Engine
    "DispatchTable",
    "EngineState",
    "Redundancy",
    "RedundancyEngine",
    "aggregate",
    "analyze_tree",
    "analyze_trees",
    # Edits
    "removable_spans",
    "apply_removals",
]
