"""
greyout - Redundancy detection for C#-like syntax trees.

greyout walks a syntax tree once, asks a catalog of small rules whether each
node contains code that can be removed without changing behavior, and
returns a minimal, ordered set of classified source spans. Editors use the
spans to grey out unnecessary code.
"""

from greyout.engine import (
    EngineConfiguration,
    Redundancy,
    RedundancyEngine,
    RuleCategory,
    RuleLevel,
    Span,
    SpanClass,
    analyze_tree,
    analyze_trees,
    apply_removals,
)
from greyout.semantics import FactsHandle, SemanticFacts, SyntacticFacts
from greyout.syntax import Node, NodeKind, SyntaxTree

__version__ = "0.1.0"
__all__ = [
    "analyze_tree",
    "analyze_trees",
    "apply_removals",
    "RedundancyEngine",
    "Redundancy",
    "EngineConfiguration",
    "RuleLevel",
    "RuleCategory",
    "Span",
    "SpanClass",
    "SemanticFacts",
    "FactsHandle",
    "SyntacticFacts",
    "Node",
    "NodeKind",
    "SyntaxTree",
]
