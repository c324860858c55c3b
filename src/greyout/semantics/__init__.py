"""
Semantic facts for greyout rules.
"""

from greyout.semantics.facts import (
    Constant,
    FactKind,
    FactsHandle,
    SemanticFacts,
    SpecialType,
    SymbolId,
    TypeId,
)
from greyout.semantics.syntactic import SyntacticFacts, type_named

__all__ = [
    # Fact values
    "Constant",
    "SpecialType",
    "TypeId",
    "SymbolId",
    "FactKind",
    # Oracles
    "SemanticFacts",
    "FactsHandle",
    "SyntacticFacts",
    "type_named",
]
