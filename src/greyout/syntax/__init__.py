"""
Syntax tree contract for greyout.

The engine consumes trees made of immutable, positioned nodes. The builders
module renders drafts into source text and a matching tree.
"""

from greyout.syntax.nodes import (
    ASSIGNMENT_KINDS,
    BINARY_KINDS,
    EMBEDDING_KINDS,
    LEAF_KINDS,
    UNARY_KINDS,
    Node,
    NodeKind,
    SyntaxTree,
    preorder,
)

__all__ = [
    # Nodes
    "Node",
    "NodeKind",
    "SyntaxTree",
    "preorder",
    # Kind sets
    "LEAF_KINDS",
    "BINARY_KINDS",
    "UNARY_KINDS",
    "ASSIGNMENT_KINDS",
    "EMBEDDING_KINDS",
]
