"""
Syntax tree node definitions for greyout.

The engine consumes a concrete syntax tree produced by a front-end. Every
node carries a kind from a closed enumeration, its start and end locations,
an ordered tuple of children, and the role it plays inside its parent
("condition", "statement", "operator", ...). Tokens are leaf nodes of kind
TOKEN, so punctuation and keywords have exact positions that rules can point
spans at.

Nodes are immutable. The parent link is a weak reference filled in once by
SyntaxTree when the tree is assembled; the engine only reads it.

Example:
    tree = SyntaxTree(root, source)
    for node in tree.walk():
        if node.kind is NodeKind.IF_STATEMENT:
            condition = node.child("condition")
"""

from __future__ import annotations

import bisect
import weakref
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Optional

from greyout.utils.errors import SourceLocation


class NodeKind(Enum):
    """Closed set of syntax node kinds."""

    # Tokens and leaves
    TOKEN = auto()
    IDENTIFIER_NAME = auto()
    LITERAL = auto()
    TYPE = auto()

    # Declarations
    COMPILATION_UNIT = auto()
    CLASS_DECLARATION = auto()
    BASE_LIST = auto()
    METHOD_DECLARATION = auto()
    CONSTRUCTOR_DECLARATION = auto()
    CONSTRUCTOR_INITIALIZER = auto()
    PARAMETER_LIST = auto()
    PARAMETER = auto()

    # Statements
    BLOCK = auto()
    EMPTY_STATEMENT = auto()
    EXPRESSION_STATEMENT = auto()
    LOCAL_DECLARATION = auto()
    VARIABLE_DECLARATION = auto()
    VARIABLE_DECLARATOR = auto()
    LABELED_STATEMENT = auto()
    IF_STATEMENT = auto()
    ELSE_CLAUSE = auto()
    WHILE_STATEMENT = auto()
    FOR_STATEMENT = auto()
    FOREACH_STATEMENT = auto()
    USING_STATEMENT = auto()
    LOCK_STATEMENT = auto()
    FIXED_STATEMENT = auto()
    SWITCH_STATEMENT = auto()
    SWITCH_SECTION = auto()
    CASE_LABEL = auto()
    DEFAULT_LABEL = auto()
    RETURN_STATEMENT = auto()
    THROW_STATEMENT = auto()
    BREAK_STATEMENT = auto()
    CONTINUE_STATEMENT = auto()
    YIELD_RETURN_STATEMENT = auto()
    TRY_STATEMENT = auto()
    CATCH_CLAUSE = auto()
    CATCH_DECLARATION = auto()
    CATCH_FILTER = auto()
    FINALLY_CLAUSE = auto()

    # Binary expressions
    ADD_EXPRESSION = auto()
    SUBTRACT_EXPRESSION = auto()
    MULTIPLY_EXPRESSION = auto()
    DIVIDE_EXPRESSION = auto()
    MODULO_EXPRESSION = auto()
    EQUALS_EXPRESSION = auto()
    NOT_EQUALS_EXPRESSION = auto()
    LESS_THAN_EXPRESSION = auto()
    LESS_THAN_OR_EQUAL_EXPRESSION = auto()
    GREATER_THAN_EXPRESSION = auto()
    GREATER_THAN_OR_EQUAL_EXPRESSION = auto()
    LOGICAL_AND_EXPRESSION = auto()
    LOGICAL_OR_EXPRESSION = auto()
    COALESCE_EXPRESSION = auto()

    # Unary expressions
    UNARY_PLUS_EXPRESSION = auto()
    UNARY_MINUS_EXPRESSION = auto()
    LOGICAL_NOT_EXPRESSION = auto()

    # Assignments
    SIMPLE_ASSIGNMENT = auto()
    ADD_ASSIGNMENT = auto()
    SUBTRACT_ASSIGNMENT = auto()
    MULTIPLY_ASSIGNMENT = auto()
    DIVIDE_ASSIGNMENT = auto()

    # Other expressions
    PARENTHESIZED_EXPRESSION = auto()
    CONDITIONAL_EXPRESSION = auto()
    MEMBER_ACCESS = auto()
    INVOCATION_EXPRESSION = auto()
    ARGUMENT_LIST = auto()
    LAMBDA_EXPRESSION = auto()
    AWAIT_EXPRESSION = auto()
    ANONYMOUS_OBJECT_CREATION = auto()
    ANONYMOUS_MEMBER_DECLARATOR = auto()

    # Query expressions
    QUERY_EXPRESSION = auto()
    FROM_CLAUSE = auto()
    WHERE_CLAUSE = auto()
    SELECT_CLAUSE = auto()


LEAF_KINDS = frozenset({NodeKind.TOKEN, NodeKind.IDENTIFIER_NAME, NodeKind.LITERAL, NodeKind.TYPE})

BINARY_KINDS = frozenset({
    NodeKind.ADD_EXPRESSION,
    NodeKind.SUBTRACT_EXPRESSION,
    NodeKind.MULTIPLY_EXPRESSION,
    NodeKind.DIVIDE_EXPRESSION,
    NodeKind.MODULO_EXPRESSION,
    NodeKind.EQUALS_EXPRESSION,
    NodeKind.NOT_EQUALS_EXPRESSION,
    NodeKind.LESS_THAN_EXPRESSION,
    NodeKind.LESS_THAN_OR_EQUAL_EXPRESSION,
    NodeKind.GREATER_THAN_EXPRESSION,
    NodeKind.GREATER_THAN_OR_EQUAL_EXPRESSION,
    NodeKind.LOGICAL_AND_EXPRESSION,
    NodeKind.LOGICAL_OR_EXPRESSION,
    NodeKind.COALESCE_EXPRESSION,
})

UNARY_KINDS = frozenset({
    NodeKind.UNARY_PLUS_EXPRESSION,
    NodeKind.UNARY_MINUS_EXPRESSION,
    NodeKind.LOGICAL_NOT_EXPRESSION,
})

ASSIGNMENT_KINDS = frozenset({
    NodeKind.SIMPLE_ASSIGNMENT,
    NodeKind.ADD_ASSIGNMENT,
    NodeKind.SUBTRACT_ASSIGNMENT,
    NodeKind.MULTIPLY_ASSIGNMENT,
    NodeKind.DIVIDE_ASSIGNMENT,
})

# Statements that own a single embedded statement under the "statement" role
EMBEDDING_KINDS = frozenset({
    NodeKind.IF_STATEMENT,
    NodeKind.ELSE_CLAUSE,
    NodeKind.WHILE_STATEMENT,
    NodeKind.FOR_STATEMENT,
    NodeKind.FOREACH_STATEMENT,
    NodeKind.USING_STATEMENT,
    NodeKind.LOCK_STATEMENT,
    NodeKind.FIXED_STATEMENT,
    NodeKind.LABELED_STATEMENT,
})


# -----------------------------------------------------------------------------
# Nodes
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True, weakref_slot=True, eq=False, repr=False)
class Node:
    """
    An immutable syntax node.

    Attributes:
        kind: The node kind
        location: Location of the first character of the node
        end_location: Location one past the last character of the node
        children: Ordered child nodes, tokens included
        role: The role this node plays in its parent, if any
        text: Source text for leaves (tokens, identifiers, literals, types)
        value: Parsed value for literals
    """

    kind: NodeKind
    location: SourceLocation
    end_location: SourceLocation
    children: tuple[Node, ...] = ()
    role: Optional[str] = None
    text: Optional[str] = None
    value: Any = None
    _parent: Optional[weakref.ref] = None

    @property
    def start(self) -> int:
        return self.location.offset

    @property
    def end(self) -> int:
        return self.end_location.offset

    @property
    def parent(self) -> Optional[Node]:
        """The parent node, or None for a root or an unlinked node."""
        if self._parent is None:
            return None
        return self._parent()

    @property
    def is_token(self) -> bool:
        return self.kind is NodeKind.TOKEN

    def child(self, role: str) -> Optional[Node]:
        """Return the first child playing the given role."""
        for node in self.children:
            if node.role == role:
                return node
        return None

    def children_with(self, role: str) -> tuple[Node, ...]:
        """Return all children playing the given role, in source order."""
        return tuple(node for node in self.children if node.role == role)

    def has_modifier(self, text: str) -> bool:
        """Check whether a modifier token with the given text is present."""
        return any(node.role == "modifier" and node.text == text for node in self.children)

    def modifier(self, text: str) -> Optional[Node]:
        for node in self.children:
            if node.role == "modifier" and node.text == text:
                return node
        return None

    def ancestors(self) -> Iterator[Node]:
        """Iterate parents from the closest one outwards."""
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def __repr__(self) -> str:
        label = f" {self.text!r}" if self.text is not None else ""
        return f"Node({self.kind.name}{label} @{self.start}:{self.end})"


def preorder(root: Node) -> Iterator[Node]:
    """Iterate a subtree in pre-order without recursion."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


# -----------------------------------------------------------------------------
# Trees
# -----------------------------------------------------------------------------


class SyntaxTree:
    """
    A parsed declaration-level tree together with its source text.

    Construction links every node to its parent through a weak reference.
    The tree keeps the root alive for as long as it exists.

    Example:
        tree = SyntaxTree(root, source, filename="Widget.cs")
        print(tree.location(42))
    """

    def __init__(self, root: Node, source: str, filename: Optional[str] = None) -> None:
        self.root = root
        self.source = source
        self.filename = filename
        self._line_starts = [0] + [i + 1 for i, ch in enumerate(source) if ch == "\n"]
        self._link_parents()

    def _link_parents(self) -> None:
        for node in preorder(self.root):
            ref = weakref.ref(node)
            for child in node.children:
                object.__setattr__(child, "_parent", ref)

    def walk(self) -> Iterator[Node]:
        """Iterate every node of the tree in pre-order."""
        return preorder(self.root)

    def location(self, offset: int) -> SourceLocation:
        """
        Convert a character offset into a line/column location.

        Args:
            offset: 0-indexed character offset

        Returns:
            The 1-indexed location of the offset
        """
        line = bisect.bisect_right(self._line_starts, offset) - 1
        return SourceLocation(
            line=line + 1,
            column=offset - self._line_starts[line] + 1,
            offset=offset,
            filename=self.filename,
        )

    def text(self, start: int, end: int) -> str:
        return self.source[start:end]
