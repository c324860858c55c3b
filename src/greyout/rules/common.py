"""
Shared predicates and span builders for catalog rules.

Everything here looks at a node and its direct children or parent only.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Optional

from greyout.engine.spans import Span, SpanClass, between, span_of
from greyout.semantics.facts import Constant, TypeId
from greyout.syntax.nodes import EMBEDDING_KINDS, Node, NodeKind


TERMINATOR_KINDS = frozenset({
    NodeKind.RETURN_STATEMENT,
    NodeKind.THROW_STATEMENT,
    NodeKind.BREAK_STATEMENT,
    NodeKind.CONTINUE_STATEMENT,
})

# Operands that can be dropped without losing a side effect
SIMPLE_OPERAND_KINDS = frozenset({NodeKind.IDENTIFIER_NAME, NodeKind.LITERAL})


# -----------------------------------------------------------------------------
# Facts
# -----------------------------------------------------------------------------


def is_integer(constant: Optional[Constant], number: int) -> bool:
    return constant is not None and constant.is_integer(number)


def is_numeric(type_id: Optional[TypeId]) -> bool:
    return type_id is not None and type_id.is_numeric


def is_boolean(type_id: Optional[TypeId]) -> bool:
    return type_id is not None and type_id.is_boolean


# -----------------------------------------------------------------------------
# Statements
# -----------------------------------------------------------------------------


def statements_of(node: Node) -> tuple[Node, ...]:
    return node.children_with("statement")


def is_empty_statement(statement: Node) -> bool:
    """An empty statement, or a block holding nothing but empty statements."""
    if statement.kind is NodeKind.EMPTY_STATEMENT:
        return True
    if statement.kind is NodeKind.BLOCK:
        return all(inner.kind is NodeKind.EMPTY_STATEMENT for inner in statements_of(statement))
    return False


def first_effective_statement(statements: Sequence[Node]) -> Optional[Node]:
    for statement in statements:
        if not is_empty_statement(statement):
            return statement
    return None


def declares_locals(block: Node) -> bool:
    """Check whether a block directly declares locals or labels."""
    return any(
        statement.kind in (NodeKind.LOCAL_DECLARATION, NodeKind.LABELED_STATEMENT)
        for statement in statements_of(block)
    )


def is_embedded(statement: Node) -> bool:
    """Check whether a statement is the body of another statement rather than a block member."""
    parent = statement.parent
    return parent is not None and parent.kind in EMBEDDING_KINDS and statement.role == "statement"


def statement_removal(statement: Node) -> Span:
    """
    The span that deletes a statement without breaking its surroundings.

    An else body takes its whole else clause with it. Any other embedded
    statement cannot vanish without leaving its owner bodiless, so it is only
    flagged.
    """
    parent = statement.parent
    if parent is not None and parent.kind is NodeKind.ELSE_CLAUSE:
        return span_of(parent)
    if is_embedded(statement):
        return span_of(statement, SpanClass.FLAGGED)
    return span_of(statement)


def unwrap_block(head: Node, block: Node) -> tuple[Span, Span]:
    """Spans removing everything from head through ``{`` and the closing ``}``."""
    return between(head, block.child("open_brace")), span_of(block.child("close_brace"))


# -----------------------------------------------------------------------------
# Calls and lambdas
# -----------------------------------------------------------------------------


def method_call(node: Node, names: frozenset[str]) -> Optional[tuple[Node, Node, tuple[Node, ...]]]:
    """
    Match ``receiver.Name(args)`` for one of the given names.

    Returns:
        (member access, argument list, arguments), or None if the node is not
        such a call
    """
    callee = node.child("expression")
    if callee is None or callee.kind is not NodeKind.MEMBER_ACCESS:
        return None
    name = callee.child("name")
    if name is None or name.text not in names:
        return None
    argument_list = node.child("argument_list")
    if argument_list is None:
        return None
    return callee, argument_list, argument_list.children_with("argument")


def call_tail(call: tuple[Node, Node, tuple[Node, ...]]) -> Span:
    """Span from the member-access dot through the closing parenthesis."""
    callee, argument_list, _ = call
    return between(callee.child("operator"), argument_list.child("close_paren"))


def lambda_parts(node: Node) -> Optional[tuple[tuple[str, ...], Node]]:
    """Return (parameter names, body) for a lambda expression."""
    if node.kind is not NodeKind.LAMBDA_EXPRESSION:
        return None
    single = node.child("parameter")
    if single is not None:
        parameters: Sequence[Node] = (single,)
    else:
        parameter_list = node.child("parameter_list")
        parameters = parameter_list.children_with("parameter") if parameter_list is not None else ()
    names = tuple(p.child("identifier").text for p in parameters if p.child("identifier") is not None)
    body = node.child("body")
    if body is None:
        return None
    return names, body


# -----------------------------------------------------------------------------
# Separated lists
# -----------------------------------------------------------------------------


def element_removal(
    items: Sequence[Node],
    separators: Sequence[Node],
    index: int,
    removed: frozenset[int] = frozenset(),
) -> Span:
    """
    Span removing one element of a comma-separated list with one separator.

    The element takes the comma after it while some element after it stays.
    Otherwise it takes the comma before it, and the first element of the list
    goes alone. Spans built this way for every index in ``removed`` never
    overlap, and deleting all of them leaves a well-formed list.

    Args:
        items: The list elements
        separators: The commas between them
        index: Index of the element to remove
        removed: Indices of every element being removed together
    """
    item = items[index]
    kept_after = any(later not in removed for later in range(index + 1, len(items)))
    if kept_after:
        return between(item, separators[index])
    if index > 0:
        return between(separators[index - 1], item)
    return span_of(item)
