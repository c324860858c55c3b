"""
Query combinator rules.

Method-syntax calls such as ``.Select(x => x)`` or ``.Where(_ => true)`` that
return their receiver's elements unchanged, and query-syntax ``where true``
clauses. The removable span of a call runs from the member-access dot through
the closing parenthesis, leaving the receiver.
"""

from __future__ import annotations

from collections.abc import Iterator

from greyout.engine.rules import Rule, RuleCategory
from greyout.engine.spans import Span, span_of
from greyout.rules.common import call_tail, lambda_parts, method_call
from greyout.semantics.facts import FactsHandle
from greyout.syntax.nodes import Node, NodeKind


SpanGroups = Iterator[tuple[Span, ...]]


def _predicate(node: Node, names: frozenset[str]):
    """
    Match a one-lambda combinator call.

    Returns:
        (call parts, lambda parameter names, lambda body), or None
    """
    call = method_call(node, names)
    if call is None or not call[2]:
        return None
    parts = lambda_parts(call[2][0])
    if parts is None:
        return None
    return call, parts[0], parts[1]


def _constant_body(node: Node, facts: FactsHandle, names: frozenset[str]):
    match = _predicate(node, names)
    if match is None:
        return None, None
    call, _, body = match
    return call, facts.constant_value(body)


# =============================================================================
# Projections and Filters
# =============================================================================


def _check_identity_projection(node: Node, facts: FactsHandle) -> SpanGroups:
    match = _predicate(node, frozenset({"Select"}))
    if match is None:
        return
    call, names, body = match
    if names and body.kind is NodeKind.IDENTIFIER_NAME and body.text == names[0]:
        yield (call_tail(call),)


def _check_constant_true_filter(node: Node, facts: FactsHandle) -> SpanGroups:
    if node.kind is NodeKind.WHERE_CLAUSE:
        constant = facts.constant_value(node.child("condition"))
        if constant is not None and constant.is_true:
            yield (span_of(node),)
        return

    call, constant = _constant_body(node, facts, frozenset({"Where"}))
    if constant is not None and constant.is_true:
        yield (call_tail(call),)


# The predicate value that makes each combinator pass everything through
_PASS_THROUGH = {
    "SkipWhile": False,
    "TakeWhile": True,
}


def _check_constant_while_predicate(node: Node, facts: FactsHandle) -> SpanGroups:
    call, constant = _constant_body(node, facts, frozenset(_PASS_THROUGH))
    if constant is None:
        return
    name = call[0].child("name").text
    if constant.value is _PASS_THROUGH[name]:
        yield (call_tail(call),)


IDENTITY_PROJECTION = Rule(
    code="R0401",
    name="identity-projection",
    category=RuleCategory.QUERIES,
    message="projection returns its input unchanged",
    kinds=frozenset({NodeKind.INVOCATION_EXPRESSION}),
    check=_check_identity_projection,
)

CONSTANT_TRUE_FILTER = Rule(
    code="R0402",
    name="constant-true-filter",
    category=RuleCategory.QUERIES,
    message="filter keeps every element",
    kinds=frozenset({NodeKind.INVOCATION_EXPRESSION, NodeKind.WHERE_CLAUSE}),
    check=_check_constant_true_filter,
)

CONSTANT_WHILE_PREDICATE = Rule(
    code="R0403",
    name="constant-while-predicate",
    category=RuleCategory.QUERIES,
    message="predicate never stops or skips anything",
    kinds=frozenset({NodeKind.INVOCATION_EXPRESSION}),
    check=_check_constant_while_predicate,
)


# =============================================================================
# Ordering
# =============================================================================

_PRIMARY_ORDERINGS = frozenset({"OrderBy", "OrderByDescending"})
_SECONDARY_ORDERINGS = frozenset({"ThenBy", "ThenByDescending"})


def _followed_by_secondary_ordering(node: Node) -> bool:
    parent = node.parent
    if parent is None or parent.kind is not NodeKind.MEMBER_ACCESS or node.role != "expression":
        return False
    return parent.child("name").text in _SECONDARY_ORDERINGS


def _check_constant_ordering_key(node: Node, facts: FactsHandle) -> SpanGroups:
    call, constant = _constant_body(node, facts, _PRIMARY_ORDERINGS | _SECONDARY_ORDERINGS)
    if constant is None:
        return
    name = call[0].child("name").text
    # ThenBy needs a preceding OrderBy, so a constant primary key must stay
    if name in _PRIMARY_ORDERINGS and _followed_by_secondary_ordering(node):
        return
    yield (call_tail(call),)


CONSTANT_ORDERING_KEY = Rule(
    code="R0404",
    name="constant-ordering-key",
    category=RuleCategory.QUERIES,
    message="ordering by a constant key keeps the original order",
    kinds=frozenset({NodeKind.INVOCATION_EXPRESSION}),
    check=_check_constant_ordering_key,
)


RULES = (
    IDENTITY_PROJECTION,
    CONSTANT_TRUE_FILTER,
    CONSTANT_WHILE_PREDICATE,
    CONSTANT_ORDERING_KEY,
)
