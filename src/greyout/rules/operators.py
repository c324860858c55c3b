"""
Operator redundancy rules.

Identity arithmetic, tautological boolean comparisons, self-comparisons,
redundant null coalescing and conditional expressions whose outcome is known.
Every rule removes exactly the operator and the operand that does not
contribute, so the remaining expression is still well formed.
"""

from __future__ import annotations

from collections.abc import Iterator

from greyout.engine.rules import Rule, RuleCategory
from greyout.engine.spans import Span, SpanClass, between, span_of
from greyout.rules.common import (
    SIMPLE_OPERAND_KINDS,
    is_boolean,
    is_integer,
    is_numeric,
    statement_removal,
)
from greyout.semantics.facts import FactsHandle
from greyout.syntax.nodes import Node, NodeKind


SpanGroups = Iterator[tuple[Span, ...]]


def _drop_right(node: Node, classification: SpanClass = SpanClass.UNNECESSARY) -> tuple[Span, ...]:
    return (between(node.child("operator"), node.child("right"), classification),)


def _drop_left(node: Node) -> tuple[Span, ...]:
    return (between(node.child("left"), node.child("operator")),)


def _removal_class(operand: Node) -> SpanClass:
    """UNNECESSARY when the dropped operand cannot run code, FLAGGED otherwise."""
    if operand.kind in SIMPLE_OPERAND_KINDS:
        return SpanClass.UNNECESSARY
    return SpanClass.FLAGGED


# =============================================================================
# Identity Arithmetic
# =============================================================================


def _identity_operand(node: Node, facts: FactsHandle, identity: int, commutative: bool) -> SpanGroups:
    left, right = node.child("left"), node.child("right")
    if is_integer(facts.constant_value(right), identity) and is_numeric(facts.static_type(left)):
        yield _drop_right(node)
    elif (
        commutative
        and is_integer(facts.constant_value(left), identity)
        and is_numeric(facts.static_type(right))
    ):
        yield _drop_left(node)


def _check_add_or_subtract_zero(node: Node, facts: FactsHandle) -> SpanGroups:
    # 0 - x negates x, so only addition is commutative here
    yield from _identity_operand(node, facts, 0, node.kind is NodeKind.ADD_EXPRESSION)


def _check_multiply_by_one(node: Node, facts: FactsHandle) -> SpanGroups:
    yield from _identity_operand(node, facts, 1, True)


def _check_divide_by_one(node: Node, facts: FactsHandle) -> SpanGroups:
    yield from _identity_operand(node, facts, 1, False)


def _check_unary_zero(node: Node, facts: FactsHandle) -> SpanGroups:
    if is_integer(facts.constant_value(node.child("operand")), 0):
        yield (span_of(node.child("operator")),)


_ASSIGNMENT_IDENTITY = {
    NodeKind.ADD_ASSIGNMENT: 0,
    NodeKind.SUBTRACT_ASSIGNMENT: 0,
    NodeKind.MULTIPLY_ASSIGNMENT: 1,
    NodeKind.DIVIDE_ASSIGNMENT: 1,
}


def _check_identity_compound_assignment(node: Node, facts: FactsHandle) -> SpanGroups:
    """
    ``x += 0`` and friends.

    As a statement the whole statement is dead. As a value the assignment
    reduces to its target.
    """
    target = node.child("left")
    identity = _ASSIGNMENT_IDENTITY[node.kind]
    if not (is_integer(facts.constant_value(node.child("right")), identity) and is_numeric(facts.static_type(target))):
        return

    parent = node.parent
    if parent is not None and parent.kind is NodeKind.EXPRESSION_STATEMENT:
        span = statement_removal(parent)
        if target.kind is not NodeKind.IDENTIFIER_NAME:
            # Evaluating a member or indexer target may have effects
            span = span.with_class(SpanClass.FLAGGED)
        yield (span,)
    else:
        yield _drop_right(node)


ADD_OR_SUBTRACT_ZERO = Rule(
    code="R0201",
    name="add-or-subtract-zero",
    category=RuleCategory.OPERATORS,
    message="adding or subtracting zero has no effect",
    kinds=frozenset({NodeKind.ADD_EXPRESSION, NodeKind.SUBTRACT_EXPRESSION}),
    check=_check_add_or_subtract_zero,
)

MULTIPLY_BY_ONE = Rule(
    code="R0202",
    name="multiply-by-one",
    category=RuleCategory.OPERATORS,
    message="multiplying by one has no effect",
    kinds=frozenset({NodeKind.MULTIPLY_EXPRESSION}),
    check=_check_multiply_by_one,
)

DIVIDE_BY_ONE = Rule(
    code="R0203",
    name="divide-by-one",
    category=RuleCategory.OPERATORS,
    message="dividing by one has no effect",
    kinds=frozenset({NodeKind.DIVIDE_EXPRESSION}),
    check=_check_divide_by_one,
)

UNARY_ZERO = Rule(
    code="R0204",
    name="unary-zero",
    category=RuleCategory.OPERATORS,
    message="sign of zero has no effect",
    kinds=frozenset({NodeKind.UNARY_PLUS_EXPRESSION, NodeKind.UNARY_MINUS_EXPRESSION}),
    check=_check_unary_zero,
)

IDENTITY_COMPOUND_ASSIGNMENT = Rule(
    code="R0205",
    name="identity-compound-assignment",
    category=RuleCategory.OPERATORS,
    message="assignment does not change the value",
    kinds=frozenset(_ASSIGNMENT_IDENTITY),
    check=_check_identity_compound_assignment,
)


# =============================================================================
# Boolean Comparisons
# =============================================================================

# The literal that leaves the other operand unchanged under each operator
_BOOLEAN_IDENTITY = {
    NodeKind.EQUALS_EXPRESSION: True,
    NodeKind.NOT_EQUALS_EXPRESSION: False,
    NodeKind.LOGICAL_AND_EXPRESSION: True,
    NodeKind.LOGICAL_OR_EXPRESSION: False,
}


def _check_comparison_to_constant(node: Node, facts: FactsHandle) -> SpanGroups:
    identity = _BOOLEAN_IDENTITY[node.kind]
    left, right = node.child("left"), node.child("right")

    right_value = facts.constant_value(right)
    if right_value is not None and right_value.value is identity and is_boolean(facts.static_type(left)):
        yield _drop_right(node)
        return

    left_value = facts.constant_value(left)
    if left_value is not None and left_value.value is identity and is_boolean(facts.static_type(right)):
        yield _drop_left(node)


def _check_comparison_to_self(node: Node, facts: FactsHandle) -> SpanGroups:
    left, right = node.child("left"), node.child("right")
    if not facts.structurally_equivalent(left, right):
        return

    if node.kind in (NodeKind.LOGICAL_AND_EXPRESSION, NodeKind.LOGICAL_OR_EXPRESSION):
        yield _drop_right(node, _removal_class(right))
        return

    # x == x is not always true: NaN, and operators overloaded on unknown types
    operand_type = facts.static_type(left)
    if operand_type is None or operand_type.is_floating:
        return
    yield _drop_right(node, SpanClass.FLAGGED)


COMPARISON_TO_BOOLEAN_CONSTANT = Rule(
    code="R0206",
    name="comparison-to-boolean-constant",
    category=RuleCategory.OPERATORS,
    message="comparison with a boolean constant is redundant",
    kinds=frozenset(_BOOLEAN_IDENTITY),
    check=_check_comparison_to_constant,
)

COMPARISON_TO_SELF = Rule(
    code="R0207",
    name="comparison-to-self",
    category=RuleCategory.OPERATORS,
    message="both operands are the same",
    kinds=frozenset(_BOOLEAN_IDENTITY),
    check=_check_comparison_to_self,
)


# =============================================================================
# Coalescing and Conditional Expressions
# =============================================================================


def _check_coalesce_to_null(node: Node, facts: FactsHandle) -> SpanGroups:
    fallback = facts.constant_value(node.child("right"))
    if fallback is not None and fallback.is_null:
        yield _drop_right(node)


def _check_coalesce_to_self(node: Node, facts: FactsHandle) -> SpanGroups:
    if facts.structurally_equivalent(node.child("left"), node.child("right")):
        yield _drop_right(node, _removal_class(node.child("right")))


def _keep_true_arm(node: Node, classification: SpanClass = SpanClass.UNNECESSARY) -> tuple[Span, ...]:
    return (
        between(node.child("condition"), node.child("question"), classification),
        between(node.child("colon"), node.child("when_false"), classification),
    )


def _check_identical_arms(node: Node, facts: FactsHandle) -> SpanGroups:
    if facts.structurally_equivalent(node.child("when_true"), node.child("when_false")):
        # The condition is evaluated either way, so only a plain one may go
        yield _keep_true_arm(node, _removal_class(node.child("condition")))


def _check_constant_condition(node: Node, facts: FactsHandle) -> SpanGroups:
    constant = facts.constant_value(node.child("condition"))
    if constant is None:
        return
    if constant.is_true:
        yield _keep_true_arm(node)
    elif constant.is_false:
        yield (between(node.child("condition"), node.child("colon")),)


def _check_boolean_arms(node: Node, facts: FactsHandle) -> SpanGroups:
    when_true = facts.constant_value(node.child("when_true"))
    when_false = facts.constant_value(node.child("when_false"))
    if when_true is None or when_false is None or not (when_true.is_true and when_false.is_false):
        return
    if is_boolean(facts.static_type(node.child("condition"))):
        yield (between(node.child("question"), node.child("when_false")),)


COALESCE_TO_NULL = Rule(
    code="R0208",
    name="coalesce-to-null",
    category=RuleCategory.OPERATORS,
    message="falling back to null has no effect",
    kinds=frozenset({NodeKind.COALESCE_EXPRESSION}),
    check=_check_coalesce_to_null,
)

COALESCE_TO_SELF = Rule(
    code="R0209",
    name="coalesce-to-self",
    category=RuleCategory.OPERATORS,
    message="falling back to the same value has no effect",
    kinds=frozenset({NodeKind.COALESCE_EXPRESSION}),
    check=_check_coalesce_to_self,
)

CONDITIONAL_WITH_IDENTICAL_ARMS = Rule(
    code="R0210",
    name="conditional-with-identical-arms",
    category=RuleCategory.OPERATORS,
    message="both branches of the conditional are the same",
    kinds=frozenset({NodeKind.CONDITIONAL_EXPRESSION}),
    check=_check_identical_arms,
)

CONDITIONAL_WITH_CONSTANT_CONDITION = Rule(
    code="R0211",
    name="conditional-with-constant-condition",
    category=RuleCategory.OPERATORS,
    message="condition of the conditional is constant",
    kinds=frozenset({NodeKind.CONDITIONAL_EXPRESSION}),
    check=_check_constant_condition,
)

CONDITIONAL_WITH_BOOLEAN_ARMS = Rule(
    code="R0212",
    name="conditional-with-boolean-arms",
    category=RuleCategory.OPERATORS,
    message="conditional returns its own condition",
    kinds=frozenset({NodeKind.CONDITIONAL_EXPRESSION}),
    check=_check_boolean_arms,
)


RULES = (
    ADD_OR_SUBTRACT_ZERO,
    MULTIPLY_BY_ONE,
    DIVIDE_BY_ONE,
    UNARY_ZERO,
    IDENTITY_COMPOUND_ASSIGNMENT,
    COMPARISON_TO_BOOLEAN_CONSTANT,
    COMPARISON_TO_SELF,
    COALESCE_TO_NULL,
    COALESCE_TO_SELF,
    CONDITIONAL_WITH_IDENTICAL_ARMS,
    CONDITIONAL_WITH_CONSTANT_CONDITION,
    CONDITIONAL_WITH_BOOLEAN_ARMS,
)
