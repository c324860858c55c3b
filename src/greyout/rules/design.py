"""
Declaration-level redundancy rules.

Unused parameters of constructors and static methods, unused catch
variables, an explicit ``object`` base, and ``sealed`` members of sealed
classes. Parameter rules only look at the declaration itself; callers in
other declarations are out of reach, so instance methods, which may
implement an interface or override, are never reported.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Optional

from greyout.engine.rules import Rule, RuleCategory
from greyout.engine.spans import Span, span_of
from greyout.rules.common import element_removal
from greyout.semantics.facts import FactsHandle, SpecialType, SymbolId
from greyout.syntax.nodes import Node, NodeKind


SpanGroups = Iterator[tuple[Span, ...]]

# Parameters whose value flows back to the caller, or that bind the receiver
_SKIPPED_PARAMETER_MODIFIERS = ("ref", "out", "this")


# =============================================================================
# Unused Parameters
# =============================================================================


def _union_reads(facts: FactsHandle, *subtrees: Optional[Node]) -> Optional[frozenset[SymbolId]]:
    """Reads across the present subtrees; None if any present subtree is undecidable."""
    reads: frozenset[SymbolId] = frozenset()
    for subtree in subtrees:
        if subtree is None:
            continue
        found = facts.reads_within(subtree)
        if found is None:
            return None
        reads = reads | found
    return reads


def _unused_parameters(node: Node, facts: FactsHandle, *scopes: Optional[Node]) -> SpanGroups:
    parameter_list = node.child("parameter_list")
    if parameter_list is None:
        return
    parameters = parameter_list.children_with("parameter")
    if not parameters:
        return
    reads = _union_reads(facts, *scopes)
    if reads is None:
        return

    unused = []
    for index, parameter in enumerate(parameters):
        if any(parameter.has_modifier(text) for text in _SKIPPED_PARAMETER_MODIFIERS):
            continue
        symbol = facts.declared_symbol(parameter)
        if symbol is not None and symbol not in reads:
            unused.append(index)

    separators = parameter_list.children_with("separator")
    removed = frozenset(unused)
    for index in unused:
        yield (element_removal(parameters, separators, index, removed),)


def _check_unused_constructor_parameter(node: Node, facts: FactsHandle) -> SpanGroups:
    body = node.child("body")
    if body is None:
        return
    yield from _unused_parameters(node, facts, body, node.child("initializer"))


def _check_unused_static_method_parameter(node: Node, facts: FactsHandle) -> SpanGroups:
    body = node.child("body")
    parent = node.parent
    if body is None or not node.has_modifier("static"):
        return
    if parent is None or parent.kind is not NodeKind.CLASS_DECLARATION:
        return
    if node.has_modifier("extern") or node.has_modifier("partial"):
        return
    yield from _unused_parameters(node, facts, body)


UNUSED_CONSTRUCTOR_PARAMETER = Rule(
    code="R0301",
    name="unused-constructor-parameter",
    category=RuleCategory.DESIGN,
    message="constructor parameter is never read",
    kinds=frozenset({NodeKind.CONSTRUCTOR_DECLARATION}),
    check=_check_unused_constructor_parameter,
    suggestion="remove the parameter and update callers",
)

UNUSED_STATIC_METHOD_PARAMETER = Rule(
    code="R0302",
    name="unused-static-method-parameter",
    category=RuleCategory.DESIGN,
    message="static method parameter is never read",
    kinds=frozenset({NodeKind.METHOD_DECLARATION}),
    check=_check_unused_static_method_parameter,
    suggestion="remove the parameter and update callers",
)


# =============================================================================
# Catch Variables
# =============================================================================


def _check_unused_catch_variable(node: Node, facts: FactsHandle) -> SpanGroups:
    declaration = node.child("declaration")
    identifier = declaration.child("identifier") if declaration is not None else None
    if identifier is None:
        return
    symbol = facts.declared_symbol(declaration)
    reads = _union_reads(facts, node.child("block"), node.child("filter"))
    if symbol is not None and reads is not None and symbol not in reads:
        yield (span_of(identifier),)


UNUSED_CATCH_VARIABLE = Rule(
    code="R0303",
    name="unused-catch-variable",
    category=RuleCategory.DESIGN,
    message="caught exception variable is never read",
    kinds=frozenset({NodeKind.CATCH_CLAUSE}),
    check=_check_unused_catch_variable,
)


# =============================================================================
# Modifiers and Bases
# =============================================================================


def _check_inherit_from_object(node: Node, facts: FactsHandle) -> SpanGroups:
    parent = node.parent
    if parent is None or parent.kind is not NodeKind.CLASS_DECLARATION:
        return
    bases = node.children_with("type")
    if len(bases) != 1:
        return
    base = facts.static_type(bases[0])
    if base is not None and base.special is SpecialType.OBJECT:
        yield (span_of(node),)


def _check_sealed_member(node: Node, facts: FactsHandle) -> SpanGroups:
    sealed = node.modifier("sealed")
    parent = node.parent
    if sealed is None or parent is None or parent.kind is not NodeKind.CLASS_DECLARATION:
        return
    if parent.has_modifier("sealed"):
        yield (span_of(sealed),)


INHERIT_FROM_OBJECT = Rule(
    code="R0304",
    name="inherit-from-object",
    category=RuleCategory.DESIGN,
    message="every class already derives from object",
    kinds=frozenset({NodeKind.BASE_LIST}),
    check=_check_inherit_from_object,
)

SEALED_MEMBER_IN_SEALED_CLASS = Rule(
    code="R0305",
    name="sealed-member-in-sealed-class",
    category=RuleCategory.DESIGN,
    message="members of a sealed class cannot be overridden anyway",
    kinds=frozenset({NodeKind.METHOD_DECLARATION}),
    check=_check_sealed_member,
)


RULES = (
    UNUSED_CONSTRUCTOR_PARAMETER,
    UNUSED_STATIC_METHOD_PARAMETER,
    UNUSED_CATCH_VARIABLE,
    INHERIT_FROM_OBJECT,
    SEALED_MEMBER_IN_SEALED_CLASS,
)
