"""
Control-flow redundancy rules.

Detects statements whose control flow is decided at compile time or that can
never run:

- Conditionals and loops whose test folds to a constant
- Statements after an unconditional return/throw/break/continue
- Switches and switch sections that do nothing
- Catch clauses whose type or filter adds nothing
"""

from __future__ import annotations

from collections.abc import Iterator

from greyout.engine.rules import Rule, RuleCategory
from greyout.engine.spans import Span, SpanClass, between, span_of
from greyout.rules.common import (
    SIMPLE_OPERAND_KINDS,
    TERMINATOR_KINDS,
    declares_locals,
    first_effective_statement,
    is_embedded,
    statement_removal,
    statements_of,
    unwrap_block,
)
from greyout.semantics.facts import FactsHandle, SpecialType
from greyout.syntax.nodes import Node, NodeKind


SpanGroups = Iterator[tuple[Span, ...]]


# =============================================================================
# Constant Conditions
# =============================================================================


def _can_unwrap(node: Node, block: Node) -> bool:
    """
    Check whether a kept block may lose its braces.

    A block declaring locals keeps its scope. When the if is itself the body
    of another statement, only a single statement can take the block's place.
    """
    if block.kind is not NodeKind.BLOCK or declares_locals(block):
        return False
    return not is_embedded(node) or len(statements_of(block)) == 1


def _check_constant_true_if(node: Node, facts: FactsHandle) -> SpanGroups:
    constant = facts.constant_value(node.child("condition"))
    if constant is None or not constant.is_true:
        return

    statement = node.child("statement")
    if _can_unwrap(node, statement):
        yield unwrap_block(node.child("if_keyword"), statement)
    else:
        yield (between(node.child("if_keyword"), node.child("close_paren")),)

    else_clause = node.child("else")
    if else_clause is not None:
        yield (span_of(else_clause),)


def _check_constant_false_if(node: Node, facts: FactsHandle) -> SpanGroups:
    """
    A false test leaves only the alternative, or nothing.

    ``if (false) a; else { b; }`` keeps ``b;``; without an else the whole
    statement goes.
    """
    constant = facts.constant_value(node.child("condition"))
    if constant is None or not constant.is_false:
        return

    else_clause = node.child("else")
    if else_clause is None:
        yield (statement_removal(node),)
        return

    alternative = else_clause.child("statement")
    if _can_unwrap(node, alternative):
        yield unwrap_block(node.child("if_keyword"), alternative)
    else:
        yield (between(node.child("if_keyword"), else_clause.child("else_keyword")),)


def _check_constant_false_while(node: Node, facts: FactsHandle) -> SpanGroups:
    constant = facts.constant_value(node.child("condition"))
    if constant is not None and constant.is_false:
        yield (statement_removal(node),)


def _declared_names(statement: Node) -> frozenset[str]:
    """Names a statement binds at its own level, such as a local or a loop variable."""
    if statement.kind is NodeKind.FOREACH_STATEMENT:
        identifier = statement.child("identifier")
        return frozenset({identifier.text}) if identifier is not None else frozenset()
    declaration = statement.child("declaration")
    if declaration is None or declaration.kind is not NodeKind.VARIABLE_DECLARATION:
        return frozenset()
    return frozenset(
        declarator.child("identifier").text
        for declarator in declaration.children_with("variable")
        if declarator.child("identifier") is not None
    )


def _hoisting_clashes(node: Node) -> bool:
    """Check whether moving a loop declaration into the enclosing block reuses a name there."""
    names = _declared_names(node)
    if not names or node.parent is None:
        return False
    return any(
        names & _declared_names(sibling)
        for sibling in statements_of(node.parent)
        if sibling is not node
    )


def _check_constant_false_for(node: Node, facts: FactsHandle) -> SpanGroups:
    """
    A for loop with a false test still runs its initializer once.

    A declaration or a single initializer expression survives as a plain
    statement once ``for (`` and everything from the test onwards are cut.
    The declaration then lives in the enclosing block, so the loop is only
    flagged when another statement of that block declares the same name.
    Declarations in nested blocks are not inspected.
    """
    constant = facts.constant_value(node.child("condition"))
    if constant is None or not constant.is_false:
        return

    declaration = node.child("declaration")
    initializers = node.children_with("initializer")
    if declaration is None and not initializers:
        yield (statement_removal(node),)
        return

    if is_embedded(node) or len(initializers) > 1 or _hoisting_clashes(node):
        yield (span_of(node, SpanClass.FLAGGED),)
        return

    yield (
        between(node.child("for_keyword"), node.child("open_paren")),
        between(node.child("condition"), node.child("statement")),
    )


CONSTANT_TRUE_CONDITION = Rule(
    code="R0101",
    name="constant-true-condition",
    category=RuleCategory.CONTROL_FLOW,
    message="condition is always true",
    kinds=frozenset({NodeKind.IF_STATEMENT}),
    check=_check_constant_true_if,
    suggestion="keep the body and drop the test and any else branch",
)

CONSTANT_FALSE_CONDITION = Rule(
    code="R0102",
    name="constant-false-condition",
    category=RuleCategory.CONTROL_FLOW,
    message="condition is always false",
    kinds=frozenset({NodeKind.IF_STATEMENT}),
    check=_check_constant_false_if,
    suggestion="keep only the else branch, if there is one",
)

CONSTANT_FALSE_WHILE = Rule(
    code="R0103",
    name="constant-false-while",
    category=RuleCategory.CONTROL_FLOW,
    message="loop body never executes",
    kinds=frozenset({NodeKind.WHILE_STATEMENT}),
    check=_check_constant_false_while,
)

CONSTANT_FALSE_FOR = Rule(
    code="R0104",
    name="constant-false-for",
    category=RuleCategory.CONTROL_FLOW,
    message="loop body never executes",
    kinds=frozenset({NodeKind.FOR_STATEMENT}),
    check=_check_constant_false_for,
)


# =============================================================================
# Unreachable Code
# =============================================================================


def _check_unreachable_code(node: Node, facts: FactsHandle) -> SpanGroups:
    statements = statements_of(node)
    for index, statement in enumerate(statements):
        if statement.kind in TERMINATOR_KINDS:
            rest = statements[index + 1:]
            # A label makes the statements after it reachable through goto
            if rest and not any(s.kind is NodeKind.LABELED_STATEMENT for s in rest):
                yield (between(rest[0], rest[-1], SpanClass.FLAGGED),)
            return


def _is_break_only(section: Node) -> bool:
    first = first_effective_statement(statements_of(section))
    return first is None or first.kind is NodeKind.BREAK_STATEMENT


def _check_switch_without_effect(node: Node, facts: FactsHandle) -> SpanGroups:
    sections = node.children_with("section")
    if not all(_is_break_only(section) for section in sections):
        return
    span = statement_removal(node)
    if node.child("expression").kind not in SIMPLE_OPERAND_KINDS:
        # Evaluating the governing expression may have effects
        span = span.with_class(SpanClass.FLAGGED)
    yield (span,)


def _check_empty_switch_section(node: Node, facts: FactsHandle) -> SpanGroups:
    if not _is_break_only(node):
        return
    switch = node.parent
    if switch is None:
        return
    default = None
    for section in switch.children_with("section"):
        if any(label.kind is NodeKind.DEFAULT_LABEL for label in section.children_with("label")):
            default = section
    # Removing a case is only harmless when falling to default does nothing either
    if default is None or _is_break_only(default):
        yield (span_of(node),)


UNREACHABLE_CODE = Rule(
    code="R0105",
    name="unreachable-code",
    category=RuleCategory.CONTROL_FLOW,
    message="code after an unconditional jump is never executed",
    kinds=frozenset({NodeKind.BLOCK, NodeKind.SWITCH_SECTION}),
    check=_check_unreachable_code,
)

SWITCH_WITHOUT_EFFECT = Rule(
    code="R0106",
    name="switch-without-effect",
    category=RuleCategory.CONTROL_FLOW,
    message="every section of this switch only breaks",
    kinds=frozenset({NodeKind.SWITCH_STATEMENT}),
    check=_check_switch_without_effect,
)

EMPTY_SWITCH_SECTION = Rule(
    code="R0107",
    name="empty-switch-section",
    category=RuleCategory.CONTROL_FLOW,
    message="switch section does nothing",
    kinds=frozenset({NodeKind.SWITCH_SECTION}),
    check=_check_empty_switch_section,
)


# =============================================================================
# Catch Clauses
# =============================================================================


def _check_constant_true_filter(node: Node, facts: FactsHandle) -> SpanGroups:
    constant = facts.constant_value(node.child("expression"))
    if constant is not None and constant.is_true:
        yield (span_of(node),)


def _catch_reads(node: Node, facts: FactsHandle):
    """Reads in the catch body and filter, or None if undecidable."""
    reads = facts.reads_within(node.child("block"))
    if reads is None:
        return None
    filter_clause = node.child("filter")
    if filter_clause is not None:
        filter_reads = facts.reads_within(filter_clause)
        if filter_reads is None:
            return None
        reads = reads | filter_reads
    return reads


def _check_needless_catch_type(node: Node, facts: FactsHandle) -> SpanGroups:
    declaration = node.child("declaration")
    if declaration is None:
        return
    caught = facts.static_type(declaration.child("type"))
    if caught is None or caught.special is not SpecialType.EXCEPTION:
        return

    if declaration.child("identifier") is not None:
        symbol = facts.declared_symbol(declaration)
        reads = _catch_reads(node, facts)
        if symbol is None or reads is None or symbol in reads:
            return

    yield (span_of(declaration),)


CONSTANT_TRUE_CATCH_FILTER = Rule(
    code="R0108",
    name="constant-true-catch-filter",
    category=RuleCategory.CONTROL_FLOW,
    message="exception filter is always true",
    kinds=frozenset({NodeKind.CATCH_FILTER}),
    check=_check_constant_true_filter,
)

NEEDLESS_CATCH_TYPE = Rule(
    code="R0109",
    name="needless-catch-type",
    category=RuleCategory.CONTROL_FLOW,
    message="catching the base exception type without using it is the same as a bare catch",
    kinds=frozenset({NodeKind.CATCH_CLAUSE}),
    check=_check_needless_catch_type,
    suggestion="use a bare 'catch'",
)


RULES = (
    CONSTANT_TRUE_CONDITION,
    CONSTANT_FALSE_CONDITION,
    CONSTANT_FALSE_WHILE,
    CONSTANT_FALSE_FOR,
    UNREACHABLE_CODE,
    SWITCH_WITHOUT_EFFECT,
    EMPTY_SWITCH_SECTION,
    CONSTANT_TRUE_CATCH_FILTER,
    NEEDLESS_CATCH_TYPE,
)
