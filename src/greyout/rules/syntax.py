"""
Superfluous syntax rules.

Braces around a lone jump statement, stray empty statements, lambda bodies
that only return, and anonymous-object member names that repeat the name the
compiler would infer anyway.
"""

from __future__ import annotations

from collections.abc import Iterator

from greyout.engine.rules import Rule, RuleCategory
from greyout.engine.spans import Span, between, span_of
from greyout.rules.common import statements_of
from greyout.semantics.facts import FactsHandle
from greyout.syntax.nodes import Node, NodeKind


SpanGroups = Iterator[tuple[Span, ...]]

_BRACE_OWNER_KINDS = frozenset({
    NodeKind.IF_STATEMENT,
    NodeKind.ELSE_CLAUSE,
    NodeKind.FOR_STATEMENT,
    NodeKind.FOREACH_STATEMENT,
    NodeKind.WHILE_STATEMENT,
    NodeKind.USING_STATEMENT,
    NodeKind.LOCK_STATEMENT,
    NodeKind.FIXED_STATEMENT,
})

_SIMPLE_JUMP_KINDS = frozenset({
    NodeKind.RETURN_STATEMENT,
    NodeKind.THROW_STATEMENT,
    NodeKind.YIELD_RETURN_STATEMENT,
})


def _check_braces_around_single_statement(node: Node, facts: FactsHandle) -> SpanGroups:
    body = node.child("statement")
    if body is None or body.kind is not NodeKind.BLOCK:
        return
    statements = statements_of(body)
    if len(statements) != 1:
        return
    statement = statements[0]
    if statement.kind in _SIMPLE_JUMP_KINDS and statement.location.line == statement.end_location.line:
        yield (span_of(body.child("open_brace")), span_of(body.child("close_brace")))


def _check_empty_statement(node: Node, facts: FactsHandle) -> SpanGroups:
    parent = node.parent
    if parent is not None and parent.kind is NodeKind.BLOCK:
        yield (span_of(node),)


def _check_lambda_single_return(node: Node, facts: FactsHandle) -> SpanGroups:
    body = node.child("body")
    if body is None or body.kind is not NodeKind.BLOCK:
        return
    statements = statements_of(body)
    if len(statements) != 1 or statements[0].kind is not NodeKind.RETURN_STATEMENT:
        return
    statement = statements[0]
    if statement.child("expression") is None:
        yield (span_of(statement),)
        return
    yield (
        between(body.child("open_brace"), statement.child("return_keyword")),
        between(statement.child("semicolon"), body.child("close_brace")),
    )


def _check_redundant_member_name(node: Node, facts: FactsHandle) -> SpanGroups:
    name = node.child("name")
    value = node.child("expression")
    if name is None or value is None:
        return
    if value.kind is NodeKind.IDENTIFIER_NAME:
        inferred = value.text
    elif value.kind is NodeKind.MEMBER_ACCESS:
        inferred = value.child("name").text
    else:
        return
    if inferred == name.text:
        yield (between(name, node.child("equals")),)


BRACES_AROUND_SINGLE_STATEMENT = Rule(
    code="R0601",
    name="braces-around-single-statement",
    category=RuleCategory.SYNTAX,
    message="braces around a single statement are unnecessary",
    kinds=_BRACE_OWNER_KINDS,
    check=_check_braces_around_single_statement,
)

EMPTY_STATEMENT_IN_BLOCK = Rule(
    code="R0602",
    name="empty-statement-in-block",
    category=RuleCategory.SYNTAX,
    message="empty statement",
    kinds=frozenset({NodeKind.EMPTY_STATEMENT}),
    check=_check_empty_statement,
)

LAMBDA_WITH_SINGLE_RETURN = Rule(
    code="R0603",
    name="lambda-with-single-return",
    category=RuleCategory.SYNTAX,
    message="lambda body can be an expression",
    kinds=frozenset({NodeKind.LAMBDA_EXPRESSION}),
    check=_check_lambda_single_return,
)

REDUNDANT_ANONYMOUS_MEMBER_NAME = Rule(
    code="R0604",
    name="redundant-anonymous-member-name",
    category=RuleCategory.SYNTAX,
    message="member name matches the inferred name",
    kinds=frozenset({NodeKind.ANONYMOUS_MEMBER_DECLARATOR}),
    check=_check_redundant_member_name,
)


RULES = (
    BRACES_AROUND_SINGLE_STATEMENT,
    EMPTY_STATEMENT_IN_BLOCK,
    LAMBDA_WITH_SINGLE_RETURN,
    REDUNDANT_ANONYMOUS_MEMBER_NAME,
)
