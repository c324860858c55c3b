"""
Redundant framework calls.

``ToString()`` on something that already is a string, and awaiting a task
that was created already completed.
"""

from __future__ import annotations

from collections.abc import Iterator

from greyout.engine.rules import Rule, RuleCategory
from greyout.engine.spans import Span, between, span_of
from greyout.rules.common import call_tail, method_call
from greyout.semantics.facts import FactsHandle, SpecialType
from greyout.syntax.nodes import Node, NodeKind


SpanGroups = Iterator[tuple[Span, ...]]

TASK_TYPE = "System.Threading.Tasks.Task"


def _check_to_string_on_string(node: Node, facts: FactsHandle) -> SpanGroups:
    call = method_call(node, frozenset({"ToString"}))
    if call is None or call[2]:
        return
    receiver = facts.static_type(call[0].child("expression"))
    if receiver is not None and receiver.special is SpecialType.STRING:
        yield (call_tail(call),)


def _check_await_completed_task(node: Node, facts: FactsHandle) -> SpanGroups:
    operand = node.child("expression")
    if operand is None or operand.kind is not NodeKind.INVOCATION_EXPRESSION:
        return
    call = method_call(operand, frozenset({"FromResult"}))
    if call is None or len(call[2]) != 1:
        return
    receiver = facts.static_type(call[0].child("expression"))
    if receiver is None or receiver.name != TASK_TYPE:
        return
    argument_list = call[1]
    yield (
        between(node.child("await_keyword"), argument_list.child("open_paren")),
        span_of(argument_list.child("close_paren")),
    )


TO_STRING_ON_STRING = Rule(
    code="R0501",
    name="to-string-on-string",
    category=RuleCategory.FRAMEWORK,
    message="value is already a string",
    kinds=frozenset({NodeKind.INVOCATION_EXPRESSION}),
    check=_check_to_string_on_string,
)

AWAIT_COMPLETED_TASK = Rule(
    code="R0502",
    name="await-completed-task",
    category=RuleCategory.FRAMEWORK,
    message="awaiting a task created from a result yields that result",
    kinds=frozenset({NodeKind.AWAIT_EXPRESSION}),
    check=_check_await_completed_task,
)


RULES = (
    TO_STRING_ON_STRING,
    AWAIT_COMPLETED_TASK,
)
