"""
Built-in rule catalog for greyout.

Rules are grouped by concern into one module per category. CATALOG is their
ordered concatenation; dispatch order within a node kind follows it.
"""

from typing import Optional

from greyout.engine.rules import Rule, RuleCategory
from greyout.rules import control_flow, design, framework, operators, queries, syntax
from greyout.rules.control_flow import (
    CONSTANT_FALSE_CONDITION,
    CONSTANT_FALSE_FOR,
    CONSTANT_FALSE_WHILE,
    CONSTANT_TRUE_CATCH_FILTER,
    CONSTANT_TRUE_CONDITION,
    EMPTY_SWITCH_SECTION,
    NEEDLESS_CATCH_TYPE,
    SWITCH_WITHOUT_EFFECT,
    UNREACHABLE_CODE,
)
from greyout.rules.design import (
    INHERIT_FROM_OBJECT,
    SEALED_MEMBER_IN_SEALED_CLASS,
    UNUSED_CATCH_VARIABLE,
    UNUSED_CONSTRUCTOR_PARAMETER,
    UNUSED_STATIC_METHOD_PARAMETER,
)
from greyout.rules.framework import AWAIT_COMPLETED_TASK, TO_STRING_ON_STRING
from greyout.rules.operators import (
    ADD_OR_SUBTRACT_ZERO,
    COALESCE_TO_NULL,
    COALESCE_TO_SELF,
    COMPARISON_TO_BOOLEAN_CONSTANT,
    COMPARISON_TO_SELF,
    CONDITIONAL_WITH_BOOLEAN_ARMS,
    CONDITIONAL_WITH_CONSTANT_CONDITION,
    CONDITIONAL_WITH_IDENTICAL_ARMS,
    DIVIDE_BY_ONE,
    IDENTITY_COMPOUND_ASSIGNMENT,
    MULTIPLY_BY_ONE,
    UNARY_ZERO,
)
from greyout.rules.queries import (
    CONSTANT_ORDERING_KEY,
    CONSTANT_TRUE_FILTER,
    CONSTANT_WHILE_PREDICATE,
    IDENTITY_PROJECTION,
)
from greyout.rules.syntax import (
    BRACES_AROUND_SINGLE_STATEMENT,
    EMPTY_STATEMENT_IN_BLOCK,
    LAMBDA_WITH_SINGLE_RETURN,
    REDUNDANT_ANONYMOUS_MEMBER_NAME,
)


# =============================================================================
# Rule Registry
# =============================================================================


CATALOG: tuple[Rule, ...] = (
    *control_flow.RULES,
    *operators.RULES,
    *design.RULES,
    *queries.RULES,
    *framework.RULES,
    *syntax.RULES,
)

ALL_RULES: dict[str, Rule] = {rule.code: rule for rule in CATALOG}

# Also index by name
RULES_BY_NAME: dict[str, Rule] = {
    rule.name: rule for rule in CATALOG
}


def get_rule_by_name(name: str) -> Optional[Rule]:
    """Get a rule by its name."""
    return RULES_BY_NAME.get(name)


def get_rule_by_code(code: str) -> Optional[Rule]:
    """Get a rule by its code."""
    return ALL_RULES.get(code)


def get_rules_by_category(category: RuleCategory) -> list[Rule]:
    """Get all rules in a category."""
    return [rule for rule in CATALOG if rule.category == category]


__all__ = [
    # Rule registry
    "CATALOG",
    "ALL_RULES",
    "RULES_BY_NAME",
    "get_rule_by_name",
    "get_rule_by_code",
    "get_rules_by_category",
    # Individual rules - Control flow
    "CONSTANT_TRUE_CONDITION",
    "CONSTANT_FALSE_CONDITION",
    "CONSTANT_FALSE_WHILE",
    "CONSTANT_FALSE_FOR",
    "UNREACHABLE_CODE",
    "SWITCH_WITHOUT_EFFECT",
    "EMPTY_SWITCH_SECTION",
    "CONSTANT_TRUE_CATCH_FILTER",
    "NEEDLESS_CATCH_TYPE",
    # Individual rules - Operators
    "ADD_OR_SUBTRACT_ZERO",
    "MULTIPLY_BY_ONE",
    "DIVIDE_BY_ONE",
    "UNARY_ZERO",
    "IDENTITY_COMPOUND_ASSIGNMENT",
    "COMPARISON_TO_BOOLEAN_CONSTANT",
    "COMPARISON_TO_SELF",
    "COALESCE_TO_NULL",
    "COALESCE_TO_SELF",
    "CONDITIONAL_WITH_IDENTICAL_ARMS",
    "CONDITIONAL_WITH_CONSTANT_CONDITION",
    "CONDITIONAL_WITH_BOOLEAN_ARMS",
    # Individual rules - Design
    "UNUSED_CONSTRUCTOR_PARAMETER",
    "UNUSED_STATIC_METHOD_PARAMETER",
    "UNUSED_CATCH_VARIABLE",
    "INHERIT_FROM_OBJECT",
    "SEALED_MEMBER_IN_SEALED_CLASS",
    # Individual rules - Queries
    "IDENTITY_PROJECTION",
    "CONSTANT_TRUE_FILTER",
    "CONSTANT_WHILE_PREDICATE",
    "CONSTANT_ORDERING_KEY",
    # Individual rules - Framework
    "TO_STRING_ON_STRING",
    "AWAIT_COMPLETED_TASK",
    # Individual rules - Syntax
    "BRACES_AROUND_SINGLE_STATEMENT",
    "EMPTY_STATEMENT_IN_BLOCK",
    "LAMBDA_WITH_SINGLE_RETURN",
    "REDUNDANT_ANONYMOUS_MEMBER_NAME",
]
