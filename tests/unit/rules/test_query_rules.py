"""
Tests for query combinator rules.
"""

import pytest

from greyout.rules.queries import (
    CONSTANT_ORDERING_KEY,
    CONSTANT_TRUE_FILTER,
    CONSTANT_WHILE_PREDICATE,
    IDENTITY_PROJECTION,
)
from greyout.syntax.builders import invoke, lambda_, member, query, return_, where


@pytest.fixture
def check(method_tree, run_rule, span_texts):
    """Run one rule over ``return <expression>;`` and return span texts per finding."""

    def _check(rule, expression):
        tree = method_tree(return_(expression))
        return [span_texts(tree, finding) for finding in run_rule(rule, tree)]

    return _check


class TestIdentityProjection:
    """Tests for Select calls returning their input."""

    def test_fires(self, check) -> None:
        """Test that the call is removed up to the receiver."""
        assert check(IDENTITY_PROJECTION, invoke("items", "Select", lambda_("x", "x"))) == [
            (".Select(x => x)",)
        ]

    @pytest.mark.parametrize(
        "selector",
        [
            lambda_("x", member("x", "Name")),
            lambda_("x", "y"),
            lambda_(("x", "i"), "i"),
        ],
    )
    def test_real_projection(self, check, selector) -> None:
        """Test projections that change the elements."""
        assert check(IDENTITY_PROJECTION, invoke("items", "Select", selector)) == []

    def test_method_group(self, check) -> None:
        """Test that only lambda selectors are inspected."""
        assert check(IDENTITY_PROJECTION, invoke("items", "Select", "Identity")) == []

    def test_chained(self, check) -> None:
        """Test an identity projection in the middle of a chain."""
        chain = invoke(invoke("items", "Select", lambda_("x", "x")), "Count")
        assert check(IDENTITY_PROJECTION, chain) == [(".Select(x => x)",)]


class TestConstantTrueFilter:
    """Tests for filters that keep every element."""

    def test_method_syntax(self, check) -> None:
        """Test ``Where(x => true)``."""
        assert check(CONSTANT_TRUE_FILTER, invoke("items", "Where", lambda_("x", True))) == [
            (".Where(x => true)",)
        ]

    def test_query_syntax(self, check) -> None:
        """Test a ``where true`` clause."""
        expression = query("x", "items", where(True), select="x")
        assert check(CONSTANT_TRUE_FILTER, expression) == [("where true",)]

    @pytest.mark.parametrize("condition", [False, member("x", "IsActive")])
    def test_real_filter(self, check, condition) -> None:
        """Test filters that may drop elements."""
        assert check(CONSTANT_TRUE_FILTER, invoke("items", "Where", lambda_("x", condition))) == []
        assert check(CONSTANT_TRUE_FILTER, query("x", "items", where(condition), select="x")) == []


class TestConstantWhilePredicate:
    """Tests for SkipWhile and TakeWhile with constant predicates."""

    @pytest.mark.parametrize(
        "name,value,expected",
        [
            ("SkipWhile", False, [(".SkipWhile(x => false)",)]),
            ("TakeWhile", True, [(".TakeWhile(x => true)",)]),
            ("SkipWhile", True, []),
            ("TakeWhile", False, []),
        ],
    )
    def test_pass_through(self, check, name, value, expected) -> None:
        """Test that only the pass-through constant is reported."""
        assert check(CONSTANT_WHILE_PREDICATE, invoke("items", name, lambda_("x", value))) == expected

    def test_zero_is_not_false(self, check) -> None:
        """Test that an integer zero is not mistaken for false."""
        assert check(CONSTANT_WHILE_PREDICATE, invoke("items", "SkipWhile", lambda_("x", 0))) == []


class TestConstantOrderingKey:
    """Tests for orderings by a constant key."""

    @pytest.mark.parametrize("name", ["OrderBy", "OrderByDescending", "ThenBy", "ThenByDescending"])
    def test_fires(self, check, name) -> None:
        """Test every ordering combinator."""
        assert check(CONSTANT_ORDERING_KEY, invoke("items", name, lambda_("x", 0))) == [
            (f".{name}(x => 0)",)
        ]

    def test_primary_kept_before_secondary(self, check) -> None:
        """Test that a constant OrderBy followed by ThenBy is kept and the ThenBy is not."""
        chain = invoke(invoke("items", "OrderBy", lambda_("x", 0)), "ThenBy", lambda_("x", member("x", "Name")))
        assert check(CONSTANT_ORDERING_KEY, chain) == []

    def test_constant_secondary(self, check) -> None:
        """Test that a constant ThenBy after a real OrderBy is reported."""
        chain = invoke(invoke("items", "OrderBy", lambda_("x", member("x", "Name"))), "ThenBy", lambda_("x", 0))
        assert check(CONSTANT_ORDERING_KEY, chain) == [(".ThenBy(x => 0)",)]

    def test_real_key(self, check) -> None:
        """Test that a key depending on the element is kept."""
        assert check(CONSTANT_ORDERING_KEY, invoke("items", "OrderBy", lambda_("x", member("x", "Name")))) == []
