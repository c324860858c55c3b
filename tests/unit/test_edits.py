"""
Unit tests for mechanical removal of unnecessary spans.
"""

import pytest

from greyout.engine.edits import apply_removals, removable_spans
from greyout.engine.spans import Span, SpanClass
from greyout.syntax.builders import binary, param, return_
from greyout.utils.errors import InvalidSpan


class TestRemovableSpans:
    """Tests for collecting removable spans."""

    def test_flagged_spans_ignored(self) -> None:
        """Test that only UNNECESSARY spans are removable."""
        spans = [Span(0, 2), Span(4, 6, SpanClass.FLAGGED)]
        assert removable_spans(spans) == [Span(0, 2)]

    def test_spans_merged(self) -> None:
        """Test that overlapping removals are merged first."""
        assert removable_spans([Span(0, 4), Span(2, 6)]) == [Span(0, 6)]


class TestApplyRemovals:
    """Tests for deleting spans from source text."""

    def test_removes_in_any_order(self) -> None:
        """Test that removal does not depend on input order."""
        source = "keep-drop-keep-drop"
        assert apply_removals(source, [Span(4, 9), Span(14, 19)]) == "keep-keep"
        assert apply_removals(source, [Span(14, 19), Span(4, 9)]) == "keep-keep"

    def test_out_of_bounds(self) -> None:
        """Test that a span past the end of the source is rejected."""
        with pytest.raises(InvalidSpan):
            apply_removals("short", [Span(2, 40)])

    def test_removes_redundancies(self, method_tree, analyze) -> None:
        """Test applying engine output directly."""
        tree = method_tree(return_(binary("+", "x", 0)), params=[param("int", "x")], returns="int")
        edited = apply_removals(tree.source, analyze(tree))
        assert "return x ;" in edited
