"""
Mechanical removal of unnecessary spans.

The engine only identifies removable code. This module is the simplest
consumer of its output: it deletes every UNNECESSARY span from a source text
and leaves FLAGGED spans alone.

Example:
    results = analyze_tree(tree)
    shorter = apply_removals(tree.source, results)
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Union

from greyout.engine.dispatch import Redundancy
from greyout.engine.spans import Span, SpanClass, merge


def removable_spans(items: Iterable[Union[Redundancy, Span]]) -> list[Span]:
    """Collect the UNNECESSARY spans of redundancies or spans, merged."""
    spans = [item.span if isinstance(item, Redundancy) else item for item in items]
    return merge(span for span in spans if span.classification is SpanClass.UNNECESSARY)


def apply_removals(source: str, items: Iterable[Union[Redundancy, Span]]) -> str:
    """
    Delete every UNNECESSARY span from source.

    Args:
        source: The text the spans were computed against
        items: Redundancies or bare spans

    Returns:
        The source with the removable ranges cut out
    """
    for span in reversed(removable_spans(items)):
        span.check_bounds(len(source))
        source = source[:span.start] + source[span.end:]
    return source
