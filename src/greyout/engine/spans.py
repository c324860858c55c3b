"""
Span algebra for redundancy findings.

A span is a half-open range of character offsets ``[start, end)`` in the
source of one tree, tagged UNNECESSARY (the characters can be deleted without
changing behavior) or FLAGGED (redundant, but not a clean deletion). Spans
are built from nodes or tokens and combined with ``merge``; no operation here
ever yields a reversed or negative range.

Example:
    header = between(node.child("if_keyword"), block.child("open_brace"))
    closing = span_of(block.child("close_brace"))
    merged = merge([header, closing])
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Union

from greyout.syntax.nodes import Node
from greyout.utils.errors import InvalidSpan


class SpanClass(Enum):
    """
    Classification of a span.

    UNNECESSARY: Removable without behavior change
    FLAGGED: Redundant but not a set of tokens that can simply be deleted
    """

    UNNECESSARY = "unnecessary"
    FLAGGED = "flagged"


# Sort rank so UNNECESSARY precedes FLAGGED at equal offsets
CLASS_ORDER = {SpanClass.UNNECESSARY: 0, SpanClass.FLAGGED: 1}


@dataclass(frozen=True, slots=True)
class Span:
    """
    A classified half-open range of source offsets.

    Attributes:
        start: Offset of the first character
        end: Offset one past the last character
        classification: Whether the range is removable or only flagged
    """

    start: int
    end: int
    classification: SpanClass = SpanClass.UNNECESSARY

    def __post_init__(self) -> None:
        if self.start < 0:
            raise InvalidSpan(f"span starts at negative offset {self.start}")
        if self.end < self.start:
            raise InvalidSpan(f"reversed span [{self.start}, {self.end})")

    @property
    def length(self) -> int:
        return self.end - self.start

    def contains(self, other: Span) -> bool:
        return self.start <= other.start and other.end <= self.end

    def check_bounds(self, length: int) -> None:
        """
        Verify the span lies within a source of the given length.

        Raises:
            InvalidSpan: If the span ends past the source
        """
        if self.end > length:
            raise InvalidSpan(f"span [{self.start}, {self.end}) exceeds source length {length}")

    def slice(self, text: str) -> str:
        return text[self.start:self.end]

    def with_class(self, classification: SpanClass) -> Span:
        return Span(self.start, self.end, classification)

    def sort_key(self) -> tuple[int, int, int]:
        return (self.start, self.end, CLASS_ORDER[self.classification])

    def __str__(self) -> str:
        return f"[{self.start}, {self.end}) {self.classification.value}"


Bound = Union[Node, Span]


def span_of(node: Bound, classification: SpanClass = SpanClass.UNNECESSARY) -> Span:
    """Create a span covering a node or token."""
    return Span(node.start, node.end, classification)


def between(first: Bound, last: Bound, classification: SpanClass = SpanClass.UNNECESSARY) -> Span:
    """
    Create a span from the start of one node or token to the end of another.

    Args:
        first: Node or token where the span starts
        last: Node or token where the span ends
        classification: Span classification

    Returns:
        The covering span

    Raises:
        InvalidSpan: If last precedes first in source order
    """
    if last.start < first.start:
        raise InvalidSpan(f"span end at {last.start} precedes span start at {first.start}")
    return Span(first.start, last.end, classification)


def overlaps(a: Span, b: Span) -> bool:
    """Check whether two spans share at least one character."""
    return a.start < b.end and b.start < a.end


def touches(a: Span, b: Span) -> bool:
    """Check whether two spans overlap or are directly adjacent."""
    return a.start <= b.end and b.start <= a.end


def merge(spans: Iterable[Span]) -> list[Span]:
    """
    Coalesce touching or overlapping spans of the same classification.

    Spans of different classification are never merged into one another.

    Returns:
        The merged spans, sorted by start offset
    """
    by_class: dict[SpanClass, list[Span]] = {}
    for span in spans:
        by_class.setdefault(span.classification, []).append(span)

    merged: list[Span] = []
    for classification, group in by_class.items():
        group.sort(key=lambda s: (s.start, s.end))
        current = group[0]
        for span in group[1:]:
            if span.start <= current.end:
                if span.end > current.end:
                    current = Span(current.start, span.end, classification)
            else:
                merged.append(current)
                current = span
        merged.append(current)

    merged.sort(key=Span.sort_key)
    return merged
