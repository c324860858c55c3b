"""
Semantic facts consumed by redundancy rules.

Rules never compute types or constants themselves. They ask a semantic
oracle, an object implementing the SemanticFacts protocol, through a
FactsHandle that is scoped to one tree and one pass. Every query may come
back absent (None). That is the normal answer for anything the oracle cannot
decide, and rules treat it as "do not fire".

Example:
    facts = FactsHandle(SyntacticFacts(tree), tree)
    constant = facts.constant_value(node.child("condition"))
    if constant is not None and constant.is_true:
        ...
    facts.close()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Protocol, runtime_checkable

from greyout.syntax.nodes import Node, SyntaxTree
from greyout.utils.errors import EngineStateError, FactUnavailable


logger = logging.getLogger("greyout.facts")


# -----------------------------------------------------------------------------
# Fact values
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Constant:
    """
    A compile-time constant value.

    ``Constant(None)`` is the null constant; an absent constant is represented
    by returning None instead of a Constant.
    """

    value: Any

    @property
    def is_true(self) -> bool:
        return self.value is True

    @property
    def is_false(self) -> bool:
        return self.value is False

    @property
    def is_null(self) -> bool:
        return self.value is None

    def is_integer(self, number: int) -> bool:
        """Check for an integral (non-boolean) constant equal to number."""
        return type(self.value) is int and self.value == number


class SpecialType(Enum):
    """Well-known types the rules need to recognize."""

    NONE = "none"
    BOOLEAN = "boolean"
    INTEGRAL = "integral"
    FLOATING = "floating"
    DECIMAL = "decimal"
    STRING = "string"
    OBJECT = "object"
    EXCEPTION = "exception"


@dataclass(frozen=True, slots=True)
class TypeId:
    """A resolved nominal type."""

    name: str
    special: SpecialType = SpecialType.NONE

    @property
    def is_boolean(self) -> bool:
        return self.special is SpecialType.BOOLEAN

    @property
    def is_numeric(self) -> bool:
        return self.special in (SpecialType.INTEGRAL, SpecialType.FLOATING, SpecialType.DECIMAL)

    @property
    def is_floating(self) -> bool:
        return self.special is SpecialType.FLOATING

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class SymbolId:
    """
    Stable identity of a declared binding.

    Attributes:
        name: Declared name
        site: Source offset of the declaring identifier
    """

    name: str
    site: int

    def __str__(self) -> str:
        return f"{self.name}@{self.site}"


class FactKind(Enum):
    """Kinds of semantic queries."""

    CONSTANT_VALUE = "constant_value"
    STATIC_TYPE = "static_type"
    DECLARED_SYMBOL = "declared_symbol"
    READS_WITHIN = "reads_within"
    STRUCTURAL_EQUIVALENCE = "structural_equivalence"


# -----------------------------------------------------------------------------
# Oracle protocol
# -----------------------------------------------------------------------------


@runtime_checkable
class SemanticFacts(Protocol):
    """
    The query surface of a semantic oracle.

    Implementations answer for a single tree. Each method returns None, or
    raises FactUnavailable, when the answer cannot be decided.
    """

    def constant_value(self, expr: Node) -> Optional[Constant]:
        ...

    def static_type(self, expr: Node) -> Optional[TypeId]:
        ...

    def declared_symbol(self, binding_site: Node) -> Optional[SymbolId]:
        ...

    def reads_within(self, subtree: Node) -> Optional[frozenset[SymbolId]]:
        ...

    def structurally_equivalent(self, a: Node, b: Node) -> Optional[bool]:
        ...


# -----------------------------------------------------------------------------
# Per-pass handle
# -----------------------------------------------------------------------------


class FactsHandle:
    """
    Memoizing, per-pass view over a semantic oracle.

    Answers are cached by (node identity, fact kind) for the lifetime of one
    pass over one tree. The tree keeps every node alive for that long, so node
    identities stay unique. ``close()`` drops the cache; a closed handle
    refuses further queries.
    """

    def __init__(self, oracle: SemanticFacts, tree: SyntaxTree) -> None:
        self.oracle = oracle
        self.tree = tree
        self._memo: dict[tuple, Any] = {}
        self._closed = False
        self.queries = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def _ask(self, key: tuple, compute: Callable[[], Any]) -> Any:
        if self._closed:
            raise EngineStateError("facts handle used after its pass ended")
        if key in self._memo:
            return self._memo[key]
        self.queries += 1
        try:
            answer = compute()
        except FactUnavailable as e:
            logger.debug(f"{key[0].value} unavailable: {e.message}")
            answer = None
        self._memo[key] = answer
        return answer

    def constant_value(self, expr: Optional[Node]) -> Optional[Constant]:
        if expr is None:
            return None
        return self._ask((FactKind.CONSTANT_VALUE, id(expr)), lambda: self.oracle.constant_value(expr))

    def static_type(self, expr: Optional[Node]) -> Optional[TypeId]:
        if expr is None:
            return None
        return self._ask((FactKind.STATIC_TYPE, id(expr)), lambda: self.oracle.static_type(expr))

    def declared_symbol(self, binding_site: Optional[Node]) -> Optional[SymbolId]:
        if binding_site is None:
            return None
        return self._ask(
            (FactKind.DECLARED_SYMBOL, id(binding_site)),
            lambda: self.oracle.declared_symbol(binding_site),
        )

    def reads_within(self, subtree: Optional[Node]) -> Optional[frozenset[SymbolId]]:
        if subtree is None:
            return None
        return self._ask((FactKind.READS_WITHIN, id(subtree)), lambda: self.oracle.reads_within(subtree))

    def structurally_equivalent(self, a: Optional[Node], b: Optional[Node]) -> Optional[bool]:
        if a is None or b is None:
            return None
        return self._ask(
            (FactKind.STRUCTURAL_EQUIVALENCE, id(a), id(b)),
            lambda: self.oracle.structurally_equivalent(a, b),
        )

    def close(self) -> None:
        """Discard every memoized fact and end the handle's pass."""
        self._memo.clear()
        self._closed = True
