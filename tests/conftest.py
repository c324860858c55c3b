"""
Pytest configuration and shared fixtures for greyout tests.
"""

from typing import Any, Optional

import pytest

from greyout.engine.config import EngineConfiguration
from greyout.engine.dispatch import DispatchTable, Redundancy, RedundancyEngine, analyze_tree
from greyout.engine.rules import Finding, Rule
from greyout.semantics.facts import Constant, SemanticFacts, TypeId
from greyout.semantics.syntactic import SyntacticFacts
from greyout.syntax.builders import Draft, block, build, class_, method
from greyout.syntax.nodes import Node, NodeKind, SyntaxTree
from greyout.utils.errors import FactUnavailable


# =============================================================================
# Stub Oracle
# =============================================================================


class StubFacts(SyntacticFacts):
    """
    An oracle with fixed answers keyed by the source text of the queried node.

    Anything not listed falls back to the tree-local answers. Texts listed in
    ``unavailable`` are undecidable for every query.
    """

    def __init__(
        self,
        tree: SyntaxTree,
        constants: Optional[dict[str, Any]] = None,
        types: Optional[dict[str, TypeId]] = None,
        unavailable: tuple[str, ...] = (),
    ) -> None:
        super().__init__(tree)
        self.constants = constants or {}
        self.types = types or {}
        self.unavailable = set(unavailable)
        self.calls: list[tuple[str, str]] = []

    def _text(self, node: Node) -> str:
        return self.tree.text(node.start, node.end)

    def _record(self, query: str, node: Node) -> str:
        text = self._text(node)
        self.calls.append((query, text))
        if text in self.unavailable:
            raise FactUnavailable(f"{query} of '{text}' is stubbed out")
        return text

    def constant_value(self, expr: Node) -> Optional[Constant]:
        text = self._record("constant_value", expr)
        if text in self.constants:
            return Constant(self.constants[text])
        return super().constant_value(expr)

    def static_type(self, expr: Node) -> Optional[TypeId]:
        text = self._record("static_type", expr)
        if text in self.types:
            return self.types[text]
        return super().static_type(expr)


# =============================================================================
# Tree Fixtures
# =============================================================================


@pytest.fixture
def tree_of():
    """Factory fixture rendering a draft into a tree."""

    def _build(draft: Draft, filename: str = "Test.cs") -> SyntaxTree:
        return build(draft, filename)

    return _build


@pytest.fixture
def method_tree(tree_of):
    """Factory fixture wrapping statements in ``class C { M(...) { ... } }``."""

    def _build(
        *statements: Draft,
        params: tuple = (),
        modifiers: tuple[str, ...] = ("public",),
        returns: str = "void",
    ) -> SyntaxTree:
        return tree_of(class_("C", method("M", params, block(*statements), modifiers, returns)))

    return _build


@pytest.fixture
def find_node():
    """Fixture returning the nth node of a kind in pre-order."""

    def _find(tree: SyntaxTree, kind: NodeKind, nth: int = 0) -> Node:
        matches = [node for node in tree.walk() if node.kind is kind]
        return matches[nth]

    return _find


@pytest.fixture
def stub_facts():
    """Factory fixture for stub oracles with fixed answers."""

    def _create(tree: SyntaxTree, **answers: Any) -> StubFacts:
        return StubFacts(tree, **answers)

    return _create


# =============================================================================
# Engine Fixtures
# =============================================================================


@pytest.fixture
def strict_config():
    """Configuration that raises rule faults instead of isolating them."""
    return EngineConfiguration(strict=True)


@pytest.fixture
def run_rule(strict_config):
    """Fixture running a single rule over a tree and returning its raw findings."""

    def _run(rule: Rule, tree: SyntaxTree, oracle: Optional[SemanticFacts] = None) -> list[Finding]:
        engine = RedundancyEngine(DispatchTable([rule]), strict_config)
        engine.run(tree, oracle)
        return list(engine.findings)

    return _run


@pytest.fixture
def analyze(strict_config):
    """Fixture running the whole catalog over a tree."""

    def _analyze(
        tree: SyntaxTree,
        oracle: Optional[SemanticFacts] = None,
        config: Optional[EngineConfiguration] = None,
    ) -> tuple[Redundancy, ...]:
        return analyze_tree(tree, oracle, config or strict_config)

    return _analyze


@pytest.fixture
def span_texts():
    """Fixture returning the source text under each span of a finding."""

    def _texts(tree: SyntaxTree, finding: Finding) -> tuple[str, ...]:
        return tuple(span.slice(tree.source) for span in finding.spans)

    return _texts


@pytest.fixture
def squash():
    """Fixture removing all whitespace, for comparing edited sources."""

    def _squash(text: str) -> str:
        return "".join(text.split())

    return _squash
