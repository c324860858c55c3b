"""
Diagnostic generation for greyout.

This module converts redundancies found by the engine into LSP-compatible
diagnostic messages. Unnecessary spans carry the ``Unnecessary`` tag, which
editors render greyed out; flagged spans are plain hints or warnings.
"""

from __future__ import annotations

import logging
from typing import Optional

from lsprotocol import types

from greyout.engine.config import EngineConfiguration
from greyout.engine.dispatch import Redundancy, RedundancyEngine
from greyout.engine.rules import RuleLevel
from greyout.engine.spans import SpanClass
from greyout.semantics.facts import SemanticFacts
from greyout.syntax.nodes import SyntaxTree
from greyout.utils.errors import PassAbandoned


logger = logging.getLogger("greyout.lsp")

SOURCE = "greyout"


class DiagnosticProvider:
    """
    Generates LSP diagnostics for one syntax tree.

    The provider runs a single engine pass over the tree and maps every
    redundancy onto a diagnostic whose range is expressed in the tree's
    source.
    """

    def __init__(
        self,
        tree: SyntaxTree,
        oracle: Optional[SemanticFacts] = None,
        config: Optional[EngineConfiguration] = None,
    ) -> None:
        """
        Initialize the diagnostic provider.

        Args:
            tree: The tree to analyze
            oracle: Semantic oracle for the tree; defaults to SyntacticFacts
            config: Optional engine configuration
        """
        self.tree = tree
        self.oracle = oracle
        self.config = config
        self.engine: Optional[RedundancyEngine] = None
        self._diagnostics: list[types.Diagnostic] = []

    def get_diagnostics(self) -> list[types.Diagnostic]:
        """
        Get all diagnostics for the tree.

        An abandoned pass yields no diagnostics; a host that abandons a pass
        is about to analyze a newer tree anyway.

        Returns:
            List of LSP diagnostic objects
        """
        self._diagnostics = []
        self.engine = RedundancyEngine(config=self.config)
        try:
            redundancies = self.engine.run(self.tree, self.oracle)
        except PassAbandoned:
            logger.debug(f"no diagnostics for abandoned pass over {self.tree.filename or '<tree>'}")
            return self._diagnostics

        for redundancy in redundancies:
            self._add_redundancy(redundancy)
        return self._diagnostics

    def abandon(self) -> None:
        """Abandon the pass currently producing diagnostics, if any."""
        if self.engine is not None:
            self.engine.abandon()

    def _add_redundancy(self, redundancy: Redundancy) -> None:
        """
        Add a redundancy as an LSP diagnostic.

        Args:
            redundancy: The merged redundancy
        """
        severity_map = {
            RuleLevel.HINT: types.DiagnosticSeverity.Hint,
            RuleLevel.WARN: types.DiagnosticSeverity.Warning,
        }
        severity = severity_map.get(redundancy.level)
        if severity is None:
            return  # Skip allowed rules

        rule = redundancy.rule
        message = rule.message
        if rule.suggestion:
            message = f"{message}\n\nhint: {rule.suggestion}"

        diagnostic = types.Diagnostic(
            range=self._range(redundancy.start, redundancy.end),
            message=message,
            severity=severity,
            source=SOURCE,
            code=rule.code,
            tags=self._get_diagnostic_tags(redundancy),
        )

        self._diagnostics.append(diagnostic)

    def _range(self, start: int, end: int) -> types.Range:
        """Convert source offsets into a 0-indexed LSP range."""
        first = self.tree.location(start)
        last = self.tree.location(end)
        return types.Range(
            start=types.Position(line=first.line - 1, character=first.column - 1),
            end=types.Position(line=last.line - 1, character=last.column - 1),
        )

    def _get_diagnostic_tags(self, redundancy: Redundancy) -> list[types.DiagnosticTag]:
        if redundancy.classification is SpanClass.UNNECESSARY:
            return [types.DiagnosticTag.Unnecessary]
        return []


def get_diagnostics_for_tree(
    tree: SyntaxTree,
    oracle: Optional[SemanticFacts] = None,
    config: Optional[EngineConfiguration] = None,
) -> list[types.Diagnostic]:
    """
    Convenience function to get diagnostics for a tree.

    Args:
        tree: The tree to analyze
        oracle: Semantic oracle for the tree
        config: Optional engine configuration

    Returns:
        List of LSP diagnostics
    """
    provider = DiagnosticProvider(tree, oracle, config)
    return provider.get_diagnostics()
