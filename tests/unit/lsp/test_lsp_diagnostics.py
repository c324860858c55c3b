"""
Tests for LSP diagnostic generation.
"""

from lsprotocol import types

from greyout.engine.config import EngineConfiguration
from greyout.lsp.diagnostics import SOURCE, DiagnosticProvider, get_diagnostics_for_tree
from greyout.semantics.syntactic import SyntacticFacts
from greyout.syntax.builders import binary, block, call, expr_stmt, if_, param, return_

PARAMS = (param("int", "x"),)


class TestDiagnosticProvider:
    """Tests for mapping redundancies onto diagnostics."""

    def test_unnecessary_span(self, method_tree) -> None:
        """Test range, code, severity and tag of a removable span."""
        tree = method_tree(return_(binary("+", "x", 0)), params=PARAMS)
        diagnostics = get_diagnostics_for_tree(tree)

        assert len(diagnostics) == 1
        diagnostic = diagnostics[0]
        assert diagnostic.range == types.Range(
            start=types.Position(line=2, character=17),
            end=types.Position(line=2, character=20),
        )
        assert diagnostic.code == "R0201"
        assert diagnostic.source == SOURCE
        assert diagnostic.severity == types.DiagnosticSeverity.Hint
        assert diagnostic.tags == [types.DiagnosticTag.Unnecessary]

    def test_warn_level(self, method_tree) -> None:
        """Test that a rule raised to warn is reported as a warning."""
        tree = method_tree(return_(binary("+", "x", 0)), params=PARAMS)
        config = EngineConfiguration()
        config.warn("add-or-subtract-zero")
        diagnostics = get_diagnostics_for_tree(tree, config=config)
        assert diagnostics[0].severity == types.DiagnosticSeverity.Warning

    def test_allowed_rule(self, method_tree) -> None:
        """Test that an allowed rule produces nothing."""
        tree = method_tree(return_(binary("+", "x", 0)), params=PARAMS)
        config = EngineConfiguration()
        config.allow("R0201")
        assert get_diagnostics_for_tree(tree, config=config) == []

    def test_flagged_span_has_no_tag(self, method_tree) -> None:
        """Test that code which must not be deleted blindly is not greyed out."""
        tree = method_tree(return_(), expr_stmt(call("Use")))
        diagnostics = get_diagnostics_for_tree(tree)
        assert [d.code for d in diagnostics] == ["R0105"]
        assert diagnostics[0].tags == []

    def test_suggestion_in_message(self, method_tree) -> None:
        """Test that a rule suggestion is appended to the message."""
        tree = method_tree(if_(True, block(expr_stmt(call("Use")))))
        diagnostics = get_diagnostics_for_tree(tree)
        assert diagnostics
        assert all(d.code == "R0101" for d in diagnostics)
        assert "\n\nhint: " in diagnostics[0].message

    def test_clean_tree(self, method_tree) -> None:
        """Test a tree with nothing redundant."""
        tree = method_tree(return_(binary("+", "x", 1)), params=PARAMS)
        assert get_diagnostics_for_tree(tree) == []


class TestAbandonedPass:
    """Tests for passes abandoned by the host."""

    def test_abandoned_pass_yields_nothing(self, method_tree) -> None:
        """Test that abandoning from inside the oracle discards the pass."""
        tree = method_tree(return_(binary("+", "x", 0)), params=PARAMS)
        provider = DiagnosticProvider(tree)

        class AbandoningFacts(SyntacticFacts):
            def constant_value(self, expr):
                provider.abandon()
                return super().constant_value(expr)

        provider.oracle = AbandoningFacts(tree)
        assert provider.get_diagnostics() == []

    def test_abandon_before_run(self, method_tree) -> None:
        """Test that abandoning with no pass in flight is harmless."""
        tree = method_tree(return_(binary("+", "x", 0)), params=PARAMS)
        provider = DiagnosticProvider(tree)
        provider.abandon()
        assert len(provider.get_diagnostics()) == 1
