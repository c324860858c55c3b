"""
Editor integration for greyout.

Converts engine results into Language Server Protocol diagnostics so that a
language server can grey out unnecessary code. Hosting the server itself is
left to the editor integration.
"""

from greyout.lsp.diagnostics import DiagnosticProvider, get_diagnostics_for_tree

__all__ = [
    "DiagnosticProvider",
    "get_diagnostics_for_tree",
]
