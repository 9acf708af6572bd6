"""
Client side of the CGDSL language server.

The server itself is an external binary; this package starts it, holds the
LSP session, and sends the custom requests the tooling needs.
"""

from .client import GENERATE_GRAPH, LanguageSession

__all__ = ["GENERATE_GRAPH", "LanguageSession"]
