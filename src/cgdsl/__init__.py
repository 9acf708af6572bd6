"""
CGDSL editor tooling.

Keyword taxonomy and TextMate grammar compiler for the card-game DSL, plus
the client-side glue for the language server's graph export.
"""

from __future__ import annotations

import re
from importlib.metadata import version as _metadata_version
from pathlib import Path as _Path

from .core.errors import (
    CgdslError,
    GraphExportError,
    ManifestError,
    OrderingViolationError,
    SessionError,
    TaxonomyConflictError,
)


def _get_version() -> str:
    """Get version from pyproject.toml (editable) or importlib.metadata (installed)."""
    pyproject = _Path(__file__).parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        content = pyproject.read_text()
        if match := re.search(r'^version\s*=\s*["\']([^"\']+)["\']', content, re.MULTILINE):
            return match.group(1)

    try:
        return _metadata_version("cgdsl-tools")
    except Exception:
        return "0.0.0"


__version__ = _get_version()

__all__ = [
    "__version__",
    "CgdslError",
    "GraphExportError",
    "ManifestError",
    "OrderingViolationError",
    "SessionError",
    "TaxonomyConflictError",
]
