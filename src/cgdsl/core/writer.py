"""
Persistence for compiled grammars.

The editor reloads the grammar file while it is being rebuilt, so writes go
to a temporary file in the target directory and are moved into place with
``os.replace``.
"""

import logging
import os
import tempfile
from pathlib import Path

from .grammar import GrammarDocument

logger = logging.getLogger(__name__)


def write_atomic(path: Path, content: str) -> None:
    """Write ``content`` to ``path`` so readers see the old or new file, never a partial one."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_path = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(content)
        os.replace(temp_path, path)
    except BaseException:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise


def write_grammar(document: GrammarDocument, path: Path) -> Path:
    """Serialize ``document`` and atomically replace ``path`` with it."""
    write_atomic(path, document.dumps())
    logger.info(f"Wrote grammar '{document.name}' to {path}")
    return path


def check_grammar(document: GrammarDocument, path: Path) -> bool:
    """Return True when ``path`` holds exactly the serialization of ``document``."""
    if not path.exists():
        logger.info(f"Grammar file missing: {path}")
        return False
    return path.read_text(encoding="utf-8") == document.dumps()


def load_grammar(path: Path) -> GrammarDocument:
    """Load a grammar document from a tmLanguage JSON file."""
    if not path.exists():
        raise FileNotFoundError(f"Grammar not found: {path}")
    return GrammarDocument.loads(path.read_text(encoding="utf-8"))
