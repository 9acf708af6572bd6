"""Shared pytest fixtures for CGDSL tests."""

import pytest

from cgdsl.core.grammar import GrammarDocument, compile_grammar
from cgdsl.core.taxonomy import Category, Taxonomy


@pytest.fixture
def small_taxonomy() -> Taxonomy:
    """Two-category taxonomy used by the end-to-end scenarios."""
    return Taxonomy(
        categories=(
            Category(name="control", scope="keyword.control.flow", tokens=("stage", "if")),
            Category(name="creation", scope="keyword.control.create", tokens=("card", "player")),
        )
    )


@pytest.fixture
def small_grammar(small_taxonomy: Taxonomy) -> GrammarDocument:
    return compile_grammar(small_taxonomy)


@pytest.fixture
def canonical_grammar() -> GrammarDocument:
    return compile_grammar()
