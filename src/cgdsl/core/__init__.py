"""Core CGDSL tooling: taxonomy, grammar compiler, tokenizer, configuration."""

from .grammar import GrammarDocument, MatchRule, RegionRule, compile_grammar, validate_taxonomy
from .taxonomy import Category, Taxonomy, default_taxonomy, load_taxonomy
from .tokenizer import Token, Tokenizer, tokenize

__all__ = [
    "Category",
    "GrammarDocument",
    "MatchRule",
    "RegionRule",
    "Taxonomy",
    "Token",
    "Tokenizer",
    "compile_grammar",
    "default_taxonomy",
    "load_taxonomy",
    "tokenize",
    "validate_taxonomy",
]
