"""
TextMate grammar compiler for CGDSL.

Turns a keyword taxonomy into a priority-ordered pattern grammar for editor
highlighters. Each category becomes one whole-word match rule; two built-in
rules cover integer literals and double-quoted strings.

The consuming tokenizer tries rules in ``patterns`` order and keeps the first
success at a scan position, so the compiler rejects taxonomies where a
literal would shadow a longer phrase declared after it.

Usage:
    python -m cgdsl.core.grammar                # print to stdout
    cgdsl grammar build                         # write syntaxes/cgdsl.tmLanguage.json
"""

from __future__ import annotations

import json
import logging
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, field_validator

from .errors import OrderingViolationError, TaxonomyConflictError
from .taxonomy import Taxonomy, default_taxonomy

logger = logging.getLogger(__name__)

SCHEMA_URL = "https://json.schemastore.org/tmlanguage.json"
DEFAULT_NAME = "cgdsl"

INTEGER_MATCH = r"\b[0-9]+\b"
STRING_DELIMITER = '"'
ESCAPE_MATCH = r"\\."


# ---------------------------------------------------------------------------
# Rule model
# ---------------------------------------------------------------------------


class MatchRule(BaseModel):
    """A single-expression rule: one scope, one match."""

    kind: Literal["match"] = "match"
    name: str = Field(..., description="Repository key")
    scope: str = Field(..., description="Full scope tag including grammar suffix")
    match: str

    def to_pattern(self) -> dict[str, Any]:
        return {"name": self.scope, "match": self.match}

    def to_repository(self) -> dict[str, Any]:
        return {"patterns": [self.to_pattern()]}

    model_config = {"frozen": True}


class RegionRule(BaseModel):
    """A begin/end delimited rule with nested patterns (string literals)."""

    kind: Literal["region"] = "region"
    name: str
    scope: str
    begin: str
    end: str
    patterns: tuple[MatchRule, ...] = ()

    def to_repository(self) -> dict[str, Any]:
        return {
            "name": self.scope,
            "begin": self.begin,
            "end": self.end,
            "patterns": [p.to_pattern() for p in self.patterns],
        }

    model_config = {"frozen": True}


Rule = Annotated[MatchRule | RegionRule, Field(discriminator="kind")]


class GrammarDocument(BaseModel):
    """
    Compiled grammar: ordered rule references plus the rule repository.

    ``rules`` order is evaluation priority. The serialized form is the
    tmLanguage JSON the editor loads.
    """

    name: str
    scope_name: str
    rules: tuple[Rule, ...]

    @field_validator("rules")
    @classmethod
    def check_rule_names(cls, v: tuple[Rule, ...]) -> tuple[Rule, ...]:
        """Each rule needs its own repository entry."""
        names = [rule.name for rule in v]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate rule names: {', '.join(duplicates)}")
        return v

    @property
    def patterns(self) -> list[str]:
        return [rule.name for rule in self.rules]

    def get(self, name: str) -> Rule | None:
        for rule in self.rules:
            if rule.name == name:
                return rule
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "$schema": SCHEMA_URL,
            "name": self.name,
            "scopeName": self.scope_name,
            "patterns": [{"include": f"#{rule.name}"} for rule in self.rules],
            "repository": {rule.name: rule.to_repository() for rule in self.rules},
        }

    def dumps(self) -> str:
        """Serialize deterministically (stable key order, trailing newline)."""
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False) + "\n"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GrammarDocument:
        """Rebuild a document from its tmLanguage JSON form."""
        repository = data.get("repository", {})
        rules: list[Rule] = []
        for ref in data.get("patterns", []):
            key = ref["include"].lstrip("#")
            entry = repository[key]
            if "begin" in entry:
                rules.append(
                    RegionRule(
                        name=key,
                        scope=entry["name"],
                        begin=entry["begin"],
                        end=entry["end"],
                        patterns=tuple(
                            MatchRule(name=key, scope=p["name"], match=p["match"])
                            for p in entry.get("patterns", [])
                        ),
                    )
                )
            else:
                inner = entry["patterns"][0]
                rules.append(MatchRule(name=key, scope=inner["name"], match=inner["match"]))
        return cls(name=data["name"], scope_name=data["scopeName"], rules=tuple(rules))

    @classmethod
    def loads(cls, text: str) -> GrammarDocument:
        return cls.from_dict(json.loads(text))

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def shadows(shorter: str, longer: str) -> bool:
    """
    True when ``shorter`` matches at the start of ``longer`` and ends on a word boundary.

    ``end`` shadows ``end stage``; ``other`` does not shadow ``others``
    because the closing ``\\b`` fails inside a word and the matcher
    backtracks to the next alternative.
    """
    return longer.startswith(shorter + " ")


def check_disjoint(taxonomy: Taxonomy) -> None:
    """Raise TaxonomyConflictError on the first token claimed by two categories."""
    owners: dict[str, str] = {}
    for token, category in taxonomy.all_tokens():
        first = owners.get(token)
        if first is not None:
            raise TaxonomyConflictError(token, first, category)
        owners[token] = category


def check_ordering(taxonomy: Taxonomy) -> None:
    """
    Raise OrderingViolationError where a literal shadows one matched after it.

    Inside a category, alternatives are tried in declared order. Across
    categories, rules are tried in taxonomy order.
    """
    categories = taxonomy.categories
    for index, category in enumerate(categories):
        tokens = category.tokens
        for i, shorter in enumerate(tokens):
            for longer in tokens[i + 1 :]:
                if shadows(shorter, longer):
                    raise OrderingViolationError(category.name, shorter, longer)
            for later in categories[index + 1 :]:
                for longer in later.tokens:
                    if shadows(shorter, longer):
                        raise OrderingViolationError(category.name, shorter, longer, later.name)


def validate_taxonomy(taxonomy: Taxonomy) -> None:
    """Run every build-time check the compiler requires."""
    check_disjoint(taxonomy)
    check_ordering(taxonomy)


# ---------------------------------------------------------------------------
# Compilation
# ---------------------------------------------------------------------------


def word_regex(words: tuple[str, ...] | list[str]) -> str:
    """Whole-word alternation of ``words`` in declared order."""
    return r"\b(" + "|".join(words) + r")\b"


def integer_rule(name: str = DEFAULT_NAME) -> MatchRule:
    return MatchRule(name="ints", scope=f"constant.numeric.integer.{name}", match=INTEGER_MATCH)


def string_rule(name: str = DEFAULT_NAME) -> RegionRule:
    return RegionRule(
        name="strings",
        scope=f"string.quoted.double.{name}",
        begin=STRING_DELIMITER,
        end=STRING_DELIMITER,
        patterns=(
            MatchRule(
                name="strings",
                scope=f"constant.character.escape.{name}",
                match=ESCAPE_MATCH,
            ),
        ),
    )


def compile_grammar(taxonomy: Taxonomy | None = None, name: str = DEFAULT_NAME) -> GrammarDocument:
    """
    Compile a taxonomy into a grammar document.

    Args:
        taxonomy: Categories to compile (default: the canonical taxonomy)
        name: Grammar name, used for ``source.<name>`` and scope suffixes

    Returns:
        GrammarDocument with one rule per category, then ints and strings

    Raises:
        TaxonomyConflictError: If a token appears in two categories
        OrderingViolationError: If a literal shadows a later, longer phrase
    """
    if taxonomy is None:
        taxonomy = default_taxonomy()

    validate_taxonomy(taxonomy)

    rules: list[Rule] = [
        MatchRule(
            name=category.name,
            scope=f"{category.scope}.{name}",
            match=word_regex(category.tokens),
        )
        for category in taxonomy.categories
    ]
    rules.append(integer_rule(name))
    rules.append(string_rule(name))

    logger.debug(f"Compiled {len(taxonomy.categories)} categories into grammar '{name}'")
    return GrammarDocument(name=name, scope_name=f"source.{name}", rules=tuple(rules))


if __name__ == "__main__":
    print(compile_grammar().dumps(), end="")
