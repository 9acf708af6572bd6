"""
Keyword taxonomy for CGDSL - named, non-overlapping groups of literal tokens.

A taxonomy is the ordered list of categories the grammar compiler turns into
highlighting rules. The canonical one is built from ``cgdsl.core.keywords``;
projects can supply their own as YAML.
"""

import re
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .keywords import CATEGORIES

# One or more runs of word characters separated by single spaces. Anything
# else could carry regex meaning into the compiled match expression.
TOKEN_RE = re.compile(r"^\w+( \w+)*$", re.ASCII)

# Repository keys of the built-in literal rules.
RESERVED_NAMES = frozenset({"ints", "strings"})


class Category(BaseModel):
    """
    A named group of literal tokens sharing one highlighting scope.

    Tokens keep their declared order; it is the alternation order of the
    compiled match expression.
    """

    name: str = Field(..., pattern=r"^[a-z][a-z0-9_]*$", description="Category name (snake_case)")
    scope: str = Field(
        ...,
        pattern=r"^[a-z][a-z0-9-]*(\.[a-z][a-z0-9-]*)*$",
        description="Dotted scope tag, without the grammar suffix",
    )
    tokens: tuple[str, ...] = Field(..., min_length=1, description="Literal tokens in match order")

    @field_validator("tokens")
    @classmethod
    def validate_tokens(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Reject empty, malformed, and repeated tokens."""
        seen: set[str] = set()
        for token in v:
            if not token:
                raise ValueError("Tokens must not be empty")
            if not TOKEN_RE.match(token):
                raise ValueError(
                    f"Invalid token '{token}': only words separated by single spaces are allowed"
                )
            if token in seen:
                raise ValueError(f"Token '{token}' is listed twice")
            seen.add(token)
        return v

    model_config = {"frozen": True}


class Taxonomy(BaseModel):
    """
    Ordered sequence of categories.

    Order is grammar priority. Disjointness across categories is checked by
    ``validate_taxonomy`` in the grammar compiler, which reports the
    offending token and both categories.
    """

    version: str = Field(default="1.0.0", description="Vocabulary revision")
    categories: tuple[Category, ...] = Field(..., min_length=1)

    @model_validator(mode="after")
    def check_unique_names(self) -> "Taxonomy":
        names = [c.name for c in self.categories]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate category names: {', '.join(duplicates)}")
        reserved = [n for n in names if n in RESERVED_NAMES]
        if reserved:
            raise ValueError(f"Category names reserved for built-in rules: {', '.join(reserved)}")
        return self

    @property
    def names(self) -> list[str]:
        return [c.name for c in self.categories]

    def get(self, name: str) -> Category | None:
        """Get category by name."""
        for category in self.categories:
            if category.name == name:
                return category
        return None

    def all_tokens(self) -> list[tuple[str, str]]:
        """Return (token, category name) pairs in priority order."""
        return [(token, c.name) for c in self.categories for token in c.tokens]

    model_config = {"frozen": True}


def default_taxonomy() -> Taxonomy:
    """Build the canonical CGDSL taxonomy from the keyword table."""
    return Taxonomy(
        categories=tuple(
            Category(name=name, scope=scope, tokens=tokens) for name, scope, tokens in CATEGORIES
        )
    )


# Serialization helpers


def load_taxonomy(path: Path) -> Taxonomy:
    """
    Load a taxonomy from a YAML file.

    Args:
        path: Path to taxonomy.yml

    Returns:
        Taxonomy instance

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If YAML is empty or doesn't match schema
    """
    if not path.exists():
        raise FileNotFoundError(f"Taxonomy not found: {path}")

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e

    if not data:
        raise ValueError(f"Empty or invalid YAML in {path}")

    return Taxonomy.model_validate(data)


def save_taxonomy(taxonomy: Taxonomy, path: Path) -> None:
    """Save a taxonomy to a YAML file."""
    path.parent.mkdir(parents=True, exist_ok=True)

    data = taxonomy.model_dump(mode="json")

    with open(path, "w") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
