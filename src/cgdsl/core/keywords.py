"""
Reserved vocabulary of the card-game DSL, partitioned into highlighting categories.

Each category is an ordered tuple of literal tokens. Phrases that share a
leading word must be listed longest-first; the grammar compiler rejects a
literal that would shadow a later one. No token may appear in two categories.

Edit this table when the DSL grows a keyword, then rebuild the grammar with
``cgdsl grammar build``.
"""

CONTROL = (
    "stage",
    "if",
    "optional",
    "choose",
    "case",
    "conditional",
    "else",
    "trigger",
)

ACTIONS = (
    "cycle", "move", "deal", "demand",
    "exchange", "place", "flip", "token",
    "reset", "set", "shuffle", "bid",
    "end stage", "end game", "end turn",
    "score", "winner",
)

HELPER = (
    "for", "is", "of", "in", "on", "as",
    "to", "using", "with", "where",
    "until", "from", "at", "cards", "out",
    "owner", "size", "fail", "successful",
    "table", "times",
)

FILTER = (
    "adjacent", "distinct", "empty", "higher",
    "lower", "same",
)

QUANTIFIER = ("all", "any")

OPERATION = ("and", "or", "not", "random", "sum")

POSITIONAL = ("bottom", "top")

EXTREMA = ("highest", "lowest", "max", "min")

STATUS = ("face down", "face up", "private")

CREATION = (
    "card", "combo", "create", "location",
    "memory", "player", "points", "precedence",
    "team", "turnorder",
)

RUNTIME = (
    "competitor", "current", "next",
    "other", "others", "playersin", "playersout",
    "playroundcounter", "position", "previous",
    "stageroundcounter", "teams",
)

# (name, scope tag, tokens) in grammar priority order: structural keywords
# first, then semantic and operator categories.
CATEGORIES: tuple[tuple[str, str, tuple[str, ...]], ...] = (
    ("control", "keyword.control.flow", CONTROL),
    ("actions", "keyword.control.action", ACTIONS),
    ("helper", "keyword.other.helper", HELPER),
    ("filter", "entity.name.function.filter", FILTER),
    ("quantifier", "keyword.operator.quantifier", QUANTIFIER),
    ("operation", "keyword.operator.arithmetic", OPERATION),
    ("positional", "support.function.query", POSITIONAL),
    ("extrema", "support.function.query", EXTREMA),
    ("status", "keyword.control.state", STATUS),
    ("creation", "keyword.control.create", CREATION),
    ("runtime", "support.type.runtime", RUNTIME),
)
