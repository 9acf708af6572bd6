"""
Reference tokenizer for compiled CGDSL grammars.

Applies a GrammarDocument to text the way a TextMate-style highlighter does:
at each scan position every rule is searched, the earliest match wins, and
ties go to the rule listed first. Begin/end rules open a region in which the
end pattern and the region's inner rules compete the same way.

Used by the test-suite to check grammars and by ``cgdsl grammar tokenize``
to preview highlighting.
"""

import re
from dataclasses import dataclass, field

from .grammar import GrammarDocument, MatchRule, RegionRule


@dataclass
class Token:
    """A scoped span of source text. Offsets index the scanned string."""

    text: str
    scope: str
    start: int
    end: int
    closed: bool = True  # False for a region still open at end of input
    children: list["Token"] = field(default_factory=list)


@dataclass
class _CompiledRule:
    name: str
    scope: str
    first: re.Pattern[str]
    end: re.Pattern[str] | None = None
    inner: list["_CompiledRule"] = field(default_factory=list)


def _compile(rule: MatchRule | RegionRule) -> _CompiledRule:
    if isinstance(rule, RegionRule):
        return _CompiledRule(
            name=rule.name,
            scope=rule.scope,
            first=re.compile(rule.begin),
            end=re.compile(rule.end),
            inner=[_compile(p) for p in rule.patterns],
        )
    return _CompiledRule(name=rule.name, scope=rule.scope, first=re.compile(rule.match))


def _earliest(
    rules: list[_CompiledRule], text: str, pos: int
) -> tuple[re.Match[str], _CompiledRule] | None:
    """Search every rule from ``pos``; earliest start wins, first rule wins ties."""
    best: tuple[re.Match[str], _CompiledRule] | None = None
    for rule in rules:
        m = rule.first.search(text, pos)
        if m is None:
            continue
        if best is None or m.start() < best[0].start():
            best = (m, rule)
    return best


class Tokenizer:
    """Scans text against the ordered rules of a grammar document."""

    def __init__(self, document: GrammarDocument):
        self.document = document
        self._rules = [_compile(rule) for rule in document.rules]

    def tokenize(self, text: str) -> list[Token]:
        tokens: list[Token] = []
        pos = 0
        while pos < len(text):
            found = _earliest(self._rules, text, pos)
            if found is None:
                break
            m, rule = found
            if rule.end is not None:
                token = self._scan_region(rule, rule.end, m, text)
            else:
                token = Token(m.group(0), rule.scope, m.start(), m.end())
            tokens.append(token)
            pos = max(token.end, m.start() + 1)
        return tokens

    def _scan_region(
        self, rule: _CompiledRule, end_pattern: re.Pattern[str], begin: re.Match[str], text: str
    ) -> Token:
        start = begin.start()
        pos = begin.end()
        children: list[Token] = []
        while True:
            end = end_pattern.search(text, pos)
            inner = _earliest(rule.inner, text, pos)
            # End pattern wins ties with inner rules.
            if inner is not None and (end is None or inner[0].start() < end.start()):
                m, sub = inner
                children.append(Token(m.group(0), sub.scope, m.start(), m.end()))
                pos = max(m.end(), m.start() + 1)
                continue
            if end is None:
                return Token(text[start:], rule.scope, start, len(text), False, children)
            return Token(text[start : end.end()], rule.scope, start, end.end(), True, children)


def tokenize(document: GrammarDocument, text: str) -> list[Token]:
    """Tokenize ``text`` with ``document``. Unmatched text yields no tokens."""
    return Tokenizer(document).tokenize(text)
