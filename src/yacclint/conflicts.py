"""Structural conflict heuristics.

None of this builds LALR tables. The checks flag grammar shapes that
commonly lead to conflicts: terminals without precedence followed by a
nonterminal, rules with identical bodies, and operator-like terminals
that never appear in a %left/%right/%nonassoc declaration.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from yacclint.ast import Associativity, GrammarFile, PrecedenceDeclaration
from yacclint.tokens import Location

_OPERATOR_CHARS = r"[+\-*/%^<>=!&|~]"

OPERATOR_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(rf"^{_OPERATOR_CHARS}$"),
    re.compile(rf"^{_OPERATOR_CHARS}{{2,}}$"),
    re.compile(rf"^'{_OPERATOR_CHARS}'$"),
    re.compile(rf"^'{_OPERATOR_CHARS}{{2,}}'$"),
    re.compile(rf'^"{_OPERATOR_CHARS}"$'),
    re.compile(rf'^"{_OPERATOR_CHARS}{{2,}}"$'),
)


def is_operator(name: str) -> bool:
    """Return True if *name* looks like a symbolic operator, quoted or not."""
    return any(p.match(name) for p in OPERATOR_PATTERNS)


@dataclass(frozen=True, slots=True)
class PrecedenceInfo:
    level: int
    associativity: Associativity


@dataclass(frozen=True, slots=True)
class ShiftReduceCandidate:
    rule: str
    alternative: int
    symbol: str
    location: Location | None


@dataclass(frozen=True, slots=True)
class ReduceReduceCandidate:
    rules: tuple[str, ...]
    location: Location | None


@dataclass(frozen=True, slots=True)
class AmbiguousOperator:
    rule: str
    operator: str
    location: Location | None


@dataclass(slots=True)
class ConflictReport:
    potential_shift_reduce: list[ShiftReduceCandidate] = field(default_factory=list)
    potential_reduce_reduce: list[ReduceReduceCandidate] = field(default_factory=list)
    ambiguous_precedence: list[AmbiguousOperator] = field(default_factory=list)
    precedence: dict[str, PrecedenceInfo] = field(default_factory=dict)


class Conflict:
    def __init__(self, ast: GrammarFile) -> None:
        self._ast = ast
        self.precedence: dict[str, PrecedenceInfo] = {}

    def analyze(self) -> ConflictReport:
        self._build_precedence_map()
        return ConflictReport(
            potential_shift_reduce=self._detect_shift_reduce(),
            potential_reduce_reduce=self._detect_reduce_reduce(),
            ambiguous_precedence=self._detect_ambiguous_precedence(),
            precedence=dict(self.precedence),
        )

    def has_precedence(self, name: str) -> bool:
        return name in self.precedence

    # ------------------------------------------------------------------

    def _build_precedence_map(self) -> None:
        # Each declaration binds tighter than the one before it
        self.precedence = {}
        level = 0
        for decl in self._ast.declarations:
            if not isinstance(decl, PrecedenceDeclaration):
                continue
            level += 1
            for name in decl.tokens:
                self.precedence[name] = PrecedenceInfo(level, decl.associativity)

    def _detect_shift_reduce(self) -> list[ShiftReduceCandidate]:
        found = []
        for rule in self._ast.rules:
            for alt_idx, alt in enumerate(rule.alternatives):
                for symbol, following in zip(alt.symbols, alt.symbols[1:]):
                    if not symbol.terminal or not following.nonterminal:
                        continue
                    if self.has_precedence(symbol.name):
                        continue
                    found.append(
                        ShiftReduceCandidate(rule.name, alt_idx, symbol.name, symbol.location)
                    )
        return found

    def _detect_reduce_reduce(self) -> list[ReduceReduceCandidate]:
        groups: dict[tuple[tuple[str, ...], ...], list] = {}
        for rule in self._ast.rules:
            body = tuple(tuple(s.name for s in alt.symbols) for alt in rule.alternatives)
            groups.setdefault(body, []).append(rule)

        found = []
        for rules in groups.values():
            if len(rules) > 1:
                found.append(
                    ReduceReduceCandidate(tuple(r.name for r in rules), rules[0].location)
                )
        return found

    def _detect_ambiguous_precedence(self) -> list[AmbiguousOperator]:
        found = []
        for rule in self._ast.rules:
            seen: set[str] = set()
            for alt in rule.alternatives:
                for symbol in alt.symbols:
                    if not symbol.terminal or not is_operator(symbol.name):
                        continue
                    if self.has_precedence(symbol.name) or symbol.name in seen:
                        continue
                    seen.add(symbol.name)
                    found.append(AmbiguousOperator(rule.name, symbol.name, symbol.location))
        return found
