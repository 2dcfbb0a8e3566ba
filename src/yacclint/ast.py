"""AST node types for parsed grammar files."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from yacclint.tokens import Location


class SymbolKind(Enum):
    TERMINAL = "terminal"
    NONTERMINAL = "nonterminal"


class Associativity(Enum):
    LEFT = "left"
    RIGHT = "right"
    NONASSOC = "nonassoc"


@dataclass(frozen=True, slots=True)
class Symbol:
    """Symbol reference inside an alternative.

    Quoted literals keep their quotes in ``name``. ``arguments`` is set for
    parameterized rule calls such as ``list(expr)``.
    """

    name: str
    kind: SymbolKind
    location: Location | None = None
    alias_name: str | None = None
    arguments: tuple[Symbol, ...] | None = None

    @property
    def terminal(self) -> bool:
        return self.kind is SymbolKind.TERMINAL

    @property
    def nonterminal(self) -> bool:
        return self.kind is SymbolKind.NONTERMINAL


@dataclass(frozen=True, slots=True)
class Action:
    """Action code block, braces included."""

    code: str
    location: Location | None = None


@dataclass(slots=True)
class Alternative:
    """One production of a rule.

    The only mutable node: an autocorrect may clear ``action``.
    """

    symbols: tuple[Symbol, ...] = ()
    action: Action | None = None
    prec: str | None = None
    location: Location | None = None


@dataclass(frozen=True, slots=True)
class Rule:
    """Grammar rule: ``name : alt | alt ;``."""

    name: str
    alternatives: tuple[Alternative, ...]
    location: Location | None = None


@dataclass(frozen=True, slots=True)
class ParameterizedRule:
    """Rule with formal parameters, from ``%rule`` or ``name(X, Y): ...``."""

    name: str
    parameters: tuple[str, ...]
    alternatives: tuple[Alternative, ...]
    location: Location | None = None


@dataclass(frozen=True, slots=True)
class TokenDeclaration:
    """%token [<tag>] NAME ..."""

    names: tuple[str, ...]
    type_tag: str | None = None
    location: Location | None = None


@dataclass(frozen=True, slots=True)
class TypeDeclaration:
    """%type [<tag>] name ..."""

    type_tag: str | None
    names: tuple[str, ...]
    location: Location | None = None


@dataclass(frozen=True, slots=True)
class PrecedenceDeclaration:
    """%left / %right / %nonassoc token ..."""

    associativity: Associativity
    tokens: tuple[str, ...]
    location: Location | None = None


@dataclass(frozen=True, slots=True)
class StartDeclaration:
    """%start symbol"""

    symbol: str
    location: Location | None = None


@dataclass(frozen=True, slots=True)
class UnionDeclaration:
    """%union { ... }"""

    body: str
    location: Location | None = None


@dataclass(frozen=True, slots=True)
class InlineRule:
    """%inline rule_name"""

    rule_name: str
    location: Location | None = None


@dataclass(frozen=True, slots=True)
class Prologue:
    """Code between %{ and %}."""

    code: str
    location: Location | None = None


@dataclass(frozen=True, slots=True)
class Epilogue:
    """Code after the second %%."""

    code: str
    location: Location | None = None


@dataclass(frozen=True, slots=True)
class Passthrough:
    """Declaration-section text not modelled by the AST (%define, %code, ...).

    Kept verbatim so the formatter can write it back unchanged.
    """

    text: str
    location: Location | None = None


Declaration = (
    TokenDeclaration
    | TypeDeclaration
    | PrecedenceDeclaration
    | StartDeclaration
    | UnionDeclaration
    | ParameterizedRule
    | InlineRule
)

RuleLike = Rule | ParameterizedRule


@dataclass(frozen=True, slots=True)
class GrammarFile:
    """Root node."""

    declarations: tuple[Declaration, ...] = ()
    rules: tuple[RuleLike, ...] = ()
    prologue: Prologue | None = None
    epilogue: Epilogue | None = None
    location: Location | None = None
    passthrough: tuple[Passthrough, ...] = ()

    def start_symbol(self) -> str | None:
        """Explicit %start symbol, else the first rule's name."""
        for decl in self.declarations:
            if isinstance(decl, StartDeclaration):
                return decl.symbol
        if self.rules:
            return self.rules[0].name
        return None

    def find_rule(self, name: str) -> RuleLike | None:
        for rule in self.rules:
            if rule.name == name:
                return rule
        return None

    def declarations_of(self, kind: type) -> list:
        return [d for d in self.declarations if isinstance(d, kind)]
