"""Two-namespace symbol registry: declared tokens and nonterminals."""

from __future__ import annotations

from dataclasses import dataclass

from yacclint.ast import GrammarFile, ParameterizedRule, PrecedenceDeclaration, TokenDeclaration
from yacclint.errors import DuplicateDeclarationError
from yacclint.tokens import Location


@dataclass(slots=True)
class TokenInfo:
    type_tag: str | None = None
    location: Location | None = None
    usage_count: int = 0


@dataclass(slots=True)
class NonterminalInfo:
    location: Location | None = None
    usage_count: int = 0


class SymbolTable:
    """Declared tokens and nonterminals with usage counters.

    Built fresh for each file; nothing here outlives a single lint run.
    """

    def __init__(self) -> None:
        self.tokens: dict[str, TokenInfo] = {}
        self.nonterminals: dict[str, NonterminalInfo] = {}
        self.types: dict[str, list[str]] = {}

    def add_token(
        self, name: str, type_tag: str | None = None, location: Location | None = None
    ) -> None:
        if name in self.tokens:
            raise DuplicateDeclarationError(name, self.tokens[name].location)
        self.tokens[name] = TokenInfo(type_tag, location)
        if type_tag is not None:
            self.types.setdefault(type_tag, []).append(name)

    def add_nonterminal(self, name: str, location: Location | None = None) -> None:
        # First declaration wins
        if name in self.nonterminals:
            return
        self.nonterminals[name] = NonterminalInfo(location)

    def use_token(self, name: str) -> None:
        info = self.tokens.get(name)
        if info is not None:
            info.usage_count += 1

    def use_nonterminal(self, name: str) -> None:
        info = self.nonterminals.get(name)
        if info is not None:
            info.usage_count += 1

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_token(self, name: str) -> bool:
        return name in self.tokens

    def is_nonterminal(self, name: str) -> bool:
        return name in self.nonterminals

    def declared(self, name: str) -> bool:
        return self.is_token(name) or self.is_nonterminal(name)

    def unused_tokens(self) -> list[str]:
        return [name for name, info in self.tokens.items() if info.usage_count == 0]

    def unused_nonterminals(self) -> list[str]:
        return [name for name, info in self.nonterminals.items() if info.usage_count == 0]

    def duplicate_symbols(self) -> list[str]:
        return [name for name in self.tokens if name in self.nonterminals]


def build_symbol_table(ast: GrammarFile) -> SymbolTable:
    """Register every declared token and every rule name of *ast*.

    Duplicate %token names are ignored here; DuplicateToken reports them.
    Names that only appear in %left/%right/%nonassoc count as tokens.
    """
    table = SymbolTable()

    for decl in ast.declarations:
        if isinstance(decl, TokenDeclaration):
            for name in decl.names:
                try:
                    table.add_token(name, decl.type_tag, decl.location)
                except DuplicateDeclarationError:
                    pass

    for decl in ast.declarations:
        if isinstance(decl, PrecedenceDeclaration):
            for name in decl.tokens:
                if not table.is_token(name):
                    table.add_token(name, None, decl.location)
        elif isinstance(decl, ParameterizedRule):
            table.add_nonterminal(decl.name, decl.location)

    for rule in ast.rules:
        table.add_nonterminal(rule.name, rule.location)

    return table
