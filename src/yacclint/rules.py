"""Concrete lint rules and the static rule table."""

from __future__ import annotations

import re
from typing import Any

from yacclint.ast import (
    Alternative,
    GrammarFile,
    ParameterizedRule,
    PrecedenceDeclaration,
    RuleLike,
    StartDeclaration,
    Symbol,
    TokenDeclaration,
    TypeDeclaration,
)
from yacclint.config import ConfigError
from yacclint.conflicts import Conflict
from yacclint.errors import DuplicateDeclarationError
from yacclint.linter import (
    LintContext,
    Offense,
    Registry,
    RemoveAction,
    ReplaceSource,
    Rule,
    RuleDescriptor,
    Severity,
)
from yacclint.reachability import Reachability
from yacclint.recursion import Recursion
from yacclint.symbol_table import SymbolTable, build_symbol_table
from yacclint.tokens import Location

# Bison's predefined error-recovery token
ERROR_TOKEN = "error"

# Parameterized rules provided by the Lrama standard library
STDLIB_RULES = frozenset(
    {
        "option",
        "list",
        "nonempty_list",
        "separated_list",
        "separated_nonempty_list",
        "preceded",
        "terminated",
        "delimited",
    }
)


def _is_literal(name: str) -> bool:
    return name.startswith(("'", '"'))


def _all_rules(ast: GrammarFile) -> list[RuleLike]:
    """Rules of the rules section followed by %rule declarations."""
    decls = [d for d in ast.declarations if isinstance(d, ParameterizedRule)]
    return [*ast.rules, *decls]


def _precedence_tokens(ast: GrammarFile) -> set[str]:
    names: set[str] = set()
    for decl in ast.declarations:
        if isinstance(decl, PrecedenceDeclaration):
            names.update(decl.tokens)
    return names


# ---------------------------------------------------------------------------
# Symbols and declarations
# ---------------------------------------------------------------------------


class UndefinedSymbol(Rule):
    def check(self, ast: GrammarFile, context: LintContext) -> list[Offense]:
        table = context.symbol_table if context is not None else build_symbol_table(ast)
        for rule in _all_rules(ast):
            params = set(getattr(rule, "parameters", ()))
            for alt in rule.alternatives:
                for symbol in alt.symbols:
                    self._check_symbol(symbol, table, params)
        return self.offenses

    def _check_symbol(self, symbol: Symbol, table: SymbolTable, params: set[str]) -> None:
        if not self._defined(symbol, table, params):
            self.add_offense(symbol, f"Undefined symbol '{symbol.name}'")
        for arg in symbol.arguments or ():
            self._check_symbol(arg, table, params)

    @staticmethod
    def _defined(symbol: Symbol, table: SymbolTable, params: set[str]) -> bool:
        name = symbol.name
        if _is_literal(name) or name == ERROR_TOKEN or name in params:
            return True
        if symbol.arguments is not None and name in STDLIB_RULES:
            return True
        return table.declared(name)


class DuplicateToken(Rule):
    def check(self, ast: GrammarFile, context: LintContext) -> list[Offense]:
        seen: dict[str, Any] = {}
        for decl in ast.declarations:
            if not isinstance(decl, TokenDeclaration):
                continue
            for name in decl.names:
                if name in seen:
                    self.add_offense(decl, f"Token '{name}' already defined at {seen[name]}")
                else:
                    seen[name] = decl.location
        return self.offenses


class UnusedToken(Rule):
    def check(self, ast: GrammarFile, context: LintContext) -> list[Offense]:
        table = SymbolTable()
        for decl in ast.declarations:
            if not isinstance(decl, TokenDeclaration):
                continue
            for name in decl.names:
                try:
                    table.add_token(name, decl.type_tag, decl.location)
                except DuplicateDeclarationError:
                    pass

        for rule in _all_rules(ast):
            for alt in rule.alternatives:
                for symbol in _walk_symbols(alt):
                    if symbol.terminal:
                        table.use_token(symbol.name)

        for name in table.unused_tokens():
            decl = _token_declaration(ast, name)
            if decl is not None:
                self.add_offense(decl, f"Token '{name}' is declared but never used")
        return self.offenses


class UnusedNonterminal(Rule):
    def check(self, ast: GrammarFile, context: LintContext) -> list[Offense]:
        table = SymbolTable()
        for rule in ast.rules:
            table.add_nonterminal(rule.name, rule.location)

        for rule in _all_rules(ast):
            for alt in rule.alternatives:
                for symbol in _walk_symbols(alt):
                    if symbol.nonterminal:
                        table.use_nonterminal(symbol.name)

        start = ast.start_symbol()
        if start is not None:
            table.use_nonterminal(start)

        for name in table.unused_nonterminals():
            if name == start:
                continue
            rule = ast.find_rule(name)
            if rule is not None:
                self.add_offense(rule, f"Nonterminal '{name}' is defined but never used")
        return self.offenses


class MissingStartSymbol(Rule):
    def check(self, ast: GrammarFile, context: LintContext) -> list[Offense]:
        if ast.declarations_of(StartDeclaration) or ast.rules:
            return self.offenses
        self.add_offense(None, "No %start declaration and no rules defined")
        return self.offenses


def _walk_symbols(alt: Alternative):
    """Yield every symbol of *alt*, including call arguments."""
    stack = list(reversed(alt.symbols))
    while stack:
        symbol = stack.pop()
        yield symbol
        stack.extend(reversed(symbol.arguments or ()))


def _token_declaration(ast: GrammarFile, name: str) -> TokenDeclaration | None:
    for decl in ast.declarations:
        if isinstance(decl, TokenDeclaration) and name in decl.names:
            return decl
    return None


# ---------------------------------------------------------------------------
# Grammar structure
# ---------------------------------------------------------------------------


class UnreachableRule(Rule):
    def check(self, ast: GrammarFile, context: LintContext) -> list[Offense]:
        if not ast.rules:
            return self.offenses
        start = ast.start_symbol()
        analyzer = Reachability(ast)
        analyzer.analyze(start)
        unreachable = analyzer.unreachable_rules()
        for rule in ast.rules:
            if rule.name in unreachable:
                self.add_offense(
                    rule, f"Rule '{rule.name}' is not reachable from start symbol '{start}'"
                )
        return self.offenses


class LeftRecursion(Rule):
    def check(self, ast: GrammarFile, context: LintContext) -> list[Offense]:
        for name in Recursion(ast).analyze().left_recursive:
            rule = ast.find_rule(name)
            if rule is not None:
                self.add_offense(
                    rule,
                    f"Rule '{name}' uses left recursion "
                    "(consider using right recursion for LL parsers)",
                )
        return self.offenses


class RightRecursion(Rule):
    def check(self, ast: GrammarFile, context: LintContext) -> list[Offense]:
        for name in Recursion(ast).analyze().right_recursive:
            rule = ast.find_rule(name)
            if rule is not None:
                self.add_offense(
                    rule,
                    f"Rule '{name}' uses right recursion "
                    "(consider left recursion for better LR parser performance)",
                )
        return self.offenses


class CircularReference(Rule):
    """Cycles through first symbols where no alternative can terminate."""

    def check(self, ast: GrammarFile, context: LintContext) -> list[Offense]:
        self._rules = {rule.name: rule for rule in ast.rules}
        self._visited: set[str] = set()
        self._stack: set[str] = set()

        for rule in ast.rules:
            if rule.name in self._visited:
                continue
            if self._has_cycle(rule.name):
                self.add_offense(rule, f"Rule '{rule.name}' is part of a circular reference")
        return self.offenses

    def _has_cycle(self, name: str) -> bool:
        if name in self._visited:
            return False
        if name in self._stack:
            return self._pure_nonterminal(name)

        self._stack.add(name)
        rule = self._rules.get(name)
        for alt in rule.alternatives if rule is not None else ():
            if _has_terminal_or_empty(alt):
                continue
            if self._has_cycle(alt.symbols[0].name):
                return True

        self._stack.discard(name)
        self._visited.add(name)
        return False

    def _pure_nonterminal(self, name: str) -> bool:
        rule = self._rules.get(name)
        if rule is None:
            return False
        return all(not _has_terminal_or_empty(alt) for alt in rule.alternatives)


def _has_terminal_or_empty(alt: Alternative) -> bool:
    return not alt.symbols or any(s.terminal for s in alt.symbols)


class LongRule(Rule):
    def check(self, ast: GrammarFile, context: LintContext) -> list[Offense]:
        limit = int(self.config.get("max_alternatives", 10))
        for rule in ast.rules:
            count = len(rule.alternatives)
            if count > limit:
                self.add_offense(
                    rule,
                    f"Rule '{rule.name}' has {count} alternatives "
                    f"(max: {limit}). Consider refactoring.",
                )
        return self.offenses


class FactorizableRules(Rule):
    def check(self, ast: GrammarFile, context: LintContext) -> list[Offense]:
        for rule in ast.rules:
            self._check_rule(rule)
        return self.offenses

    def _check_rule(self, rule: RuleLike) -> None:
        if len(rule.alternatives) < 2:
            return

        groups: dict[str, list[Alternative]] = {}
        for alt in rule.alternatives:
            if alt.symbols:
                groups.setdefault(alt.symbols[0].name, []).append(alt)

        for alts in groups.values():
            if len(alts) < 2:
                continue
            prefix = _common_prefix_length(alts)
            if prefix < 2:
                continue
            self.add_offense(
                rule,
                f"Rule '{rule.name}' has {len(alts)} alternatives with common prefix "
                f"({prefix} symbols). Consider factoring.",
            )
            break  # once per rule


def _common_prefix_length(alts: list[Alternative]) -> int:
    length = 0
    for column in zip(*(alt.symbols for alt in alts)):
        if len({s.name for s in column}) != 1:
            break
        length += 1
    return length


class RedundantEpsilon(Rule):
    def check(self, ast: GrammarFile, context: LintContext) -> list[Offense]:
        for rule in ast.rules:
            empty = [alt for alt in rule.alternatives if not alt.symbols]
            if not empty or len(empty) == len(rule.alternatives):
                continue
            for alt in empty:
                self.add_offense(
                    alt,
                    f"Rule '{rule.name}' has an epsilon production. "
                    "Verify if it's necessary or if the rule can be made optional elsewhere.",
                )
        return self.offenses


# ---------------------------------------------------------------------------
# Precedence
# ---------------------------------------------------------------------------


class AmbiguousPrecedence(Rule):
    def check(self, ast: GrammarFile, context: LintContext) -> list[Offense]:
        for entry in Conflict(ast).analyze().ambiguous_precedence:
            self.add_offense(
                entry,
                f"Operator {entry.operator} in rule '{entry.rule}' "
                "does not have an explicit precedence declaration",
            )
        return self.offenses


class PrecImprovement(Rule):
    def check(self, ast: GrammarFile, context: LintContext) -> list[Offense]:
        declared = _precedence_tokens(ast)
        for rule in ast.rules:
            for alt in rule.alternatives:
                if alt.prec is None or alt.prec in declared:
                    continue
                self.add_offense(
                    alt,
                    f"%prec token '{alt.prec}' is not declared in precedence directives. "
                    "Consider adding it to %left, %right, or %nonassoc.",
                )
        return self.offenses


# ---------------------------------------------------------------------------
# Style
# ---------------------------------------------------------------------------


class _NamingRule(Rule):
    """Base for rules that check names against a configurable ``pattern``."""

    default_pattern = ""

    def __init__(self, descriptor: RuleDescriptor, config: dict[str, Any] | None = None) -> None:
        super().__init__(descriptor, config)
        source = self.config.get("pattern", self.default_pattern)
        try:
            self.pattern = re.compile(source)
        except (re.error, TypeError) as exc:
            raise ConfigError(f"{descriptor.name}: invalid pattern {source!r}: {exc}") from exc


class TokenNaming(_NamingRule):
    default_pattern = r"^[A-Z][A-Z0-9_]*$"

    def check(self, ast: GrammarFile, context: LintContext) -> list[Offense]:
        pattern = self.pattern
        for decl in ast.declarations:
            if not isinstance(decl, TokenDeclaration):
                continue
            for name in decl.names:
                if _is_literal(name) or pattern.search(name):
                    continue
                self.add_offense(decl, f"Token '{name}' should match pattern /{pattern.pattern}/")
        return self.offenses


class NonterminalNaming(_NamingRule):
    default_pattern = r"^[a-z][a-z0-9_]*$"

    def check(self, ast: GrammarFile, context: LintContext) -> list[Offense]:
        pattern = self.pattern
        for rule in ast.rules:
            if not pattern.search(rule.name):
                self.add_offense(
                    rule, f"Nonterminal '{rule.name}' should match pattern /{pattern.pattern}/"
                )
        return self.offenses


_TAG_STYLES: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("snake_case", re.compile(r"^[a-z][a-z0-9_]*$")),
    ("camel_case", re.compile(r"^[a-z][a-zA-Z0-9]*$")),
    ("pascal_case", re.compile(r"^[A-Z][a-zA-Z0-9]*$")),
    ("upper_snake_case", re.compile(r"^[A-Z][A-Z0-9_]*$")),
)


def _tag_style(tag: str) -> str:
    for style, pattern in _TAG_STYLES:
        if pattern.match(tag):
            return style
    return "other"


class ConsistentTagNaming(Rule):
    def check(self, ast: GrammarFile, context: LintContext) -> list[Offense]:
        tags = [
            decl.type_tag
            for decl in ast.declarations
            if isinstance(decl, (TokenDeclaration, TypeDeclaration)) and decl.type_tag
        ]
        if len(tags) < 2:
            return self.offenses

        styles: dict[str, int] = {}
        for tag in tags:
            style = _tag_style(tag)
            styles[style] = styles.get(style, 0) + 1
        if len(styles) < 2:
            return self.offenses

        most_common = max(styles, key=lambda s: styles[s])
        first = ast.declarations[0] if ast.declarations else None
        self.add_offense(
            first,
            f"Inconsistent type tag naming styles detected ({', '.join(styles)}). "
            f"Consider using {most_common} throughout.",
        )
        return self.offenses


class EmptyAction(Rule):
    def check(self, ast: GrammarFile, context: LintContext) -> list[Offense]:
        for position, rule in enumerate(ast.rules):
            for idx, alt in enumerate(rule.alternatives):
                if alt.action is None or not _empty_action(alt.action.code):
                    continue
                self.add_offense(
                    alt.action,
                    "Empty action block can be removed",
                    autocorrect=RemoveAction(rule.name, position, idx, alt),
                )
        return self.offenses


def _empty_action(code: str) -> bool:
    code = code.strip()
    if code.startswith("{") and code.endswith("}"):
        code = code[1:-1]
    return not code.strip()


_TRAILING_BLANKS = re.compile(r"[ \t]+(?=\r?$)", re.MULTILINE)


class TrailingWhitespace(Rule):
    def check(self, ast: GrammarFile, context: LintContext) -> list[Offense]:
        source = context.source
        if not source:
            return self.offenses

        fix = ReplaceSource(_TRAILING_BLANKS.sub("", source))
        for lineno, line in enumerate(source.splitlines(), start=1):
            stripped = line.rstrip("\r")
            if stripped == stripped.rstrip(" \t"):
                continue
            location = Location(context.file, lineno, len(stripped.rstrip()) + 1)
            self.add_offense(location, "Trailing whitespace detected", autocorrect=fix)
        return self.offenses


# ---------------------------------------------------------------------------
# Rule table
# ---------------------------------------------------------------------------


def _make_rules() -> list[RuleDescriptor]:
    rules: list[RuleDescriptor] = []

    def d(
        name: str,
        cls: type[Rule],
        severity: Severity,
        description: str,
        *,
        autocorrectable: bool = False,
    ) -> None:
        rules.append(RuleDescriptor(name, description, severity, autocorrectable, cls))

    ERR, WARN = Severity.ERROR, Severity.WARNING
    CONV, INFO = Severity.CONVENTION, Severity.INFO

    d(
        "AmbiguousPrecedence",
        AmbiguousPrecedence,
        WARN,
        "Detects operators without explicit precedence declarations",
    )
    d("CircularReference", CircularReference, ERR, "Detects infinite recursion in grammar rules")
    d(
        "ConsistentTagNaming",
        ConsistentTagNaming,
        CONV,
        "Ensures consistent naming style for type tags",
    )
    d("DuplicateToken", DuplicateToken, ERR, "Detects tokens defined multiple times")
    d("EmptyAction", EmptyAction, CONV, "Detects empty action blocks { }", autocorrectable=True)
    d("FactorizableRules", FactorizableRules, INFO, "Suggests factoring rules with common prefixes")
    d(
        "LeftRecursion",
        LeftRecursion,
        WARN,
        "Detects left recursion (may cause issues with some parsers)",
    )
    d("LongRule", LongRule, CONV, "Detects rules with too many alternatives")
    d(
        "MissingStartSymbol",
        MissingStartSymbol,
        ERR,
        "Detects missing %start declaration with ambiguous default",
    )
    d(
        "NonterminalNaming",
        NonterminalNaming,
        CONV,
        "Nonterminals should follow snake_case naming convention",
    )
    d("PrecImprovement", PrecImprovement, INFO, "Suggests improvements for %prec directive usage")
    d(
        "RedundantEpsilon",
        RedundantEpsilon,
        INFO,
        "Detects potentially redundant epsilon (empty) productions",
    )
    d(
        "RightRecursion",
        RightRecursion,
        WARN,
        "Detects right recursion (consider converting to left recursion for LR parsers)",
    )
    d("TokenNaming", TokenNaming, CONV, "Tokens should follow UPPER_CASE naming convention")
    d(
        "TrailingWhitespace",
        TrailingWhitespace,
        CONV,
        "Detects trailing whitespace at the end of lines",
        autocorrectable=True,
    )
    d(
        "UndefinedSymbol",
        UndefinedSymbol,
        ERR,
        "Detects references to undeclared tokens or nonterminals",
    )
    d(
        "UnreachableRule",
        UnreachableRule,
        WARN,
        "Detects rules that are not reachable from the start symbol",
    )
    d(
        "UnusedNonterminal",
        UnusedNonterminal,
        WARN,
        "Detects nonterminals that are defined but never referenced",
    )
    d("UnusedToken", UnusedToken, WARN, "Detects tokens that are declared but never used in rules")

    return rules


REGISTRY: Registry = Registry(_make_rules())
