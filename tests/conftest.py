"""Shared test fixtures and helpers."""

from __future__ import annotations

import pytest

from yacclint.ast import GrammarFile
from yacclint.lexer import tokenize
from yacclint.linter import LintContext, Offense
from yacclint.parser import parse
from yacclint.rules import REGISTRY
from yacclint.symbol_table import build_symbol_table
from yacclint.tokens import Token, TokenType


@pytest.fixture
def lex():
    """Return a helper that tokenizes source and returns tokens (excluding EOF)."""

    def _lex(source: str) -> list[Token]:
        tokens = tokenize(source, "test.y")
        # Strip trailing EOF for convenience
        return [t for t in tokens if t.type != TokenType.EOF]

    return _lex


@pytest.fixture
def parse_source():
    """Return a helper that parses source and returns a GrammarFile."""

    def _parse(source: str, filename: str = "test.y") -> GrammarFile:
        return parse(source, filename)

    return _parse


def assert_types(tokens: list[Token], expected: list[TokenType]) -> None:
    """Assert that the token types match the expected list."""
    actual = [t.type for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def assert_values(tokens: list[Token], expected: list[str]) -> None:
    """Assert that the token values match the expected list."""
    actual = [t.value for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def symbol_names(ast: GrammarFile, rule: int = 0, alt: int = 0) -> list[str]:
    """Names of the symbols in one alternative of one rule."""
    return [s.name for s in ast.rules[rule].alternatives[alt].symbols]


def make_context(source: str, filename: str = "test.y") -> tuple[GrammarFile, LintContext]:
    ast = parse(source, filename)
    return ast, LintContext(build_symbol_table(ast), source, filename)


def run_rule(
    name: str, source: str, config: dict | None = None, filename: str = "test.y"
) -> list[Offense]:
    """Run a single registered rule over *source*."""
    ast, context = make_context(source, filename)
    rule = REGISTRY.find(name).create(config or {})
    rule.file = filename
    return rule.check(ast, context)
