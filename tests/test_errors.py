"""Test error types: positions, formatting with source context."""

import pytest

from yacclint.errors import DuplicateDeclarationError, ParseError, RuleNotImplementedError
from yacclint.parser import parse
from yacclint.tokens import Location, TokenType


class TestErrorPositions:
    def test_missing_colon(self):
        with pytest.raises(ParseError) as exc_info:
            parse("%%\nexpr NUMBER ;\n", "g.y")
        err = exc_info.value
        assert (err.location.line, err.location.column) == (2, 6)
        assert err.expected is TokenType.COLON
        assert err.actual is TokenType.IDENTIFIER

    def test_missing_separator_at_eof(self):
        with pytest.raises(ParseError) as exc_info:
            parse("%token A\n", "g.y")
        assert exc_info.value.actual is TokenType.EOF
        assert exc_info.value.location.line == 2


class TestErrorFormatting:
    def test_caret_under_token(self):
        with pytest.raises(ParseError) as exc_info:
            parse("%%\nexpr NUMBER ;\n", "g.y")
        assert str(exc_info.value) == (
            "error: expected COLON, got IDENTIFIER\n"
            "  --> g.y:2:6\n"
            "  |\n"
            "2 | expr NUMBER ;\n"
            "  |      ^^^^^^"
        )

    def test_without_source_line(self):
        err = ParseError("boom", Location("g.y", 5, 1))
        assert err.format() == "error: boom\n  --> g.y:5:1"

    def test_override_filename(self):
        err = ParseError("boom", Location("g.y", 1, 1, 1), "x\n")
        assert "--> other.y:1:1" in err.format("other.y")

    def test_underline_at_least_one(self):
        err = ParseError("boom", Location("g.y", 1, 3, 0), "abc\n")
        assert err.format().endswith("|   ^")

    def test_underline_clamped_to_line(self):
        err = ParseError("boom", Location("g.y", 1, 2, 50), "abc\n")
        assert err.format().endswith("|  ^^")


class TestOtherErrors:
    def test_duplicate_declaration(self):
        err = DuplicateDeclarationError("A", Location("g.y", 1, 8))
        assert str(err) == "token 'A' already declared at g.y:1:8"

    def test_duplicate_declaration_without_location(self):
        assert str(DuplicateDeclarationError("A", None)) == "token 'A' already declared"

    def test_rule_not_implemented(self):
        err = RuleNotImplementedError("Foo")
        assert err.rule_name == "Foo"
        assert "Foo" in str(err)
