"""Error types with formatted source context."""

from __future__ import annotations

from yacclint.tokens import Location, TokenType


class ParseError(Exception):
    """Raised on the first parse error, with location and source context."""

    def __init__(
        self,
        message: str,
        location: Location,
        source: str = "",
        expected: TokenType | None = None,
        actual: TokenType | None = None,
    ) -> None:
        self.message = message
        self.location = location
        self.source = source
        self.expected = expected
        self.actual = actual
        super().__init__(self.format(location.file))

    def format(self, filename: str | None = None) -> str:
        if filename is None:
            filename = self.location.file
        lines = self.source.splitlines(keepends=True)
        line_idx = self.location.line - 1
        col = self.location.column

        if 0 <= line_idx < len(lines):
            source_line = lines[line_idx].rstrip("\n").rstrip("\r")
        else:
            source_line = ""

        header = f"error: {self.message}"
        line_num = str(self.location.line)
        gutter_width = len(line_num) + 1
        arrow = f"{' ' * gutter_width}--> {filename}:{self.location.line}:{col}"

        # Without source text there is nothing to underline
        if not source_line:
            return f"{header}\n{arrow}"

        # Underline the token, at least 1 char, but stay within the line
        underline_len = max(1, min(self.location.length, len(source_line) - col + 1))

        pad = " " * (col - 1)
        carets = "^" * underline_len

        blank_gutter = " " * gutter_width + "|"
        line_gutter = f"{line_num:>{gutter_width - 1}} |"

        return (
            f"{header}\n"
            f"{arrow}\n"
            f"{blank_gutter}\n"
            f"{line_gutter} {source_line}\n"
            f"{blank_gutter} {pad}{carets}"
        )


class DuplicateDeclarationError(Exception):
    """Raised when a token is added to a symbol table twice."""

    def __init__(self, name: str, previous: Location | None) -> None:
        self.name = name
        self.previous = previous
        where = f" at {previous}" if previous is not None else ""
        super().__init__(f"token '{name}' already declared{where}")


class RuleNotImplementedError(Exception):
    """Raised when a lint rule class does not implement check()."""

    def __init__(self, rule_name: str) -> None:
        self.rule_name = rule_name
        super().__init__(f"lint rule '{rule_name}' must implement check()")
