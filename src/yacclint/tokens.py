"""Token types, data structures, and character classification helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    # Structural markers
    SECTION_SEPARATOR = auto()  # %%
    PROLOGUE_START = auto()  # %{ ... %}: value is the enclosed code
    PROLOGUE_END = auto()  # stray %}

    # Directive keywords
    TOKEN = auto()  # %token
    TYPE = auto()  # %type
    LEFT = auto()  # %left
    RIGHT = auto()  # %right
    NONASSOC = auto()  # %nonassoc
    PREC = auto()  # %prec
    UNION = auto()  # %union
    START = auto()  # %start
    RULE = auto()  # %rule
    INLINE = auto()  # %inline
    DIRECTIVE = auto()  # any other %word

    # Punctuation (single-character)
    PIPE = auto()  # |
    COLON = auto()  # :
    SEMICOLON = auto()  # ;
    LPAREN = auto()  # (
    RPAREN = auto()  # )
    LBRACKET = auto()  # [
    RBRACKET = auto()  # ]
    COMMA = auto()  # ,

    # Literals
    CHAR = auto()  # 'x': value excludes the quotes
    STRING = auto()  # "xx": value excludes the quotes
    TYPE_TAG = auto()  # <tag>: value excludes the angle brackets

    ACTION = auto()  # balanced { ... } block, braces included
    IDENTIFIER = auto()

    EOF = auto()


# Directive spelling -> keyword token type. Anything else lexes as DIRECTIVE.
DIRECTIVES: dict[str, TokenType] = {
    "%token": TokenType.TOKEN,
    "%type": TokenType.TYPE,
    "%left": TokenType.LEFT,
    "%right": TokenType.RIGHT,
    "%nonassoc": TokenType.NONASSOC,
    "%prec": TokenType.PREC,
    "%union": TokenType.UNION,
    "%start": TokenType.START,
    "%rule": TokenType.RULE,
    "%inline": TokenType.INLINE,
}

PUNCTUATION: dict[str, TokenType] = {
    "|": TokenType.PIPE,
    ":": TokenType.COLON,
    ";": TokenType.SEMICOLON,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    ",": TokenType.COMMA,
}


@dataclass(frozen=True, slots=True)
class Location:
    """Source location, 1-based line and column, length in characters."""

    file: str
    line: int
    column: int
    length: int = 0

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"


@dataclass(frozen=True, slots=True)
class Token:
    """A single lexer token with its payload and original source text."""

    type: TokenType
    value: str
    raw: str
    location: Location
    offset: int = 0

    def __str__(self) -> str:
        return f"{self.type.name}({self.value!r})"


def is_alpha(ch: str) -> bool:
    """Return True if ch is an ASCII letter."""
    return ("a" <= ch <= "z") or ("A" <= ch <= "Z")


def is_ident_start(ch: str) -> bool:
    """Return True if ch can start an identifier."""
    return is_alpha(ch) or ch == "_"


def is_ident_char(ch: str) -> bool:
    """Return True if ch can continue an identifier."""
    return is_alpha(ch) or ("0" <= ch <= "9") or ch == "_"


def is_directive_char(ch: str) -> bool:
    """Return True if ch belongs to a %directive spelling."""
    return is_alpha(ch) or ch in "%-"
