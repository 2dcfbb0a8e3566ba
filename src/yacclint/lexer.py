"""Grammar lexer: converts .y source text into a flat token stream."""

from __future__ import annotations

from yacclint.tokens import (
    DIRECTIVES,
    PUNCTUATION,
    Location,
    Token,
    TokenType,
    is_alpha,
    is_directive_char,
    is_ident_char,
    is_ident_start,
)


class Lexer:
    """Tokenize grammar source text into a stream of Token objects.

    The lexer never fails: unknown characters are skipped and unterminated
    literals, actions or prologues run to end of input. Malformed input is
    left for the parser to reject.
    """

    def __init__(self, source: str, filename: str = "<input>") -> None:
        self._source = source
        self._filename = filename
        self._pos = 0
        self._line = 1
        self._col = 1
        self._tokens: list[Token] = []
        self._start = (1, 1, 0)  # (line, column, offset) of the token being scanned

    def tokenize(self) -> list[Token]:
        """Tokenize the full source and return the token list."""
        while self._pos < len(self._source):
            self._lex_one()
        self._mark()
        self._emit(TokenType.EOF, "")
        return self._tokens

    # ------------------------------------------------------------------
    # Position helpers
    # ------------------------------------------------------------------

    def _peek(self, offset: int = 0) -> str:
        idx = self._pos + offset
        if idx < len(self._source):
            return self._source[idx]
        return ""

    def _at_end(self) -> bool:
        return self._pos >= len(self._source)

    def _advance(self, count: int = 1) -> None:
        for _ in range(count):
            if self._at_end():
                return
            if self._source[self._pos] == "\n":
                self._line += 1
                self._col = 1
            else:
                self._col += 1
            self._pos += 1

    def _mark(self) -> None:
        self._start = (self._line, self._col, self._pos)

    def _emit(self, tt: TokenType, value: str) -> Token:
        line, col, offset = self._start
        raw = self._source[offset : self._pos]
        loc = Location(self._filename, line, col, len(raw))
        tok = Token(tt, value, raw, loc, offset)
        self._tokens.append(tok)
        return tok

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _lex_one(self) -> None:
        ch = self._peek()
        nxt = self._peek(1)

        if ch in " \t\r\n\f\v":
            self._advance()
            return

        if ch == "/" and nxt == "/":
            self._skip_line_comment()
            return

        if ch == "/" and nxt == "*":
            self._skip_block_comment()
            return

        if ch == "%":
            self._lex_percent(nxt)
            return

        if ch == "{":
            self._lex_action()
            return

        if ch == "'":
            self._lex_quoted("'", TokenType.CHAR)
            return

        if ch == '"':
            self._lex_quoted('"', TokenType.STRING)
            return

        if ch == "<":
            self._lex_type_tag()
            return

        if ch in PUNCTUATION:
            self._mark()
            self._advance()
            self._emit(PUNCTUATION[ch], ch)
            return

        if is_ident_start(ch):
            self._lex_identifier()
            return

        # Anything else is silently skipped
        self._advance()

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    def _skip_line_comment(self) -> None:
        self._advance(2)  # //
        while not self._at_end() and self._peek() != "\n":
            self._advance()
        self._advance()  # newline

    def _skip_block_comment(self) -> None:
        self._advance(2)  # /*
        while not self._at_end():
            if self._peek() == "*" and self._peek(1) == "/":
                self._advance(2)
                return
            self._advance()

    # ------------------------------------------------------------------
    # % constructs: %{ %} %% %directive
    # ------------------------------------------------------------------

    def _lex_percent(self, nxt: str) -> None:
        self._mark()

        if nxt == "{":
            self._lex_prologue()
            return

        if nxt == "}":
            self._advance(2)
            self._emit(TokenType.PROLOGUE_END, "%}")
            return

        if nxt == "%":
            self._advance(2)
            self._emit(TokenType.SECTION_SEPARATOR, "%%")
            return

        if is_alpha(nxt):
            chars = []
            while not self._at_end() and is_directive_char(self._peek()):
                chars.append(self._peek())
                self._advance()
            text = "".join(chars)
            self._emit(DIRECTIVES.get(text, TokenType.DIRECTIVE), text)
            return

        # A lone '%' carries no meaning
        self._advance()

    def _lex_prologue(self) -> None:
        self._advance(2)  # %{
        content_start = self._pos
        while not self._at_end():
            if self._peek() == "%" and self._peek(1) == "}":
                code = self._source[content_start : self._pos]
                self._advance(2)
                self._emit(TokenType.PROLOGUE_START, code)
                return
            self._advance()
        self._emit(TokenType.PROLOGUE_START, self._source[content_start:])

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def _lex_action(self) -> None:
        """Scan a balanced {...} block; the value keeps the braces."""
        self._mark()
        depth = 0
        while not self._at_end():
            ch = self._peek()
            if ch == "{":
                depth += 1
                self._advance()
            elif ch == "}":
                depth -= 1
                self._advance()
                if depth == 0:
                    break
            elif ch in "'\"":
                self._skip_quoted(ch)
            elif ch == "/" and self._peek(1) == "/":
                while not self._at_end() and self._peek() != "\n":
                    self._advance()
            elif ch == "/" and self._peek(1) == "*":
                self._skip_block_comment()
            else:
                self._advance()
        _, _, offset = self._start
        self._emit(TokenType.ACTION, self._source[offset : self._pos])

    # ------------------------------------------------------------------
    # Literals
    # ------------------------------------------------------------------

    def _skip_quoted(self, quote: str) -> None:
        """Move past a quoted literal, honouring backslash escapes."""
        self._advance()  # opening quote
        while not self._at_end() and self._peek() != quote:
            if self._peek() == "\\":
                self._advance()
            self._advance()
        self._advance()  # closing quote

    def _lex_quoted(self, quote: str, tt: TokenType) -> None:
        self._mark()
        self._advance()  # opening quote
        chars = []
        while not self._at_end() and self._peek() != quote:
            ch = self._peek()
            chars.append(ch)
            self._advance()
            if ch == "\\" and not self._at_end():
                # Escaped character is copied verbatim, never interpreted
                chars.append(self._peek())
                self._advance()
        self._advance()  # closing quote
        self._emit(tt, "".join(chars))

    def _lex_type_tag(self) -> None:
        self._mark()
        self._advance()  # <
        chars = []
        while not self._at_end() and self._peek() != ">":
            chars.append(self._peek())
            self._advance()
        self._advance()  # >
        self._emit(TokenType.TYPE_TAG, "".join(chars))

    def _lex_identifier(self) -> None:
        self._mark()
        while not self._at_end() and is_ident_char(self._peek()):
            self._advance()
        _, _, offset = self._start
        self._emit(TokenType.IDENTIFIER, self._source[offset : self._pos])


def tokenize(source: str, filename: str = "<input>") -> list[Token]:
    """Convenience function: tokenize source text and return token list."""
    return Lexer(source, filename).tokenize()
