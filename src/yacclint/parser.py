"""Grammar parser: converts a token stream into a GrammarFile AST."""

from __future__ import annotations

from yacclint.ast import (
    Action,
    Alternative,
    Associativity,
    Declaration,
    Epilogue,
    GrammarFile,
    InlineRule,
    ParameterizedRule,
    Passthrough,
    PrecedenceDeclaration,
    Prologue,
    Rule,
    RuleLike,
    StartDeclaration,
    Symbol,
    SymbolKind,
    TokenDeclaration,
    TypeDeclaration,
    UnionDeclaration,
)
from yacclint.errors import ParseError
from yacclint.lexer import tokenize
from yacclint.tokens import Token, TokenType


class Parser:
    """Recursive descent parser for grammar token streams."""

    def __init__(self, tokens: list[Token], source: str = "") -> None:
        if not tokens or tokens[-1].type != TokenType.EOF:
            raise ValueError("token stream must end with an EOF token")
        self._tokens = tokens
        self._source = source
        self._pos = 0
        self._passthrough: list[Passthrough] = []

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def _peek(self, offset: int = 0) -> Token:
        idx = self._pos + offset
        if idx < len(self._tokens):
            return self._tokens[idx]
        return self._tokens[-1]  # EOF

    def _at(self, *types: TokenType) -> bool:
        return self._peek().type in types

    def _at_eof(self) -> bool:
        return self._peek().type == TokenType.EOF

    def _advance(self) -> Token:
        tok = self._tokens[self._pos]
        if tok.type != TokenType.EOF:
            self._pos += 1
        return tok

    def _expect(self, tt: TokenType) -> Token:
        tok = self._peek()
        if tok.type != tt:
            raise self._error(f"expected {tt.name}, got {tok.type.name}", tok, tt)
        return self._advance()

    # ------------------------------------------------------------------
    # File level
    # ------------------------------------------------------------------

    def parse(self) -> GrammarFile:
        location = self._peek().location
        prologue = self._parse_prologue()
        declarations = self._parse_declarations()
        self._expect(TokenType.SECTION_SEPARATOR)
        rules = self._parse_rules()
        epilogue = self._parse_epilogue()
        return GrammarFile(
            declarations=tuple(declarations),
            rules=tuple(rules),
            prologue=prologue,
            epilogue=epilogue,
            passthrough=tuple(self._passthrough),
            location=location,
        )

    def _parse_prologue(self) -> Prologue | None:
        if not self._at(TokenType.PROLOGUE_START):
            return None
        tok = self._advance()
        return Prologue(tok.value, tok.location)

    def _parse_epilogue(self) -> Epilogue | None:
        if not self._at(TokenType.SECTION_SEPARATOR):
            return None
        sep = self._advance()
        first = self._peek()

        if self._source:
            # Verbatim, so comments and preprocessor lines survive
            code = self._source[sep.offset + len(sep.raw) :].lstrip("\r\n")
        else:
            parts: list[str] = []
            while not self._at_eof():
                parts.append(self._advance().raw)
            code = " ".join(parts)

        self._pos = len(self._tokens) - 1
        if not code.strip():
            return None
        return Epilogue(code, first.location)

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def _parse_declarations(self) -> list[Declaration]:
        declarations: list[Declaration] = []

        while not self._at(TokenType.SECTION_SEPARATOR, TokenType.EOF):
            tt = self._peek().type
            if tt == TokenType.TOKEN:
                declarations.append(self._parse_token_declaration())
            elif tt == TokenType.TYPE:
                declarations.append(self._parse_type_declaration())
            elif tt in _ASSOCIATIVITY:
                declarations.append(self._parse_precedence_declaration())
            elif tt == TokenType.START:
                declarations.append(self._parse_start_declaration())
            elif tt == TokenType.UNION:
                declarations.append(self._parse_union_declaration())
            elif tt == TokenType.RULE:
                self._advance()
                name_tok, parameters, alternatives = self._parse_rule_parts()
                declarations.append(
                    ParameterizedRule(
                        name_tok.value, tuple(parameters), tuple(alternatives), name_tok.location
                    )
                )
            elif tt == TokenType.INLINE:
                declarations.append(self._parse_inline_declaration())
            else:
                # Unrecognized directives are left out of the model but kept as text
                self._passthrough.append(self._parse_passthrough())

        return declarations

    def _parse_passthrough(self) -> Passthrough:
        """Consume one unrecognized directive (or stray token) and its operands."""
        run = [self._advance()]
        while not self._at(*_DECLARATION_STARTS):
            run.append(self._advance())

        first = run[0]
        if self._source:
            # Up to the next token, so unlexed operands (%expect 0) and comments survive
            end = len(self._source) if self._at_eof() else self._peek().offset
            text = self._source[first.offset : end].rstrip()
        else:
            text = " ".join(tok.raw for tok in run)
        return Passthrough(text, first.location)

    def _parse_token_declaration(self) -> TokenDeclaration:
        tok = self._expect(TokenType.TOKEN)
        type_tag = None
        if self._at(TokenType.TYPE_TAG):
            type_tag = self._advance().value
        names = self._parse_names()
        return TokenDeclaration(tuple(names), type_tag, tok.location)

    def _parse_type_declaration(self) -> TypeDeclaration:
        tok = self._expect(TokenType.TYPE)
        type_tag = None
        if self._at(TokenType.TYPE_TAG):
            type_tag = self._advance().value
        names = []
        while self._at(TokenType.IDENTIFIER):
            names.append(self._advance().value)
        return TypeDeclaration(type_tag, tuple(names), tok.location)

    def _parse_precedence_declaration(self) -> PrecedenceDeclaration:
        tok = self._advance()
        associativity = _ASSOCIATIVITY[tok.type]
        # Bison permits a tag here (%left <op> PLUS); it does not affect precedence
        if self._at(TokenType.TYPE_TAG):
            self._advance()
        names = self._parse_names()
        return PrecedenceDeclaration(associativity, tuple(names), tok.location)

    def _parse_names(self) -> list[str]:
        names = []
        while self._at(*_SYMBOL_TOKENS):
            names.append(_symbol_name(self._advance()))
        return names

    def _parse_start_declaration(self) -> StartDeclaration:
        tok = self._expect(TokenType.START)
        symbol = self._expect(TokenType.IDENTIFIER).value
        return StartDeclaration(symbol, tok.location)

    def _parse_union_declaration(self) -> UnionDeclaration:
        tok = self._expect(TokenType.UNION)
        # Optional union name: %union value { ... }
        if self._at(TokenType.IDENTIFIER) and self._peek(1).type == TokenType.ACTION:
            self._advance()
        body = ""
        if self._at(TokenType.ACTION):
            body = self._advance().value
        return UnionDeclaration(body, tok.location)

    def _parse_inline_declaration(self) -> InlineRule:
        tok = self._expect(TokenType.INLINE)
        name = self._expect(TokenType.IDENTIFIER).value
        return InlineRule(name, tok.location)

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    def _parse_rules(self) -> list[RuleLike]:
        rules: list[RuleLike] = []
        while not self._at(TokenType.SECTION_SEPARATOR, TokenType.EOF):
            if self._at(TokenType.IDENTIFIER):
                rules.append(self._parse_rule())
            else:
                self._advance()
        return rules

    def _parse_rule(self) -> RuleLike:
        name_tok, parameters, alternatives = self._parse_rule_parts()
        if parameters:
            return ParameterizedRule(
                name_tok.value, tuple(parameters), tuple(alternatives), name_tok.location
            )
        return Rule(name_tok.value, tuple(alternatives), name_tok.location)

    def _parse_rule_parts(self) -> tuple[Token, list[str], list[Alternative]]:
        """Parse ``name [(params)] : alt | alt [;]``."""
        name_tok = self._expect(TokenType.IDENTIFIER)

        parameters: list[str] = []
        if self._at(TokenType.LPAREN):
            self._advance()
            if not self._at(TokenType.RPAREN):
                parameters = self._parse_parameter_list()
            self._expect(TokenType.RPAREN)

        self._expect(TokenType.COLON)

        alternatives = [self._parse_alternative()]
        while self._at(TokenType.PIPE):
            self._advance()
            alternatives.append(self._parse_alternative())

        if self._at(TokenType.SEMICOLON):
            self._advance()

        return name_tok, parameters, alternatives

    def _parse_parameter_list(self) -> list[str]:
        params = [self._expect(TokenType.IDENTIFIER).value]
        while self._at(TokenType.COMMA):
            self._advance()
            params.append(self._expect(TokenType.IDENTIFIER).value)
        return params

    # ------------------------------------------------------------------
    # Alternatives and symbols
    # ------------------------------------------------------------------

    def _parse_alternative(self) -> Alternative:
        start = self._peek().location
        symbols: list[Symbol] = []
        prec: str | None = None

        while not self._at(*_ALTERNATIVE_STOP):
            if self._at(TokenType.PREC):
                self._advance()
                if self._at_eof():
                    raise self._error("expected precedence token, got EOF", self._peek())
                prec = _symbol_name(self._advance())
            elif self._at(TokenType.DIRECTIVE) and self._peek().value == "%empty":
                self._advance()
            elif self._at(*_SYMBOL_TOKENS):
                if self._at_rule_head():
                    break
                symbols.append(self._parse_symbol())
            else:
                break

        action = None
        if self._at(TokenType.ACTION):
            tok = self._advance()
            action = Action(tok.value, tok.location)

        location = symbols[0].location if symbols else start
        return Alternative(tuple(symbols), action, prec, location)

    def _at_rule_head(self) -> bool:
        """An identifier followed by ':' starts the next rule (missing ';')."""
        return self._at(TokenType.IDENTIFIER) and self._peek(1).type == TokenType.COLON

    def _parse_symbol(self) -> Symbol:
        tok = self._peek()
        if tok.type not in _SYMBOL_TOKENS:
            raise self._error(f"expected symbol, got {tok.type.name}", tok, TokenType.IDENTIFIER)
        self._advance()

        alias_name = None
        arguments = None
        if self._at(TokenType.LBRACKET):
            self._advance()
            alias_name = self._expect(TokenType.IDENTIFIER).value
            self._expect(TokenType.RBRACKET)
        elif self._at(TokenType.LPAREN):
            self._advance()
            arguments = tuple(self._parse_argument_list())
            self._expect(TokenType.RPAREN)

        return Symbol(_symbol_name(tok), _classify(tok), tok.location, alias_name, arguments)

    def _parse_argument_list(self) -> list[Symbol]:
        """Arguments of a parameterized call: ``list(expr)``, ``pair(A, b)``."""
        args: list[Symbol] = []
        if self._at(TokenType.RPAREN):
            return args
        args.append(self._parse_symbol())
        while self._at(TokenType.COMMA):
            self._advance()
            args.append(self._parse_symbol())
        return args

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _error(self, message: str, tok: Token, expected: TokenType | None = None) -> ParseError:
        return ParseError(message, tok.location, self._source, expected, tok.type)


# Module-level constants
_SYMBOL_TOKENS: tuple[TokenType, ...] = (TokenType.IDENTIFIER, TokenType.STRING, TokenType.CHAR)
_ALTERNATIVE_STOP: tuple[TokenType, ...] = (
    TokenType.PIPE,
    TokenType.SEMICOLON,
    TokenType.ACTION,
    TokenType.SECTION_SEPARATOR,
    TokenType.EOF,
)
_ASSOCIATIVITY: dict[TokenType, Associativity] = {
    TokenType.LEFT: Associativity.LEFT,
    TokenType.RIGHT: Associativity.RIGHT,
    TokenType.NONASSOC: Associativity.NONASSOC,
}
# Token kinds that begin a new entry in the declarations section
_DECLARATION_STARTS: tuple[TokenType, ...] = (
    TokenType.TOKEN,
    TokenType.TYPE,
    TokenType.LEFT,
    TokenType.RIGHT,
    TokenType.NONASSOC,
    TokenType.START,
    TokenType.UNION,
    TokenType.RULE,
    TokenType.INLINE,
    TokenType.DIRECTIVE,
    TokenType.PROLOGUE_START,
    TokenType.SECTION_SEPARATOR,
    TokenType.EOF,
)


def _symbol_name(tok: Token) -> str:
    """Literals keep their quotes so they stay distinct from identifiers."""
    if tok.type in (TokenType.STRING, TokenType.CHAR):
        return tok.raw
    return tok.value


def _classify(tok: Token) -> SymbolKind:
    """Quoted literals and Uppercase-leading names are terminals."""
    if tok.type in (TokenType.STRING, TokenType.CHAR):
        return SymbolKind.TERMINAL
    if tok.value and "A" <= tok.value[0] <= "Z":
        return SymbolKind.TERMINAL
    return SymbolKind.NONTERMINAL


def parse_tokens(tokens: list[Token], source: str = "") -> GrammarFile:
    """Parse an already tokenized grammar."""
    return Parser(tokens, source).parse()


def parse(source: str, filename: str = "<input>") -> GrammarFile:
    """Convenience function: parse source text and return a GrammarFile AST."""
    tokens = tokenize(source, filename)
    return Parser(tokens, source).parse()
