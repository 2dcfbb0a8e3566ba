"""Pretty-printer: renders a GrammarFile AST back to canonical source."""

from __future__ import annotations

from dataclasses import dataclass

from yacclint.ast import (
    Alternative,
    GrammarFile,
    InlineRule,
    ParameterizedRule,
    PrecedenceDeclaration,
    RuleLike,
    StartDeclaration,
    Symbol,
    TokenDeclaration,
    TypeDeclaration,
    UnionDeclaration,
)


@dataclass(frozen=True, slots=True)
class FormatOptions:
    indent_size: int = 4
    align_tokens: bool = True
    blank_lines_around_sections: int = 1

    @property
    def indent(self) -> str:
        return " " * self.indent_size


_DIRECTIVE_NAMES = {"left": "%left", "right": "%right", "nonassoc": "%nonassoc"}
_DIRECTIVE_WIDTH = max(len(name) for name in _DIRECTIVE_NAMES.values())


class Formatter:
    """Render declarations grouped by kind, then rules, then the epilogue."""

    def __init__(self, options: FormatOptions | None = None) -> None:
        self.options = options or FormatOptions()

    def format(self, ast: GrammarFile) -> str:
        gap = "\n" * (max(0, self.options.blank_lines_around_sections) + 1)

        head: list[str] = []
        if ast.prologue is not None:
            code = ast.prologue.code.strip("\r\n")
            head.append(f"%{{\n{code}\n%}}" if code else "%{\n%}")
        if ast.passthrough:
            head.append("\n".join(p.text for p in ast.passthrough))
        head.extend(self._format_declarations(ast))

        out = "\n\n".join(head)
        if out:
            out += gap
        out += "%%"

        if ast.rules:
            out += gap + "\n\n".join(self._format_rule(rule) for rule in ast.rules)

        if ast.epilogue is not None:
            out += gap + "%%" + gap + ast.epilogue.code

        lines = [line.rstrip() for line in out.splitlines()]
        return "\n".join(lines).rstrip("\n") + "\n"

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def _format_declarations(self, ast: GrammarFile) -> list[str]:
        tokens = ast.declarations_of(TokenDeclaration)
        types = ast.declarations_of(TypeDeclaration)
        precedence = ast.declarations_of(PrecedenceDeclaration)
        starts = ast.declarations_of(StartDeclaration)
        unions = ast.declarations_of(UnionDeclaration)
        rules = ast.declarations_of(ParameterizedRule)
        inlines = ast.declarations_of(InlineRule)

        blocks: list[str] = []
        if tokens:
            blocks.append(self._format_tokens(tokens))
        if types:
            blocks.append("\n".join(_directive("%type", d.type_tag, d.names) for d in types))
        if precedence:
            blocks.append("\n".join(self._format_precedence(d) for d in precedence))
        if starts:
            # Only the first %start is meaningful
            blocks.append(f"%start {starts[0].symbol}")
        if unions:
            blocks.append("\n".join(f"%union {d.body}".rstrip() for d in unions))
        if rules:
            blocks.append("\n".join(self._format_rule_declaration(d) for d in rules))
        if inlines:
            blocks.append("\n".join(f"%inline {d.rule_name}" for d in inlines))
        return blocks

    def _format_tokens(self, decls: list[TokenDeclaration]) -> str:
        if not self.options.align_tokens:
            return "\n".join(_directive("%token", d.type_tag, d.names) for d in decls)

        width = max(len(d.type_tag) + 2 if d.type_tag else 0 for d in decls)
        if width == 0:
            return "\n".join(_directive("%token", None, d.names) for d in decls)

        lines = []
        for d in decls:
            tag = f"<{d.type_tag}>" if d.type_tag else ""
            lines.append(f"%token {tag.ljust(width)} {' '.join(d.names)}")
        return "\n".join(lines)

    def _format_precedence(self, decl: PrecedenceDeclaration) -> str:
        directive = _DIRECTIVE_NAMES[decl.associativity.value]
        if self.options.align_tokens:
            directive = directive.ljust(_DIRECTIVE_WIDTH)
        return f"{directive} {' '.join(decl.tokens)}"

    def _format_rule_declaration(self, decl: ParameterizedRule) -> str:
        params = f"({', '.join(decl.parameters)})" if decl.parameters else ""
        alternatives = " | ".join(_format_alternative(alt) for alt in decl.alternatives)
        return f"%rule {decl.name}{params}: {alternatives} ;"

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    def _format_rule(self, rule: RuleLike) -> str:
        header = rule.name
        if isinstance(rule, ParameterizedRule) and rule.parameters:
            header += f"({', '.join(rule.parameters)})"

        indent = self.options.indent
        lines = [header]
        for idx, alt in enumerate(rule.alternatives):
            prefix = ":" if idx == 0 else "|"
            lines.append(f"{indent}{prefix} {_format_alternative(alt)}")
        lines.append(f"{indent};")
        return "\n".join(lines)


def _directive(name: str, type_tag: str | None, names: tuple[str, ...]) -> str:
    parts = [name]
    if type_tag:
        parts.append(f"<{type_tag}>")
    parts.extend(names)
    return " ".join(parts)


def _format_alternative(alt: Alternative) -> str:
    parts = [_format_symbol(sym) for sym in alt.symbols]
    if alt.prec is not None:
        parts.append(f"%prec {alt.prec}")
    if alt.action is not None:
        parts.append(alt.action.code)
    return " ".join(parts)


def _format_symbol(symbol: Symbol) -> str:
    text = symbol.name
    if symbol.alias_name:
        text += f"[{symbol.alias_name}]"
    if symbol.arguments is not None:
        text += f"({', '.join(_format_symbol(arg) for arg in symbol.arguments)})"
    return text


def format_grammar(ast: GrammarFile, options: FormatOptions | None = None) -> str:
    """Convenience function: render *ast* with *options*."""
    return Formatter(options).format(ast)
