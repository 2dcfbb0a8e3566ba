"""--debug AST dump to stderr."""

from __future__ import annotations

import sys
from typing import TextIO

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


def dump_ast(ast: GrammarFile, *, file: TextIO = sys.stderr) -> None:
    """Print a human-readable AST tree to *file*."""
    f = file
    f.write("GrammarFile\n")
    if ast.prologue is not None:
        f.write(f"{_indent(1)}Prologue {_preview(ast.prologue.code)}\n")
    for item in ast.passthrough:
        f.write(f"{_indent(1)}Passthrough {_preview(item.text)}\n")
    for decl in ast.declarations:
        _dump_declaration(decl, 1, f)
    for rule in ast.rules:
        _dump_rule(rule, 1, f)
    if ast.epilogue is not None:
        f.write(f"{_indent(1)}Epilogue {_preview(ast.epilogue.code)}\n")


def _indent(depth: int) -> str:
    return "  " * depth


def _preview(text: str, limit: int = 40) -> str:
    text = " ".join(text.split())
    if len(text) > limit:
        text = text[: limit - 3] + "..."
    return repr(text)


def _dump_declaration(decl, depth: int, f: TextIO) -> None:
    pad = _indent(depth)
    if isinstance(decl, TokenDeclaration):
        tag = f" <{decl.type_tag}>" if decl.type_tag else ""
        f.write(f"{pad}Token{tag} {' '.join(decl.names)}\n")
    elif isinstance(decl, TypeDeclaration):
        tag = f" <{decl.type_tag}>" if decl.type_tag else ""
        f.write(f"{pad}Type{tag} {' '.join(decl.names)}\n")
    elif isinstance(decl, PrecedenceDeclaration):
        f.write(f"{pad}Precedence {decl.associativity.value} {' '.join(decl.tokens)}\n")
    elif isinstance(decl, StartDeclaration):
        f.write(f"{pad}Start {decl.symbol}\n")
    elif isinstance(decl, UnionDeclaration):
        f.write(f"{pad}Union {_preview(decl.body)}\n")
    elif isinstance(decl, ParameterizedRule):
        _dump_rule(decl, depth, f)
    elif isinstance(decl, InlineRule):
        f.write(f"{pad}Inline {decl.rule_name}\n")


def _dump_rule(rule: RuleLike, depth: int, f: TextIO) -> None:
    if isinstance(rule, ParameterizedRule):
        f.write(f"{_indent(depth)}ParameterizedRule {rule.name}({', '.join(rule.parameters)})\n")
    else:
        f.write(f"{_indent(depth)}Rule {rule.name}\n")
    for alt in rule.alternatives:
        _dump_alternative(alt, depth + 1, f)


def _dump_alternative(alt: Alternative, depth: int, f: TextIO) -> None:
    symbols = " ".join(_symbol_text(s) for s in alt.symbols) or "<empty>"
    f.write(f"{_indent(depth)}Alternative {symbols}")
    if alt.prec is not None:
        f.write(f" %prec {alt.prec}")
    if alt.action is not None:
        f.write(f" Action {_preview(alt.action.code)}")
    f.write("\n")


def _symbol_text(symbol: Symbol) -> str:
    kind = "T" if symbol.terminal else "N"
    text = f"{symbol.name}:{kind}"
    if symbol.alias_name:
        text += f"[{symbol.alias_name}]"
    if symbol.arguments:
        text += "(" + ", ".join(_symbol_text(a) for a in symbol.arguments) + ")"
    return text
