"""yacclint: linter and formatter for Yacc/Bison grammar files."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from yacclint.config import Config
    from yacclint.linter import Offense

__version__ = "0.1.0"


def lint(source: str, filename: str = "grammar.y", config: Config | None = None) -> list[Offense]:
    """Parse and lint grammar source with every enabled rule."""
    from yacclint.linter import lint_source

    offenses, _, _ = lint_source(source, filename, config)
    return offenses


def format(source: str, filename: str = "grammar.y", config: Config | None = None) -> str:
    """Parse grammar source and return it in canonical layout."""
    from yacclint.formatter import FormatOptions, format_grammar
    from yacclint.parser import parse

    options = config.formatter_options if config is not None else FormatOptions()
    return format_grammar(parse(source, filename), options)
