"""Command-line interface for yacclint."""

from __future__ import annotations

import argparse
import difflib
import json
import sys
from fnmatch import fnmatchcase
from pathlib import Path

from yacclint import __version__
from yacclint.ast import GrammarFile
from yacclint.config import CONFIG_FILENAME, Config, ConfigError, default_config_text, load_config
from yacclint.errors import ParseError
from yacclint.linter import LintContext, Offense, RuleDescriptor, Severity


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="yacclint",
        description="Linter and formatter for Yacc/Bison grammar files",
    )
    sub = p.add_subparsers(dest="command", metavar="COMMAND")

    lint = sub.add_parser("lint", help="Lint grammar files")
    lint.add_argument("files", nargs="+", metavar="FILE", help="Grammar files or directories")
    lint.add_argument(
        "--config",
        metavar="FILE",
        help=f"Config file (default: auto-discover {CONFIG_FILENAME})",
    )
    lint.add_argument(
        "--format",
        choices=("text", "json", "github"),
        default="text",
        help="Output format (default: text)",
    )
    lint.add_argument("-a", "--autocorrect", action="store_true", help="Auto-fix offenses")
    lint.add_argument(
        "--only",
        nargs="+",
        default=None,
        metavar="RULE",
        help="Run only the named rules",
    )
    lint.add_argument(
        "--except",
        dest="except_rules",
        nargs="+",
        default=None,
        metavar="RULE",
        help="Skip the named rules",
    )
    lint.add_argument("--debug", action="store_true", help="Dump AST to stderr")

    fmt = sub.add_parser("fmt", help="Format grammar files")
    fmt.add_argument("files", nargs="+", metavar="FILE", help="Grammar files or directories")
    fmt.add_argument("--check", action="store_true", help="Check only, don't modify")
    fmt.add_argument("--diff", action="store_true", help="Show a unified diff, don't modify")
    fmt.add_argument("--config", metavar="FILE", help="Config file")

    rules = sub.add_parser("rules", help="List all available rules")
    rules.add_argument("--format", choices=("text", "json"), default="text")

    init = sub.add_parser("init", help=f"Generate a default {CONFIG_FILENAME}")
    init.add_argument("--force", action="store_true", help="Overwrite an existing file")

    sub.add_parser("version", help="Show version")
    return p


# ---------------------------------------------------------------------------
# File discovery
# ---------------------------------------------------------------------------


def _matches(rel: str, pattern: str) -> bool:
    """Glob match where ``**/`` may also stand for no directory at all."""
    if fnmatchcase(rel, pattern):
        return True
    while "**/" in pattern:
        pattern = pattern.replace("**/", "", 1)
        if fnmatchcase(rel, pattern):
            return True
    return False


def collect_files(paths: list[str], config: Config) -> list[Path]:
    """Expand directories by the config include/exclude globs.

    Plain file arguments are returned as given, missing ones included, so
    the caller can report them.
    """
    files: list[Path] = []
    for raw in paths:
        path = Path(raw)
        if not path.is_dir():
            files.append(path)
            continue
        found: set[Path] = set()
        for pattern in config.included_patterns:
            for candidate in path.glob(pattern):
                if not candidate.is_file():
                    continue
                rel = candidate.relative_to(path).as_posix()
                if any(_matches(rel, ex) for ex in config.excluded_patterns):
                    continue
                found.add(candidate)
        files.extend(sorted(found))
    return files


def _load(args: argparse.Namespace) -> Config:
    return load_config(Path(args.config) if args.config else None)


def select_rules(
    config: Config, only: list[str] | None, except_rules: list[str] | None
) -> list[RuleDescriptor]:
    """Enabled rules narrowed by --only / --except."""
    from yacclint.rules import REGISTRY

    selected = REGISTRY.enabled_rules(config)
    if only:
        selected = [d for d in selected if d.name in only]
    if except_rules:
        selected = [d for d in selected if d.name not in except_rules]
    return selected


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def lint_file(
    path: Path,
    config: Config,
    rules: list[RuleDescriptor],
    *,
    autocorrect: bool = False,
    debug: bool = False,
) -> list[Offense]:
    """Lint one file, rewriting it when autocorrect changes the source."""
    from yacclint.debug import dump_ast
    from yacclint.linter import lint_source

    source = path.read_text(encoding="utf-8")
    offenses, context, ast = lint_source(source, str(path), config, rules)

    if debug and ast is not None:
        dump_ast(ast, file=sys.stderr)

    if autocorrect and ast is not None:
        _autocorrect(path, source, offenses, context, ast)
    return offenses


def _autocorrect(
    path: Path, source: str, offenses: list[Offense], context: LintContext, ast: GrammarFile
) -> None:
    from yacclint.linter import ReplaceSource, apply_autocorrections

    fixable = [o for o in offenses if o.autocorrectable]
    if not fixable:
        return
    apply_autocorrections(fixable, context, ast)
    if context.source != source:
        # Only source edits reach the file; AST-only fixes are not counted
        written = sum(1 for o in fixable if isinstance(o.autocorrect, ReplaceSource))
        path.write_text(context.source, encoding="utf-8")
        print(f"Auto-corrected {written} offense(s) in {path}", file=sys.stderr)


def cmd_lint(args: argparse.Namespace) -> int:
    from yacclint.reporters import get_reporter

    config = _load(args)
    rules = select_rules(config, args.only, args.except_rules)

    offenses: list[Offense] = []
    for path in collect_files(args.files, config):
        if not path.is_file():
            print(f"File not found: {path}", file=sys.stderr)
            continue
        offenses.extend(
            lint_file(path, config, rules, autocorrect=args.autocorrect, debug=args.debug)
        )

    print(get_reporter(args.format).report(offenses))
    return 1 if any(o.severity is Severity.ERROR for o in offenses) else 0


def cmd_fmt(args: argparse.Namespace) -> int:
    from yacclint.formatter import format_grammar
    from yacclint.parser import parse

    config = _load(args)
    options = config.formatter_options
    status = 0

    for path in collect_files(args.files, config):
        if not path.is_file():
            print(f"File not found: {path}", file=sys.stderr)
            continue
        source = path.read_text(encoding="utf-8")
        try:
            ast = parse(source, str(path))
        except ParseError as exc:
            print(str(exc), file=sys.stderr)
            status = 1
            continue

        formatted = format_grammar(ast, options)
        if args.check or args.diff:
            if formatted == source:
                print(f"{path}: OK")
                continue
            print(f"{path}: needs formatting")
            if args.diff:
                sys.stdout.writelines(unified_diff(source, formatted, str(path)))
            if args.check:
                status = 1
        elif formatted != source:
            path.write_text(formatted, encoding="utf-8")
            print(f"Formatted {path}")

    return status


def unified_diff(original: str, formatted: str, name: str) -> list[str]:
    lines = difflib.unified_diff(
        original.splitlines(keepends=True),
        formatted.splitlines(keepends=True),
        fromfile=f"a/{name}",
        tofile=f"b/{name}",
    )
    return [line if line.endswith("\n") else line + "\n" for line in lines]


def cmd_rules(args: argparse.Namespace) -> int:
    from yacclint.rules import REGISTRY

    if args.format == "json":
        print(json.dumps([d.to_dict() for d in REGISTRY.all()], indent=2))
        return 0

    print("Available lint rules:")
    for desc in REGISTRY.all():
        marker = " [autocorrectable]" if desc.autocorrectable else ""
        print(f"  {desc.name} ({desc.severity.value}){marker}")
        print(f"    {desc.description}")
    return 0


def cmd_init(args: argparse.Namespace) -> int:
    path = Path(CONFIG_FILENAME)
    if path.exists() and not args.force:
        print(f"error: {path} already exists (use --force to overwrite)", file=sys.stderr)
        return 1
    path.write_text(default_config_text(), encoding="utf-8")
    print(f"Generated {path}")
    return 0


COMMANDS = {
    "lint": cmd_lint,
    "fmt": cmd_fmt,
    "rules": cmd_rules,
    "init": cmd_init,
}


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help(sys.stderr)
        return 2

    if args.command == "version":
        print(f"yacclint {__version__}")
        return 0

    try:
        return COMMANDS[args.command](args)
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
