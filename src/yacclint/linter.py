"""Lint rule engine: rule contract, offenses, registry and autocorrect."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from yacclint.ast import Alternative, GrammarFile
from yacclint.errors import ParseError, RuleNotImplementedError
from yacclint.parser import parse
from yacclint.symbol_table import SymbolTable, build_symbol_table
from yacclint.tokens import Location

if TYPE_CHECKING:
    from yacclint.config import Config


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"
    CONVENTION = "convention"
    INFO = "info"


# ---------------------------------------------------------------------------
# Rule descriptors
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RuleDescriptor:
    """Static metadata for one lint rule plus the class that implements it."""

    name: str
    description: str
    severity: Severity
    autocorrectable: bool = False
    rule_class: type[Rule] | None = None

    def create(self, config: dict[str, Any] | None = None) -> Rule:
        if self.rule_class is None:
            raise RuleNotImplementedError(self.name)
        return self.rule_class(self, config or {})

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "severity": self.severity.value,
            "autocorrectable": self.autocorrectable,
        }


# ---------------------------------------------------------------------------
# Autocorrect values
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RemoveAction:
    """Clear the action of alternative *index* of the rule at *position*.

    *position* indexes ``GrammarFile.rules``. A name may head several rules
    (``expr: A ; expr: B ;``), so *rule* only guards against a stale AST.
    """

    rule: str
    position: int
    index: int
    alternative: Alternative | None = field(default=None, compare=False)

    def apply(self, context: LintContext, ast: GrammarFile | None = None) -> None:
        alt = self.alternative
        if ast is not None and self.position < len(ast.rules):
            target = ast.rules[self.position]
            if target.name == self.rule and self.index < len(target.alternatives):
                alt = target.alternatives[self.index]
        if alt is not None:
            alt.action = None


@dataclass(frozen=True, slots=True)
class ReplaceSource:
    """Replace the whole source buffer with *text*."""

    text: str

    def apply(self, context: LintContext, ast: GrammarFile | None = None) -> None:
        context.source = self.text


Autocorrect = RemoveAction | ReplaceSource


# ---------------------------------------------------------------------------
# Offenses and context
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Offense:
    rule: RuleDescriptor
    location: Location
    message: str
    severity: Severity
    autocorrect: Autocorrect | None = None

    @classmethod
    def create(
        cls,
        rule: RuleDescriptor,
        message: str,
        location: Location | None = None,
        severity: Severity | None = None,
        autocorrect: Autocorrect | None = None,
        file: str = "grammar",
    ) -> Offense:
        """Build an offense, filling in the rule's severity and a 1:1 location."""
        if location is None:
            location = Location(file, 1, 1)
        return cls(rule, location, message, severity or rule.severity, autocorrect)

    @property
    def autocorrectable(self) -> bool:
        return self.autocorrect is not None

    @property
    def rule_name(self) -> str:
        return self.rule.name

    def to_dict(self) -> dict[str, Any]:
        return {
            "severity": self.severity.value,
            "rule_name": self.rule_name,
            "message": self.message,
            "location": {
                "file": self.location.file,
                "line": self.location.line,
                "column": self.location.column,
            },
            "autocorrectable": self.autocorrectable,
        }

    def __str__(self) -> str:
        return f"{self.location}: {self.severity.value}: [{self.rule_name}] {self.message}"


@dataclass(slots=True)
class LintContext:
    """Per-file state shared by all rules; ``source`` is the mutable buffer."""

    symbol_table: SymbolTable
    source: str
    file: str = "grammar"


# ---------------------------------------------------------------------------
# Rule contract
# ---------------------------------------------------------------------------


class Rule:
    """Base class for lint rules.

    Subclasses override check() and report through add_offense(). A rule
    never mutates the AST or context itself; fixes are attached to offenses
    as autocorrect values and applied later by apply_autocorrections().
    """

    def __init__(self, descriptor: RuleDescriptor, config: dict[str, Any] | None = None) -> None:
        self.descriptor = descriptor
        self.config = config or {}
        self.file = "grammar"
        self.offenses: list[Offense] = []

    def check(self, ast: GrammarFile, context: LintContext) -> list[Offense]:
        raise RuleNotImplementedError(self.descriptor.name)

    def add_offense(
        self,
        node: Any,
        message: str,
        autocorrect: Autocorrect | None = None,
    ) -> Offense:
        """Record an offense at *node* (an AST node or a Location)."""
        location = node if isinstance(node, Location) else getattr(node, "location", None)
        offense = Offense.create(
            self.descriptor, message, location, autocorrect=autocorrect, file=self.file
        )
        self.offenses.append(offense)
        return offense


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class Registry:
    """Read-only collection of rule descriptors, in registration order."""

    def __init__(self, descriptors: list[RuleDescriptor] | tuple[RuleDescriptor, ...]) -> None:
        rules: dict[str, RuleDescriptor] = {}
        for desc in descriptors:
            if desc.rule_class is None or desc.rule_class.check is Rule.check:
                raise RuleNotImplementedError(desc.name)
            if desc.name in rules:
                raise ValueError(f"duplicate lint rule: {desc.name}")
            rules[desc.name] = desc
        self._rules = rules

    def all(self) -> list[RuleDescriptor]:
        return list(self._rules.values())

    def find(self, name: str) -> RuleDescriptor | None:
        return self._rules.get(name)

    def enabled_rules(self, config: Config | None) -> list[RuleDescriptor]:
        if config is None:
            return self.all()
        return [d for d in self._rules.values() if config.rule_enabled(d.name)]

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, name: object) -> bool:
        return name in self._rules


# ---------------------------------------------------------------------------
# Running rules
# ---------------------------------------------------------------------------


def run_rules(
    ast: GrammarFile,
    context: LintContext,
    rules: list[RuleDescriptor],
    config: Config | None = None,
) -> list[Offense]:
    """Run each rule in order and concatenate their offenses."""
    offenses: list[Offense] = []
    for desc in rules:
        rule_config = config.rule_config(desc.name) if config is not None else {}
        rule = desc.create(rule_config)
        rule.file = context.file
        offenses.extend(rule.check(ast, context))
    return offenses


def apply_autocorrections(
    offenses: list[Offense], context: LintContext, ast: GrammarFile | None = None
) -> str:
    """Apply autocorrect values in offense order and return the new source.

    Every fix runs, one after another, against the same buffer and AST.
    There is no conflict detection: a later ReplaceSource wins over earlier
    edits.
    """
    for offense in offenses:
        if offense.autocorrect is not None:
            offense.autocorrect.apply(context, ast)
    return context.source


_PARSE_ERROR_RULE = RuleDescriptor(
    "ParseError", "Grammar file could not be parsed", Severity.ERROR
)


def parse_error_offense(exc: ParseError, file: str) -> Offense:
    """Turn a parse failure into a single error offense."""
    location = exc.location if exc.location is not None else Location(file, 1, 1)
    return Offense.create(_PARSE_ERROR_RULE, exc.message, location, file=file)


def lint_source(
    source: str,
    filename: str = "grammar",
    config: Config | None = None,
    rules: list[RuleDescriptor] | None = None,
) -> tuple[list[Offense], LintContext, GrammarFile | None]:
    """Parse and lint one file.

    Returns the offenses, the lint context (whose ``source`` autocorrect
    may rewrite) and the AST, which is None when the file failed to parse.
    """
    try:
        ast = parse(source, filename)
    except ParseError as exc:
        context = LintContext(SymbolTable(), source, filename)
        return [parse_error_offense(exc, filename)], context, None

    context = LintContext(build_symbol_table(ast), source, filename)
    if rules is None:
        from yacclint.rules import REGISTRY

        rules = REGISTRY.enabled_rules(config)
    return run_rules(ast, context, rules, config), context, ast
