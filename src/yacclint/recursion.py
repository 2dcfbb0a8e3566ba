"""Left and right recursion detection."""

from __future__ import annotations

from dataclasses import dataclass

from yacclint.ast import GrammarFile, RuleLike


@dataclass(frozen=True, slots=True)
class RecursionResult:
    left_recursive: tuple[str, ...]
    right_recursive: tuple[str, ...]


class Recursion:
    """Mark rules that recurse through their first or last symbol.

    Indirect left recursion is only followed for two hops (A -> B -> A);
    longer chains such as A -> B -> C -> A are not reported.
    """

    def __init__(self, ast: GrammarFile) -> None:
        self._ast = ast
        self._left: list[str] = []
        self._right: list[str] = []

    def analyze(self) -> RecursionResult:
        self._left = []
        self._right = []
        for rule in self._ast.rules:
            self._check_left(rule)
            self._check_right(rule)
        return RecursionResult(tuple(self._left), tuple(self._right))

    def left_recursive(self, name: str) -> bool:
        return name in self._left

    def right_recursive(self, name: str) -> bool:
        return name in self._right

    # ------------------------------------------------------------------

    def _check_left(self, rule: RuleLike) -> None:
        for alt in rule.alternatives:
            if not alt.symbols:
                continue
            first = alt.symbols[0]
            if first.nonterminal and first.name == rule.name:
                self._mark(self._left, rule.name)

        self._check_indirect_left(rule)

    def _check_right(self, rule: RuleLike) -> None:
        for alt in rule.alternatives:
            if not alt.symbols:
                continue
            last = alt.symbols[-1]
            if last.nonterminal and last.name == rule.name:
                self._mark(self._right, rule.name)

    def _check_indirect_left(self, rule: RuleLike) -> None:
        for alt in rule.alternatives:
            if not alt.symbols or not alt.symbols[0].nonterminal:
                continue
            dependent = self._ast.find_rule(alt.symbols[0].name)
            if dependent is None or dependent is rule:
                continue
            for dep_alt in dependent.alternatives:
                if not dep_alt.symbols:
                    continue
                first = dep_alt.symbols[0]
                if first.nonterminal and first.name == rule.name:
                    self._mark(self._left, rule.name)

    @staticmethod
    def _mark(names: list[str], name: str) -> None:
        if name not in names:
            names.append(name)
