"""Reachability of rules from the start symbol."""

from __future__ import annotations

from yacclint.ast import Alternative, GrammarFile, ParameterizedRule


class Reachability:
    """Dependency graph over rule names, walked depth-first from the start."""

    def __init__(self, ast: GrammarFile) -> None:
        self._ast = ast
        self.dependencies: dict[str, set[str]] = {}
        self._reachable: set[str] = set()

    def analyze(self, start_symbol: str | None = None) -> set[str]:
        """Return the set of names reachable from *start_symbol*.

        Without an explicit start the %start declaration is used, else the
        first rule. A grammar with neither yields an empty set.
        """
        self._build_dependency_graph()
        self._reachable = set()
        start = start_symbol or self._ast.start_symbol()
        if start is not None:
            self._mark_reachable(start)
        return self._reachable

    def unreachable_rules(self) -> set[str]:
        return {rule.name for rule in self._ast.rules} - self._reachable

    # ------------------------------------------------------------------

    def _build_dependency_graph(self) -> None:
        self.dependencies = {}
        for rule in self._ast.rules:
            self._add_edges(rule.name, rule.alternatives)
        for decl in self._ast.declarations:
            if isinstance(decl, ParameterizedRule):
                self._add_edges(decl.name, decl.alternatives)

    def _add_edges(self, name: str, alternatives: tuple[Alternative, ...]) -> None:
        deps = self.dependencies.setdefault(name, set())
        for alt in alternatives:
            for symbol in alt.symbols:
                if not symbol.nonterminal:
                    continue
                deps.add(symbol.name)
                # Arguments of a call such as list(expr)
                for arg in symbol.arguments or ():
                    if arg.nonterminal:
                        deps.add(arg.name)

    def _mark_reachable(self, start: str) -> None:
        stack = [start]
        while stack:
            name = stack.pop()
            if name in self._reachable:
                continue
            self._reachable.add(name)
            stack.extend(self.dependencies.get(name, ()))
