"""Test rule reachability from the start symbol."""

from yacclint.reachability import Reachability


class TestReachability:
    def test_all_reachable(self, parse_source):
        ast = parse_source("%%\nprogram: stmt ;\nstmt: expr ;\nexpr: NUMBER ;\n")
        analysis = Reachability(ast)
        assert analysis.analyze() == {"program", "stmt", "expr"}
        assert analysis.unreachable_rules() == set()

    def test_unreachable(self, parse_source):
        ast = parse_source("%%\nprogram: stmt ;\nstmt: A ;\norphan: B ;\n")
        analysis = Reachability(ast)
        analysis.analyze()
        assert analysis.unreachable_rules() == {"orphan"}

    def test_explicit_start_declaration(self, parse_source):
        ast = parse_source("%start b\n%%\na: b ;\nb: B ;\n")
        analysis = Reachability(ast)
        assert analysis.analyze() == {"b"}
        assert analysis.unreachable_rules() == {"a"}

    def test_start_argument_overrides(self, parse_source):
        ast = parse_source("%%\na: b ;\nb: B ;\nc: a ;\n")
        analysis = Reachability(ast)
        assert analysis.analyze("c") == {"c", "a", "b"}

    def test_no_rules(self, parse_source):
        analysis = Reachability(parse_source("%%\n"))
        assert analysis.analyze() == set()
        assert analysis.unreachable_rules() == set()

    def test_cycle_terminates(self, parse_source):
        ast = parse_source("%%\na: b ;\nb: a | A ;\n")
        assert Reachability(ast).analyze() == {"a", "b"}

    def test_terminals_are_not_edges(self, parse_source):
        ast = parse_source("%%\na: B 'c' ;\n")
        analysis = Reachability(ast)
        analysis.analyze()
        assert analysis.dependencies == {"a": set()}

    def test_call_arguments_are_edges(self, parse_source):
        ast = parse_source("%%\ns: list(item) ;\nitem: A ;\n")
        analysis = Reachability(ast)
        assert "item" in analysis.analyze()

    def test_parameterized_declaration_edges(self, parse_source):
        ast = parse_source("%rule wrap: inner ;\n%%\ns: wrap ;\ninner: A ;\n")
        analysis = Reachability(ast)
        assert analysis.analyze() == {"s", "wrap", "inner"}

    def test_reachable_and_unreachable_partition_rules(self, parse_source):
        ast = parse_source("%%\na: b ;\nb: B ;\nc: d ;\nd: D ;\ne: E ;\n")
        analysis = Reachability(ast)
        reachable = analysis.analyze()
        unreachable = analysis.unreachable_rules()
        names = {r.name for r in ast.rules}
        assert (reachable & names) | unreachable == names
        assert not (reachable & unreachable)

    def test_reanalyze_resets(self, parse_source):
        ast = parse_source("%%\na: A ;\nb: a ;\n")
        analysis = Reachability(ast)
        assert analysis.analyze("b") == {"a", "b"}
        assert analysis.analyze("a") == {"a"}
