"""Tests for the CLI module: arg parsing, file discovery, commands, exit codes."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from yacclint.cli import (
    _matches,
    build_parser,
    collect_files,
    lint_file,
    main,
    select_rules,
    unified_diff,
)
from yacclint.config import CONFIG_FILENAME, Config

CLEAN = "%token NUMBER\n%%\nexpr\n    : NUMBER\n    ;\n"


@pytest.fixture(autouse=True)
def _in_tmp(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run every CLI test from an empty directory so no config is discovered."""
    monkeypatch.chdir(tmp_path)


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


# ---------------------------------------------------------------------------
# Arg parsing via build_parser
# ---------------------------------------------------------------------------


class TestArgParsing:
    def test_lint_defaults(self) -> None:
        ns = build_parser().parse_args(["lint", "a.y"])
        assert ns.command == "lint"
        assert ns.files == ["a.y"]
        assert ns.format == "text"
        assert ns.autocorrect is False
        assert ns.only is None
        assert ns.except_rules is None
        assert ns.config is None

    def test_lint_flags(self) -> None:
        ns = build_parser().parse_args(
            ["lint", "a.y", "b.y", "-a", "--format", "json", "--only", "LongRule", "EmptyAction"]
        )
        assert ns.files == ["a.y", "b.y"]
        assert ns.autocorrect is True
        assert ns.format == "json"
        assert ns.only == ["LongRule", "EmptyAction"]

    def test_except(self) -> None:
        ns = build_parser().parse_args(["lint", "a.y", "--except", "TokenNaming"])
        assert ns.except_rules == ["TokenNaming"]

    def test_invalid_format(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["lint", "a.y", "--format", "xml"])

    def test_fmt_flags(self) -> None:
        ns = build_parser().parse_args(["fmt", "a.y", "--check", "--diff"])
        assert ns.check is True
        assert ns.diff is True

    def test_no_command(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main([]) == 2
        assert "usage" in capsys.readouterr().err


# ---------------------------------------------------------------------------
# File discovery
# ---------------------------------------------------------------------------


class TestCollectFiles:
    def test_plain_files_kept(self, tmp_path: Path) -> None:
        assert collect_files(["a.y", "missing.y"], Config()) == [Path("a.y"), Path("missing.y")]

    def test_directory_expanded(self, tmp_path: Path) -> None:
        write(tmp_path / "src" / "b.y", CLEAN)
        write(tmp_path / "src" / "a.y", CLEAN)
        write(tmp_path / "src" / "nested" / "c.y", CLEAN)
        write(tmp_path / "src" / "notes.txt", "")
        files = collect_files(["src"], Config())
        assert files == [Path("src/a.y"), Path("src/b.y"), Path("src/nested/c.y")]

    def test_excluded(self, tmp_path: Path) -> None:
        write(tmp_path / "proj" / "a.y", CLEAN)
        write(tmp_path / "proj" / "vendor" / "lib" / "v.y", CLEAN)
        write(tmp_path / "proj" / "tmp" / "t.y", CLEAN)
        assert collect_files(["proj"], Config()) == [Path("proj/a.y")]

    def test_matches(self) -> None:
        assert _matches("a.y", "**/*.y")
        assert _matches("x/a.y", "**/*.y")
        assert _matches("vendor/v.y", "vendor/**/*")
        assert not _matches("a.txt", "**/*.y")


class TestSelectRules:
    def test_only(self) -> None:
        names = [d.name for d in select_rules(Config(), ["LongRule"], None)]
        assert names == ["LongRule"]

    def test_except(self) -> None:
        names = {d.name for d in select_rules(Config(), None, ["LongRule"])}
        assert "LongRule" not in names
        assert len(names) == 18

    def test_disabled_in_config(self) -> None:
        config = Config()
        config.data["rules"] = {"LongRule": False}
        assert select_rules(config, ["LongRule"], None) == []


# ---------------------------------------------------------------------------
# lint
# ---------------------------------------------------------------------------


class TestLint:
    def test_clean_file(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        write(tmp_path / "ok.y", CLEAN)
        assert main(["lint", "ok.y"]) == 0
        assert capsys.readouterr().out.strip() == "No offenses detected"

    def test_error_exit_code(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        write(tmp_path / "bad.y", "%token NUMBER\n%%\nexpr: MISSING ;\n")
        assert main(["lint", "bad.y"]) == 1
        out = capsys.readouterr().out
        assert "[UndefinedSymbol] Undefined symbol 'MISSING'" in out
        assert "bad.y" in out

    def test_warnings_only_exit_zero(self, tmp_path: Path) -> None:
        write(tmp_path / "warn.y", "%token NUMBER UNUSED\n%%\nexpr: NUMBER ;\n")
        assert main(["lint", "warn.y"]) == 0

    def test_parse_error(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        write(tmp_path / "broken.y", "%token A\n")
        assert main(["lint", "broken.y"]) == 1
        assert "[ParseError]" in capsys.readouterr().out

    def test_missing_file(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["lint", "nope.y"]) == 0
        captured = capsys.readouterr()
        assert "File not found: nope.y" in captured.err
        assert "No offenses detected" in captured.out

    def test_json_format(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        write(tmp_path / "bad.y", "%token NUMBER\n%%\nexpr: MISSING ;\n")
        main(["lint", "bad.y", "--format", "json", "--only", "UndefinedSymbol"])
        data = json.loads(capsys.readouterr().out)
        assert data["summary"]["total"] == 1
        assert data["files"][0]["offenses"][0]["rule"] == "UndefinedSymbol"

    def test_github_format(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        write(tmp_path / "bad.y", "%token NUMBER\n%%\nexpr: MISSING ;\n")
        main(["lint", "bad.y", "--format", "github", "--only", "UndefinedSymbol"])
        assert capsys.readouterr().out.startswith("::error file=bad.y,line=3,col=7::")

    def test_except_rule(self, tmp_path: Path) -> None:
        write(tmp_path / "bad.y", "%token NUMBER\n%%\nexpr: NUMBER MISSING ;\n")
        assert main(["lint", "bad.y", "--except", "UndefinedSymbol"]) == 0

    def test_config_disables_rule(self, tmp_path: Path) -> None:
        write(tmp_path / CONFIG_FILENAME, "[rules]\nUndefinedSymbol = false\n")
        write(tmp_path / "bad.y", "%token NUMBER\n%%\nexpr: NUMBER MISSING ;\n")
        assert main(["lint", "bad.y"]) == 0

    def test_explicit_config_missing(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["lint", "a.y", "--config", "nope.toml"]) == 2
        assert capsys.readouterr().err.startswith("error: ")

    def test_invalid_rule_pattern(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        write(tmp_path / CONFIG_FILENAME, '[rules.TokenNaming]\npattern = "("\n')
        write(tmp_path / "a.y", CLEAN)
        assert main(["lint", "a.y"]) == 2
        assert capsys.readouterr().err.startswith("error: TokenNaming: invalid pattern '('")

    def test_directory(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        write(tmp_path / "g" / "a.y", CLEAN)
        write(tmp_path / "g" / "b.y", "%%\nexpr: MISSING ;\n")
        assert main(["lint", "g"]) == 1
        out = capsys.readouterr().out
        assert str(Path("g/b.y")) in out

    def test_debug_dumps_ast(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        write(tmp_path / "ok.y", CLEAN)
        main(["lint", "ok.y", "--debug"])
        err = capsys.readouterr().err
        assert err.startswith("GrammarFile\n")
        assert "Rule expr" in err


class TestAutocorrect:
    def test_trailing_whitespace_fixed(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        path = write(tmp_path / "ws.y", "%token NUMBER  \n%%\nexpr\n    : NUMBER\t\n    ;\n")
        main(["lint", "ws.y", "-a"])
        assert path.read_text() == CLEAN
        assert "Auto-corrected 2 offense(s) in ws.y" in capsys.readouterr().err

    def test_count_excludes_empty_actions(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        source = "%token NUMBER\n%%\nexpr\n    : NUMBER { } \n    ;\n"
        path = write(tmp_path / "ea.y", source)
        main(["lint", "ea.y", "-a"])
        assert path.read_text() == "%token NUMBER\n%%\nexpr\n    : NUMBER { }\n    ;\n"
        assert "Auto-corrected 1 offense(s) in ea.y" in capsys.readouterr().err

    def test_empty_action_alone_not_reported(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        source = "%token NUMBER\n%%\nexpr\n    : NUMBER { }\n    ;\n"
        path = write(tmp_path / "ea.y", source)
        main(["lint", "ea.y", "-a"])
        assert path.read_text() == source
        assert "Auto-corrected" not in capsys.readouterr().err

    def test_without_flag_file_untouched(self, tmp_path: Path) -> None:
        source = "%token NUMBER  \n%%\nexpr\n    : NUMBER\n    ;\n"
        path = write(tmp_path / "ws.y", source)
        main(["lint", "ws.y"])
        assert path.read_text() == source

    def test_nothing_to_fix(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = write(tmp_path / "ok.y", CLEAN)
        main(["lint", "ok.y", "-a"])
        assert path.read_text() == CLEAN
        assert "Auto-corrected" not in capsys.readouterr().err

    def test_lint_file_returns_offenses(self, tmp_path: Path) -> None:
        path = write(tmp_path / "ws.y", "%token NUMBER \n%%\nexpr: NUMBER ;\n")
        rules = select_rules(Config(), ["TrailingWhitespace"], None)
        offenses = lint_file(path, Config(), rules, autocorrect=True)
        assert len(offenses) == 1
        assert path.read_text() == "%token NUMBER\n%%\nexpr: NUMBER ;\n"


# ---------------------------------------------------------------------------
# fmt
# ---------------------------------------------------------------------------


class TestFmt:
    def test_rewrites_file(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = write(tmp_path / "g.y", "%token NUMBER\n%%\nexpr: NUMBER ;\n")
        assert main(["fmt", "g.y"]) == 0
        assert path.read_text() == "%token NUMBER\n\n%%\n\nexpr\n    : NUMBER\n    ;\n"
        assert "Formatted g.y" in capsys.readouterr().out

    def test_already_formatted(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        formatted = "%token NUMBER\n\n%%\n\nexpr\n    : NUMBER\n    ;\n"
        write(tmp_path / "g.y", formatted)
        assert main(["fmt", "g.y"]) == 0
        assert capsys.readouterr().out == ""

    def test_check(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        source = "%token NUMBER\n%%\nexpr: NUMBER ;\n"
        path = write(tmp_path / "g.y", source)
        assert main(["fmt", "g.y", "--check"]) == 1
        assert path.read_text() == source
        assert "g.y: needs formatting" in capsys.readouterr().out

    def test_check_ok(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        write(tmp_path / "g.y", "%token NUMBER\n\n%%\n\nexpr\n    : NUMBER\n    ;\n")
        assert main(["fmt", "g.y", "--check"]) == 0
        assert "g.y: OK" in capsys.readouterr().out

    def test_diff(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        source = "%token NUMBER\n%%\nexpr: NUMBER ;\n"
        path = write(tmp_path / "g.y", source)
        assert main(["fmt", "g.y", "--diff"]) == 0
        out = capsys.readouterr().out
        assert "--- a/g.y" in out
        assert "+++ b/g.y" in out
        assert "-expr: NUMBER ;" in out
        assert path.read_text() == source

    def test_parse_error(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        write(tmp_path / "bad.y", "%token A\n")
        assert main(["fmt", "bad.y"]) == 1
        assert "error: expected SECTION_SEPARATOR" in capsys.readouterr().err

    def test_unknown_directives_survive_rewrite(self, tmp_path: Path) -> None:
        source = "%define api.pure full\n%expect 0\n%destructor { free($$); } <s>\n%%\ns: A ;\n"
        path = write(tmp_path / "g.y", source)
        assert main(["fmt", "g.y"]) == 0
        assert path.read_text() == (
            "%define api.pure full\n%expect 0\n%destructor { free($$); } <s>\n"
            "\n%%\n\ns\n    : A\n    ;\n"
        )

    def test_config_indent(self, tmp_path: Path) -> None:
        write(tmp_path / CONFIG_FILENAME, "[formatter]\nindent_size = 2\n")
        path = write(tmp_path / "g.y", "%%\nexpr: NUMBER ;\n")
        main(["fmt", "g.y"])
        assert path.read_text() == "%%\n\nexpr\n  : NUMBER\n  ;\n"

    def test_unified_diff_terminates_lines(self) -> None:
        lines = unified_diff("a", "b", "x.y")
        assert all(line.endswith("\n") for line in lines)


# ---------------------------------------------------------------------------
# rules / init / version
# ---------------------------------------------------------------------------


class TestRulesCommand:
    def test_text(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["rules"]) == 0
        out = capsys.readouterr().out
        assert out.startswith("Available lint rules:\n")
        assert "  EmptyAction (convention) [autocorrectable]\n" in out
        assert "  UndefinedSymbol (error)\n" in out
        assert "    Detects references to undeclared tokens or nonterminals\n" in out

    def test_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["rules", "--format", "json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert len(data) == 19
        assert data[0].keys() == {"name", "description", "severity", "autocorrectable"}


class TestInit:
    def test_creates_config(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["init"]) == 0
        assert (tmp_path / CONFIG_FILENAME).is_file()
        assert f"Generated {CONFIG_FILENAME}" in capsys.readouterr().out

    def test_refuses_overwrite(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        write(tmp_path / CONFIG_FILENAME, "# mine\n")
        assert main(["init"]) == 1
        assert "already exists" in capsys.readouterr().err
        assert (tmp_path / CONFIG_FILENAME).read_text() == "# mine\n"

    def test_force(self, tmp_path: Path) -> None:
        write(tmp_path / CONFIG_FILENAME, "# mine\n")
        assert main(["init", "--force"]) == 0
        assert (tmp_path / CONFIG_FILENAME).read_text() != "# mine\n"


class TestVersion:
    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["version"]) == 0
        assert capsys.readouterr().out.strip() == "yacclint 0.1.0"
