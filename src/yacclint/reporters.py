"""Offense reporters: plain text, JSON and GitHub Actions annotations."""

from __future__ import annotations

import json

from yacclint.linter import Offense, Severity


def _group_by_file(offenses: list[Offense]) -> dict[str, list[Offense]]:
    grouped: dict[str, list[Offense]] = {}
    for offense in offenses:
        grouped.setdefault(offense.location.file, []).append(offense)
    return grouped


def _count_by_severity(offenses: list[Offense]) -> dict[str, int]:
    counts: dict[str, int] = {}
    for offense in offenses:
        key = offense.severity.value
        counts[key] = counts.get(key, 0) + 1
    return counts


class TextReporter:
    def report(self, offenses: list[Offense]) -> str:
        if not offenses:
            return "No offenses detected"

        lines: list[str] = []
        for file, file_offenses in _group_by_file(offenses).items():
            lines.append("")
            lines.append(file)
            ordered = sorted(file_offenses, key=lambda o: (o.location.line, o.location.column))
            for o in ordered:
                loc = f"{o.location.line}:{o.location.column}"
                lines.append(f"  {loc}: {o.severity.value}: [{o.rule_name}] {o.message}")

        lines.append("")
        lines.append(self._summary(offenses))
        return "\n".join(lines)

    @staticmethod
    def _summary(offenses: list[Offense]) -> str:
        counts = _count_by_severity(offenses)
        labels = (
            (Severity.ERROR, "error(s)"),
            (Severity.WARNING, "warning(s)"),
            (Severity.CONVENTION, "convention(s)"),
            (Severity.INFO, "info"),
        )
        parts = [f"{counts[sev.value]} {label}" for sev, label in labels if sev.value in counts]
        return f"{', '.join(parts)} found"


class JsonReporter:
    def report(self, offenses: list[Offense]) -> str:
        output = {
            "summary": {
                "total": len(offenses),
                "by_severity": _count_by_severity(offenses),
            },
            "files": [
                {"path": file, "offenses": [self._format(o) for o in file_offenses]}
                for file, file_offenses in _group_by_file(offenses).items()
            ],
        }
        return json.dumps(output, indent=2)

    @staticmethod
    def _format(offense: Offense) -> dict:
        return {
            "rule": offense.rule_name,
            "severity": offense.severity.value,
            "message": offense.message,
            "location": {
                "line": offense.location.line,
                "column": offense.location.column,
                "length": offense.location.length,
            },
            "autocorrectable": offense.autocorrectable,
        }


class GithubReporter:
    """One ``::level file=…,line=…,col=…::message`` workflow command per offense."""

    def report(self, offenses: list[Offense]) -> str:
        return "\n".join(self._format(o) for o in offenses)

    @staticmethod
    def _format(offense: Offense) -> str:
        if offense.severity in (Severity.ERROR, Severity.WARNING):
            level = offense.severity.value
        else:
            level = "notice"
        loc = offense.location
        message = offense.message.replace(",", "%2C")
        return f"::{level} file={loc.file},line={loc.line},col={loc.column}::{message}"


REPORTERS = {
    "text": TextReporter,
    "json": JsonReporter,
    "github": GithubReporter,
}


def get_reporter(name: str) -> TextReporter | JsonReporter | GithubReporter:
    """Return a reporter instance by format name (unknown names fall back to text)."""
    return REPORTERS.get(name, TextReporter)()
