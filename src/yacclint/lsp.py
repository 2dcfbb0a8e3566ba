"""Minimal LSP server for grammar files, publishing lint diagnostics."""

from __future__ import annotations

from pathlib import Path

from lsprotocol.types import (
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_OPEN,
    Diagnostic,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidOpenTextDocumentParams,
    Position,
    PublishDiagnosticsParams,
    Range,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer
from pygls.uris import to_fs_path

from yacclint import __version__
from yacclint.config import Config, ConfigError, load_config
from yacclint.linter import Offense, Severity, lint_source

server = LanguageServer(
    "yacclint-lsp", __version__, text_document_sync_kind=TextDocumentSyncKind.Full
)

SEVERITY_MAP: dict[Severity, DiagnosticSeverity] = {
    Severity.ERROR: DiagnosticSeverity.Error,
    Severity.WARNING: DiagnosticSeverity.Warning,
    Severity.CONVENTION: DiagnosticSeverity.Information,
    Severity.INFO: DiagnosticSeverity.Hint,
}


def to_diagnostic(offense: Offense) -> Diagnostic:
    """Convert a 1-based offense location to a 0-based LSP range."""
    loc = offense.location
    line = max(loc.line - 1, 0)
    col = max(loc.column - 1, 0)
    return Diagnostic(
        range=Range(
            start=Position(line=line, character=col),
            end=Position(line=line, character=col + max(loc.length, 1)),
        ),
        message=offense.message,
        severity=SEVERITY_MAP[offense.severity],
        code=offense.rule_name,
        source="yacclint",
    )


def diagnostics_for(source: str, filename: str, config: Config | None = None) -> list[Diagnostic]:
    offenses, _, _ = lint_source(source, filename, config or Config())
    return [to_diagnostic(o) for o in offenses]


def config_error_diagnostic(exc: ConfigError) -> Diagnostic:
    return Diagnostic(
        range=Range(start=Position(line=0, character=0), end=Position(line=0, character=1)),
        message=str(exc),
        severity=DiagnosticSeverity.Error,
        code="ConfigError",
        source="yacclint",
    )


def _validate(ls: LanguageServer, uri: str) -> None:
    """Lint the open document and publish diagnostics.

    Configuration is discovered in the document's directory, the same way
    the CLI discovers it in the working directory.
    """
    doc = ls.workspace.get_text_document(uri)
    filename = uri.rsplit("/", 1)[-1] if "/" in uri else uri
    try:
        path = to_fs_path(uri)
        search_dir = Path(path).parent if path else None
        config = load_config(search_dir=search_dir)
        diagnostics = diagnostics_for(doc.source, filename, config)
    except ConfigError as exc:
        diagnostics = [config_error_diagnostic(exc)]
    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
    )


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: LanguageServer, params: DidOpenTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: LanguageServer, params: DidChangeTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


def main() -> None:
    server.start_io()
