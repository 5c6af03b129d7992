"""
Compilation error reporting.

Reads the LaTeX and BibTeX logs left by a failed compile and writes their entries
to the output sink. LaTeX entries are mapped back to the literate source when a
concordance applies; BibTeX entries never refer to the source and are shown as-is.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from texpress.contexts.diagnostics.concordance import Concordance, remap_entries
from texpress.contexts.diagnostics.exceptions import LogParseError
from texpress.contexts.diagnostics.log_entry import LogEntry
from texpress.contexts.diagnostics.log_parser import parse_bibtex_log, parse_latex_log
from texpress.contexts.rendering.compiler import ancillary_path
from texpress.contexts.rendering.logger import _log_error
from texpress.contexts.rendering.output_sink import OutputSink


@dataclass
class CompileDiagnostics:
    """Entries recovered from one compile's logs, in parse order."""

    latex: List[LogEntry] = field(default_factory=list)
    bibtex: List[LogEntry] = field(default_factory=list)

    @property
    def entries(self) -> List[LogEntry]:
        return self.latex + self.bibtex

    def __bool__(self) -> bool:
        return bool(self.latex or self.bibtex)


def _parse_if_present(log_path: Path, parser) -> List[LogEntry]:
    if not log_path.exists():
        return []
    try:
        return parser(log_path)
    except LogParseError as e:
        _log_error(str(e))
        return []


def collect_diagnostics(tex_path: Path, concordance: Concordance) -> CompileDiagnostics:
    """
    Parse the .log and .blg beside tex_path.

    Missing or unreadable logs contribute no entries.
    """
    latex = _parse_if_present(ancillary_path(tex_path, ".log"), parse_latex_log)
    bibtex = _parse_if_present(ancillary_path(tex_path, ".blg"), parse_bibtex_log)
    return CompileDiagnostics(latex=remap_entries(latex, concordance), bibtex=bibtex)


def show_log_entry(entry: LogEntry, sink: OutputSink) -> None:
    sink.show_output(entry.format() + "\n")


def show_compilation_errors(diagnostics: CompileDiagnostics, sink: OutputSink) -> bool:
    """
    Write diagnostics to the sink, grouped by log.

    Returns:
        True if at least one entry was shown
    """
    if diagnostics.latex:
        sink.show_output("\nLaTeX errors:\n")
        for entry in diagnostics.latex:
            show_log_entry(entry, sink)
        sink.show_output("\n")

    if diagnostics.bibtex:
        sink.show_output("BibTeX errors:\n")
        for entry in diagnostics.bibtex:
            show_log_entry(entry, sink)
        sink.show_output("\n")

    return bool(diagnostics)
