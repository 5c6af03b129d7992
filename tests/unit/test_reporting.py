"""Unit tests for compile error collection and display."""

import pytest

from texpress.contexts.diagnostics.concordance import Concordance
from texpress.contexts.diagnostics.log_entry import LogEntry, LogEntryType
from texpress.contexts.rendering.output_sink import BufferOutputSink
from texpress.contexts.rendering.reporting import collect_diagnostics, show_compilation_errors

LATEX_LOG = (
    "(./paper.tex\n"
    "./paper.tex:12: Undefined control sequence.\n"
    "l.12 \\foo\n"
    "\n"
    ")\n"
)

# The BibTeX location names the same file the concordance covers
BIBTEX_LOG = (
    "This is BibTeX, Version 0.99d (TeX Live 2023)\n"
    "I couldn't open database file refs.bib\n"
    "---line 12 of file paper.tex\n"
)


@pytest.fixture
def concordance():
    """paper.tex line n comes from paper.Rnw line n + 100."""
    return Concordance(
        input_file="paper.Rnw",
        output_file="paper.tex",
        input_lines=tuple(range(101, 131)),
    )


@pytest.mark.unit
class TestCollectDiagnostics:
    """Tests for collect_diagnostics."""

    def test_latex_remapped_bibtex_unchanged(self, tmp_path, concordance):
        """Test only LaTeX entries go through the concordance."""
        (tmp_path / "paper.log").write_text(LATEX_LOG)
        (tmp_path / "paper.blg").write_text(BIBTEX_LOG)

        diagnostics = collect_diagnostics(tmp_path / "paper.tex", concordance)

        assert diagnostics.latex == [
            LogEntry(LogEntryType.ERROR, "paper.Rnw", 112, "Undefined control sequence.")
        ]
        assert diagnostics.bibtex == [
            LogEntry(LogEntryType.ERROR, "paper.tex", 12, "I couldn't open database file refs.bib")
        ]
        assert diagnostics.entries == diagnostics.latex + diagnostics.bibtex

    def test_missing_logs_yield_nothing(self, tmp_path, concordance):
        diagnostics = collect_diagnostics(tmp_path / "paper.tex", concordance)

        assert not diagnostics
        assert diagnostics.entries == []

    def test_unreadable_log_counts_as_empty(self, tmp_path):
        """Test a log that cannot be read is skipped rather than raised."""
        (tmp_path / "paper.log").mkdir()
        (tmp_path / "paper.blg").write_text(BIBTEX_LOG)

        diagnostics = collect_diagnostics(tmp_path / "paper.tex", Concordance())

        assert diagnostics.latex == []
        assert len(diagnostics.bibtex) == 1


@pytest.mark.unit
class TestShowCompilationErrors:
    """Tests for show_compilation_errors."""

    def test_sections_in_order(self, tmp_path, concordance):
        """Test LaTeX entries come first, then BibTeX entries, each under its label."""
        (tmp_path / "paper.log").write_text(LATEX_LOG)
        (tmp_path / "paper.blg").write_text(BIBTEX_LOG)
        sink = BufferOutputSink()

        shown = show_compilation_errors(collect_diagnostics(tmp_path / "paper.tex", concordance), sink)

        assert shown is True
        assert sink.text == (
            "\nLaTeX errors:\n"
            "paper.Rnw (line 112): Undefined control sequence.\n"
            "\n"
            "BibTeX errors:\n"
            "paper.tex (line 12): I couldn't open database file refs.bib\n"
            "\n"
        )

    def test_bibtex_only(self, tmp_path):
        (tmp_path / "paper.blg").write_text(BIBTEX_LOG)
        sink = BufferOutputSink()

        shown = show_compilation_errors(collect_diagnostics(tmp_path / "paper.tex", Concordance()), sink)

        assert shown is True
        assert sink.text.startswith("BibTeX errors:\n")
        assert "LaTeX errors:" not in sink.text

    def test_nothing_to_show(self, tmp_path):
        sink = BufferOutputSink()

        assert show_compilation_errors(collect_diagnostics(tmp_path / "paper.tex", Concordance()), sink) is False
        assert sink.text == ""
