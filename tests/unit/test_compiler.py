"""Unit tests for compile strategies and compile helpers."""

from dataclasses import replace
from pathlib import Path

import pytest

from texpress.contexts.rendering.compiler import (
    CompileOptions,
    PdfLatexStrategy,
    Texi2DviStrategy,
    probe_version,
    remove_existing_logs,
    select_compile_strategy,
)
from texpress.utils.process import ProcessResult
from tests.helpers.fakes import FakeRunner, fake_which, write_byproducts

PDFLATEX = Path("/opt/texlive/bin/pdflatex")


@pytest.mark.unit
class TestCompileOptions:
    """Tests for CompileOptions.program_flags."""

    def test_default_flags(self):
        assert CompileOptions().program_flags() == [
            "-interaction=nonstopmode",
            "-file-line-error",
            "-synctex=-1",
        ]

    def test_shell_escape_flag(self):
        flags = CompileOptions(shell_escape=True, sync_tex=False).program_flags()

        assert "-shell-escape" in flags
        assert "-synctex=-1" not in flags


@pytest.mark.unit
class TestStrategies:
    """Tests for command construction and invocation."""

    def test_direct_command(self, tex_document):
        command = PdfLatexStrategy().build_command(PDFLATEX, tex_document, CompileOptions())

        assert command[0] == str(PDFLATEX)
        assert command[-1] == "paper.tex"

    def test_direct_runs_in_document_directory(self, tex_document):
        """Test the program runs once, in the document's directory, inheriting env."""
        runner = FakeRunner()

        result = PdfLatexStrategy().compile(PDFLATEX, tex_document, CompileOptions(), runner)

        assert result.exit_status == 0
        assert runner.count == 1
        assert runner.calls[0]["cwd"] == tex_document.parent
        assert runner.calls[0]["env"] is None

    def test_texi2dvi_passes_program_through_environment(self, tex_document):
        """Test texi2dvi gets the program and flags via PDFLATEX/LATEX."""
        runner = FakeRunner()
        strategy = Texi2DviStrategy(Path("/usr/bin/texi2dvi"))

        strategy.compile(PDFLATEX, tex_document, CompileOptions(), runner)

        call = runner.calls[0]
        assert call["args"] == ["/usr/bin/texi2dvi", "--pdf", "--quiet", "--batch", "paper.tex"]
        assert call["env"]["PDFLATEX"].startswith(f"{PDFLATEX} -interaction=nonstopmode")
        assert call["env"]["LATEX"] == call["env"]["PDFLATEX"]

    def test_failed_compile_result_is_returned(self, tex_document):
        runner = FakeRunner(on_run=lambda cwd: ProcessResult(exit_status=1, stderr="boom"))

        result = PdfLatexStrategy().compile(PDFLATEX, tex_document, CompileOptions(), runner)

        assert not result.succeeded
        assert result.stderr == "boom"


@pytest.mark.unit
class TestSelectCompileStrategy:
    """Tests for select_compile_strategy."""

    def test_direct_by_default(self, settings):
        assert isinstance(select_compile_strategy(settings, which=fake_which), PdfLatexStrategy)

    def test_texi2dvi_when_enabled_and_installed(self, settings):
        strategy = select_compile_strategy(
            replace(settings, use_texi2dvi=True), which=lambda name: f"/usr/bin/{name}"
        )

        assert isinstance(strategy, Texi2DviStrategy)
        assert strategy.texi2dvi_path == Path("/usr/bin/texi2dvi")

    def test_falls_back_when_texi2dvi_missing(self, settings):
        strategy = select_compile_strategy(replace(settings, use_texi2dvi=True), which=fake_which)

        assert isinstance(strategy, PdfLatexStrategy)


@pytest.mark.unit
class TestCompileHelpers:
    """Tests for version probing and stale log removal."""

    def test_probe_version(self):
        assert probe_version(PDFLATEX, FakeRunner()).startswith("pdfTeX 3.14")

    def test_probe_version_nonzero_exit(self):
        runner = FakeRunner(version_result=ProcessResult(exit_status=1, stderr="bad"))

        assert probe_version(PDFLATEX, runner) == ""

    def test_probe_version_launch_failure(self):
        def broken_runner(args, cwd=None, env=None):
            raise FileNotFoundError(2, "No such file or directory")

        assert probe_version(PDFLATEX, broken_runner) == ""

    def test_remove_existing_logs(self, tmp_path):
        """Test stale .log/.blg files go and other files stay."""
        write_byproducts(tmp_path, "paper", [".log", ".blg", ".aux"])

        remove_existing_logs(tmp_path / "paper.tex")
        remove_existing_logs(tmp_path / "paper.tex")

        assert not (tmp_path / "paper.log").exists()
        assert not (tmp_path / "paper.blg").exists()
        assert (tmp_path / "paper.aux").exists()
