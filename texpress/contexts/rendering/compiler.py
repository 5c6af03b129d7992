"""
LaTeX Compilation Module

Runs the LaTeX program over a .tex file through one of two interchangeable
strategies:

- PdfLatexStrategy invokes the program directly
- Texi2DviStrategy runs texi2dvi, which reruns the program (and BibTeX/makeindex)
  until cross-references settle

Both take the same CompileOptions and return a uniform CompileResult.
"""

import shutil
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional

from texpress.contexts.rendering.logger import _log_debug, _log_warning
from texpress.utils.config import CompileSettings
from texpress.utils.process import ProcessResult, ProcessRunner

# The compile result carries the same fields as any process run
CompileResult = ProcessResult

LOG_EXTENSIONS = (".log", ".blg")


@dataclass
class CompileOptions:
    """
    Options shared by every compile strategy.

    Attributes:
        file_line_error: Report errors as file:line:message
        sync_tex: Embed SyncTeX data for source/PDF navigation
        shell_escape: Allow the document to run shell commands
        version_info: Output of '<program> --version' (empty if the probe failed)
    """

    file_line_error: bool = True
    sync_tex: bool = True
    shell_escape: bool = False
    version_info: str = ""

    def program_flags(self) -> List[str]:
        """Command-line flags for the LaTeX program."""
        flags = ["-interaction=nonstopmode"]
        if self.file_line_error:
            flags.append("-file-line-error")
        if self.sync_tex:
            flags.append("-synctex=-1")
        if self.shell_escape:
            flags.append("-shell-escape")
        return flags


def ancillary_path(tex_path: Path, ext: str) -> Path:
    """Sibling file sharing the document stem, e.g. paper.tex -> paper.log."""
    return tex_path.parent / f"{tex_path.stem}{ext}"


def remove_existing_logs(tex_path: Path) -> None:
    """
    Delete stale .log/.blg files so a later parse only sees this run's output.

    Deletion errors are logged, not raised.
    """
    for ext in LOG_EXTENSIONS:
        log_path = ancillary_path(tex_path, ext)
        try:
            log_path.unlink(missing_ok=True)
        except OSError as e:
            _log_warning(f"Unable to remove stale log {log_path}: {e}")


def probe_version(program: Path, runner: ProcessRunner) -> str:
    """
    Ask the program for its version text.

    Best effort: failures are logged and yield an empty string.
    """
    try:
        result = runner([str(program), "--version"])
    except OSError as e:
        _log_warning(f"Error probing for LaTeX version: {e}")
        return ""

    if not result.succeeded:
        _log_warning(f"Error probing for LaTeX version: {result.stderr.strip()}")
        return ""

    version_info = result.stdout.strip()
    if version_info:
        _log_debug(f"LaTeX version: {version_info.splitlines()[0]}")
    return version_info


class CompileStrategy(ABC):
    """Invokes the LaTeX toolchain for one .tex file."""

    name: str = "compile"

    @abstractmethod
    def build_command(self, program: Path, tex_path: Path, options: CompileOptions) -> List[str]:
        """Command line for this strategy."""

    def build_environment(self, program: Path, options: CompileOptions) -> Optional[Dict[str, str]]:
        """Extra environment variables for the process (None = inherit)."""
        return None

    def compile(
        self,
        program: Path,
        tex_path: Path,
        options: CompileOptions,
        runner: ProcessRunner,
    ) -> CompileResult:
        """
        Run the compile in the document's directory.

        Raises:
            OSError: If the process cannot be started
        """
        command = self.build_command(program, tex_path, options)
        _log_debug(f"Running: {' '.join(command)}")
        return runner(
            command,
            cwd=tex_path.parent,
            env=self.build_environment(program, options),
        )


class PdfLatexStrategy(CompileStrategy):
    """Runs the LaTeX program directly, once."""

    name = "direct"

    def build_command(self, program: Path, tex_path: Path, options: CompileOptions) -> List[str]:
        return [str(program), *options.program_flags(), tex_path.name]


class Texi2DviStrategy(CompileStrategy):
    """
    Runs texi2dvi, passing the program and its flags through the environment.

    texi2dvi reads the PDF engine command from PDFLATEX when run with --pdf.
    """

    name = "texi2dvi"

    def __init__(self, texi2dvi_path: Path):
        self.texi2dvi_path = texi2dvi_path

    def build_command(self, program: Path, tex_path: Path, options: CompileOptions) -> List[str]:
        return [str(self.texi2dvi_path), "--pdf", "--quiet", "--batch", tex_path.name]

    def build_environment(self, program: Path, options: CompileOptions) -> Dict[str, str]:
        engine = " ".join([str(program), *options.program_flags()])
        return {"PDFLATEX": engine, "LATEX": engine}


def select_compile_strategy(
    settings: CompileSettings,
    which: Callable[[str], Optional[str]] = shutil.which,
) -> CompileStrategy:
    """
    Pick the compile strategy from settings.

    texi2dvi is used only when enabled and installed; otherwise the program is
    invoked directly.
    """
    if settings.use_texi2dvi:
        texi2dvi = which("texi2dvi")
        if texi2dvi:
            return Texi2DviStrategy(Path(texi2dvi))
        _log_warning("texi2dvi requested but not found; invoking LaTeX program directly")
    return PdfLatexStrategy()
