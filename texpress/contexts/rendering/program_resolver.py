"""
LaTeX Program Resolution

Chooses the LaTeX program for a document from its '% !TeX program = ...' magic
comment, falling back to the configured default, and locates it on disk.
"""

import os
import shutil
from pathlib import Path
from typing import Callable, Optional

from texpress.contexts.rendering.exceptions import ProgramResolutionError
from texpress.contexts.rendering.logger import _log_debug
from texpress.contexts.weaving.magic_comments import MagicComments
from texpress.utils.config import CompileSettings

SUPPORTED_PROGRAMS = ("pdflatex", "xelatex", "lualatex")

Which = Callable[[str], Optional[str]]


def _validate_program(name: str, origin: str) -> str:
    program = name.strip().lower()
    if program not in SUPPORTED_PROGRAMS:
        raise ProgramResolutionError(
            f"Unknown LaTeX program type '{name}' {origin} "
            f"(valid types are {', '.join(SUPPORTED_PROGRAMS)})"
        )
    return program


def find_program(program: str, tex_bin_dir: Optional[Path], which: Which = shutil.which) -> Optional[Path]:
    """
    Locate an executable, checking tex_bin_dir before PATH.

    Returns:
        Absolute path, or None if not found
    """
    if tex_bin_dir is not None:
        candidate = Path(tex_bin_dir) / program
        if candidate.is_file() and os.access(candidate, os.X_OK):
            return candidate.absolute()

    found = which(program)
    return Path(found).absolute() if found else None


def resolve_latex_program(
    magic_comments: MagicComments,
    settings: CompileSettings,
    which: Which = shutil.which,
) -> Path:
    """
    Resolve the LaTeX program path for a document.

    Args:
        magic_comments: Directives parsed from the document
        settings: Compile settings (default program, TeX bin directory)
        which: PATH lookup function

    Returns:
        Absolute path to the program

    Raises:
        ProgramResolutionError: With a user-facing message when the requested
            program is unknown or cannot be found
    """
    requested = magic_comments.lookup("TeX", "program")
    if requested:
        program = _validate_program(requested, "specified")
    else:
        program = _validate_program(settings.default_program, "configured")

    path = find_program(program, settings.tex_bin_dir, which)
    if path is None:
        if requested:
            raise ProgramResolutionError(
                f"Unable to find specified LaTeX program '{program}' on the system path"
            )
        raise ProgramResolutionError(
            f"No TeX installation detected ('{program}' not found). "
            "Please install TeX before compiling."
        )

    _log_debug(f"Resolved LaTeX program: {path}")
    return path
