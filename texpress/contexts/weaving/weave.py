"""
Rnw Weave Stage

Runs Sweave or knitr over a literate document to produce the .tex file the
compiler consumes, along with a concordance mapping generated lines back to the
source. The weave driver comes from the '% !Rnw weave = ...' magic comment,
falling back to the configured default.
"""

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List

from texpress.contexts.diagnostics.concordance import Concordance, parse_concordance
from texpress.contexts.diagnostics.exceptions import ConcordanceError
from texpress.contexts.weaving.logger import (
    _log_debug,
    _log_error,
    _log_success,
    _log_warning,
    log_weave_output,
    log_weave_start,
)
from texpress.contexts.weaving.magic_comments import MagicComments
from texpress.utils.config import CompileSettings
from texpress.utils.process import ProcessRunner, run_program

# R expressions per weave driver; {file} is the Rnw file name
WEAVE_COMMANDS: Dict[str, str] = {
    "sweave": "utils::Sweave('{file}', concordance = TRUE)",
    "knitr": "library(knitr); opts_knit$set(concordance = TRUE); knit('{file}')",
}

WEAVE_DISPLAY_NAMES = {"sweave": "Sweave", "knitr": "knitr"}


@dataclass
class WeaveResult:
    """
    Outcome of weaving a literate document.

    Attributes:
        succeeded: Whether the weave produced a .tex file
        error_message: User-facing reason for failure (empty on success)
        concordance: Line mapping for the generated .tex (empty if none was written)
    """

    succeeded: bool
    error_message: str = ""
    concordance: Concordance = field(default_factory=Concordance)


def concordance_path(source: Path) -> Path:
    """Concordance file written beside the source, e.g. paper-concordance.tex."""
    return source.parent / f"{source.stem}-concordance.tex"


def resolve_weave_method(magic_comments: MagicComments, settings: CompileSettings) -> str:
    """
    Pick the weave driver for a document.

    Returns:
        Lower-cased driver name

    Raises:
        ValueError: If the requested driver is not supported
    """
    requested = magic_comments.lookup("Rnw", "weave") or settings.default_weave
    method = requested.strip().lower()
    if method not in WEAVE_COMMANDS:
        valid = ", ".join(WEAVE_DISPLAY_NAMES.values())
        raise ValueError(f"Unknown Rnw weave method '{requested}' specified (valid types are {valid})")
    return method


def build_weave_command(rscript: str, source: Path, method: str) -> List[str]:
    """Rscript invocation that weaves `source` in its own directory."""
    escaped = source.name.replace("\\", "\\\\").replace("'", "\\'")
    return [rscript, "--vanilla", "-e", WEAVE_COMMANDS[method].format(file=escaped)]


def read_concordance(source: Path) -> Concordance:
    """
    Load the concordance the weave wrote, if any.

    A missing or malformed concordance is not an error; locations are then
    reported against the generated .tex file.
    """
    path = concordance_path(source)
    if not path.exists():
        _log_debug(f"No concordance written for {source.name}")
        return Concordance()

    try:
        return parse_concordance(path.read_text(encoding="utf-8", errors="replace"))
    except (ConcordanceError, OSError) as e:
        _log_warning(f"Ignoring unreadable concordance {path.name}: {e}")
        return Concordance()


async def run_weave(
    source: Path,
    magic_comments: MagicComments,
    settings: CompileSettings,
    runner: ProcessRunner = run_program,
) -> WeaveResult:
    """
    Weave a literate document into <stem>.tex.

    The R process runs in a worker thread so the caller's event loop keeps going.

    Args:
        source: Literate document (.Rnw, .Snw, .nw)
        magic_comments: Directives parsed from the document
        settings: Compile settings (default weave driver, Rscript path)
        runner: Process runner

    Returns:
        WeaveResult; failures carry the weave's own error message
    """
    source = Path(source)

    try:
        method = resolve_weave_method(magic_comments, settings)
    except ValueError as e:
        _log_error(str(e))
        return WeaveResult(succeeded=False, error_message=str(e))

    command = build_weave_command(settings.rscript, source, method)
    log_weave_start(source, WEAVE_DISPLAY_NAMES[method], command)

    try:
        result = await asyncio.to_thread(runner, command, cwd=source.parent)
    except OSError as e:
        message = f"Unable to run {settings.rscript}: {e.strerror or e}"
        _log_error(message)
        return WeaveResult(succeeded=False, error_message=message)

    log_weave_output(result.stdout, result.stderr)

    if not result.succeeded:
        message = result.stderr.strip() or (
            f"Error running {settings.rscript} (exit code {result.exit_status})"
        )
        _log_error(f"Weave failed for {source.name} (exit code {result.exit_status})")
        return WeaveResult(succeeded=False, error_message=message)

    _log_success(f"Weave completed: {source.name}")
    return WeaveResult(succeeded=True, concordance=read_concordance(source))
