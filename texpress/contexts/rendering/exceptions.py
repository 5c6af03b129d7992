"""Exceptions for the rendering context."""

from pathlib import Path
from typing import Optional


class CompilePipelineError(Exception):
    """
    Base for failures that abort a compilation.

    The message is user-facing: the pipeline writes it to the output sink as-is.

    Attributes:
        message: Human-readable description
        target: Document being compiled, if known
    """

    def __init__(self, message: str, target: Optional[Path] = None):
        self.message = message
        self.target = target
        super().__init__(message)


class InvalidTargetError(CompilePipelineError):
    """The target document cannot be compiled (bad filename, missing file)."""

    pass


class ProgramResolutionError(CompilePipelineError):
    """No usable LaTeX program could be found for the document."""

    pass


class CompileLaunchError(CompilePipelineError):
    """
    The compiler process could not be started.

    Attributes:
        original_error: The OSError raised when launching
    """

    def __init__(
        self,
        message: str,
        target: Optional[Path] = None,
        original_error: Optional[Exception] = None,
    ):
        self.original_error = original_error
        super().__init__(message, target)
