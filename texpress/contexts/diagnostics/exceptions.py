"""Exceptions for the diagnostics context."""

from pathlib import Path
from typing import Optional


class LogParseError(Exception):
    """
    Exception raised when a diagnostic log cannot be read or parsed.

    Callers treat this as "no entries"; it is logged, never shown to the user.

    Attributes:
        message: Error description
        log_path: Log file that failed to parse
        original_error: The underlying exception, if any
    """

    def __init__(
        self,
        message: str,
        log_path: Optional[Path] = None,
        original_error: Optional[Exception] = None,
    ):
        self.message = message
        self.log_path = log_path
        self.original_error = original_error

        parts = [message]
        if log_path:
            parts.append(f"Log: {log_path}")
        if original_error:
            parts.append(f"Original error: {original_error}")

        super().__init__("\n".join(parts))


class ConcordanceError(ValueError):
    """Raised when a concordance record is malformed."""

    pass
