"""Structured representation of one toolchain diagnostic."""

from dataclasses import dataclass
from enum import Enum


class LogEntryType(Enum):
    """Severity of a diagnostic entry."""

    ERROR = "error"
    WARNING = "warning"
    BOX = "box"


def normalize_log_path(path: str) -> str:
    """Strip the leading './' TeX prints for files in the working directory."""
    path = path.strip().replace("\\", "/")
    while path.startswith("./"):
        path = path[2:]
    return path


@dataclass(frozen=True)
class LogEntry:
    """
    One diagnostic parsed from a LaTeX or BibTeX log.

    Attributes:
        type: Error, warning or overfull/underfull box
        file: File the diagnostic refers to, as named in the log
        line: 1-based line number within that file
        message: Diagnostic text
    """

    type: LogEntryType
    file: str
    line: int
    message: str

    def __post_init__(self):
        if self.line < 1:
            raise ValueError(f"Log entry line must be positive, got {self.line}")

    def format(self) -> str:
        """Render as '<file> (line <line>): <message>'."""
        return f"{self.file} (line {self.line}): {self.message}"
