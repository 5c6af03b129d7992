"""Exceptions for the weaving context."""

from pathlib import Path
from typing import Optional


class MagicCommentError(Exception):
    """
    Raised when a document cannot be read for magic comments.

    Attributes:
        message: Human-readable description
        path: Document that could not be read, if known
    """

    def __init__(self, message: str, path: Optional[Path] = None):
        self.message = message
        self.path = path
        super().__init__(message)

    def __str__(self) -> str:
        if self.path:
            return f"{self.message}: {self.path}"
        return self.message
