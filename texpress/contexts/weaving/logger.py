"""
Weaving context logger.

Provides logging interface for weaving context with automatic [weave] prefix.
All weaving modules should import from this module, not from loguru directly.
"""

from pathlib import Path
from typing import Sequence

from loguru import logger

CONTEXT_PREFIX = "[weave]"


def _log_info(message: str) -> None:
    """Log info message with [weave] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [weave] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [weave] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [weave] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [weave] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


def log_weave_start(source: Path, method: str, command: Sequence[str]) -> None:
    """Log start of a weave with context."""
    _log_info(f"Weaving {source.name} with {method}")
    _log_debug(f"  Command: {' '.join(command)}")
    _log_debug(f"  Working directory: {source.parent}")


def log_weave_output(stdout: str, stderr: str) -> None:
    """Log raw R output, bypassing the line format."""
    if stdout:
        logger.opt(raw=True).debug(f"\n{'=' * 80}\nR STDOUT:\n{'=' * 80}\n{stdout}\n")
    if stderr:
        logger.opt(raw=True).debug(f"\n{'=' * 80}\nR STDERR:\n{'=' * 80}\n{stderr}\n")
