"""
Diagnostics context logger.

Provides logging interface for diagnostics context with automatic [diag] prefix.
All diagnostics modules should import from this module, not from loguru directly.
"""

from pathlib import Path

from loguru import logger

CONTEXT_PREFIX = "[diag]"


def _log_info(message: str) -> None:
    """Log info message with [diag] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [diag] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [diag] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [diag] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


def log_parse_summary(log_path: Path, dialect: str, entry_count: int) -> None:
    """Log how many entries a log produced."""
    _log_debug(f"Parsed {dialect} log {log_path.name}: {entry_count} entries")
