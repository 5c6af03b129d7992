"""
Rendering context logger.

Provides logging interface for rendering context with automatic [render] prefix.
All rendering modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path
from typing import Optional

from loguru import logger

from texpress.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[render]"


def setup_rendering_logger(log_dir: Path, program: Optional[str] = None) -> Path:
    """
    Setup logger for rendering context.

    Configures loguru with provenance tracking and rendering-specific context.

    Args:
        log_dir: Directory for this rendering session
        program: LaTeX program recorded in the provenance header, if known

    Returns:
        Path to log file

    Example:
        from texpress.contexts.rendering.logger import setup_rendering_logger

        log_file = setup_rendering_logger(log_dir)
    """
    return _setup_logger(
        context_name="render",
        log_dir=log_dir,
        extra_provenance={"LaTeX program": program or "(resolved per document)"},
    )


# Wrapper functions with automatic [render] prefix


def _log_info(message: str) -> None:
    """Log info message with [render] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [render] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [render] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [render] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [render] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level rendering-specific logging helpers


def log_compile_start(target: Path, program: Path, strategy_name: str) -> None:
    """Log start of compilation with context."""
    _log_info(f"Starting compilation: {target.name}")
    _log_debug(f"  Source: {target}")
    _log_debug(f"  Program: {program}")
    _log_debug(f"  Strategy: {strategy_name}")


def log_compile_result(
    target: Path,
    exit_status: int,
    elapsed_time: float,
    stdout: str = "",
    stderr: str = "",
    page_count: Optional[int] = None,
) -> None:
    """
    Log compilation result with raw compiler output on failure.

    Args:
        target: Document that was compiled
        exit_status: Compiler exit status
        elapsed_time: Time taken to compile
        stdout: Compiler standard output
        stderr: Compiler standard error
        page_count: Pages in the produced PDF, if readable
    """
    if exit_status == 0:
        pages = f", {page_count} pages" if page_count is not None else ""
        _log_success(f"{target.name}: compilation succeeded ({elapsed_time:.2f}s{pages})")
        return

    _log_error(f"{target.name}: compilation failed with exit code {exit_status} ({elapsed_time:.2f}s)")

    # Use opt(raw=True) to bypass format template and preserve original formatting
    if stdout:
        logger.opt(raw=True).debug(f"\n{'=' * 80}\nCOMPILER STDOUT:\n{'=' * 80}\n{stdout}\n")
    if stderr:
        logger.opt(raw=True).debug(f"\n{'=' * 80}\nCOMPILER STDERR:\n{'=' * 80}\n{stderr}\n")
