"""
External process invocation.

Every program TEXPRESS runs (version probes, weave, compile) goes through a
ProcessRunner so callers can substitute their own, e.g. to count invocations.
"""

import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Protocol, Sequence


@dataclass
class ProcessResult:
    """
    Outcome of one external program run.

    Attributes:
        exit_status: Process return code (0 = success)
        stdout: Captured standard output
        stderr: Captured standard error
    """

    exit_status: int
    stdout: str = ""
    stderr: str = ""

    @property
    def succeeded(self) -> bool:
        return self.exit_status == 0


class ProcessRunner(Protocol):
    """Runs a program to completion. Raises OSError if it cannot be started."""

    def __call__(
        self,
        args: Sequence[str],
        cwd: Optional[Path] = None,
        env: Optional[Dict[str, str]] = None,
    ) -> ProcessResult: ...


def run_program(
    args: Sequence[str],
    cwd: Optional[Path] = None,
    env: Optional[Dict[str, str]] = None,
) -> ProcessResult:
    """
    Run a program and capture its output.

    Args:
        args: Program and arguments
        cwd: Working directory (default: current directory)
        env: Extra environment variables layered over os.environ

    Returns:
        ProcessResult with exit status and decoded output

    Raises:
        OSError: If the program cannot be started
    """
    process_env = {**os.environ, **env} if env else None

    result = subprocess.run(
        [str(arg) for arg in args],
        cwd=cwd,
        env=process_env,
        capture_output=True,
        text=True,
        encoding="utf-8",
        errors="replace",  # Replace invalid UTF-8 bytes instead of crashing
    )

    return ProcessResult(exit_status=result.returncode, stdout=result.stdout, stderr=result.stderr)
