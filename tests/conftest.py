"""Common pytest configuration."""

from pathlib import Path

import pytest

from texpress.utils.config import CompileSettings


@pytest.fixture
def settings(tmp_path) -> CompileSettings:
    """Settings with cleanup enabled and logs/events under tmp_path."""
    return CompileSettings(
        clean_output=True,
        logs_path=tmp_path / "logs",
        events_file=tmp_path / "logs" / "events.log",
    )


@pytest.fixture
def tex_document(tmp_path) -> Path:
    path = tmp_path / "paper.tex"
    path.write_text(
        "% !TeX program = pdflatex\n"
        "\\documentclass{article}\n"
        "\\begin{document}\n"
        "Hello\n"
        "\\end{document}\n"
    )
    return path
