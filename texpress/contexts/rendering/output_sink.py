"""Append-only text channels for compile progress and diagnostics."""

from typing import List, Protocol

import typer


class OutputSink(Protocol):
    """Receives user-facing compile output, in pipeline order."""

    def show_output(self, text: str) -> None: ...


class ConsoleOutputSink:
    """Writes output to the terminal as it arrives."""

    def __init__(self, err: bool = False):
        self.err = err

    def show_output(self, text: str) -> None:
        typer.echo(text, nl=False, err=self.err)


class BufferOutputSink:
    """Collects output in memory, e.g. for an embedding host or tests."""

    def __init__(self):
        self.chunks: List[str] = []

    def show_output(self, text: str) -> None:
        self.chunks.append(text)

    @property
    def text(self) -> str:
        return "".join(self.chunks)
