#!/usr/bin/env python3
"""
PDF Compilation CLI

Compiles LaTeX and literate (Sweave/knitr) documents to PDF using the rendering context.

Commands:
    compile  - Compile a single document to PDF
    events   - Show recent pipeline events (e.g. published PDFs)

Examples:\n

    compile_pdf.py compile paper.tex                       # Compile a LaTeX document

    compile_pdf.py compile analysis.Rnw --view             # Weave, compile and open the PDF

    compile_pdf.py compile paper.tex --config texpress.yaml

    compile_pdf.py events -n 5                             # Last 5 pipeline events
"""

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from texpress.contexts.rendering import compile_pdf
from texpress.utils.config import load_settings
from texpress.utils.event_logging import get_recent_events
from texpress.utils.timestamp import format_timestamp

app = typer.Typer(
    help="Compile LaTeX and Rnw documents to PDF with structured error reporting",
    add_completion=False,
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@app.command("compile")
def compile_command(
    target: Annotated[
        Path,
        typer.Argument(help="Document to compile (.tex, .Rnw, .Snw, .nw)"),
    ],
    view: Annotated[
        bool,
        typer.Option("--view", help="Open the PDF after a successful compile"),
    ] = False,
    publish: Annotated[
        bool,
        typer.Option("--publish", help="Record the PDF in the pipeline event log"),
    ] = False,
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="YAML file with setting overrides", exists=True),
    ] = None,
    keep_artifacts: Annotated[
        bool,
        typer.Option(
            "--keep-artifacts",
            "-k",
            help="Keep auxiliary files (.aux, .log, etc.) after compiling",
        ),
    ] = False,
    texi2dvi: Annotated[
        Optional[bool],
        typer.Option("--texi2dvi/--direct", help="Compile through texi2dvi or call the program directly"),
    ] = None,
    shell_escape: Annotated[
        Optional[bool],
        typer.Option("--shell-escape/--no-shell-escape", help="Allow shell commands during compilation"),
    ] = None,
):
    """
    Compile a document to PDF.

    Literate documents are woven first; errors in the generated .tex are reported
    against the original source lines.

    Examples:\n

        $ compile_pdf.py compile paper.tex                 # Compile

        $ compile_pdf.py compile paper.Rnw --publish       # Compile and publish

        $ compile_pdf.py compile paper.tex -k              # Keep auxiliary files
    """
    if view and publish:
        typer.secho("Error: choose at most one of --view and --publish\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    try:
        settings = load_settings(
            config,
            clean_output=False if keep_artifacts else None,
            use_texi2dvi=texi2dvi,
            shell_escape=shell_escape,
        )
    except ValueError as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    action = "view" if view else "publish" if publish else None

    typer.secho(f"\nCompiling: {target}", fg=typer.colors.BLUE, bold=True)
    outcome = asyncio.run(compile_pdf(target, completed_action=action, settings=settings))

    typer.echo("")
    if outcome.succeeded:
        typer.secho("✓ Compilation succeeded", fg=typer.colors.GREEN, bold=True)
        typer.echo(f"  PDF: {outcome.pdf_path}")
    else:
        typer.secho("✗ Compilation failed", fg=typer.colors.RED, bold=True)
        if outcome.entries:
            typer.echo(f"  Diagnostics: {len(outcome.entries)}")
    typer.echo("")

    raise typer.Exit(code=0 if outcome.succeeded else 1)


@app.command("events")
def events_command(
    n: int = typer.Option(10, "--num", "-n", help="Number of recent events to show"),
    target: Optional[str] = typer.Option(None, "--target", "-t", help="Filter to events for this target"),
    event_type: Optional[str] = typer.Option(
        None, "--event-type", "-e", help="Filter to events of this type"
    ),
):
    """
    Show the last n events from the pipeline event log.

    Examples:\n

        $ compile_pdf.py events                        # Last 10 events

        $ compile_pdf.py events -e pdf_published       # Last 10 published PDFs
    """
    settings = load_settings()
    events = get_recent_events(
        settings.pipeline_events_file, n=n, target=target, event_type=event_type
    )

    if not events:
        typer.echo("No events found.")
        raise typer.Exit()

    for event in events:
        timestamp = format_timestamp(event.get("timestamp", ""))
        details = {
            k: v for k, v in event.items() if k not in ("timestamp", "event_type", "target")
        }
        typer.secho(f"{timestamp}  {event['event_type']}", fg=typer.colors.CYAN, nl=False)
        typer.echo(f"  {event.get('target', '')}")
        if details:
            typer.echo(f"    {json.dumps(details)}")


if __name__ == "__main__":
    app()
