"""
PDF Compilation Pipeline

Drives one compilation of a target document:

    INIT -> RESOLVING_PROGRAM -> [WEAVING] -> COMPILING -> DONE_SUCCESS
                                                       -> REPORTING -> DONE_FAILURE

Any stage failure goes straight to DONE_FAILURE after writing a single message to
the output sink. Auxiliary-file cleanup, when enabled, runs on every exit path.
"""

import asyncio
import shutil
import time
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from pathlib import Path
from typing import Awaitable, Callable, Dict, FrozenSet, List, Optional

import typer

from texpress.contexts.diagnostics.concordance import Concordance
from texpress.contexts.diagnostics.log_entry import LogEntry
from texpress.contexts.rendering.cleanup import AuxCleanupManager
from texpress.contexts.rendering.compiler import (
    CompileOptions,
    probe_version,
    remove_existing_logs,
    select_compile_strategy,
)
from texpress.contexts.rendering.exceptions import (
    CompileLaunchError,
    CompilePipelineError,
    InvalidTargetError,
)
from texpress.contexts.rendering.logger import (
    _log_error,
    _log_info,
    log_compile_result,
    log_compile_start,
    setup_rendering_logger,
)
from texpress.contexts.rendering.output_sink import ConsoleOutputSink, OutputSink
from texpress.contexts.rendering.program_resolver import resolve_latex_program
from texpress.contexts.rendering.reporting import collect_diagnostics, show_compilation_errors
from texpress.contexts.weaving.exceptions import MagicCommentError
from texpress.contexts.weaving.magic_comments import MagicComments, parse_magic_comments
from texpress.contexts.weaving.weave import WeaveResult, run_weave
from texpress.utils.config import CompileSettings, load_settings
from texpress.utils.event_logging import log_pipeline_event
from texpress.utils.pdf_processing import page_count
from texpress.utils.process import ProcessRunner, run_program
from texpress.utils.timestamp import now

LITERATE_EXTENSIONS = frozenset({".rnw", ".snw", ".nw"})

# Extension of the document handed to the compiler, whatever the target's extension
GENERATED_EXTENSION = ".tex"

WeaveFunction = Callable[..., Awaitable[WeaveResult]]


@dataclass(frozen=True)
class TargetDocument:
    """
    The document being compiled.

    Attributes:
        path: Absolute path to the target
    """

    path: Path

    @classmethod
    def from_path(cls, path) -> "TargetDocument":
        return cls(path=Path(path).absolute())

    @property
    def stem(self) -> str:
        return self.path.stem

    @property
    def extension(self) -> str:
        """Lower-cased extension including the dot."""
        return self.path.suffix.lower()

    @property
    def is_literate(self) -> bool:
        return self.extension in LITERATE_EXTENSIONS

    def ancillary_path(self, ext: str) -> Path:
        return self.path.parent / f"{self.stem}{ext}"

    @property
    def tex_path(self) -> Path:
        return self.ancillary_path(GENERATED_EXTENSION)

    @property
    def pdf_path(self) -> Path:
        return self.ancillary_path(".pdf")


class PipelineState(Enum):
    INIT = "init"
    RESOLVING_PROGRAM = "resolving_program"
    WEAVING = "weaving"
    COMPILING = "compiling"
    REPORTING = "reporting"
    DONE_SUCCESS = "done_success"
    DONE_FAILURE = "done_failure"


TRANSITIONS: Dict[PipelineState, FrozenSet[PipelineState]] = {
    PipelineState.INIT: frozenset({PipelineState.RESOLVING_PROGRAM, PipelineState.DONE_FAILURE}),
    PipelineState.RESOLVING_PROGRAM: frozenset(
        {PipelineState.WEAVING, PipelineState.COMPILING, PipelineState.DONE_FAILURE}
    ),
    PipelineState.WEAVING: frozenset({PipelineState.COMPILING, PipelineState.DONE_FAILURE}),
    PipelineState.COMPILING: frozenset(
        {PipelineState.REPORTING, PipelineState.DONE_SUCCESS, PipelineState.DONE_FAILURE}
    ),
    PipelineState.REPORTING: frozenset({PipelineState.DONE_FAILURE}),
    PipelineState.DONE_SUCCESS: frozenset(),
    PipelineState.DONE_FAILURE: frozenset(),
}


@dataclass
class PipelineOutcome:
    """
    Summary of a finished pipeline run.

    Attributes:
        target: Document that was compiled
        state: Final pipeline state
        history: States visited, in order
        program: Resolved LaTeX program (None if resolution never succeeded)
        exit_status: Compiler exit status (None if the compiler never ran)
        entries: Diagnostics shown to the user
        error_message: The failure message written to the sink, if any
    """

    target: TargetDocument
    state: PipelineState
    history: List[PipelineState] = field(default_factory=list)
    program: Optional[Path] = None
    exit_status: Optional[int] = None
    entries: List[LogEntry] = field(default_factory=list)
    error_message: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.state == PipelineState.DONE_SUCCESS

    @property
    def pdf_path(self) -> Optional[Path]:
        return self.target.pdf_path if self.succeeded else None


class PdfCompilePipeline:
    """
    Compiles one target document to PDF.

    A pipeline instance runs once. It owns its cleanup manager; nothing else
    touches it.

    Args:
        target_path: Document to compile (.tex, .Rnw, .Snw, .nw)
        settings: Compile settings
        on_completed: Called with no arguments once, only if the compile succeeds
        sink: Receives progress and diagnostics (default: console)
        runner: Runs external programs
        weave: Weave coroutine used for literate documents
        which: PATH lookup used to find programs

    Example:
        >>> pipeline = PdfCompilePipeline("paper.Rnw", load_settings())
        >>> outcome = asyncio.run(pipeline.start())
    """

    def __init__(
        self,
        target_path,
        settings: CompileSettings,
        on_completed: Optional[Callable[[], None]] = None,
        sink: Optional[OutputSink] = None,
        runner: ProcessRunner = run_program,
        weave: WeaveFunction = run_weave,
        which: Callable[[str], Optional[str]] = shutil.which,
    ):
        self.target = TargetDocument.from_path(target_path)
        self.settings = settings
        self.on_completed = on_completed
        self.sink = sink if sink is not None else ConsoleOutputSink()
        self.runner = runner
        self.weave = weave
        self.which = which

        self.state = PipelineState.INIT
        self.history = [PipelineState.INIT]
        self.magic_comments = MagicComments()
        self.program: Optional[Path] = None
        self.exit_status: Optional[int] = None
        self.entries: List[LogEntry] = []
        self.error_message: Optional[str] = None
        self._cleanup = AuxCleanupManager()

    def _transition(self, new_state: PipelineState) -> None:
        if new_state not in TRANSITIONS[self.state]:
            raise RuntimeError(f"Invalid pipeline transition: {self.state.name} -> {new_state.name}")
        self.state = new_state
        self.history.append(new_state)

    def _fail(self, message: str) -> None:
        self.error_message = message
        _log_error(message)
        self.sink.show_output(message + "\n")
        self._transition(PipelineState.DONE_FAILURE)

    @property
    def outcome(self) -> PipelineOutcome:
        return PipelineOutcome(
            target=self.target,
            state=self.state,
            history=list(self.history),
            program=self.program,
            exit_status=self.exit_status,
            entries=list(self.entries),
            error_message=self.error_message,
        )

    async def start(self) -> PipelineOutcome:
        """
        Run the pipeline to completion.

        Returns:
            PipelineOutcome describing the run

        Raises:
            RuntimeError: If this pipeline has already been started
        """
        if self.state != PipelineState.INIT:
            raise RuntimeError(f"Pipeline for {self.target.path.name} has already run")

        with self._cleanup:
            try:
                await self._run()
            except CompilePipelineError as e:
                self._fail(e.message)

        return self.outcome

    def validate_target(self) -> None:
        """
        Reject targets TeX cannot compile.

        Raises:
            InvalidTargetError: If the filename contains whitespace or the file is missing
        """
        filename = self.target.path.name
        if any(char.isspace() for char in filename):
            raise InvalidTargetError(
                f"Invalid filename: '{filename}' (TeX does not understand paths with spaces)",
                self.target.path,
            )
        if not self.target.path.is_file():
            raise InvalidTargetError(f"File not found: {self.target.path}", self.target.path)

    async def _run(self) -> None:
        self.validate_target()
        self._transition(PipelineState.RESOLVING_PROGRAM)

        try:
            self.magic_comments = parse_magic_comments(self.target.path)
        except MagicCommentError as e:
            _log_error(str(e))

        self.program = resolve_latex_program(self.magic_comments, self.settings, self.which)

        concordance = Concordance()
        if self.target.is_literate:
            self._transition(PipelineState.WEAVING)
            result = await self.weave(
                self.target.path, self.magic_comments, self.settings, self.runner
            )
            if not result.succeeded:
                self._fail(result.error_message)
                return
            concordance = result.concordance

        await self._compile(concordance)

    async def _compile(self, concordance: Concordance) -> None:
        self._transition(PipelineState.COMPILING)

        options = CompileOptions(
            file_line_error=True,
            sync_tex=True,
            shell_escape=self.settings.shell_escape,
        )
        options.version_info = await asyncio.to_thread(probe_version, self.program, self.runner)

        tex_path = self.target.tex_path
        remove_existing_logs(tex_path)

        if self.settings.clean_output:
            self._cleanup.init(tex_path)

        strategy = select_compile_strategy(self.settings, self.which)
        log_compile_start(tex_path, self.program, strategy.name)
        self.sink.show_output("\nRunning LaTeX compiler...")

        start_time = time.time()
        try:
            result = await asyncio.to_thread(
                strategy.compile, self.program, tex_path, options, self.runner
            )
        except OSError as e:
            raise CompileLaunchError(
                f"Unable to compile pdf: {e.strerror or e}", tex_path, original_error=e
            )
        elapsed = time.time() - start_time

        self.exit_status = result.exit_status
        log_compile_result(
            tex_path,
            result.exit_status,
            elapsed,
            stdout=result.stdout,
            stderr=result.stderr,
            page_count=page_count(self.target.pdf_path) if result.succeeded else None,
        )

        if result.succeeded:
            self.sink.show_output("completed\n")
            self._cleanup.cleanup()
            self._transition(PipelineState.DONE_SUCCESS)
            if self.on_completed is not None:
                self.on_completed()
            return

        self.sink.show_output("\n")
        self._cleanup.preserve_log()
        self._transition(PipelineState.REPORTING)

        diagnostics = collect_diagnostics(tex_path, concordance)
        self.entries = diagnostics.entries
        if show_compilation_errors(diagnostics, self.sink):
            self._transition(PipelineState.DONE_FAILURE)
            return

        self._fail(f"Error running {self.program} (exit code {result.exit_status})")
        if result.stderr.strip():
            self.sink.show_output(result.stderr.rstrip("\n") + "\n")


# Completion actions


def view_pdf(target: TargetDocument) -> None:
    """Open the compiled PDF with the system viewer."""
    _log_info(f"Opening {target.pdf_path}")
    typer.launch(str(target.pdf_path))


def publish_pdf(target: TargetDocument, settings: CompileSettings) -> None:
    """Record the compiled PDF in the pipeline event log for downstream consumers."""
    log_pipeline_event(
        events_file=settings.pipeline_events_file,
        event_type="pdf_published",
        target=str(target.path),
        source="rendering",
        pdf_path=str(target.pdf_path),
    )
    _log_info(f"Published {target.pdf_path.name}")


def completion_callback(
    action: Optional[str], target: TargetDocument, settings: CompileSettings
) -> Optional[Callable[[], None]]:
    """
    Bind a completion action token to a no-argument callback.

    Args:
        action: "view", "publish", or anything else for no post-action

    Returns:
        Callback, or None when no post-action applies
    """
    if action == "view":
        return partial(view_pdf, target)
    if action == "publish":
        return partial(publish_pdf, target, settings)
    return None


async def compile_pdf(
    target_path,
    completed_action: Optional[str] = None,
    settings: Optional[CompileSettings] = None,
    sink: Optional[OutputSink] = None,
    runner: ProcessRunner = run_program,
    which: Callable[[str], Optional[str]] = shutil.which,
) -> PipelineOutcome:
    """
    Compile a document to PDF with session logging.

    Entry point for hosts: resolves settings, sets up a timestamped loguru session
    under settings.logs_path, binds the completion action and runs the pipeline.

    Args:
        target_path: Document to compile
        completed_action: "view", "publish", or None
        settings: Compile settings (default: load_settings())
        sink: Output sink (default: console)
        runner: Process runner
        which: PATH lookup used to find programs

    Returns:
        PipelineOutcome for the run
    """
    if settings is None:
        settings = load_settings()

    target = TargetDocument.from_path(target_path)
    setup_rendering_logger(Path(settings.logs_path) / f"render_{now()}")

    pipeline = PdfCompilePipeline(
        target.path,
        settings,
        on_completed=completion_callback(completed_action, target, settings),
        sink=sink,
        runner=runner,
        which=which,
    )
    return await pipeline.start()
