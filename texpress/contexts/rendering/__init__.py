"""
Rendering Context

Responsibilities:
- Resolves the LaTeX program for a document
- Compiles .tex files to PDF (direct or through texi2dvi)
- Reports compile failures from the engine logs
- Cleans up auxiliary files according to the compile outcome

Owns: LaTeX compilation, PDF generation, compile output
Never: Modifies document content
"""

from texpress.contexts.rendering.cleanup import AuxCleanupManager
from texpress.contexts.rendering.compiler import (
    CompileOptions,
    CompileResult,
    CompileStrategy,
    PdfLatexStrategy,
    Texi2DviStrategy,
    select_compile_strategy,
)
from texpress.contexts.rendering.exceptions import (
    CompileLaunchError,
    CompilePipelineError,
    InvalidTargetError,
    ProgramResolutionError,
)
from texpress.contexts.rendering.output_sink import (
    BufferOutputSink,
    ConsoleOutputSink,
    OutputSink,
)
from texpress.contexts.rendering.pipeline import (
    PdfCompilePipeline,
    PipelineOutcome,
    PipelineState,
    TargetDocument,
    compile_pdf,
)
from texpress.contexts.rendering.program_resolver import resolve_latex_program

__all__ = [
    # Orchestration
    "compile_pdf",
    "PdfCompilePipeline",
    "PipelineOutcome",
    "PipelineState",
    "TargetDocument",
    # Compilation
    "CompileOptions",
    "CompileResult",
    "CompileStrategy",
    "PdfLatexStrategy",
    "Texi2DviStrategy",
    "select_compile_strategy",
    "resolve_latex_program",
    "AuxCleanupManager",
    # Output
    "OutputSink",
    "ConsoleOutputSink",
    "BufferOutputSink",
    # Errors
    "CompilePipelineError",
    "InvalidTargetError",
    "ProgramResolutionError",
    "CompileLaunchError",
]
