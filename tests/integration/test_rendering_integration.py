"""
Integration tests for rendering context - tests real LaTeX compilation.
"""

import shutil

import pytest

from texpress.contexts.rendering.output_sink import BufferOutputSink
from texpress.contexts.rendering.pipeline import PdfCompilePipeline
from texpress.utils.pdf_processing import page_count

# Check if pdflatex is available
PDFLATEX_AVAILABLE = shutil.which("pdflatex") is not None
skip_if_no_pdflatex = pytest.mark.skipif(
    not PDFLATEX_AVAILABLE,
    reason="pdflatex not installed - install TeX Live, MiKTeX, or MacTeX"
)

RSCRIPT_AVAILABLE = shutil.which("Rscript") is not None


@pytest.mark.integration
@pytest.mark.latex
@skip_if_no_pdflatex
@pytest.mark.asyncio
async def test_compile_simple_document(tmp_path, settings):
    """Test a valid document compiles to a one-page PDF and byproducts are removed."""
    tex = tmp_path / "simple.tex"
    tex.write_text(
        r"""\documentclass{article}
\begin{document}
Hello, world.
\end{document}
"""
    )
    sink = BufferOutputSink()

    outcome = await PdfCompilePipeline(tex, settings, sink=sink).start()

    assert outcome.succeeded, sink.text
    assert outcome.pdf_path.exists()
    assert page_count(outcome.pdf_path) == 1
    assert not (tmp_path / "simple.aux").exists()
    assert not (tmp_path / "simple.log").exists()


@pytest.mark.integration
@pytest.mark.latex
@skip_if_no_pdflatex
@pytest.mark.asyncio
async def test_compile_with_intentional_error(tmp_path, settings):
    """Test that compilation properly detects and reports errors."""
    broken_tex = tmp_path / "broken.tex"
    broken_tex.write_text(
        r"""\documentclass{article}
\begin{document}
This has an \undefinedcommand{test} that should fail.
\end{document}
"""
    )
    sink = BufferOutputSink()

    outcome = await PdfCompilePipeline(broken_tex, settings, sink=sink).start()

    assert outcome.succeeded is False
    assert "broken.tex (line 3): Undefined control sequence." in sink.text
    assert (tmp_path / "broken.log").exists()


@pytest.mark.integration
@pytest.mark.latex
@skip_if_no_pdflatex
@pytest.mark.skipif(not RSCRIPT_AVAILABLE, reason="Rscript not installed")
@pytest.mark.asyncio
async def test_sweave_errors_point_at_rnw(tmp_path, settings):
    """Test errors in a woven document are reported against the .Rnw line."""
    rnw = tmp_path / "report.Rnw"
    rnw.write_text(
        r"""\documentclass{article}
\begin{document}
<<>>=
x <- 1 + 1
x
@
Now an \undefinedcommand here.
\end{document}
"""
    )
    sink = BufferOutputSink()

    outcome = await PdfCompilePipeline(rnw, settings, sink=sink).start()

    assert outcome.succeeded is False
    assert any(entry.file == "report.Rnw" and entry.line == 7 for entry in outcome.entries), sink.text
