"""
TEXPRESS - TeX Pipeline for Rendering, Errors, Sweave and Synchronization

A PDF compilation pipeline that drives an external TeX toolchain, turns its
diagnostic logs into structured entries, and maps error locations back to
literate (Sweave/knitr) sources.

Architecture:
- Weaving Context: Magic comments and literate document preprocessing
- Rendering Context: Program resolution, compilation and cleanup
- Diagnostics Context: Log parsing and concordance remapping
"""

__version__ = "0.1.0"
