"""
Diagnostics Context

Responsibilities:
- Represents toolchain diagnostics as structured log entries
- Parses LaTeX engine logs and BibTeX logs
- Maps generated-document locations back to literate sources via concordances

Owns: Log entry model, log parsing, concordance remapping
Never: Runs external programs or writes user-facing output
"""

from texpress.contexts.diagnostics.concordance import (
    Concordance,
    parse_concordance,
    remap_entries,
    remap_entry,
)
from texpress.contexts.diagnostics.exceptions import ConcordanceError, LogParseError
from texpress.contexts.diagnostics.log_entry import LogEntry, LogEntryType
from texpress.contexts.diagnostics.log_parser import parse_bibtex_log, parse_latex_log

__all__ = [
    # Data model
    "LogEntry",
    "LogEntryType",
    "Concordance",
    # Parsing
    "parse_latex_log",
    "parse_bibtex_log",
    "parse_concordance",
    # Remapping
    "remap_entry",
    "remap_entries",
    # Errors
    "LogParseError",
    "ConcordanceError",
]
