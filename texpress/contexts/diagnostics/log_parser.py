"""
LaTeX and BibTeX Log Parsing

Turns the primary engine log (.log) and the bibliography engine log (.blg) into
ordered lists of LogEntry. Each parser is independent; callers treat a
LogParseError as "no entries".

Only diagnostics with a known location are reported. Anything the parser cannot
tie to a file and a positive line (e.g. "There were undefined references.") is
skipped.
"""

import re
from pathlib import Path
from typing import List, Optional, Tuple

from texpress.contexts.diagnostics.exceptions import LogParseError
from texpress.contexts.diagnostics.log_entry import LogEntry, LogEntryType, normalize_log_path
from texpress.contexts.diagnostics.logger import _log_debug, log_parse_summary

# TeX hard-wraps log lines at max_print_line characters
MAX_PRINT_LINE = 79

# How far past a "! message" line to look for its "l.<n>" location
ERROR_LOCATION_LOOKAHEAD = 10


class LogRegex:
    """Patterns for the two log dialects."""

    # ./paper.tex:12: Undefined control sequence.
    FILE_LINE_ERROR = re.compile(
        r"^(?P<file>(?:[A-Za-z]:)?[^:\s][^:]*\.\w+):(?P<line>\d+): (?P<message>.+)$"
    )

    # ! Undefined control sequence.
    CLASSIC_ERROR = re.compile(r"^! (?P<message>.+)$")

    # l.12 \foo
    ERROR_LOCATION = re.compile(r"^l\.(?P<line>\d+)")

    # LaTeX Warning: / Package natbib Warning: / Class article Warning:
    WARNING_START = re.compile(
        r"^(?:LaTeX(?: \S+)?|Package \S+|Class \S+) Warning: (?P<message>.*)$"
    )
    WARNING_CONTINUATION_PREFIX = re.compile(r"^\(\S+\)\s+")
    INPUT_LINE = re.compile(r"\s*on input line (?P<line>\d+)\.?")

    # Overfull \hbox (12.0pt too wide) in paragraph at lines 10--12
    BOX = re.compile(r"^(?:Overfull|Underfull) \\[hv]box")
    BOX_LOCATION = re.compile(r"lines? (?P<line>\d+)")
    BOX_MESSAGE_END = re.compile(r" (?:in paragraph|in alignment|detected|has occurred)")

    # File opened by TeX: "(./paper.tex" or "(/usr/share/texmf/.../article.cls"
    FILE_OPEN = re.compile(r"\((?P<file>[^\s()\[\]{}<>]+\.[A-Za-z0-9]+)")

    # I couldn't open database file refs.bib
    # ---line 3 of file paper.aux
    BIBTEX_ERROR_LOCATION = re.compile(r"^(?P<message>.*)---line (?P<line>\d+) of file (?P<file>.+)$")

    # Warning--empty journal in smith2020
    # --line 12 of file refs.bib
    BIBTEX_WARNING = re.compile(r"^Warning--(?P<message>.+)$")
    BIBTEX_WARNING_LOCATION = re.compile(r"^--line (?P<line>\d+) of file (?P<file>.+)$")


def _read_log(log_path: Path) -> str:
    try:
        # TeX engines write logs in latin-1 (font metadata is not valid UTF-8)
        return Path(log_path).read_text(encoding="latin-1")
    except OSError as e:
        raise LogParseError("Unable to read log file", log_path=log_path, original_error=e)


def unwrap_log_lines(content: str, max_print_line: int = MAX_PRINT_LINE) -> List[str]:
    """
    Rejoin lines that TeX hard-wrapped at max_print_line characters.

    Args:
        content: Raw log content
        max_print_line: Wrap width used by the engine

    Returns:
        Logical log lines
    """
    lines = []
    pending = ""
    for raw in content.splitlines():
        pending += raw
        if len(raw) == max_print_line:
            continue
        lines.append(pending)
        pending = ""
    if pending:
        lines.append(pending)
    return lines


class _FileStack:
    """Tracks which file TeX is reading from the parentheses it prints."""

    def __init__(self, default_file: str):
        self.default_file = default_file
        self._stack: List[Optional[str]] = []

    @property
    def current(self) -> str:
        for name in reversed(self._stack):
            if name is not None:
                return name
        return self.default_file

    def update(self, line: str) -> None:
        pos = 0
        while pos < len(line):
            char = line[pos]
            if char == "(":
                match = LogRegex.FILE_OPEN.match(line, pos)
                if match:
                    self._stack.append(normalize_log_path(match.group("file")))
                    pos = match.end()
                    continue
                self._stack.append(None)
            elif char == ")" and self._stack:
                self._stack.pop()
            pos += 1


def _starts_new_diagnostic(line: str) -> bool:
    return any(
        pattern.match(line)
        for pattern in (
            LogRegex.FILE_LINE_ERROR,
            LogRegex.CLASSIC_ERROR,
            LogRegex.WARNING_START,
            LogRegex.BOX,
        )
    )


def _collect_warning(lines: List[str], start: int, first: str) -> tuple[str, int]:
    """Join a warning with its continuation lines; returns (text, index of last line)."""
    parts = [first.strip()]
    index = start
    while index + 1 < len(lines):
        following = lines[index + 1]
        if not following.strip() or _starts_new_diagnostic(following):
            break
        if LogRegex.INPUT_LINE.search(parts[-1]):
            break
        parts.append(LogRegex.WARNING_CONTINUATION_PREFIX.sub("", following).strip())
        index += 1
    return " ".join(part for part in parts if part), index


def _find_error_location(lines: List[str], start: int) -> Optional[Tuple[int, int]]:
    """(line number, index of the "l.<n>" line) for the error at `start`."""
    end = min(len(lines), start + 1 + ERROR_LOCATION_LOOKAHEAD)
    for index in range(start + 1, end):
        if _starts_new_diagnostic(lines[index]):
            break
        match = LogRegex.ERROR_LOCATION.match(lines[index])
        if match:
            return int(match.group("line")), index
    return None


def _end_of_error_context(lines: List[str], location_index: int) -> int:
    """
    Index of the last line of an error's source context.

    TeX prints the offending source line split in two: "l.<n> <text read so far>"
    and, indented below it, the rest of the line. Both are document text.
    """
    following = location_index + 1
    if following < len(lines) and lines[following][:1].isspace() and lines[following].strip():
        return following
    return location_index


def _end_of_box_display(lines: List[str], start: int) -> int:
    """Index of the last line of the box contents TeX prints under a box warning."""
    index = start
    while index + 1 < len(lines):
        following = lines[index + 1]
        if not following.strip() or _starts_new_diagnostic(following):
            break
        index += 1
    return index


def _append_entry(
    entries: List[LogEntry], entry_type: LogEntryType, file: str, line: int, message: str
) -> None:
    # Line numbers below 1 carry no usable location
    if line < 1:
        _log_debug(f"Skipping {entry_type.value} with line {line}: {message}")
        return
    entries.append(LogEntry(type=entry_type, file=file, line=line, message=message))


def parse_latex_content(content: str, default_file: str) -> List[LogEntry]:
    """
    Parse LaTeX log text into entries.

    Only lines TeX prints itself feed the open-file stack; the source excerpts
    shown under errors and boxes are document text and may contain parentheses.

    Args:
        content: Log file content
        default_file: File reported when the log does not name one (the main .tex)

    Returns:
        Entries in order of appearance
    """
    lines = unwrap_log_lines(content)
    files = _FileStack(default_file)
    entries: List[LogEntry] = []

    index = 0
    while index < len(lines):
        line = lines[index]

        match = LogRegex.FILE_LINE_ERROR.match(line) or LogRegex.CLASSIC_ERROR.match(line)
        if match:
            location = _find_error_location(lines, index)
            if "file" in match.groupdict():
                _append_entry(
                    entries,
                    LogEntryType.ERROR,
                    normalize_log_path(match.group("file")),
                    int(match.group("line")),
                    match.group("message").strip(),
                )
            elif location is not None:
                _append_entry(
                    entries,
                    LogEntryType.ERROR,
                    files.current,
                    location[0],
                    match.group("message").strip(),
                )
            else:
                _log_debug(f"Skipping error without location: {match.group('message')}")

            index = _end_of_error_context(lines, location[1]) + 1 if location else index + 1
            continue

        match = LogRegex.WARNING_START.match(line)
        if match:
            text, last = _collect_warning(lines, index, match.group("message"))
            location = LogRegex.INPUT_LINE.search(text)
            if location:
                _append_entry(
                    entries,
                    LogEntryType.WARNING,
                    files.current,
                    int(location.group("line")),
                    LogRegex.INPUT_LINE.sub("", text).strip(),
                )
            index = last + 1
            continue

        if LogRegex.BOX.match(line):
            location = LogRegex.BOX_LOCATION.search(line)
            if location:
                _append_entry(
                    entries,
                    LogEntryType.BOX,
                    files.current,
                    int(location.group("line")),
                    LogRegex.BOX_MESSAGE_END.split(line, maxsplit=1)[0].strip(),
                )
            index = _end_of_box_display(lines, index) + 1
            continue

        files.update(line)
        index += 1

    return entries


def parse_latex_log(log_path: Path, default_file: Optional[str] = None) -> List[LogEntry]:
    """
    Parse a LaTeX engine log file.

    Understands -file-line-error output, classic "! message" / "l.<n>" errors,
    LaTeX/package warnings with an input line, and overfull/underfull boxes.

    Args:
        log_path: Path to the .log file
        default_file: File reported when the log does not name one
                      (default: the .tex file beside the log)

    Returns:
        Entries in order of appearance

    Raises:
        LogParseError: If the log cannot be read
    """
    log_path = Path(log_path)
    if default_file is None:
        default_file = f"{log_path.stem}.tex"

    entries = parse_latex_content(_read_log(log_path), default_file)
    log_parse_summary(log_path, "LaTeX", len(entries))
    return entries


def parse_bibtex_content(content: str) -> List[LogEntry]:
    """
    Parse BibTeX log text into entries.

    Errors are a message followed by "---line N of file F" (sometimes on the same
    line); warnings are "Warning--message" followed by "--line N of file F".
    """
    lines = content.splitlines()
    entries: List[LogEntry] = []

    for index, line in enumerate(lines):
        match = LogRegex.BIBTEX_ERROR_LOCATION.match(line)
        if match:
            message = match.group("message").strip()
            if not message and index > 0:
                message = lines[index - 1].strip()
            _append_entry(
                entries,
                LogEntryType.ERROR,
                normalize_log_path(match.group("file")),
                int(match.group("line")),
                message,
            )
            continue

        match = LogRegex.BIBTEX_WARNING.match(line)
        if match and index + 1 < len(lines):
            location = LogRegex.BIBTEX_WARNING_LOCATION.match(lines[index + 1])
            if location:
                _append_entry(
                    entries,
                    LogEntryType.WARNING,
                    normalize_log_path(location.group("file")),
                    int(location.group("line")),
                    match.group("message").strip(),
                )

    return entries


def parse_bibtex_log(log_path: Path) -> List[LogEntry]:
    """
    Parse a BibTeX .blg file.

    Raises:
        LogParseError: If the log cannot be read
    """
    log_path = Path(log_path)
    entries = parse_bibtex_content(_read_log(log_path))
    log_parse_summary(log_path, "BibTeX", len(entries))
    return entries
