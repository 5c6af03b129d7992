"""
Concordance Mapping

A weave step turns a literate source (paper.Rnw) into a generated document
(paper.tex). Sweave and knitr can record a concordance, a run-length encoded
map from generated lines back to source lines, written as:

    \\Sconcordance{concordance:paper.tex:paper.Rnw:%
    1 12 1 1 0 5 1}

or, for documents that start part-way into the output:

    \\Sconcordance{concordance:paper.tex:paper.Rnw:ofs 10:1 12 1}

The first number is the source line of the first generated line; the rest are
(count, step) pairs describing how the source line advances for each
following generated line.
"""

import re
from dataclasses import dataclass, replace
from itertools import accumulate
from pathlib import Path
from typing import Iterable, List, Tuple

from texpress.contexts.diagnostics.exceptions import ConcordanceError
from texpress.contexts.diagnostics.log_entry import LogEntry, normalize_log_path
from texpress.contexts.diagnostics.logger import _log_debug

SCONCORDANCE_PATTERN = re.compile(r"\\Sconcordance\{(?P<body>[^}]*)\}")
CONCORDANCE_LINE_CONTINUATION = re.compile(r"%\s*\n")


@dataclass(frozen=True)
class Concordance:
    """
    Line mapping between a generated document and its literate source.

    An empty concordance (no input lines) maps nothing and leaves entries alone.

    Attributes:
        input_file: Literate source, e.g. paper.Rnw
        output_file: Generated document, e.g. paper.tex
        offset: Number of generated lines before the mapped region
        input_lines: Source line for each mapped generated line
    """

    input_file: str = ""
    output_file: str = ""
    offset: int = 0
    input_lines: Tuple[int, ...] = ()

    @property
    def empty(self) -> bool:
        return not self.input_lines

    def rnw_line(self, generated_line: int) -> int:
        """
        Map a generated-document line to its source line.

        Lines outside the recorded range clamp to the nearest mapped line.
        """
        if self.empty:
            return generated_line
        index = generated_line - self.offset - 1
        index = max(0, min(index, len(self.input_lines) - 1))
        return self.input_lines[index]

    def maps_file(self, file: str) -> bool:
        """Whether a log entry naming `file` refers to this concordance's output."""
        if self.empty:
            return False
        candidate = normalize_log_path(file)
        output = normalize_log_path(self.output_file)
        if candidate == output:
            return True
        # Logs may name the file with a directory the concordance omits (or vice versa)
        return Path(candidate).name == Path(output).name and (
            "/" not in candidate or "/" not in output
        )


def _decode_input_lines(values: List[int]) -> Tuple[int, ...]:
    first, pairs = values[0], values[1:]
    if len(pairs) % 2:
        raise ConcordanceError(f"Concordance run-length data has odd length: {len(pairs)}")

    steps = []
    for count, step in zip(pairs[0::2], pairs[1::2]):
        steps.extend([step] * count)
    return tuple(accumulate(steps, initial=first))


def parse_concordance_record(body: str) -> Concordance:
    """
    Parse the body of one \\Sconcordance{...} record.

    Raises:
        ConcordanceError: If the record is malformed
    """
    fields = [field.strip() for field in body.split(":")]
    if len(fields) < 4 or fields[0] != "concordance":
        raise ConcordanceError(f"Not a concordance record: {body[:80]}")

    output_file, input_file = fields[1], fields[2]
    offset = 0
    data = fields[3:]
    if data[0].startswith("ofs"):
        try:
            offset = int(data[0].split()[1])
        except (IndexError, ValueError):
            raise ConcordanceError(f"Invalid concordance offset: {data[0]}")
        data = data[1:]

    try:
        values = [int(token) for token in " ".join(data).split()]
    except ValueError as e:
        raise ConcordanceError(f"Invalid concordance data: {e}")
    if not values:
        raise ConcordanceError("Concordance record has no line data")

    return Concordance(
        input_file=input_file,
        output_file=output_file,
        offset=offset,
        input_lines=_decode_input_lines(values),
    )


def parse_concordance(text: str) -> Concordance:
    """
    Parse concordance text written by the weave step.

    Only the first record is used; later records belong to child documents.

    Returns:
        The parsed Concordance, or an empty one if the text holds no record

    Raises:
        ConcordanceError: If a record is present but malformed
    """
    joined = CONCORDANCE_LINE_CONTINUATION.sub("", text)
    records = SCONCORDANCE_PATTERN.findall(joined)
    if not records:
        return Concordance()
    if len(records) > 1:
        _log_debug(f"Ignoring {len(records) - 1} additional concordance records")
    return parse_concordance_record(records[0])


def remap_entry(entry: LogEntry, concordance: Concordance) -> LogEntry:
    """
    Point an entry at the literate source when the concordance covers its file.

    Returns a new entry with the source file and line, or the entry unchanged.
    """
    if not concordance.maps_file(entry.file):
        return entry
    return replace(entry, file=concordance.input_file, line=concordance.rnw_line(entry.line))


def remap_entries(entries: Iterable[LogEntry], concordance: Concordance) -> List[LogEntry]:
    """Apply remap_entry to each entry, preserving order."""
    return [remap_entry(entry, concordance) for entry in entries]
