"""
Magic Comment Parsing

Magic comments are directives in a document's leading comment block:

    % !TeX program = xelatex
    % !Rnw weave = knitr
    % !BIB program = biber

Only the leading block is read; parsing stops at the first line that is neither
blank nor a comment.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Tuple

from texpress.contexts.weaving.exceptions import MagicCommentError

MAGIC_COMMENT_PATTERN = re.compile(
    r"^%+\s*!(?P<scope>\w+)\s+(?P<variable>\w+)\s*=\s*(?P<value>.*?)\s*$"
)


@dataclass(frozen=True)
class MagicComment:
    """One directive, e.g. scope='TeX', variable='program', value='xelatex'."""

    scope: str
    variable: str
    value: str

    @property
    def key(self) -> Tuple[str, str]:
        return (self.scope.lower(), self.variable.lower())


class MagicComments(Mapping):
    """
    Ordered, read-only mapping of (scope, variable) to value.

    Keys are lower-cased; when a directive repeats, the first occurrence wins.

    Example:
        >>> comments = parse_magic_comments_text("% !TeX program = xelatex\\n")
        >>> comments.lookup("TeX", "program")
        'xelatex'
    """

    def __init__(self, comments: Tuple[MagicComment, ...] = ()):
        self._comments = tuple(comments)
        self._values = {}
        for comment in self._comments:
            self._values.setdefault(comment.key, comment.value)

    def __getitem__(self, key: Tuple[str, str]) -> str:
        scope, variable = key
        return self._values[(scope.lower(), variable.lower())]

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"MagicComments({list(self._comments)!r})"

    @property
    def comments(self) -> Tuple[MagicComment, ...]:
        return self._comments

    def lookup(self, scope: str, variable: str) -> Optional[str]:
        """Value for a directive, or None if absent."""
        return self.get((scope, variable))


def parse_magic_comments_text(text: str) -> MagicComments:
    """Parse magic comments from document text."""
    comments = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        if not stripped.startswith("%"):
            break
        match = MAGIC_COMMENT_PATTERN.match(stripped)
        if match:
            comments.append(
                MagicComment(
                    scope=match.group("scope"),
                    variable=match.group("variable"),
                    value=match.group("value"),
                )
            )
    return MagicComments(tuple(comments))


def parse_magic_comments(path: Path) -> MagicComments:
    """
    Parse magic comments from the leading lines of a document.

    Raises:
        MagicCommentError: If the document cannot be read
    """
    try:
        text = Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise MagicCommentError(f"Unable to read magic comments ({e.strerror})", path) from e
    return parse_magic_comments_text(text)
