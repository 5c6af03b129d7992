"""
Weaving Context

Responsibilities:
- Reads magic comments from a document's leading comment block
- Weaves literate documents (Sweave/knitr) into compilable .tex files
- Collects the concordance written by the weave

Owns: Magic comments, Rnw weaving
Never: Compiles LaTeX or interprets compiler logs
"""

from texpress.contexts.weaving.exceptions import MagicCommentError
from texpress.contexts.weaving.magic_comments import (
    MagicComment,
    MagicComments,
    parse_magic_comments,
)
from texpress.contexts.weaving.weave import WeaveResult, run_weave

__all__ = [
    "MagicComment",
    "MagicComments",
    "MagicCommentError",
    "parse_magic_comments",
    "WeaveResult",
    "run_weave",
]
