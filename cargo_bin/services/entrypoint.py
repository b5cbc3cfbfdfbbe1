"""Entry-point detection for Rust source files.

Detection is a best-effort textual check, not a Rust parser: a file counts as
a binary when, after comments are stripped, some line starts (with no
indentation) with a ``fn main(`` declaration. Unusually formatted files may be
missed; that is accepted.
"""

from __future__ import annotations

import re
from typing import Protocol

ENTRY_POINT_NAME = "main"

_BLOCK_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
_LINE_COMMENT_RE = re.compile(r"//[^\n]*")


class EntryPointDetector(Protocol):
    """Reports whether source text defines the conventional entry point."""

    def defines_entry_point(self, source: str) -> bool: ...


def strip_comments(source: str) -> str:
    """Remove ``/* */`` and ``//`` comments, keeping line structure.

    Block comments are replaced by the newlines they contained so that code
    after a multi-line comment stays at the same line position. Nesting is
    not tracked: a nested block comment ends at its first ``*/``.
    """
    source = _BLOCK_COMMENT_RE.sub(lambda m: "\n" * m.group(0).count("\n"), source)
    return _LINE_COMMENT_RE.sub("", source)


class RegexEntryPointDetector:
    """Detects a top-level ``fn main`` with a regular expression."""

    def __init__(self, name: str = ENTRY_POINT_NAME) -> None:
        self.name = name
        self._pattern = re.compile(
            r"^(?:pub(?:\([^)]*\))?\s+)?(?:async\s+)?(?:unsafe\s+)?"
            rf"fn\s+{re.escape(name)}\s*\(",
            re.MULTILINE,
        )

    def defines_entry_point(self, source: str) -> bool:
        return self._pattern.search(strip_comments(source)) is not None


DEFAULT_DETECTOR: EntryPointDetector = RegexEntryPointDetector()
