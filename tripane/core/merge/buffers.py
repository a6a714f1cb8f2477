"""
Text buffer accessors used by the merge session.

The session never touches widgets directly; it reads and edits text
through the small protocol defined here.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from tripane.core.models import TextRange


@runtime_checkable
class TextBuffer(Protocol):
    """Uniform accessor for one pane's text."""

    def full_text(self) -> str:
        ...

    def lines(self) -> list[str]:
        """All lines, without terminators."""
        ...

    def line(self, index: int) -> str:
        ...

    def replace(self, text_range: TextRange, text: str) -> None:
        ...


def normalize_content(content: str | None) -> str:
    """Normalize text for a buffer: ``None`` becomes empty, line endings become LF."""
    if not content:
        return ""
    return content.replace("\r\n", "\n").replace("\r", "\n")


class StringBuffer:
    """In-memory text buffer."""

    def __init__(self, content: str | None = ""):
        self._text = normalize_content(content)

    def full_text(self) -> str:
        return self._text

    def set_text(self, content: str | None) -> None:
        self._text = normalize_content(content)

    def lines(self) -> list[str]:
        return self._text.split("\n")

    def line(self, index: int) -> str:
        lines = self.lines()
        if 0 <= index < len(lines):
            return lines[index]
        return ""

    def replace(self, text_range: TextRange, text: str) -> None:
        """
        Replace the text between two (line, column) positions.

        Positions past the end of a line or of the buffer are clamped, the way
        editor widgets treat them.
        """
        start = self._to_offset(text_range.start_line, text_range.start_column)
        end = self._to_offset(text_range.end_line, text_range.end_column)
        if end < start:
            start, end = end, start
        self._text = self._text[:start] + text + self._text[end:]

    def _to_offset(self, line: int, column: int) -> int:
        lines = self.lines()
        if line >= len(lines):
            return len(self._text)
        line = max(0, line)
        offset = sum(len(text) + 1 for text in lines[:line])
        return offset + min(max(0, column), len(lines[line]))

    def __repr__(self) -> str:
        return f"StringBuffer({self._text!r})"
