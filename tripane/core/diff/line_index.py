"""
Character offset to line mapping for a single text buffer.

Offsets count every character of the full text, including ``\\n``
terminators. Lookups never raise: offsets past the end of the text clamp
to the last line.
"""

from __future__ import annotations

from typing import Sequence

from tripane.core.models import LineSpan


class LineIndex:
    """
    Line layout of one buffer, recomputed at the start of every diff pass.

    ``line_lengths`` counts the terminator of every line that has one; the
    final line (the text after the last newline, possibly empty) has none,
    so the lengths always sum to the length of the full text.
    """

    def __init__(self, lines: Sequence[str]):
        self._lines = list(lines) or [""]
        self._starts: list[int] = []
        # Offset just past each line's terminator. The final line gets a
        # virtual terminator so boundary checks treat it like any other line.
        self._ends: list[int] = []

        running_total = 0
        for line in self._lines:
            self._starts.append(running_total)
            running_total += len(line) + 1
            self._ends.append(running_total)

    @classmethod
    def from_text(cls, text: str) -> 'LineIndex':
        return cls(text.split("\n"))

    @property
    def line_count(self) -> int:
        return len(self._lines)

    @property
    def total_length(self) -> int:
        return self._ends[-1] - 1

    @property
    def line_lengths(self) -> list[int]:
        lengths = [len(line) + 1 for line in self._lines]
        lengths[-1] -= 1
        return lengths

    def chars_on_line(self, line: int) -> int:
        """Number of characters on a line, excluding its terminator."""
        if 0 <= line < len(self._lines):
            return len(self._lines[line])
        return 0

    def locate(self, offset: int) -> tuple[int, int]:
        """
        Return ``(line, column)`` of the character at ``offset``.

        An offset sitting exactly on a line boundary belongs to the start of
        the following line.
        """
        for line, end in enumerate(self._ends):
            if offset < end:
                return line, offset - self._starts[line]
        return self._clamp(offset)

    def locate_end(self, offset: int) -> tuple[int, int]:
        """
        Return ``(line, column)`` for the exclusive end of a span.

        Unlike :meth:`locate`, an end offset on a line boundary stays on the
        line it closes.
        """
        for line, end in enumerate(self._ends):
            if offset <= end:
                return line, offset - self._starts[line]
        return self._clamp(offset)

    def line_for_offset(self, offset: int) -> int:
        """
        Line an offset is anchored to, resolving boundaries to the earlier line.

        An offset just after a terminator resolves to the line that
        terminator closes; callers decide whether to move to the next line.
        """
        for line, end in enumerate(self._ends):
            if offset <= end:
                return line
        return len(self._lines) - 1

    def is_line_boundary(self, offset: int, starts_with_newline: bool = False) -> bool:
        """
        True if ``offset`` sits right after some line's terminator.

        When the pending edit starts with a newline, the boundary is taken one
        character earlier, on the terminator itself.
        """
        adjust = 1 if starts_with_newline else 0
        return any(offset == end - adjust for end in self._ends)

    def span(self, offset: int, text: str) -> LineSpan:
        """
        Line/column bounds of ``text`` placed at ``offset`` in this buffer.

        Positions are normalized so that a span starting on a terminator
        begins on the next line, a span ending at column 0 does not claim
        that line, and a mid-line span ending in a newline claims the line
        its split-off tail now occupies.
        """
        start_line, start_char = self.locate(offset)
        end_line, end_char = self.locate_end(offset + len(text))

        if start_char > 0 and self.chars_on_line(start_line) == start_char:
            start_line += 1
            start_char = 0

        if end_char == 0:
            end_line -= 1

        if start_char > 0 and text.endswith("\n"):
            end_line += 1

        return LineSpan(start_line, start_char, end_line, end_char)

    def _clamp(self, offset: int) -> tuple[int, int]:
        last = len(self._lines) - 1
        return last, max(0, offset - self._starts[last])
