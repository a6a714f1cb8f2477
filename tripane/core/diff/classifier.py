"""
Classification of single edit operations into diff regions.

A character-level diff rarely lines up with line boundaries. For every
insert or delete the classifier decides which lines of the edited buffer are
affected and whether the counterpart buffer shows a full-line highlight
(the line was overwritten) or a zero-height marker (content was inserted).
"""

from __future__ import annotations

from tripane.core.diff.line_index import LineIndex
from tripane.core.models import DiffRegion, EditKind


class DiffRegionClassifier:
    """
    Classifier for one buffer pair.

    ``first`` and ``second`` are the line indexes of the pair's first and
    second buffers. INSERT text lives in the first buffer, DELETE text in
    the second.
    """

    def __init__(self, first: LineIndex, second: LineIndex):
        self.first = first
        self.second = second

    def classify(
        self,
        kind: EditKind,
        first_offset: int,
        second_offset: int,
        text: str
    ) -> DiffRegion:
        """
        Compute the region covered by one non-empty INSERT or DELETE.

        Args:
            kind: EditKind.INSERT or EditKind.DELETE
            first_offset: Characters consumed so far in the first buffer
            second_offset: Characters consumed so far in the second buffer
            text: The operation's text

        Returns:
            DiffRegion with the first buffer on the left side
        """
        if kind is EditKind.INSERT:
            edited, counterpart = self.first, self.second
            edited_offset, counterpart_offset = first_offset, second_offset
        elif kind is EditKind.DELETE:
            edited, counterpart = self.second, self.first
            edited_offset, counterpart_offset = second_offset, first_offset
        else:
            raise ValueError(f"Cannot classify an {kind.name} operation")

        edited_start, edited_end, counterpart_start, counterpart_end = self._bounds(
            edited, counterpart, edited_offset, counterpart_offset, text
        )

        if kind is EditKind.INSERT:
            return DiffRegion(edited_start, edited_end, counterpart_start, counterpart_end)
        return DiffRegion(counterpart_start, counterpart_end, edited_start, edited_end)

    def _bounds(
        self,
        edited: LineIndex,
        counterpart: LineIndex,
        edited_offset: int,
        counterpart_offset: int,
        text: str
    ) -> tuple[int, int, int, int]:
        info = edited.span(edited_offset, text)

        # The diff primitive sometimes puts a newline first, sometimes not,
        # and flips between the two while the user types.
        starts_with_newline = text.startswith("\n")

        current_line_counterpart = counterpart.line_for_offset(counterpart_offset)
        chars_on_counterpart_line = counterpart.chars_on_line(current_line_counterpart)
        chars_on_edited_start_line = edited.chars_on_line(info.start_line)

        if chars_on_edited_start_line == 0 and starts_with_newline:
            starts_with_newline = False

        # A change starting a fresh line can come back anchored on the
        # terminator of the previous line in the counterpart.
        counterpart_start = current_line_counterpart
        if info.start_char == 0 and counterpart.is_line_boundary(
            counterpart_offset, starts_with_newline
        ):
            counterpart_start += 1

        single_line = info.start_line == info.end_line
        overwrites_line = (
            (info.start_char > 0 or (single_line and len(text) < chars_on_edited_start_line))
            and chars_on_counterpart_line > 0
            and info.start_char < chars_on_edited_start_line
        )

        rows = 1 if overwrites_line else 0
        return (
            info.start_line,
            info.end_line + 1,
            counterpart_start,
            counterpart_start + rows,
        )
