"""Tests for LineIndex."""

from __future__ import annotations

from tripane.core.diff.line_index import LineIndex
from tripane.core.models import LineSpan


class TestLineLayout:
    """Tests for line counts and lengths."""

    def test_trailing_newline_leaves_empty_last_line(self) -> None:
        """Test that a trailing newline produces an empty final line."""
        index = LineIndex.from_text("a\nb\nc\n")

        assert index.line_count == 4
        assert index.line_lengths == [2, 2, 2, 0]

    def test_line_lengths_sum_to_text_length(self) -> None:
        """Test that line lengths always sum to the full text length."""
        for text in ["", "abc", "a\nb", "a\nb\n", "\n\n", "one\n\nthree\n"]:
            index = LineIndex.from_text(text)
            assert sum(index.line_lengths) == len(text)
            assert index.total_length == len(text)

    def test_empty_text_has_one_empty_line(self) -> None:
        """Test that empty text still has a single line."""
        index = LineIndex.from_text("")

        assert index.line_count == 1
        assert index.chars_on_line(0) == 0

    def test_chars_on_line_excludes_terminator(self) -> None:
        """Test that character counts exclude the newline."""
        index = LineIndex.from_text("abc\nde\n")

        assert index.chars_on_line(0) == 3
        assert index.chars_on_line(1) == 2
        assert index.chars_on_line(2) == 0

    def test_chars_on_line_out_of_range(self) -> None:
        """Test that lines outside the text have no characters."""
        index = LineIndex.from_text("abc")

        assert index.chars_on_line(-1) == 0
        assert index.chars_on_line(5) == 0


class TestOffsetLookup:
    """Tests for offset to line lookups."""

    def test_locate_first_character(self) -> None:
        """Test locating offset 0."""
        index = LineIndex.from_text("a\nb\nc\n")

        assert index.locate(0) == (0, 0)

    def test_locate_boundary_resolves_to_following_line(self) -> None:
        """Test that an offset on a line boundary starts the next line."""
        index = LineIndex.from_text("a\nb\nc\n")

        assert index.locate(1) == (0, 1)
        assert index.locate(2) == (1, 0)
        assert index.locate(4) == (2, 0)

    def test_locate_end_stays_on_closed_line(self) -> None:
        """Test that an end offset on a boundary stays on the line it closes."""
        index = LineIndex.from_text("a\nb\nc\n")

        assert index.locate_end(2) == (0, 2)
        assert index.locate_end(3) == (1, 1)

    def test_total_length_resolves_to_last_line(self) -> None:
        """Test that the offset equal to the text length is on the last line."""
        index = LineIndex.from_text("a\nb\nc\n")

        assert index.locate(6) == (3, 0)
        assert index.line_for_offset(6) == 2

        no_newline = LineIndex.from_text("a\nbc")
        assert no_newline.locate(4)[0] == 1
        assert no_newline.line_for_offset(4) == 1

    def test_offsets_past_end_clamp(self) -> None:
        """Test that lookups beyond the text clamp to the last line."""
        index = LineIndex.from_text("a\nb\nc\n")

        assert index.locate(100)[0] == 3
        assert index.locate_end(100)[0] == 3
        assert index.line_for_offset(100) == 3

    def test_line_for_offset_resolves_boundary_to_earlier_line(self) -> None:
        """Test that anchoring an offset keeps boundary offsets on the closed line."""
        index = LineIndex.from_text("a\nb\nc\n")

        assert index.line_for_offset(0) == 0
        assert index.line_for_offset(2) == 0
        assert index.line_for_offset(3) == 1


class TestLineBoundary:
    """Tests for is_line_boundary."""

    def test_offset_after_terminator_is_boundary(self) -> None:
        """Test offsets right after a newline."""
        index = LineIndex.from_text("a\nb\nc\n")

        assert index.is_line_boundary(2)
        assert index.is_line_boundary(4)
        assert not index.is_line_boundary(3)
        assert not index.is_line_boundary(0)

    def test_leading_newline_moves_boundary_onto_terminator(self) -> None:
        """Test that a pending leading newline shifts the boundary back one."""
        index = LineIndex.from_text("a\nb\n")

        assert index.is_line_boundary(1, starts_with_newline=True)
        assert not index.is_line_boundary(2, starts_with_newline=True)

    def test_returns_plain_bool(self) -> None:
        """Test that the check returns a boolean."""
        index = LineIndex.from_text("a\n")

        assert index.is_line_boundary(2) is True
        assert index.is_line_boundary(1) is False


class TestSpan:
    """Tests for span normalization."""

    def test_whole_line_span(self) -> None:
        """Test a span covering one full line and its terminator."""
        index = LineIndex.from_text("a\nnew\nb\n")

        assert index.span(2, "new\n") == LineSpan(1, 0, 1, 4)

    def test_span_starting_on_terminator_moves_to_next_line(self) -> None:
        """Test that a span starting on a newline begins on the next line."""
        index = LineIndex.from_text("ab\ncd")

        assert index.span(2, "\ncd") == LineSpan(1, 0, 1, 2)

    def test_mid_line_span_ending_in_newline_claims_next_line(self) -> None:
        """Test that a mid-line span ending with a newline extends one line."""
        index = LineIndex.from_text("ab\ncd")

        assert index.span(1, "b\n") == LineSpan(0, 1, 1, 3)

    def test_mid_line_span(self) -> None:
        """Test a span inside a single line."""
        index = LineIndex.from_text("abc\n")

        assert index.span(1, "b") == LineSpan(0, 1, 0, 2)
