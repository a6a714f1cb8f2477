"""Tests for the pairwise diff translator."""

from __future__ import annotations

from tripane.core.diff.line_index import LineIndex
from tripane.core.diff.translator import PairwiseDiffTranslator, normalize_edit_script
from tripane.core.models import DiffRegion, EditKind, EditOperation


EQ = EditKind.EQUAL
INS = EditKind.INSERT
DEL = EditKind.DELETE


def ops(*pairs: tuple[EditKind, str]) -> list[EditOperation]:
    return [EditOperation(kind, text) for kind, text in pairs]


def make_translator(first: str, second: str) -> PairwiseDiffTranslator:
    return PairwiseDiffTranslator(LineIndex.from_text(first), LineIndex.from_text(second))


class TestNormalizeEditScript:
    """Tests for the adjacent-newline fix-up."""

    def test_moves_leading_newline_onto_previous_operation(self) -> None:
        """Test that a split blank line is moved back."""
        script = ops((EQ, "a\n"), (INS, "\nb"), (EQ, "c"))

        result = normalize_edit_script(script)

        assert [op.text for op in result] == ["a\n\n", "b", "c"]
        assert [op.kind for op in result] == [EQ, INS, EQ]

    def test_fix_up_cascades_left_to_right(self) -> None:
        """Test that a moved newline can trigger the next fix-up."""
        script = ops((EQ, "x\n"), (INS, "\n\n"), (DEL, "\ny"))

        result = normalize_edit_script(script)

        assert [op.text for op in result] == ["x\n\n", "\n\n", "y"]

    def test_does_not_mutate_input(self) -> None:
        """Test that the input script is left untouched."""
        script = ops((EQ, "a\n"), (INS, "\nb"))
        snapshot = list(script)

        normalize_edit_script(script)

        assert script == snapshot
        assert script[0].text == "a\n"

    def test_untouched_operations_are_reused(self) -> None:
        """Test that operations without a fix-up are returned as-is."""
        script = ops((EQ, "a"), (INS, "b\n"), (EQ, "c"))

        result = normalize_edit_script(script)

        assert result == script
        assert all(new is old for new, old in zip(result, script))

    def test_empty_script(self) -> None:
        """Test normalizing an empty script."""
        assert normalize_edit_script([]) == []


class TestPairwiseDiffTranslator:
    """Tests for PairwiseDiffTranslator."""

    def test_empty_operations_are_skipped(self) -> None:
        """Test that zero-length operations produce no regions."""
        translator = make_translator("a", "a")

        regions = translator.translate(ops((INS, ""), (DEL, ""), (EQ, "a")))

        assert regions == []

    def test_equal_only_script_has_no_regions(self) -> None:
        """Test that an unchanged pair yields nothing."""
        translator = make_translator("a\nb\n", "a\nb\n")

        assert translator.translate(ops((EQ, "a\nb\n"))) == []

    def test_line_replacement(self) -> None:
        """Test a replaced line producing a delete and an insert region."""
        translator = make_translator("a\nX\nc\n", "a\nb\nc\n")

        regions = translator.translate(
            ops((EQ, "a\n"), (DEL, "b"), (INS, "X"), (EQ, "\nc\n"))
        )

        assert regions == [DiffRegion(1, 1, 1, 2), DiffRegion(1, 2, 1, 1)]

    def test_delete_advances_only_second_offset(self) -> None:
        """Test that the insert after a delete is anchored past the deleted text."""
        translator = make_translator("a\nX\nc\n", "a\nb\nc\n")

        regions = translator.translate(
            ops((EQ, "a\n"), (DEL, "b"), (INS, "X"), (EQ, "\nc\n"))
        )

        # Second offset 3 is mid-line, so no boundary bump on the counterpart
        assert regions[1].right_start_line == 1

    def test_pure_insertion(self) -> None:
        """Test a whole inserted line."""
        translator = make_translator("a\nnew\nb\n", "a\nb\n")

        regions = translator.translate(ops((EQ, "a\n"), (INS, "new\n"), (EQ, "b\n")))

        assert regions == [DiffRegion(1, 2, 1, 1)]

    def test_regions_follow_source_order(self) -> None:
        """Test that regions come out in increasing line order."""
        translator = make_translator("a\nX\nc\nY\n", "a\nb\nc\nd\n")

        regions = translator.translate(ops(
            (EQ, "a\n"), (DEL, "b"), (INS, "X"),
            (EQ, "\nc\n"), (DEL, "d"), (INS, "Y"), (EQ, "\n"),
        ))

        assert len(regions) == 4
        starts = [region.left_start_line for region in regions]
        assert starts == sorted(starts)
        assert regions[-1] == DiffRegion(3, 4, 3, 3)
