"""
Translation of a pair's edit script into diff regions.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from tripane.core.diff.classifier import DiffRegionClassifier
from tripane.core.diff.line_index import LineIndex
from tripane.core.models import DiffRegion, EditKind, EditOperation


logger = logging.getLogger(__name__)


def normalize_edit_script(operations: Sequence[EditOperation]) -> list[EditOperation]:
    """
    Move split blank lines back onto the preceding operation.

    When one operation ends with a newline and the next starts with one,
    the primitive has split a shared blank line across the two. One newline
    moves from the start of the next operation to the end of this one,
    which avoids a spurious one-line gap between regions. A moved newline
    can expose the same pattern on the following pair, so the pass runs
    left to right over the already-adjusted texts.

    Returns a new list; ``operations`` is left untouched.
    """
    texts = [op.text for op in operations]

    for index in range(len(texts) - 1):
        if texts[index].endswith("\n") and texts[index + 1].startswith("\n"):
            texts[index] += "\n"
            texts[index + 1] = texts[index + 1][1:]

    return [
        op if op.text == text else EditOperation(op.kind, text)
        for op, text in zip(operations, texts)
    ]


class PairwiseDiffTranslator:
    """
    Walks one edit script and emits a region per change.

    Keeps a running character offset into each buffer of the pair. EQUAL
    advances both; a change advances only the buffer whose text contains it.
    """

    def __init__(self, first: LineIndex, second: LineIndex):
        self.classifier = DiffRegionClassifier(first, second)

    def translate(self, operations: Iterable[EditOperation]) -> list[DiffRegion]:
        """Convert an edit script into regions, in source order."""
        regions: list[DiffRegion] = []
        first_offset = 0
        second_offset = 0

        for op in normalize_edit_script(list(operations)):
            # The primitive occasionally emits operations with no text
            if not op.text:
                continue

            length = len(op.text)
            if op.kind is EditKind.EQUAL:
                first_offset += length
                second_offset += length
            elif op.kind is EditKind.INSERT:
                regions.append(self.classifier.classify(
                    EditKind.INSERT, first_offset, second_offset, op.text
                ))
                first_offset += length
            elif op.kind is EditKind.DELETE:
                regions.append(self.classifier.classify(
                    EditKind.DELETE, first_offset, second_offset, op.text
                ))
                second_offset += length

        logger.debug(
            "Translated edit script into %d regions (offsets %d/%d)",
            len(regions), first_offset, second_offset
        )
        return regions
