"""
Diff alignment engine.

Runs one diff pass over the three buffers:
1. Builds a line index per buffer
2. Diffs common into left and right into common
3. Translates both edit scripts into line regions
4. Simplifies each region list

A pass is synchronous and keeps no state between calls.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from tripane.core.diff.line_index import LineIndex
from tripane.core.diff.primitive import Differ, match_patch_differ
from tripane.core.diff.simplifier import simplify_regions
from tripane.core.diff.translator import PairwiseDiffTranslator
from tripane.core.models import (
    BufferPair,
    BufferRole,
    DiffRegion,
    Granularity,
    PassResult,
)


logger = logging.getLogger(__name__)


DEFAULT_MAX_DIFFS = 5000


@dataclass
class EngineOptions:
    """Options for the alignment engine."""
    granularity: Granularity = Granularity.BROAD
    max_diffs: int = DEFAULT_MAX_DIFFS


class AlignmentEngine:
    """
    Engine turning three texts into two lists of diff regions.

    The character diff primitive is injected; by default diff-match-patch
    with semantic cleanup is used.
    """

    def __init__(
        self,
        differ: Optional[Differ] = None,
        options: Optional[EngineOptions] = None
    ):
        self.differ = differ or match_patch_differ
        self.options = options or EngineOptions()

    def compute(
        self,
        left: Optional[str],
        common: Optional[str],
        right: Optional[str]
    ) -> PassResult:
        """
        Run a full diff pass.

        Args:
            left: Left buffer text (None is treated as empty)
            common: Common ancestor text
            right: Right buffer text

        Returns:
            PassResult with simplified regions for both pairs
        """
        texts = {
            BufferRole.LEFT: left or "",
            BufferRole.COMMON: common or "",
            BufferRole.RIGHT: right or "",
        }
        indexes = {role: LineIndex.from_text(text) for role, text in texts.items()}

        raw: dict[BufferPair, list[DiffRegion]] = {}
        for pair in BufferPair:
            raw[pair] = self.compute_pair(
                texts[pair.first], texts[pair.second],
                indexes[pair.first], indexes[pair.second]
            )

        result = PassResult(
            left_common=simplify_regions(raw[BufferPair.LEFT_COMMON], self.options.granularity),
            common_right=simplify_regions(raw[BufferPair.COMMON_RIGHT], self.options.granularity),
            raw_count=sum(len(regions) for regions in raw.values()),
        )

        logger.debug(
            "Diff pass: %d raw regions, %d left/common, %d common/right",
            result.raw_count, len(result.left_common), len(result.common_right)
        )
        return result

    def compute_pair(
        self,
        first_text: str,
        second_text: str,
        first_index: Optional[LineIndex] = None,
        second_index: Optional[LineIndex] = None
    ) -> list[DiffRegion]:
        """
        Unsimplified regions for one pair.

        The edit script runs from the second text to the first, so inserts
        land in the first buffer and deletes come from the second.
        """
        first_index = first_index or LineIndex.from_text(first_text)
        second_index = second_index or LineIndex.from_text(second_text)

        operations = self.differ(second_text, first_text)
        return PairwiseDiffTranslator(first_index, second_index).translate(operations)

    def exceeds_ceiling(self, result: PassResult) -> bool:
        """True if a pass has too many regions to be shown."""
        return result.total > self.options.max_diffs
