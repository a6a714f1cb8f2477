"""
Merge session over the three panes.

Owns the buffers for one comparison, runs diff passes on request and
publishes their results, and copies regions from the left or right pane
into the common pane.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Mapping, Optional

from tripane.core.diff.engine import AlignmentEngine
from tripane.core.exceptions import CopyDisabledError, RegionIndexError
from tripane.core.merge.buffers import TextBuffer
from tripane.core.models import (
    BufferPair,
    BufferRole,
    CopyDirection,
    DiffRegion,
    PassResult,
    TextRange,
)


logger = logging.getLogger(__name__)


PassListener = Callable[[PassResult], None]
RangeFactory = Callable[[int, int, int, int], TextRange]


class MergeSession:
    """
    Three buffers plus the last published diff pass.

    A pass whose region count exceeds the engine's ceiling is dropped
    whole: listeners are not called and the previously published regions
    stay in place.
    """

    def __init__(
        self,
        buffers: Mapping[BufferRole, TextBuffer],
        engine: Optional[AlignmentEngine] = None,
        make_range: RangeFactory = TextRange,
        copy_link_enabled: Optional[Mapping[BufferRole, bool]] = None
    ):
        missing = [role.value for role in BufferRole if role not in buffers]
        if missing:
            raise ValueError(f"Missing buffers for: {', '.join(missing)}")

        self.buffers = dict(buffers)
        self.engine = engine or AlignmentEngine()
        self.make_range = make_range
        self.copy_link_enabled = {
            BufferRole.LEFT: True,
            BufferRole.RIGHT: True,
        }
        if copy_link_enabled:
            self.copy_link_enabled.update(copy_link_enabled)

        self._result = PassResult()
        self._listeners: list[PassListener] = []

    # -------------------------------------------------------------------------
    # Listeners
    # -------------------------------------------------------------------------

    def add_listener(self, callback: PassListener) -> None:
        """Add a callback called with every published pass."""
        self._listeners.append(callback)

    def remove_listener(self, callback: PassListener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    # -------------------------------------------------------------------------
    # Diff passes
    # -------------------------------------------------------------------------

    @property
    def result(self) -> PassResult:
        """The last published pass."""
        return self._result

    def regions(self, pair: BufferPair) -> list[DiffRegion]:
        return self._result.regions(pair)

    def diff_count(self) -> int:
        """Number of regions across both pairs in the last published pass."""
        return self._result.total

    def refresh(self) -> Optional[PassResult]:
        """
        Run a diff pass over the current buffer contents.

        Returns:
            The published PassResult, or None when the pass was dropped
            for exceeding the max-diffs ceiling
        """
        result = self.engine.compute(
            self.buffers[BufferRole.LEFT].full_text(),
            self.buffers[BufferRole.COMMON].full_text(),
            self.buffers[BufferRole.RIGHT].full_text(),
        )

        if self.engine.exceeds_ceiling(result):
            logger.info(
                "Skipping display of %d diffs (limit %d)",
                result.total, self.engine.options.max_diffs
            )
            return None

        self._result = result
        for callback in list(self._listeners):
            callback(result)
        return result

    def set_options(self, **changes) -> Optional[PassResult]:
        """
        Change engine options on the fly and re-diff.

        Accepts the fields of EngineOptions, e.g. ``granularity`` or
        ``max_diffs``.
        """
        self.engine.options = replace(self.engine.options, **changes)
        return self.refresh()

    # -------------------------------------------------------------------------
    # Copy
    # -------------------------------------------------------------------------

    def copy(self, direction: CopyDirection, index: int) -> Optional[PassResult]:
        """
        Copy one region's lines into the common pane.

        The source lines replace the counterpart line range in the common
        buffer; a zero-height counterpart range becomes a pure insertion.

        Args:
            direction: LEFT_TO_COMMON or RIGHT_TO_COMMON
            index: Index of the region in the direction's pair

        Returns:
            Result of the pass run after the copy
        """
        source_role = direction.source
        if not self.copy_link_enabled.get(source_role, False):
            raise CopyDisabledError(f"Copying from the {source_role.value} pane is disabled")

        regions = self.regions(direction.pair)
        if not 0 <= index < len(regions):
            raise RegionIndexError(
                f"No region {index} for {direction.name}", index, len(regions)
            )
        region = regions[index]

        if direction is CopyDirection.LEFT_TO_COMMON:
            start_line, end_line = region.left_start_line, region.left_end_line
            target_start, target_end = region.right_start_line, region.right_end_line
        else:
            start_line, end_line = region.right_start_line, region.right_end_line
            target_start, target_end = region.left_start_line, region.left_end_line

        source = self.buffers[source_role]
        content = "".join(f"{source.line(line)}\n" for line in range(start_line, end_line))

        target = self.buffers[BufferRole.COMMON]
        target.replace(self.make_range(target_start, 0, target_end, 0), content)

        logger.debug(
            "Copied %s lines %d-%d into common lines %d-%d",
            source_role.value, start_line, end_line, target_start, target_end
        )
        return self.refresh()
