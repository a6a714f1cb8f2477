"""
Core data models for the three-pane diff viewer.

This module defines the data structures shared by the alignment engine,
the merge session and the UI:
- Buffer roles and buffer pairs
- Edit script operations
- Diff regions (line-range descriptors)
- Pass results and text ranges

All models are:
- UI-agnostic (the Qt view is only one consumer)
- Pure derived values, recomputed on every diff pass
- Immutable where practical
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterator


# =============================================================================
# Enumerations
# =============================================================================

class BufferRole(Enum):
    """Which of the three texts a value pertains to."""
    LEFT = "left"
    COMMON = "common"
    RIGHT = "right"


class BufferPair(Enum):
    """
    An ordered pair of buffers that gets its own edit script.

    The first role is the "left side" of every region produced for the
    pair and the second role its "right side". The edit script is computed
    from the second buffer (source) to the first (target), so INSERT text
    lives in the first buffer and DELETE text in the second.
    """
    LEFT_COMMON = (BufferRole.LEFT, BufferRole.COMMON)
    COMMON_RIGHT = (BufferRole.COMMON, BufferRole.RIGHT)

    @property
    def first(self) -> BufferRole:
        return self.value[0]

    @property
    def second(self) -> BufferRole:
        return self.value[1]


class EditKind(Enum):
    """Operation tag of an edit script entry (diff-match-patch values)."""
    DELETE = -1
    EQUAL = 0
    INSERT = 1


class Granularity(Enum):
    """How aggressively neighbouring regions are merged."""
    SPECIFIC = "specific"   # Merge only strictly adjacent regions
    BROAD = "broad"         # Merge regions within one line

    @classmethod
    def from_string(cls, value: str) -> 'Granularity':
        """Create from string value, defaulting to BROAD."""
        try:
            for granularity in cls:
                if granularity.value == value.lower():
                    return granularity
            return cls[value.upper()]
        except (KeyError, AttributeError):
            return cls.BROAD

    def within(self, distance: int) -> bool:
        """True if two regions this many lines apart should merge."""
        if self is Granularity.SPECIFIC:
            return distance < 1
        return distance <= 1


class CopyDirection(Enum):
    """Direction of a copy into the common pane."""
    LEFT_TO_COMMON = auto()
    RIGHT_TO_COMMON = auto()

    @property
    def pair(self) -> BufferPair:
        if self is CopyDirection.LEFT_TO_COMMON:
            return BufferPair.LEFT_COMMON
        return BufferPair.COMMON_RIGHT

    @property
    def source(self) -> BufferRole:
        if self is CopyDirection.LEFT_TO_COMMON:
            return BufferRole.LEFT
        return BufferRole.RIGHT


# =============================================================================
# Edit Script Models
# =============================================================================

@dataclass(frozen=True)
class EditOperation:
    """One entry of an edit script: an operation and its text."""
    kind: EditKind
    text: str

    @classmethod
    def from_tuple(cls, chunk: tuple[int, str]) -> 'EditOperation':
        """Build from a raw ``(op, text)`` tuple as returned by diff-match-patch."""
        op, text = chunk
        return cls(EditKind(op), text)

    @property
    def is_change(self) -> bool:
        return self.kind is not EditKind.EQUAL


# =============================================================================
# Region Models
# =============================================================================

@dataclass(frozen=True)
class DiffRegion:
    """
    One contiguous change between the two buffers of a pair.

    Lines are 0-indexed and half-open: ``*_end_line`` is one past the last
    affected line. When start and end are equal on one side, the region is a
    zero-height marker on that side: content from the other side was purely
    inserted at that point.
    """
    left_start_line: int
    left_end_line: int
    right_start_line: int
    right_end_line: int

    @property
    def left_extent(self) -> int:
        return self.left_end_line - self.left_start_line

    @property
    def right_extent(self) -> int:
        return self.right_end_line - self.right_start_line

    @property
    def is_empty(self) -> bool:
        """True when the region has no extent in either buffer."""
        return self.left_extent == 0 and self.right_extent == 0

    def side(self, first: bool) -> tuple[int, int]:
        """Return ``(start, end)`` for the first or second buffer of the pair."""
        if first:
            return self.left_start_line, self.left_end_line
        return self.right_start_line, self.right_end_line

    def union(self, other: 'DiffRegion') -> 'DiffRegion':
        """Smallest region covering both regions."""
        return DiffRegion(
            left_start_line=min(self.left_start_line, other.left_start_line),
            left_end_line=max(self.left_end_line, other.left_end_line),
            right_start_line=min(self.right_start_line, other.right_start_line),
            right_end_line=max(self.right_end_line, other.right_end_line),
        )


@dataclass(frozen=True)
class LineSpan:
    """Start/end line and column of a character span inside one buffer."""
    start_line: int = 0
    start_char: int = 0
    end_line: int = 0
    end_char: int = 0


@dataclass(frozen=True)
class TextRange:
    """A range of text in a buffer, as (line, column) start and end."""
    start_line: int
    start_column: int
    end_line: int
    end_column: int


# =============================================================================
# Pass Models
# =============================================================================

@dataclass
class PassResult:
    """
    Outcome of one diff pass over the three buffers.

    Holds the simplified regions for both pairs plus the unsimplified
    region count, which callers may use for diagnostics.
    """
    left_common: list[DiffRegion] = field(default_factory=list)
    common_right: list[DiffRegion] = field(default_factory=list)
    raw_count: int = 0

    @property
    def total(self) -> int:
        """Number of simplified regions across both pairs."""
        return len(self.left_common) + len(self.common_right)

    @property
    def is_identical(self) -> bool:
        return self.total == 0

    def regions(self, pair: BufferPair) -> list[DiffRegion]:
        if pair is BufferPair.LEFT_COMMON:
            return self.left_common
        return self.common_right

    def iter_all(self) -> Iterator[tuple[BufferPair, int, DiffRegion]]:
        """Iterate ``(pair, index, region)`` over both pairs."""
        for pair in BufferPair:
            for index, region in enumerate(self.regions(pair)):
                yield pair, index, region
