"""
Grouping of neighbouring diff regions.

Several regions on subsequent lines, say line 1 => line 1, line 2 => line 2
and lines 3-4 => line 3, read better as one connector: lines 1-4 => lines 1-3.
"""

from __future__ import annotations

from typing import Iterable

from tripane.core.models import DiffRegion, Granularity


def group_regions(
    regions: Iterable[DiffRegion],
    granularity: Granularity = Granularity.BROAD
) -> list[DiffRegion]:
    """
    Merge each region into the first existing group it touches.

    A region touches a group when its start lies within the granularity
    threshold of the group's end on both sides at once. First match wins,
    not best match.
    """
    grouped: list[DiffRegion] = []

    for region in regions:
        for index, group in enumerate(grouped):
            if (granularity.within(abs(region.left_start_line - group.left_end_line))
                    and granularity.within(abs(region.right_start_line - group.right_end_line))):
                grouped[index] = group.union(region)
                break
        else:
            grouped.append(region)

    return grouped


def simplify_regions(
    regions: Iterable[DiffRegion],
    granularity: Granularity = Granularity.BROAD
) -> list[DiffRegion]:
    """
    Group regions, then drop those with no extent in either buffer.

    Grouping repeats until no two groups touch, since a group that grows
    late can come within reach of one created after it. The result is
    therefore a fixed point: simplifying it again changes nothing.

    O(n^2) per round in the number of regions; the engine bounds n with its
    max-diffs ceiling.
    """
    grouped = group_regions(regions, granularity)
    while True:
        regrouped = group_regions(grouped, granularity)
        if len(regrouped) == len(grouped):
            break
        grouped = regrouped

    return [region for region in grouped if not region.is_empty]
