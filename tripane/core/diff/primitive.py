"""
Character-level diff primitive.

Wraps diff-match-patch behind a plain callable so the alignment engine can
be given any function with the same shape.
"""

from __future__ import annotations

from typing import Callable

from diff_match_patch import diff_match_patch

from tripane.core.models import EditOperation


Differ = Callable[[str, str], list[EditOperation]]


class MatchPatchDiffer:
    """
    Differ backed by diff-match-patch.

    Runs ``diff_main`` followed by ``diff_cleanupSemantic`` so the script
    is free of most spurious single-character edits.
    """

    def __init__(self, timeout: float = 1.0, cleanup_semantic: bool = True):
        self._dmp = diff_match_patch()
        self._dmp.Diff_Timeout = timeout
        self.cleanup_semantic = cleanup_semantic

    def __call__(self, source: str, target: str) -> list[EditOperation]:
        diffs = self._dmp.diff_main(source, target)
        if self.cleanup_semantic:
            self._dmp.diff_cleanupSemantic(diffs)
        return [EditOperation.from_tuple(chunk) for chunk in diffs]


def match_patch_differ(source: str, target: str) -> list[EditOperation]:
    """Diff ``source`` into ``target`` with default diff-match-patch settings."""
    return MatchPatchDiffer()(source, target)
