"""
Diff alignment module.

Provides the pieces of a diff pass:
- Line index (offset to line mapping)
- Region classifier and pairwise translator
- Region simplifier
- Alignment engine tying them together
"""

from tripane.core.diff.line_index import LineIndex
from tripane.core.diff.primitive import (
    Differ,
    MatchPatchDiffer,
    match_patch_differ,
)
from tripane.core.diff.classifier import DiffRegionClassifier
from tripane.core.diff.translator import (
    PairwiseDiffTranslator,
    normalize_edit_script,
)
from tripane.core.diff.simplifier import (
    group_regions,
    simplify_regions,
)
from tripane.core.diff.engine import (
    AlignmentEngine,
    EngineOptions,
    DEFAULT_MAX_DIFFS,
)

__all__ = [
    # Line mapping
    'LineIndex',
    # Primitive
    'Differ',
    'MatchPatchDiffer',
    'match_patch_differ',
    # Regions
    'DiffRegionClassifier',
    'PairwiseDiffTranslator',
    'normalize_edit_script',
    'group_regions',
    'simplify_regions',
    # Engine
    'AlignmentEngine',
    'EngineOptions',
    'DEFAULT_MAX_DIFFS',
]
