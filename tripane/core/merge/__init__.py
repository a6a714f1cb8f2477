"""
Merge module for copying changes between panes.
"""

from tripane.core.merge.buffers import (
    TextBuffer,
    StringBuffer,
    normalize_content,
)
from tripane.core.merge.session import (
    MergeSession,
    PassListener,
)

__all__ = [
    'TextBuffer',
    'StringBuffer',
    'normalize_content',
    'MergeSession',
    'PassListener',
]
