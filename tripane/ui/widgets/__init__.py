"""
Reusable UI widgets for the three-pane diff viewer.
"""

from tripane.ui.widgets.connector_gutter import (
    ConnectorGutter,
    GutterColors,
)

__all__ = [
    'ConnectorGutter',
    'GutterColors',
]
