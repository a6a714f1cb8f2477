"""
tripane: three-pane comparison of two texts against a common ancestor.
"""

__version__ = "1.0.0"
