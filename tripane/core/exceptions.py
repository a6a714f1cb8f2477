"""Custom exceptions for the three-pane diff viewer."""


class TripaneError(Exception):
    """Base exception for all tripane errors."""

    pass


class CopyError(TripaneError):
    """Copy operation errors."""

    pass


class CopyDisabledError(CopyError):
    """Copying from a pane whose copy link is disabled."""

    pass


class RegionIndexError(CopyError):
    """A copy referenced a region that does not exist in the current pass."""

    def __init__(self, message: str, index: int, available: int) -> None:
        """Initialize region index error.

        Args:
            message: Error message
            index: Requested region index
            available: Number of regions in the pair
        """
        super().__init__(message)
        self.index = index
        self.available = available
