"""Local storage exceptions."""
from .base import PortfolioTrackerError


class StorageError(PortfolioTrackerError):
    """Exception raised when the local key-value store cannot be read or written."""
    pass
