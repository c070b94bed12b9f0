"""Configuration-related exceptions."""
from .base import PortfolioTrackerError


class ConfigurationError(PortfolioTrackerError):
    """Exception raised for configuration-related errors."""
    pass
