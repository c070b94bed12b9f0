"""Quote lookup exceptions.

Every ``QuoteError`` carries a short message that is safe to show to the user;
transport details go into ``details`` and the log only.
"""
from typing import Dict, Any, Optional

from .base import PortfolioTrackerError


class QuoteError(PortfolioTrackerError):
    """Base exception for quote lookup failures."""

    default_message = 'Failed to fetch stock data'

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message or self.default_message, details)

    @property
    def user_message(self) -> str:
        """Message suitable for the view layer (no details)."""
        return self.message


class TickerRequiredError(QuoteError):
    """Raised when an empty ticker is submitted."""
    default_message = 'Ticker symbol is required'


class QuoteNotFoundError(QuoteError):
    """Raised when the provider has no such symbol."""
    default_message = 'Stock not found'


class QuoteConnectionError(QuoteError):
    """Raised when the quote gateway cannot be reached."""
    default_message = 'Unable to connect to server'


class QuoteServerError(QuoteError):
    """Raised when the quote gateway answers with a 5xx status."""
    default_message = 'Server error occurred'


class QuoteFetchError(QuoteError):
    """Raised for any other quote lookup failure."""
    pass


class UpstreamError(PortfolioTrackerError):
    """Raised by the gateway when the upstream provider call fails."""
    pass
