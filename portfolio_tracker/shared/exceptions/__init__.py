"""Custom exceptions for the portfolio tracker."""
from .base import PortfolioTrackerError
from .config import ConfigurationError
from .storage import StorageError
from .quote import (
    QuoteError,
    TickerRequiredError,
    QuoteNotFoundError,
    QuoteConnectionError,
    QuoteServerError,
    QuoteFetchError,
    UpstreamError
)

__all__ = [
    'PortfolioTrackerError',
    'ConfigurationError',
    'StorageError',
    'QuoteError',
    'TickerRequiredError',
    'QuoteNotFoundError',
    'QuoteConnectionError',
    'QuoteServerError',
    'QuoteFetchError',
    'UpstreamError'
]
