"""Application services for the portfolio tracker."""
from .quote_service import QuoteService
from .snapshot_stream import SnapshotStream
from .portfolio_store import PortfolioStore, RefreshResult, PortfolioSnapshot

__all__ = [
    'QuoteService',
    'SnapshotStream',
    'PortfolioStore',
    'RefreshResult',
    'PortfolioSnapshot'
]
