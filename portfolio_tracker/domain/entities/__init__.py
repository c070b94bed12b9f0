"""Domain entities for the portfolio tracker."""
from .quote import StockMetrics
from .position import Position, PortfolioStats, CASH_SYMBOL

__all__ = [
    'StockMetrics',
    'Position',
    'PortfolioStats',
    'CASH_SYMBOL'
]
