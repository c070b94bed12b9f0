"""Domain services for the portfolio tracker."""
from .portfolio_aggregator import (
    calculate_equity,
    calculate_percent_change,
    calculate_day_change,
    calculate_portfolio_stats,
    sort_positions,
    SORT_KEYS
)

__all__ = [
    'calculate_equity',
    'calculate_percent_change',
    'calculate_day_change',
    'calculate_portfolio_stats',
    'sort_positions',
    'SORT_KEYS'
]
