"""Derived per-position and whole-portfolio figures.

All functions are pure: they read positions and never mutate them.
"""
import math
from typing import Any, Callable, Dict, Iterable, List, Optional

from ..entities.position import Position, PortfolioStats


def calculate_equity(position: Position) -> float:
    """Market value of a position; for cash, the cash amount itself."""
    if not position.shares:
        return 0.0
    if position.is_cash:
        return position.shares
    return position.shares * position.current_price


def calculate_percent_change(position: Position) -> float:
    """Gain/loss of the current price against the average cost, in percent."""
    if position.is_cash:
        return 0.0
    if not position.avg_cost:
        return 0.0
    return (position.current_price - position.avg_cost) / position.avg_cost * 100


def calculate_day_change(position: Position) -> float:
    """Current price relative to the day's low, in percent."""
    if not position.day_low:
        return 0.0
    change = (position.current_price - position.day_low) / position.day_low * 100
    return 0.0 if math.isnan(change) else change


def calculate_portfolio_stats(positions: Iterable[Position]) -> PortfolioStats:
    """Aggregate a snapshot. Cash counts towards value and cost, never gain/loss."""
    portfolio = list(positions)
    stock_positions = [p for p in portfolio if not p.is_cash]
    cash_position = next((p for p in portfolio if p.is_cash), None)

    stock_value = sum((p.shares or 0) * p.current_price for p in stock_positions)
    stock_cost = sum((p.shares or 0) * (p.avg_cost or 0) for p in stock_positions)
    cash_value = (cash_position.shares or 0) if cash_position else 0

    total_gain_loss = stock_value - stock_cost
    total_gain_loss_percent = (total_gain_loss / stock_cost) * 100 if stock_cost > 0 else 0

    return PortfolioStats(
        total_stocks=len(stock_positions),
        total_positions=len(portfolio),
        stock_value=stock_value,
        stock_cost=stock_cost,
        cash_value=cash_value,
        total_value=stock_value + cash_value,
        total_cost=stock_cost + cash_value,
        total_gain_loss=total_gain_loss,
        total_gain_loss_percent=total_gain_loss_percent
    )


SORT_KEYS: Dict[str, Callable[[Position], Any]] = {
    'equity': calculate_equity,
    'percent_change': calculate_percent_change,
    'day_change': calculate_day_change,
    'symbol': lambda p: p.symbol,
    'name': lambda p: p.name,
    'current_price': lambda p: p.current_price,
    'quantity': lambda p: p.shares or 0,
    'avg_cost': lambda p: p.avg_cost or 0,
}


def sort_positions(
    positions: Iterable[Position],
    sort_by: Optional[str] = 'equity',
    descending: bool = True
) -> List[Position]:
    """Sort for display. The cash position always comes first.

    ``sort_by=None`` keeps the stored order (cash still first).
    """
    portfolio = list(positions)
    cash = [p for p in portfolio if p.is_cash]
    stocks = [p for p in portfolio if not p.is_cash]

    if sort_by is None:
        return cash + stocks
    if sort_by not in SORT_KEYS:
        raise ValueError(f"Unknown sort key: {sort_by}")

    return cash + sorted(stocks, key=SORT_KEYS[sort_by], reverse=descending)
