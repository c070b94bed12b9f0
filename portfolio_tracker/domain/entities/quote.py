"""Quote-related domain entities."""
from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class StockMetrics:
    """Normalized quote record extracted from a provider response."""
    symbol: str
    name: str
    current_price: float
    currency: str
    day_high: float
    day_low: float
    fifty_two_week_high: float
    fifty_two_week_low: float
    volume: int
    exchange: str

    def __post_init__(self):
        """Validate metrics after initialization."""
        if not self.symbol or not self.symbol.strip():
            raise ValueError("Stock symbol cannot be empty")
        self.symbol = self.symbol.upper().strip()

    @classmethod
    def from_chart_meta(cls, meta: Dict[str, Any]) -> 'StockMetrics':
        """Build metrics from the ``meta`` block of a chart result."""
        return cls(
            symbol=meta['symbol'],
            name=meta.get('longName') or meta.get('shortName') or '',
            current_price=meta.get('regularMarketPrice') or 0.0,
            currency=meta.get('currency') or '',
            day_high=meta.get('regularMarketDayHigh') or 0.0,
            day_low=meta.get('regularMarketDayLow') or 0.0,
            fifty_two_week_high=meta.get('fiftyTwoWeekHigh') or 0.0,
            fifty_two_week_low=meta.get('fiftyTwoWeekLow') or 0.0,
            volume=meta.get('regularMarketVolume') or 0,
            exchange=meta.get('exchangeName') or ''
        )
