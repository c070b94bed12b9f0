"""Portfolio position entities."""
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Dict, Optional

from .quote import StockMetrics

CASH_SYMBOL = 'CASH'


def _parse_date(value: Any) -> Optional[datetime]:
    """Parse a stored ISO-8601 date, accepting the ``Z`` UTC suffix."""
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    return datetime.fromisoformat(text)


def _number(value: Any, default: Optional[float] = 0.0) -> Optional[float]:
    """Coerce a stored numeric field; ``None`` or ``''`` gives ``default``."""
    if value is None or value == '':
        return default
    if isinstance(value, bool):
        raise ValueError(f"expected a number, got {value!r}")
    return float(value)


@dataclass
class Position:
    """A held instrument, or the synthetic cash slot."""
    symbol: str
    name: str = ''
    current_price: float = 0.0
    currency: str = ''
    day_high: float = 0.0
    day_low: float = 0.0
    fifty_two_week_high: float = 0.0
    fifty_two_week_low: float = 0.0
    volume: int = 0
    exchange: str = ''
    added_date: Optional[datetime] = None
    shares: Optional[float] = None
    avg_cost: Optional[float] = None
    is_cash: bool = False

    def __post_init__(self):
        """Normalize the symbol after initialization."""
        if not isinstance(self.symbol, str) or not self.symbol.strip():
            raise ValueError("Position symbol cannot be empty")
        self.symbol = self.symbol.upper().strip()

    @classmethod
    def from_metrics(
        cls,
        metrics: StockMetrics,
        added_date: datetime,
        shares: float = 0,
        avg_cost: float = 0
    ) -> 'Position':
        """Create a stock position from a quote."""
        return cls(
            symbol=metrics.symbol,
            name=metrics.name,
            current_price=metrics.current_price,
            currency=metrics.currency,
            day_high=metrics.day_high,
            day_low=metrics.day_low,
            fifty_two_week_high=metrics.fifty_two_week_high,
            fifty_two_week_low=metrics.fifty_two_week_low,
            volume=metrics.volume,
            exchange=metrics.exchange,
            added_date=added_date,
            shares=shares,
            avg_cost=avg_cost
        )

    @classmethod
    def cash(cls, added_date: datetime, amount: float = 0) -> 'Position':
        """Create the synthetic cash position."""
        return cls(
            symbol=CASH_SYMBOL,
            name='Cash Position',
            current_price=1.0,
            currency='USD',
            day_high=1.0,
            day_low=1.0,
            fifty_two_week_high=1.0,
            fifty_two_week_low=1.0,
            volume=0,
            exchange='N/A',
            added_date=added_date,
            shares=amount,
            avg_cost=1.0,
            is_cash=True
        )

    def with_market_data(self, metrics: StockMetrics) -> 'Position':
        """Return a copy carrying the market snapshot of ``metrics``.

        Descriptive fields, holdings and ``added_date`` are kept.
        """
        return replace(
            self,
            current_price=metrics.current_price,
            day_high=metrics.day_high,
            day_low=metrics.day_low,
            fifty_two_week_high=metrics.fifty_two_week_high,
            fifty_two_week_low=metrics.fifty_two_week_low,
            volume=metrics.volume
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the JSON shape used in local storage."""
        return {
            'symbol': self.symbol,
            'name': self.name,
            'currentPrice': self.current_price,
            'currency': self.currency,
            'dayHigh': self.day_high,
            'dayLow': self.day_low,
            'fiftyTwoWeekHigh': self.fifty_two_week_high,
            'fiftyTwoWeekLow': self.fifty_two_week_low,
            'volume': self.volume,
            'exchange': self.exchange,
            'addedDate': self.added_date.isoformat() if self.added_date else None,
            'shares': self.shares,
            'avgCost': self.avg_cost,
            'isCash': self.is_cash
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Position':
        """Rebuild a position from storage; absent keys take defaults.

        Raises ValueError or TypeError when a field has the wrong type. A
        record under the reserved ``CASH`` symbol is always the cash slot.
        """
        symbol = data['symbol']
        if not isinstance(symbol, str):
            raise ValueError(f"symbol must be a string, got {symbol!r}")
        is_cash = data.get('isCash') is True or symbol.strip().upper() == CASH_SYMBOL
        position = cls(
            symbol=CASH_SYMBOL if is_cash else symbol,
            name=str(data.get('name') or ''),
            current_price=_number(data.get('currentPrice')),
            currency=str(data.get('currency') or ''),
            day_high=_number(data.get('dayHigh')),
            day_low=_number(data.get('dayLow')),
            fifty_two_week_high=_number(data.get('fiftyTwoWeekHigh')),
            fifty_two_week_low=_number(data.get('fiftyTwoWeekLow')),
            volume=int(_number(data.get('volume'))),
            exchange=str(data.get('exchange') or ''),
            added_date=_parse_date(data.get('addedDate')),
            shares=_number(data.get('shares'), None),
            avg_cost=_number(data.get('avgCost'), None),
            is_cash=is_cash
        )
        if is_cash:
            position.current_price = position.avg_cost = 1.0
        return position


@dataclass
class PortfolioStats:
    """Whole-portfolio aggregate figures."""
    total_stocks: int
    total_positions: int
    stock_value: float
    stock_cost: float
    cash_value: float
    total_value: float
    total_cost: float
    total_gain_loss: float
    total_gain_loss_percent: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'totalStocks': self.total_stocks,
            'totalPositions': self.total_positions,
            'stockValue': self.stock_value,
            'stockCost': self.stock_cost,
            'cashValue': self.cash_value,
            'totalValue': self.total_value,
            'totalCost': self.total_cost,
            'totalGainLoss': self.total_gain_loss,
            'totalGainLossPercent': self.total_gain_loss_percent
        }
