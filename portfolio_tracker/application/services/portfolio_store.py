"""Application service holding the authoritative portfolio state."""
import asyncio
import json
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Callable, Dict, List, Optional, Set, Tuple

import pytz

from ...domain.entities.position import CASH_SYMBOL, Position, PortfolioStats
from ...domain.entities.quote import StockMetrics
from ...domain.repositories.key_value_storage import IKeyValueStorage
from ...domain.services.portfolio_aggregator import calculate_portfolio_stats, sort_positions
from ...shared.config import Settings
from ...shared.exceptions import QuoteError, StorageError
from ...shared.logging import get_logger, timed_operation
from .quote_service import QuoteService
from .snapshot_stream import SnapshotStream, Unsubscribe

PortfolioSnapshot = Tuple[Position, ...]

DEFAULT_STORAGE_KEY = 'portfolio-stocks'


@dataclass
class RefreshResult:
    """Per-symbol outcome of a live price refresh."""
    updated: Dict[str, float] = field(default_factory=dict)
    failed: Dict[str, str] = field(default_factory=dict)
    skipped: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def symbols(self) -> List[str]:
        return list(self.updated) + list(self.failed) + self.skipped


class PortfolioStore:
    """Positions plus the single synthetic cash slot.

    Every mutation builds a new snapshot, publishes it to subscribers and
    writes it to local storage. Storage is best effort: failures are logged
    and the in-memory snapshot stays authoritative.

    Domain-rule rejections (duplicate symbol, unknown symbol, insufficient
    cash) return ``False`` instead of raising.
    """

    def __init__(
        self,
        storage: IKeyValueStorage,
        quote_service: Optional[QuoteService] = None,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.storage = storage
        self.quote_service = quote_service
        self.logger = get_logger(__name__)

        if settings is not None:
            self.storage_key = settings.storage.storage_key
            self._tz = settings.tz
        else:
            self.storage_key = DEFAULT_STORAGE_KEY
            self._tz = pytz.utc
        self._clock = clock or self._now

        self._stream: SnapshotStream[PortfolioSnapshot] = SnapshotStream(())
        self._refresh_tasks: Set[asyncio.Task] = set()

        self._load_portfolio_from_storage()
        self._ensure_cash_position()

    # Reads

    def get_portfolio(self) -> SnapshotStream[PortfolioSnapshot]:
        """Snapshot stream; subscribers get the current snapshot right away."""
        return self._stream

    def subscribe(self, callback: Callable[[PortfolioSnapshot], None]) -> Unsubscribe:
        return self._stream.subscribe(callback)

    def get_current_portfolio(self) -> List[Position]:
        return list(self._stream.value)

    def is_in_portfolio(self, symbol: str) -> bool:
        symbol = symbol.strip().upper()
        return any(p.symbol == symbol for p in self._stream.value)

    def get_cash_balance(self) -> float:
        cash = self._find_cash()
        return (cash.shares or 0) if cash else 0

    def get_portfolio_stats(self) -> PortfolioStats:
        return calculate_portfolio_stats(self._stream.value)

    def get_sorted_portfolio(self, sort_by: Optional[str] = 'equity', descending: bool = True) -> List[Position]:
        return sort_positions(self._stream.value, sort_by, descending)

    # Mutations

    def add_to_portfolio(self, metrics: StockMetrics, shares: float = 0, avg_cost: float = 0) -> bool:
        """Append a new position; rejected if the symbol is already held."""
        if self.is_in_portfolio(metrics.symbol):
            self.logger.info(f"{metrics.symbol} is already in the portfolio")
            return False

        position = Position.from_metrics(metrics, self._clock(), shares=shares, avg_cost=avg_cost)
        self._update_portfolio(self.get_current_portfolio() + [position])
        self.logger.info(f"Added {position.symbol} to portfolio")
        return True

    def remove_from_portfolio(self, symbol: str) -> bool:
        """Remove a stock position. The cash position is never removed."""
        symbol = symbol.strip().upper()
        if symbol == CASH_SYMBOL:
            return False

        current = self.get_current_portfolio()
        remaining = [p for p in current if p.is_cash or p.symbol != symbol]
        if len(remaining) == len(current):
            return False

        self._update_portfolio(remaining)
        self.logger.info(f"Removed {symbol} from portfolio")
        return True

    def update_stock_position(self, symbol: str, shares: float, avg_cost: float) -> bool:
        """Replace shares and average cost of a stock position."""
        symbol = symbol.strip().upper()
        portfolio = self.get_current_portfolio()
        index = self._index_of(portfolio, lambda p: p.symbol == symbol)
        if index is None or portfolio[index].is_cash:
            return False

        portfolio[index] = replace(portfolio[index], shares=shares, avg_cost=avg_cost)
        self._update_portfolio(portfolio)
        return True

    def update_cash_position(self, amount: float) -> bool:
        """Set the cash amount, synthesizing the cash slot first if missing."""
        portfolio = self.get_current_portfolio()
        index = self._index_of(portfolio, lambda p: p.is_cash)
        if index is None:
            self._ensure_cash_position()
            return self.update_cash_position(amount)

        portfolio[index] = replace(portfolio[index], shares=amount)
        self._update_portfolio(portfolio)
        return True

    def add_cash(self, amount: float) -> bool:
        if amount < 0:
            return False
        return self.update_cash_position(self.get_cash_balance() + amount)

    def remove_cash(self, amount: float) -> bool:
        """Withdraw cash; rejected when the balance does not cover ``amount``."""
        if amount < 0:
            return False
        balance = self.get_cash_balance()
        if balance < amount:
            self.logger.info(f"Insufficient cash: balance {balance}, requested {amount}")
            return False
        return self.update_cash_position(balance - amount)

    def clear_portfolio(self) -> None:
        """Drop every stock position; cash is kept unchanged."""
        cash = self._find_cash()
        if cash is None:
            self._update_portfolio([])
            self._ensure_cash_position()
        else:
            self._update_portfolio([cash])
        self.logger.info("Portfolio cleared")

    # Live prices

    def get_live_value(self) -> asyncio.Task:
        """Start a refresh in the background and return its task.

        Must be called from inside a running event loop. Awaiting the task
        yields the ``RefreshResult``.
        """
        task = asyncio.get_running_loop().create_task(self.refresh_live_values())
        self._refresh_tasks.add(task)
        task.add_done_callback(self._refresh_tasks.discard)
        return task

    async def refresh_live_values(self) -> RefreshResult:
        """Re-quote every stock position concurrently.

        Each finished lookup is applied and published on its own, in
        completion order; updates to one position never wait for another.
        """
        if self.quote_service is None:
            raise RuntimeError("PortfolioStore has no quote service configured")

        symbols = [p.symbol for p in self._stream.value if not p.is_cash]
        result = RefreshResult()
        if not symbols:
            return result

        with timed_operation(self.logger, f"live price refresh of {len(symbols)} positions"):
            outcomes = await asyncio.gather(
                *(self._refresh_position(symbol) for symbol in symbols),
                return_exceptions=True
            )

        for symbol, outcome in zip(symbols, outcomes):
            if isinstance(outcome, QuoteError):
                result.failed[symbol] = outcome.user_message
            elif isinstance(outcome, BaseException):
                result.failed[symbol] = str(outcome) or type(outcome).__name__
            elif outcome is None:
                result.skipped.append(symbol)
            else:
                result.updated[symbol] = outcome
        return result

    async def _refresh_position(self, symbol: str) -> Optional[float]:
        try:
            metrics = await self.quote_service.get_stock_metrics(symbol)
        except QuoteError as e:
            self.logger.error(f"Error fetching live data for {symbol}: {e}")
            raise

        # Re-read: other refreshes or user edits may have landed meanwhile.
        portfolio = self.get_current_portfolio()
        index = self._index_of(portfolio, lambda p: p.symbol == symbol and not p.is_cash)
        if index is None:
            self.logger.debug(f"{symbol} left the portfolio during refresh")
            return None

        portfolio[index] = portfolio[index].with_market_data(metrics)
        self._update_portfolio(portfolio)
        return metrics.current_price

    # Internals

    def _now(self) -> datetime:
        return datetime.now(self._tz)

    def _find_cash(self) -> Optional[Position]:
        return next((p for p in self._stream.value if p.is_cash), None)

    @staticmethod
    def _index_of(portfolio: List[Position], predicate: Callable[[Position], bool]) -> Optional[int]:
        for i, position in enumerate(portfolio):
            if predicate(position):
                return i
        return None

    def _ensure_cash_position(self) -> None:
        if self._find_cash() is None:
            cash = Position.cash(self._clock())
            self._update_portfolio([cash] + self.get_current_portfolio())

    def _update_portfolio(self, portfolio: List[Position]) -> None:
        snapshot = tuple(portfolio)
        self._stream.publish(snapshot)
        self._save_portfolio_to_storage(snapshot)

    def _load_portfolio_from_storage(self) -> None:
        try:
            stored = self.storage.get_item(self.storage_key)
            if not stored:
                return
            records = json.loads(stored)
            if not isinstance(records, list):
                raise ValueError(f"expected a JSON array, got {type(records).__name__}")
        except (StorageError, ValueError) as e:
            self.logger.error(f"Error loading portfolio from storage: {e}")
            return

        portfolio: List[Position] = []
        seen: Set[str] = set()
        has_cash = False
        for record in records:
            try:
                position = Position.from_dict(record)
            except (KeyError, TypeError, ValueError, OverflowError) as e:
                self.logger.warning(f"Skipping malformed stored position {record!r}: {e}")
                continue
            if position.symbol in seen or (position.is_cash and has_cash):
                self.logger.warning(f"Skipping duplicate stored position {position.symbol}")
                continue
            seen.add(position.symbol)
            has_cash = has_cash or position.is_cash
            portfolio.append(position)

        self._stream.publish(tuple(portfolio))
        self.logger.info(f"Loaded {len(portfolio)} positions from storage")

    def _save_portfolio_to_storage(self, snapshot: PortfolioSnapshot) -> None:
        try:
            payload = json.dumps([p.to_dict() for p in snapshot])
            self.storage.set_item(self.storage_key, payload)
        except (StorageError, TypeError, ValueError) as e:
            self.logger.error(f"Error saving portfolio to storage: {e}")
