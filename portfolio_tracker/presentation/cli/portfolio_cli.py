"""Command-line search and portfolio views."""
import argparse
import asyncio
from typing import Awaitable, Callable, List, Optional, TypeVar

from ...application.services import PortfolioStore, QuoteService, RefreshResult
from ...domain.entities import Position, StockMetrics
from ...domain.services import (
    SORT_KEYS,
    calculate_day_change,
    calculate_equity,
    calculate_percent_change,
)
from ...shared.exceptions import QuoteError
from ...shared.logging import LoggerMixin

T = TypeVar('T')


class PortfolioCli(LoggerMixin):
    """Renders search results and the portfolio as plain text."""

    def __init__(self, store: PortfolioStore, quote_service: QuoteService):
        self.store = store
        self.quote_service = quote_service

    def _run(self, factory: Callable[[], Awaitable[T]]) -> T:
        """Run a coroutine on a fresh loop, closing the HTTP session after."""
        async def runner():
            try:
                return await factory()
            finally:
                await self.quote_service.close()
        return asyncio.run(runner())

    # Search view

    def search(self, ticker: str) -> int:
        try:
            metrics = self._run(lambda: self.quote_service.get_stock_metrics(ticker))
        except QuoteError as e:
            self.logger.info(f"Lookup for {ticker!r} failed: {e}")
            print(f"Error: {e.user_message}")
            return 1

        print(self.format_metrics(metrics))
        if self.store.is_in_portfolio(metrics.symbol):
            print(f"{metrics.symbol} is in your portfolio")
        return 0

    def add(self, ticker: str, shares: float = 0, avg_cost: float = 0) -> int:
        try:
            metrics = self._run(lambda: self.quote_service.get_stock_metrics(ticker))
        except QuoteError as e:
            print(f"Error: {e.user_message}")
            return 1

        if not self.store.add_to_portfolio(metrics, shares=shares, avg_cost=avg_cost):
            print(f"{metrics.symbol} is already in your portfolio!")
            return 1
        print(f"{metrics.symbol} added to portfolio!")
        return 0

    # Portfolio view

    def remove(self, symbol: str) -> int:
        if symbol.strip().upper() == 'CASH':
            print("Cash position cannot be removed!")
            return 1
        if not self.store.remove_from_portfolio(symbol):
            print(f"{symbol.upper()} is not in your portfolio")
            return 1
        print(f"{symbol.upper()} removed from portfolio!")
        return 0

    def update(self, symbol: str, shares: float, avg_cost: float) -> int:
        if not self.store.update_stock_position(symbol, shares, avg_cost):
            print(f"{symbol.upper()} is not a stock in your portfolio")
            return 1
        print(f"{symbol.upper()} updated successfully!")
        return 0

    def cash(self, action: str, amount: float) -> int:
        if action == 'set':
            ok = self.store.update_cash_position(amount)
        elif action == 'deposit':
            ok = self.store.add_cash(amount)
        else:
            ok = self.store.remove_cash(amount)

        if not ok:
            print(f"Cannot {action} {amount:.2f}: balance is {self.store.get_cash_balance():.2f}")
            return 1
        print(f"Cash position updated successfully! Balance: {self.store.get_cash_balance():.2f}")
        return 0

    def clear(self) -> int:
        self.store.clear_portfolio()
        print("Portfolio cleared!")
        return 0

    def refresh(self) -> int:
        result = self._run(self.store.refresh_live_values)
        print(self.format_refresh(result))
        return 0 if result.ok else 1

    def show(self, sort_by: str = 'equity', ascending: bool = False, refresh: bool = False) -> int:
        if refresh and self.store.get_portfolio_stats().total_stocks:
            print("Updating stock prices...")
            print(self.format_refresh(self._run(self.store.refresh_live_values)))

        print(self.format_table(self.store.get_sorted_portfolio(sort_by, descending=not ascending)))
        print()
        print(self.format_stats())
        return 0

    # Formatting

    @staticmethod
    def format_metrics(metrics: StockMetrics) -> str:
        return "\n".join([
            f"{metrics.symbol} - {metrics.name} ({metrics.exchange})",
            f"  Price:      {metrics.current_price:,.2f} {metrics.currency}",
            f"  Day range:  {metrics.day_low:,.2f} - {metrics.day_high:,.2f}",
            f"  52w range:  {metrics.fifty_two_week_low:,.2f} - {metrics.fifty_two_week_high:,.2f}",
            f"  Volume:     {metrics.volume:,}",
        ])

    @staticmethod
    def format_table(positions: List[Position]) -> str:
        header = f"{'Symbol':<8} {'Name':<24} {'Price':>10} {'Qty':>10} {'Avg Cost':>10} {'Equity':>12} {'Chg %':>8} {'Day %':>8}"
        lines = [header, '-' * len(header)]
        for p in positions:
            lines.append(
                f"{p.symbol:<8} {p.name[:24]:<24} {p.current_price:>10.2f} {(p.shares or 0):>10.2f} "
                f"{(p.avg_cost or 0):>10.2f} {calculate_equity(p):>12.2f} "
                f"{calculate_percent_change(p):>7.2f}% {calculate_day_change(p):>7.2f}%"
            )
        return "\n".join(lines)

    def format_stats(self) -> str:
        stats = self.store.get_portfolio_stats()
        return "\n".join([
            f"Positions:   {stats.total_stocks} stocks + cash",
            f"Stock value: {stats.stock_value:,.2f}",
            f"Cash:        {stats.cash_value:,.2f}",
            f"Total value: {stats.total_value:,.2f}",
            f"Total cost:  {stats.total_cost:,.2f}",
            f"Gain/loss:   {stats.total_gain_loss:,.2f} ({stats.total_gain_loss_percent:.2f}%)",
        ])

    @staticmethod
    def format_refresh(result: RefreshResult) -> str:
        lines = [f"Updated {len(result.updated)} of {len(result.symbols)} positions"]
        for symbol, message in sorted(result.failed.items()):
            lines.append(f"  {symbol}: {message}")
        return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='portfolio-tracker', description='Stock portfolio tracker')
    sub = parser.add_subparsers(dest='command', required=True)

    serve = sub.add_parser('serve', help='Run the quote gateway')
    serve.add_argument('--host')
    serve.add_argument('--port', type=int)

    search = sub.add_parser('search', help='Look up a ticker')
    search.add_argument('ticker')

    add = sub.add_parser('add', help='Add a ticker to the portfolio')
    add.add_argument('ticker')
    add.add_argument('--shares', type=float, default=0)
    add.add_argument('--avg-cost', type=float, default=0)

    remove = sub.add_parser('remove', help='Remove a position')
    remove.add_argument('symbol')

    update = sub.add_parser('update', help='Set shares and average cost of a position')
    update.add_argument('symbol')
    update.add_argument('shares', type=float)
    update.add_argument('avg_cost', type=float)

    cash = sub.add_parser('cash', help='Manage the cash position')
    cash.add_argument('action', choices=['set', 'deposit', 'withdraw'])
    cash.add_argument('amount', type=float)

    sub.add_parser('clear', help='Remove every stock position (cash is kept)')
    sub.add_parser('refresh', help='Refresh live prices')

    show = sub.add_parser('show', help='Show the portfolio')
    show.add_argument('--sort', choices=sorted(SORT_KEYS), default='equity')
    show.add_argument('--asc', action='store_true', help='Sort ascending')
    show.add_argument('--refresh', action='store_true', help='Refresh live prices first')

    return parser


def dispatch(cli: PortfolioCli, args: argparse.Namespace) -> Optional[int]:
    """Run the view command named by ``args``; ``serve`` is handled by the caller."""
    if args.command == 'search':
        return cli.search(args.ticker)
    if args.command == 'add':
        return cli.add(args.ticker, args.shares, args.avg_cost)
    if args.command == 'remove':
        return cli.remove(args.symbol)
    if args.command == 'update':
        return cli.update(args.symbol, args.shares, args.avg_cost)
    if args.command == 'cash':
        return cli.cash(args.action, args.amount)
    if args.command == 'clear':
        return cli.clear()
    if args.command == 'refresh':
        return cli.refresh()
    if args.command == 'show':
        return cli.show(args.sort, args.asc, args.refresh)
    return None
