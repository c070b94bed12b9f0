"""Application service for quote lookups through the quote gateway."""
from typing import Any, Dict, Optional

from curl_cffi.requests import AsyncSession
from curl_cffi.requests.exceptions import (
    ConnectionError as CurlConnectionError,
    RequestException,
    Timeout,
)

from ...domain.entities.quote import StockMetrics
from ...shared.config import QuoteApiSettings
from ...shared.exceptions.quote import (
    QuoteConnectionError,
    QuoteFetchError,
    QuoteNotFoundError,
    QuoteServerError,
    TickerRequiredError,
)
from ...shared.logging import get_logger


class QuoteService:
    """Calls the gateway and normalizes its answers.

    Callers only ever see ``StockMetrics`` or a ``QuoteError`` subclass; the
    provider's nested response shape and transport errors stay in here.
    """

    def __init__(
        self,
        settings: Optional[QuoteApiSettings] = None,
        session: Optional[AsyncSession] = None
    ):
        self.settings = settings or QuoteApiSettings()
        self._session = session
        self.logger = get_logger(__name__)

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            self._session = AsyncSession()
        return self._session

    async def close(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def search_stock(self, ticker: str) -> Dict[str, Any]:
        """Fetch the raw chart document for ``ticker``.

        Raises:
            TickerRequiredError: blank ticker, before any network call.
            QuoteNotFoundError: gateway answered 404.
            QuoteConnectionError: gateway unreachable or timed out.
            QuoteServerError: gateway answered 5xx.
            QuoteFetchError: anything else.
        """
        if not ticker or not ticker.strip():
            raise TickerRequiredError()

        symbol = ticker.strip().upper()
        try:
            response = await self.session.get(
                self.settings.stock_url,
                params={'ticker': symbol},
                timeout=self.settings.timeout
            )
        except (CurlConnectionError, Timeout) as e:
            self.logger.error(f"Stock API Error for {symbol}: {e}")
            raise QuoteConnectionError(details={'ticker': symbol}) from e
        except RequestException as e:
            self.logger.error(f"Stock API Error for {symbol}: {e}")
            raise QuoteFetchError(details={'ticker': symbol}) from e

        status = response.status_code
        if status == 404:
            self.logger.warning(f"Stock API Error for {symbol}: HTTP 404")
            raise QuoteNotFoundError(details={'ticker': symbol, 'status': status})
        if status >= 500:
            self.logger.error(f"Stock API Error for {symbol}: HTTP {status}")
            raise QuoteServerError(details={'ticker': symbol, 'status': status})
        if not 200 <= status < 300:
            self.logger.error(f"Stock API Error for {symbol}: HTTP {status}")
            raise QuoteFetchError(details={'ticker': symbol, 'status': status})

        try:
            return response.json()
        except ValueError as e:
            self.logger.error(f"Stock API Error for {symbol}: undecodable body")
            raise QuoteFetchError(details={'ticker': symbol}) from e

    def extract_stock_metrics(self, stock_data: Dict[str, Any]) -> StockMetrics:
        """Pull the normalized metrics out of ``chart.result[0].meta``.

        Raises:
            QuoteNotFoundError: the document has no result entry.
            QuoteFetchError: the entry is malformed.
        """
        chart = (stock_data or {}).get('chart') or {}
        results = chart.get('result') or []
        if not results:
            raise QuoteNotFoundError(details={'error': chart.get('error')})

        try:
            return StockMetrics.from_chart_meta(results[0]['meta'])
        except (KeyError, TypeError, ValueError) as e:
            raise QuoteFetchError(details={'reason': f"malformed chart result: {e}"}) from e

    async def get_stock_metrics(self, ticker: str) -> StockMetrics:
        """Search and normalize in one call."""
        return self.extract_stock_metrics(await self.search_stock(ticker))
