"""Client for the upstream Yahoo Finance chart endpoint."""
import json
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import quote

import curl_cffi.requests as requests
from curl_cffi.requests.exceptions import RequestException

from ...shared.exceptions.quote import UpstreamError
from ...shared.logging import get_logger


@dataclass
class ChartResponse:
    """Raw upstream answer: status code plus the undecoded JSON body."""
    status_code: int
    content: bytes

    def json(self) -> Any:
        return json.loads(self.content)


class YahooChartClient:
    """Fetches ``{base_url}/{ticker}`` using a browser-impersonating session."""

    def __init__(
        self,
        base_url: str,
        timeout: int = 10,
        impersonate: str = 'chrome',
        session: Optional[requests.Session] = None
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session(impersonate=impersonate)
        self.logger = get_logger(__name__)

    def chart_url(self, ticker: str) -> str:
        return f"{self.base_url}/{quote(ticker, safe='')}"

    def fetch_chart(self, ticker: str) -> ChartResponse:
        """Fetch the chart document for ``ticker``.

        Raises:
            UpstreamError: transport failure or a body that is not JSON.
        """
        url = self.chart_url(ticker)
        try:
            response = self.session.get(url, timeout=self.timeout)
        except RequestException as e:
            raise UpstreamError(f"Upstream request failed: {e}", {'ticker': ticker}) from e

        content = response.content
        try:
            json.loads(content)
        except ValueError as e:
            raise UpstreamError(
                "Upstream returned a non-JSON body",
                {'ticker': ticker, 'status': response.status_code}
            ) from e

        self.logger.debug(f"Fetched chart for {ticker}: HTTP {response.status_code}")
        return ChartResponse(status_code=response.status_code, content=content)

    def close(self) -> None:
        self.session.close()
