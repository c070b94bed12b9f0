"""
Quote Gateway - Flask proxy for the upstream chart API.

The browser-side client cannot call the quote provider directly because of
cross-origin restrictions, so this thin service forwards a ticker upstream
and hands back the provider's JSON body untouched:

    GET /api/stock?ticker=AAPL  ->  {upstream_base_url}/AAPL
"""
from typing import Optional

from flask import Flask, Response, jsonify, redirect, request
from flask_cors import CORS

from ...infrastructure.quotes import YahooChartClient
from ...shared.config import Settings
from ...shared.exceptions import UpstreamError
from ...shared.logging import get_logger, get_contextual_logger

FETCH_FAILED_MESSAGE = "Failed to fetch stock data"


class QuoteGatewayApp:
    """Stateless HTTP proxy in front of the quote provider."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        chart_client: Optional[YahooChartClient] = None
    ):
        if settings is None:
            settings = Settings.from_env()
            settings.validate()
        self.settings = settings
        self.logger = get_logger(__name__)

        gateway = self.settings.gateway
        self.chart_client = chart_client or YahooChartClient(
            base_url=gateway.upstream_base_url,
            timeout=gateway.timeout,
            impersonate=gateway.impersonate
        )

        # Flask app
        self.app = Flask(__name__)
        CORS(self.app)
        self._setup_routes()

    def _setup_routes(self):
        """Setup Flask routes."""

        @self.app.route('/')
        def index():
            return redirect('/api/health')

        @self.app.route('/api/health')
        def api_health():
            return jsonify({'status': 'ok'})

        @self.app.route('/api/stock', methods=['GET'])
        def api_stock():
            """Proxy a ticker lookup to the upstream chart endpoint."""
            ticker = (request.args.get('ticker') or '').strip()
            if not ticker:
                return jsonify({'error': 'Ticker symbol is required'}), 400

            log = get_contextual_logger(__name__, ticker=ticker)
            try:
                chart = self.chart_client.fetch_chart(ticker)
            except UpstreamError as e:
                log.error(f"Error fetching stock data: {e}")
                return jsonify({'error': FETCH_FAILED_MESSAGE}), 500

            log.debug(f"Upstream answered HTTP {chart.status_code}")
            return Response(chart.content, status=chart.status_code, mimetype='application/json')

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """Run the development server."""
        host = host or self.settings.gateway.host
        port = port or self.settings.gateway.port
        self.logger.info(f"Quote gateway running on http://{host}:{port}")
        self.app.run(host=host, port=port, debug=self.settings.debug, use_reloader=False)


def create_app(
    settings: Optional[Settings] = None,
    chart_client: Optional[YahooChartClient] = None
) -> Flask:
    """Application factory for WSGI servers and tests."""
    return QuoteGatewayApp(settings=settings, chart_client=chart_client).app
