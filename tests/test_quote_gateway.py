import json
from unittest.mock import MagicMock

import pytest
from curl_cffi.requests.exceptions import RequestException

from portfolio_tracker.infrastructure.quotes import ChartResponse, YahooChartClient
from portfolio_tracker.presentation.web import QuoteGatewayApp, create_app
from portfolio_tracker.shared.config import Settings
from portfolio_tracker.shared.exceptions import UpstreamError

UPSTREAM_BODY = (
    b'{"chart":{"result":[{"meta":{"currency":"USD","symbol":"AAPL",'
    b'"regularMarketPrice":180.0,"longName":"Apple Inc."}}],"error":null}}'
)


@pytest.fixture
def chart_client():
    return MagicMock(spec=YahooChartClient)


@pytest.fixture
def client(chart_client):
    app = create_app(Settings.default(), chart_client=chart_client)
    app.config['TESTING'] = True
    return app.test_client()


def test_stock_returns_upstream_body_verbatim(client, chart_client):
    chart_client.fetch_chart.return_value = ChartResponse(200, UPSTREAM_BODY)

    resp = client.get('/api/stock?ticker=AAPL')

    assert resp.status_code == 200
    assert resp.data == UPSTREAM_BODY
    assert resp.get_json() == json.loads(UPSTREAM_BODY)
    assert resp.mimetype == 'application/json'
    chart_client.fetch_chart.assert_called_once_with('AAPL')


def test_stock_passes_upstream_status_through(client, chart_client):
    body = b'{"chart":{"result":null,"error":{"code":"Not Found"}}}'
    chart_client.fetch_chart.return_value = ChartResponse(404, body)

    resp = client.get('/api/stock?ticker=NOPE')

    assert resp.status_code == 404
    assert resp.data == body


def test_stock_upstream_failure_returns_500(client, chart_client):
    chart_client.fetch_chart.side_effect = UpstreamError("boom", {'ticker': 'AAPL'})

    resp = client.get('/api/stock?ticker=AAPL')

    assert resp.status_code == 500
    assert resp.get_json() == {'error': 'Failed to fetch stock data'}


@pytest.mark.parametrize('query', ['', '?ticker=', '?ticker=%20%20'])
def test_stock_requires_ticker(client, chart_client, query):
    resp = client.get(f'/api/stock{query}')
    assert resp.status_code == 400
    assert resp.get_json() == {'error': 'Ticker symbol is required'}
    chart_client.fetch_chart.assert_not_called()


def test_only_get_is_allowed(client):
    assert client.post('/api/stock?ticker=AAPL').status_code == 405


def test_cors_header_is_sent(client, chart_client):
    chart_client.fetch_chart.return_value = ChartResponse(200, UPSTREAM_BODY)
    origin = 'http://localhost:4200'
    resp = client.get('/api/stock?ticker=AAPL', headers={'Origin': origin})
    # older flask-cors answers '*', newer releases echo the request origin
    assert resp.headers.get('Access-Control-Allow-Origin') in ('*', origin)


def test_health_and_root_redirect(client):
    assert client.get('/api/health').get_json() == {'status': 'ok'}
    resp = client.get('/')
    assert resp.status_code == 302
    assert resp.headers['Location'].endswith('/api/health')


class TestYahooChartClient:

    def make_client(self, status=200, content=UPSTREAM_BODY, side_effect=None):
        session = MagicMock()
        session.get.return_value = MagicMock(status_code=status, content=content)
        session.get.side_effect = side_effect
        client = YahooChartClient('https://upstream.test/v8/finance/chart/', timeout=5, session=session)
        return client, session

    def test_fetch_chart(self):
        client, session = self.make_client()
        chart = client.fetch_chart('AAPL')
        assert chart.status_code == 200
        assert chart.content == UPSTREAM_BODY
        assert chart.json()['chart']['result'][0]['meta']['symbol'] == 'AAPL'
        session.get.assert_called_once_with('https://upstream.test/v8/finance/chart/AAPL', timeout=5)

    def test_ticker_is_url_quoted(self):
        client, _ = self.make_client()
        assert client.chart_url('^GSPC') == 'https://upstream.test/v8/finance/chart/%5EGSPC'
        assert client.chart_url('BRK-B') == 'https://upstream.test/v8/finance/chart/BRK-B'

    def test_transport_error_raises_upstream_error(self):
        client, _ = self.make_client(side_effect=RequestException('connection reset'))
        with pytest.raises(UpstreamError):
            client.fetch_chart('AAPL')

    def test_non_json_body_raises_upstream_error(self):
        client, _ = self.make_client(status=502, content=b'<html>Bad gateway</html>')
        with pytest.raises(UpstreamError) as excinfo:
            client.fetch_chart('AAPL')
        assert excinfo.value.details['status'] == 502


def test_gateway_without_settings_reads_environment(monkeypatch):
    monkeypatch.setenv('UPSTREAM_CHART_URL', 'https://chart.example.test/v8/')
    monkeypatch.setenv('UPSTREAM_TIMEOUT', '3')
    monkeypatch.delenv('TIMEZONE', raising=False)

    gateway = QuoteGatewayApp()

    assert gateway.chart_client.base_url == 'https://chart.example.test/v8'
    assert gateway.chart_client.timeout == 3
