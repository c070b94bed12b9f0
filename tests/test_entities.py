from datetime import datetime, timezone

import pytest
import pytz

from portfolio_tracker.domain.entities import Position, StockMetrics

META = {
    "currency": "USD",
    "symbol": "AAPL",
    "exchangeName": "NMS",
    "fullExchangeName": "NasdaqGS",
    "regularMarketPrice": 180.5,
    "fiftyTwoWeekHigh": 199.62,
    "fiftyTwoWeekLow": 164.08,
    "regularMarketDayHigh": 182.0,
    "regularMarketDayLow": 178.25,
    "regularMarketVolume": 51234000,
    "longName": "Apple Inc.",
    "shortName": "Apple Inc."
}


def test_metrics_from_chart_meta():
    metrics = StockMetrics.from_chart_meta(META)
    assert metrics == StockMetrics(
        symbol='AAPL', name='Apple Inc.', current_price=180.5, currency='USD',
        day_high=182.0, day_low=178.25, fifty_two_week_high=199.62,
        fifty_two_week_low=164.08, volume=51234000, exchange='NMS'
    )


def test_metrics_name_falls_back_to_short_name():
    meta = dict(META, longName=None, shortName='APPLE')
    assert StockMetrics.from_chart_meta(meta).name == 'APPLE'


def test_symbol_is_normalized():
    assert Position(symbol=' msft ').symbol == 'MSFT'
    with pytest.raises(ValueError):
        Position(symbol='  ')


def test_cash_position_defaults():
    added = datetime(2024, 5, 1, tzinfo=pytz.utc)
    cash = Position.cash(added)
    assert cash.is_cash
    assert cash.symbol == 'CASH'
    assert cash.current_price == 1.0
    assert cash.avg_cost == 1.0
    assert cash.shares == 0


def test_position_dict_uses_storage_keys():
    added = datetime(2024, 5, 1, 12, 30, tzinfo=pytz.utc)
    position = Position.from_metrics(StockMetrics.from_chart_meta(META), added, shares=3, avg_cost=150)
    data = position.to_dict()
    assert data['currentPrice'] == 180.5
    assert data['fiftyTwoWeekLow'] == 164.08
    assert data['addedDate'] == '2024-05-01T12:30:00+00:00'
    assert data['isCash'] is False
    assert Position.from_dict(data) == position


def test_from_dict_accepts_javascript_dates_and_missing_keys():
    position = Position.from_dict({'symbol': 'tsla', 'addedDate': '2024-03-04T05:06:07.000Z'})
    assert position.symbol == 'TSLA'
    assert position.added_date == datetime(2024, 3, 4, 5, 6, 7, tzinfo=timezone.utc)
    assert position.shares is None
    assert position.avg_cost is None
    assert position.current_price == 0.0
    assert position.is_cash is False


def test_with_market_data_keeps_holdings():
    added = datetime(2024, 5, 1, tzinfo=pytz.utc)
    position = Position.from_metrics(StockMetrics.from_chart_meta(META), added, shares=3, avg_cost=150)
    refreshed = position.with_market_data(StockMetrics.from_chart_meta(dict(META, regularMarketPrice=190.0)))
    assert refreshed.current_price == 190.0
    assert refreshed.shares == 3
    assert refreshed.avg_cost == 150
    assert refreshed.added_date == added
    assert position.current_price == 180.5


def test_from_dict_coerces_numeric_strings():
    position = Position.from_dict({'symbol': 'AAPL', 'currentPrice': '180', 'volume': '12', 'shares': '2'})
    assert position.current_price == 180.0
    assert position.volume == 12
    assert position.shares == 2.0


@pytest.mark.parametrize('record', [
    {'symbol': 123},
    {'symbol': None},
    {'symbol': 'AAPL', 'currentPrice': 'n/a'},
    {'symbol': 'AAPL', 'shares': [1]},
    {'symbol': 'AAPL', 'volume': True},
])
def test_from_dict_rejects_wrong_field_types(record):
    with pytest.raises((TypeError, ValueError)):
        Position.from_dict(record)


def test_from_dict_reserved_symbol_is_cash():
    position = Position.from_dict({'symbol': 'cash', 'shares': 5, 'currentPrice': 3})
    assert position.is_cash
    assert position.symbol == 'CASH'
    assert position.current_price == 1.0
    assert position.avg_cost == 1.0
    assert position.shares == 5
