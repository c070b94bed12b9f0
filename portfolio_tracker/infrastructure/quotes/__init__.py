"""Upstream quote provider clients."""
from .yahoo_chart_client import YahooChartClient, ChartResponse

__all__ = ['YahooChartClient', 'ChartResponse']
