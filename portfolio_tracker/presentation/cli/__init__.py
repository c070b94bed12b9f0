"""Command-line views."""
from .portfolio_cli import PortfolioCli, build_parser, dispatch

__all__ = ['PortfolioCli', 'build_parser', 'dispatch']
