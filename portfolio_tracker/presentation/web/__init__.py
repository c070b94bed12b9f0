"""HTTP surface: the quote gateway."""
from .quote_gateway_app import QuoteGatewayApp, create_app

__all__ = ['QuoteGatewayApp', 'create_app']
