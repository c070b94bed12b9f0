"""Repository interfaces for the portfolio tracker."""
from .key_value_storage import IKeyValueStorage

__all__ = ['IKeyValueStorage']
