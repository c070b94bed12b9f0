"""Personal stock portfolio tracker with a quote gateway."""

__version__ = '0.1.0'
