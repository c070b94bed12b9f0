"""Presentation layer: HTTP gateway and command-line views."""
