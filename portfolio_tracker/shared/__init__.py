"""Cross-cutting utilities: configuration, logging and exceptions."""
