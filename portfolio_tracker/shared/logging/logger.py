"""Logging configuration and utilities."""
import logging
import logging.handlers
import os
import sys
import time
from contextlib import contextmanager
from typing import Iterator, Optional

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Chatty third-party loggers, capped at WARNING.
NOISY_LOGGERS = ('werkzeug', 'curl_cffi', 'asyncio')


class LoggerMixin:
    """Mixin class to add logging capabilities to any class."""

    @property
    def logger(self) -> logging.Logger:
        return get_logger(self.__class__.__name__)


def setup_logging(
    level: int = logging.INFO,
    format_string: str = DEFAULT_FORMAT,
    log_file: Optional[str] = None,
    max_file_size: int = 10 * 1024 * 1024,
    backup_count: int = 5
) -> None:
    """
    Configure the root logger for the CLI and the gateway.

    Args:
        level: Logging level
        format_string: Log message format
        log_file: Optional path of a size-rotated log file
        max_file_size: Bytes per log file before rotation
        backup_count: Rotated files to keep
    """
    formatter = logging.Formatter(format_string)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(
            log_file, maxBytes=max_file_size, backupCount=backup_count
        ))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class ContextualLogger(logging.LoggerAdapter):
    """Prefixes every message with ``[key=value | ...]``."""

    def process(self, msg, kwargs):
        if not self.extra:
            return msg, kwargs
        context = " | ".join(f"{k}={v}" for k, v in self.extra.items())
        return f"[{context}] {msg}", kwargs


def get_contextual_logger(name: str, **context) -> ContextualLogger:
    """Logger for one unit of work, e.g. ``get_contextual_logger(__name__, ticker='AAPL')``."""
    return ContextualLogger(get_logger(name), context)


@contextmanager
def timed_operation(logger: logging.Logger, operation: str) -> Iterator[None]:
    """Log start, end and duration of ``operation``; failures are logged and re-raised."""
    logger.info(f"Starting {operation}")
    started = time.perf_counter()
    try:
        yield
    except BaseException:
        logger.error(f"Failed {operation} after {time.perf_counter() - started:.2f}s")
        raise
    logger.info(f"Completed {operation} in {time.perf_counter() - started:.2f}s")
