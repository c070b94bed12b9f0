"""Configuration management module."""
from .settings import (
    Settings, GatewaySettings, QuoteApiSettings, StorageSettings, LoggingSettings
)


def setup_logging(settings: Settings = None):
    """Setup logging from the given settings, or from the environment."""
    from ..logging.logger import setup_logging as _setup_logging
    log_settings = (settings or Settings.from_env()).logging
    return _setup_logging(
        level=log_settings.log_level,
        format_string=log_settings.format,
        log_file=log_settings.file_path,
        max_file_size=log_settings.max_file_size,
        backup_count=log_settings.backup_count
    )


__all__ = [
    'Settings', 'setup_logging',
    'GatewaySettings', 'QuoteApiSettings', 'StorageSettings', 'LoggingSettings'
]
