"""Application settings and configuration values."""
import os
from dataclasses import dataclass
from typing import Optional
import pytz

from ..exceptions.config import ConfigurationError


@dataclass
class GatewaySettings:
    """Quote gateway (HTTP proxy) settings."""
    host: str = '127.0.0.1'
    port: int = 3001
    upstream_base_url: str = 'https://query1.finance.yahoo.com/v8/finance/chart'
    timeout: int = 10
    impersonate: str = 'chrome'


@dataclass
class QuoteApiSettings:
    """Settings for the client side of the quote gateway."""
    base_url: str = 'http://localhost:3001/api'
    timeout: int = 10

    @property
    def stock_url(self) -> str:
        """Get the stock endpoint URL."""
        return f"{self.base_url.rstrip('/')}/stock"


@dataclass
class StorageSettings:
    """Local key-value storage settings."""
    path: str = 'data/portfolio.db'
    storage_key: str = 'portfolio-stocks'

    @property
    def abs_path(self) -> str:
        """Get the full storage file path."""
        return os.path.abspath(self.path)


@dataclass
class LoggingSettings:
    """Logging configuration settings."""
    level: str = 'INFO'
    format: str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    file_path: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5

    @property
    def log_level(self) -> int:
        """Get the numeric log level."""
        import logging
        return getattr(logging, self.level.upper(), logging.INFO)


@dataclass
class Settings:
    """Main application settings container."""
    gateway: GatewaySettings
    quote_api: QuoteApiSettings
    storage: StorageSettings
    logging: LoggingSettings

    # General settings
    timezone: str = "UTC"
    environment: str = "development"
    debug: bool = False

    @property
    def tz(self) -> pytz.BaseTzInfo:
        """Get the timezone object."""
        return pytz.timezone(self.timezone)

    @classmethod
    def default(cls) -> 'Settings':
        """Create settings with every value at its default."""
        return cls(
            gateway=GatewaySettings(),
            quote_api=QuoteApiSettings(),
            storage=StorageSettings(),
            logging=LoggingSettings()
        )

    @classmethod
    def from_env(cls) -> 'Settings':
        """Create settings from environment variables."""
        return cls(
            gateway=GatewaySettings(
                host=os.getenv('GATEWAY_HOST', '127.0.0.1'),
                port=int(os.getenv('GATEWAY_PORT', '3001')),
                upstream_base_url=os.getenv(
                    'UPSTREAM_CHART_URL',
                    'https://query1.finance.yahoo.com/v8/finance/chart'
                ),
                timeout=int(os.getenv('UPSTREAM_TIMEOUT', '10')),
                impersonate=os.getenv('UPSTREAM_IMPERSONATE', 'chrome')
            ),
            quote_api=QuoteApiSettings(
                base_url=os.getenv('QUOTE_API_URL', 'http://localhost:3001/api'),
                timeout=int(os.getenv('QUOTE_API_TIMEOUT', '10'))
            ),
            storage=StorageSettings(
                path=os.getenv('STORAGE_PATH', 'data/portfolio.db'),
                storage_key=os.getenv('STORAGE_KEY', 'portfolio-stocks')
            ),
            logging=LoggingSettings(
                level=os.getenv('LOG_LEVEL', 'INFO'),
                file_path=os.getenv('LOG_FILE_PATH'),
                max_file_size=int(os.getenv('LOG_MAX_SIZE', str(10 * 1024 * 1024)))
            ),
            timezone=os.getenv('TIMEZONE', 'UTC'),
            environment=os.getenv('ENVIRONMENT', 'development'),
            debug=os.getenv('DEBUG', 'false').lower() == 'true'
        )

    def validate(self) -> None:
        """Validate configuration settings."""
        errors = []

        # Validate gateway settings
        if not 0 < self.gateway.port < 65536:
            errors.append(f"Gateway port out of range: {self.gateway.port}")

        if not self.gateway.upstream_base_url:
            errors.append("Upstream chart URL cannot be empty")

        if self.gateway.timeout <= 0 or self.quote_api.timeout <= 0:
            errors.append("Timeouts must be positive")

        if not self.quote_api.base_url:
            errors.append("Quote API URL cannot be empty")

        # Validate storage settings
        if not self.storage.path:
            errors.append("Storage path cannot be empty")

        if not self.storage.storage_key:
            errors.append("Storage key cannot be empty")

        # Validate timezone
        try:
            pytz.timezone(self.timezone)
        except pytz.UnknownTimeZoneError:
            errors.append(f"Unknown timezone: {self.timezone}")

        if errors:
            raise ConfigurationError(
                f"Configuration validation failed: {'; '.join(errors)}",
                {'error_count': len(errors)}
            )
