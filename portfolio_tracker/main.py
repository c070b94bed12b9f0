"""Application entry point: builds settings, logging and services, then runs a command."""
import sys
from typing import List, Optional

from .application.services import PortfolioStore, QuoteService
from .infrastructure.storage import SqliteKeyValueStorage
from .presentation.cli.portfolio_cli import PortfolioCli, build_parser, dispatch
from .presentation.web import QuoteGatewayApp
from .shared.config import Settings, setup_logging
from .shared.exceptions import ConfigurationError


def build_store(settings: Settings, quote_service: Optional[QuoteService] = None) -> PortfolioStore:
    """Wire the portfolio store to its storage and quote service."""
    storage = SqliteKeyValueStorage(settings.storage.abs_path)
    return PortfolioStore(
        storage,
        quote_service=quote_service or QuoteService(settings.quote_api),
        settings=settings
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = Settings.from_env()
        settings.validate()
    except (ConfigurationError, ValueError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    setup_logging(settings)

    if args.command == 'serve':
        QuoteGatewayApp(settings).run(host=args.host, port=args.port)
        return 0

    quote_service = QuoteService(settings.quote_api)
    cli = PortfolioCli(build_store(settings, quote_service), quote_service)
    return dispatch(cli, args) or 0


if __name__ == '__main__':
    sys.exit(main())
