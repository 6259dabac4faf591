"""Application entry point: wires repositories, custody and services together.

    from src.main import build_app
    app = build_app()
    app.dispatcher.call("initialize_program", {"owner": "admin"})
"""

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from config.settings import settings
from src.rb_admin.application.service import AdminService
from src.rb_clearing.application.service import TradingService
from src.rb_clearing.domain.custody import CollateralCustodyProtocol
from src.rb_clearing.infrastructure.custody import InMemoryCustody
from src.rb_common.database import init_db, session_factory
from src.rb_gateway.dispatcher import Dispatcher
from src.rb_market.application.quotes import QuoteService
from src.rb_market.application.service import MarketService
from src.rb_market.domain.repository import LedgerRepositoryProtocol
from src.rb_market.infrastructure.memory import InMemoryLedgerRepository
from src.rb_market.infrastructure.persistence import SqlLedgerRepository
from src.rb_position.application.service import PositionService


@dataclass
class App:
    repo: LedgerRepositoryProtocol
    custody: CollateralCustodyProtocol
    markets: MarketService
    quotes: QuoteService
    trading: TradingService
    positions: PositionService
    admin: AdminService
    dispatcher: Dispatcher


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def build_app(
    repo: LedgerRepositoryProtocol | None = None,
    custody: CollateralCustodyProtocol | None = None,
) -> App:
    """Assemble the engine. Defaults to the in-memory ledger and custodian."""
    configure_logging()
    repo = repo or InMemoryLedgerRepository()
    custody = custody or InMemoryCustody()

    markets = MarketService(repo, custody)
    quotes = QuoteService(repo)
    trading = TradingService(repo, custody)
    positions = PositionService(repo)
    admin = AdminService(repo, markets)
    return App(
        repo=repo,
        custody=custody,
        markets=markets,
        quotes=quotes,
        trading=trading,
        positions=positions,
        admin=admin,
        dispatcher=Dispatcher(markets, quotes, trading, positions, admin),
    )


def build_sql_app(
    session: Session | None = None,
    custody: CollateralCustodyProtocol | None = None,
) -> App:
    """Assemble the engine over the SQLAlchemy ledger at settings.DATABASE_URL."""
    if session is None:
        init_db()
        session = session_factory()
    return build_app(repo=SqlLedgerRepository(session), custody=custody)
