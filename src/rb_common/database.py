from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from config.settings import settings


class Base(DeclarativeBase):
    """Shared declarative base for all ORM models across modules."""

    pass


engine: Engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
)

session_factory = sessionmaker(
    engine,
    class_=Session,
    expire_on_commit=False,
)


def init_db(bind: Engine | None = None) -> None:
    """Create ledger tables that do not exist yet."""
    # ORM modules register their tables on Base.metadata at import time
    import src.rb_market.infrastructure.db_models  # noqa: F401

    Base.metadata.create_all(bind or engine)
