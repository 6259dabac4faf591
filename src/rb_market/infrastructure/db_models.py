"""SQLAlchemy ORM models for the ledger tables.

u64 amounts are stored as decimal strings: SQLite INTEGER is signed 64-bit
and would silently lose the top bit. Bin vectors are JSON columns.
"""

from typing import Any

from sqlalchemy import JSON, BigInteger, Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from src.rb_common.database import Base


class U64String(TypeDecorator[int]):
    impl = String(20)
    cache_ok = True

    def process_bind_param(self, value: int | None, dialect: Any) -> str | None:
        return None if value is None else str(value)

    def process_result_value(self, value: str | None, dialect: Any) -> int | None:
        return None if value is None else int(value)


class ProgramStateORM(Base):
    __tablename__ = "programs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)  # singleton row, id=1
    owner: Mapped[str] = mapped_column(String(64), nullable=False)
    market_count: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    last_closed_market: Mapped[int] = mapped_column(BigInteger, nullable=False, default=-1)


class MarketORM(Base):
    __tablename__ = "markets"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    tick_spacing: Mapped[int] = mapped_column(BigInteger, nullable=False)
    min_tick: Mapped[int] = mapped_column(BigInteger, nullable=False)
    max_tick: Mapped[int] = mapped_column(BigInteger, nullable=False)
    open_ts: Mapped[int] = mapped_column(BigInteger, nullable=False)
    close_ts: Mapped[int] = mapped_column(BigInteger, nullable=False)
    bins: Mapped[list[int]] = mapped_column(JSON, nullable=False)
    total_supply: Mapped[int] = mapped_column(U64String, nullable=False)
    collateral_balance: Mapped[int] = mapped_column(U64String, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False)
    closed: Mapped[bool] = mapped_column(Boolean, nullable=False)
    winning_bin: Mapped[int | None] = mapped_column(BigInteger, nullable=True)


class PositionORM(Base):
    __tablename__ = "positions"

    owner: Mapped[str] = mapped_column(String(64), primary_key=True)
    market_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    bins: Mapped[list[list[int]]] = mapped_column(JSON, nullable=False)  # [[index, amount], ...]
