"""SqlLedgerRepository — SQLAlchemy implementation of LedgerRepositoryProtocol.

Rows are mapped to detached domain dataclasses on read and written back
field by field on save. `atomic()` commits the session on success and
rolls it back on any exception.
"""

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import select
from sqlalchemy.orm import Session

from src.rb_market.domain.models import Market, ProgramState
from src.rb_market.infrastructure.db_models import MarketORM, PositionORM, ProgramStateORM
from src.rb_position.domain.models import BinBalance, Position

_PROGRAM_ROW_ID = 1

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_market(row: MarketORM) -> Market:
    return Market(
        id=row.id,
        tick_spacing=row.tick_spacing,
        min_tick=row.min_tick,
        max_tick=row.max_tick,
        open_ts=row.open_ts,
        close_ts=row.close_ts,
        bins=[int(q) for q in row.bins],
        total_supply=row.total_supply,
        collateral_balance=row.collateral_balance,
        active=row.active,
        closed=row.closed,
        winning_bin=row.winning_bin,
    )


def _row_to_position(row: PositionORM) -> Position:
    return Position(
        owner=row.owner,
        market_id=row.market_id,
        bins=[BinBalance(index=int(i), amount=int(a)) for i, a in row.bins],
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class SqlLedgerRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    @contextmanager
    def atomic(self) -> Iterator[None]:
        try:
            yield
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

    def get_program_state(self) -> ProgramState | None:
        row = self._session.get(ProgramStateORM, _PROGRAM_ROW_ID)
        if row is None:
            return None
        return ProgramState(
            owner=row.owner,
            market_count=row.market_count,
            last_closed_market=row.last_closed_market,
        )

    def save_program_state(self, state: ProgramState) -> None:
        row = self._session.get(ProgramStateORM, _PROGRAM_ROW_ID)
        if row is None:
            row = ProgramStateORM(id=_PROGRAM_ROW_ID)
            self._session.add(row)
        row.owner = state.owner
        row.market_count = state.market_count
        row.last_closed_market = state.last_closed_market
        self._session.flush()

    def get_market(self, market_id: int) -> Market | None:
        row = self._session.get(MarketORM, market_id)
        return None if row is None else _row_to_market(row)

    def save_market(self, market: Market) -> None:
        row = self._session.get(MarketORM, market.id)
        if row is None:
            row = MarketORM(id=market.id)
            self._session.add(row)
        row.tick_spacing = market.tick_spacing
        row.min_tick = market.min_tick
        row.max_tick = market.max_tick
        row.open_ts = market.open_ts
        row.close_ts = market.close_ts
        row.bins = list(market.bins)
        row.total_supply = market.total_supply
        row.collateral_balance = market.collateral_balance
        row.active = market.active
        row.closed = market.closed
        row.winning_bin = market.winning_bin
        self._session.flush()

    def list_markets(self) -> list[Market]:
        rows = self._session.scalars(select(MarketORM).order_by(MarketORM.id)).all()
        return [_row_to_market(r) for r in rows]

    def get_position(self, owner: str, market_id: int) -> Position | None:
        row = self._session.get(PositionORM, (owner, market_id))
        return None if row is None else _row_to_position(row)

    def save_position(self, position: Position) -> None:
        row = self._session.get(PositionORM, (position.owner, position.market_id))
        if row is None:
            row = PositionORM(owner=position.owner, market_id=position.market_id)
            self._session.add(row)
        row.bins = [[bal.index, bal.amount] for bal in position.bins]
        self._session.flush()

    def list_positions(self, market_id: int) -> list[Position]:
        rows = self._session.scalars(
            select(PositionORM)
            .where(PositionORM.market_id == market_id)
            .order_by(PositionORM.owner)
        ).all()
        return [_row_to_position(r) for r in rows]
