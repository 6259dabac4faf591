"""Pydantic schemas for rb_market calls: lifecycle requests, market views, quotes."""

from pydantic import BaseModel, Field

from config.settings import settings
from src.rb_common.units import U64, amount_to_display
from src.rb_market.domain.models import Market, ProgramState

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class InitializeProgramRequest(BaseModel):
    owner: str = Field(..., min_length=1)


class CreateMarketRequest(BaseModel):
    caller: str
    tick_spacing: int
    min_tick: int
    max_tick: int
    close_ts: int


class ActivateMarketRequest(BaseModel):
    caller: str
    market_id: int = Field(..., ge=0)
    active: bool


class CloseMarketRequest(BaseModel):
    caller: str
    market_id: int = Field(..., ge=0)
    winning_bin: int


class WithdrawCollateralRequest(BaseModel):
    caller: str
    market_id: int = Field(..., ge=0)


class GetMarketRequest(BaseModel):
    market_id: int = Field(..., ge=0)


class BinQuoteRequest(BaseModel):
    """Single-bin quote: `amount` is a token quantity, or a budget for calculate_x_for_bin."""

    market_id: int = Field(..., ge=0)
    bin_index: int
    amount: U64


class MultiBinQuoteRequest(BaseModel):
    """Uniform multi-bin quote: the same `amount` in every listed bin."""

    market_id: int = Field(..., ge=0)
    bin_indices: list[int] = Field(..., min_length=1)
    amount: U64


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ProgramStateResponse(BaseModel):
    owner: str
    market_count: int
    last_closed_market: int
    next_market_to_close: int

    @classmethod
    def from_domain(cls, state: ProgramState) -> "ProgramStateResponse":
        return cls(
            owner=state.owner,
            market_count=state.market_count,
            last_closed_market=state.last_closed_market,
            next_market_to_close=state.next_market_to_close,
        )


class BinOut(BaseModel):
    index: int
    quantity: int


class MarketDetail(BaseModel):
    id: int
    status: str
    tick_spacing: int
    min_tick: int
    max_tick: int
    min_bin_index: int
    max_bin_index: int
    open_ts: int
    close_ts: int
    active: bool
    closed: bool
    winning_bin: int | None
    total_supply: int
    collateral_balance: int
    collateral_balance_display: str
    bins: list[BinOut]

    @classmethod
    def from_domain(cls, m: Market) -> "MarketDetail":
        return cls(
            id=m.id,
            status=m.status.value,
            tick_spacing=m.tick_spacing,
            min_tick=m.min_tick,
            max_tick=m.max_tick,
            min_bin_index=m.min_bin_index,
            max_bin_index=m.max_bin_index,
            open_ts=m.open_ts,
            close_ts=m.close_ts,
            active=m.active,
            closed=m.closed,
            winning_bin=m.winning_bin,
            total_supply=m.total_supply,
            collateral_balance=m.collateral_balance,
            collateral_balance_display=amount_to_display(
                m.collateral_balance, settings.COLLATERAL_DECIMALS
            ),
            bins=[BinOut(index=i, quantity=m.bin_quantity(i)) for i in m.bin_range()],
        )


class WithdrawCollateralResponse(BaseModel):
    market_id: int
    recipient: str
    amount: int
    amount_display: str


class QuoteResponse(BaseModel):
    market_id: int
    bin_indices: list[int]
    amount: int      # requested quantity or budget
    result: int      # cost, revenue or affordable quantity
