"""Pydantic schemas for rb_clearing calls: buy, sell, claim."""

from pydantic import BaseModel, Field

from src.rb_clearing.domain.trade import Fill
from src.rb_common.units import U64


class BuyTokensRequest(BaseModel):
    market_id: int = Field(..., ge=0)
    user: str = Field(..., min_length=1)
    bin_indices: list[int]
    quantities: list[U64]
    max_collateral: U64


class SellTokensRequest(BaseModel):
    market_id: int = Field(..., ge=0)
    user: str = Field(..., min_length=1)
    bin_indices: list[int]
    quantities: list[U64]
    min_collateral: U64


class ClaimRewardRequest(BaseModel):
    market_id: int = Field(..., ge=0)
    user: str = Field(..., min_length=1)


class TradeResponse(BaseModel):
    market_id: int
    user: str
    side: str
    bin_indices: list[int]       # legs actually applied (zero quantities dropped)
    quantities: list[int]
    collateral: int              # cost paid or revenue received
    collateral_display: str
    total_supply: int
    collateral_balance: int

    @classmethod
    def from_fill(
        cls, fill: Fill, total_supply: int, collateral_balance: int, display: str
    ) -> "TradeResponse":
        return cls(
            market_id=fill.market_id,
            user=fill.user,
            side=fill.side,
            bin_indices=fill.bin_indices,
            quantities=fill.quantities,
            collateral=fill.collateral,
            collateral_display=display,
            total_supply=total_supply,
            collateral_balance=collateral_balance,
        )


class ClaimRewardResponse(BaseModel):
    market_id: int
    user: str
    winning_bin: int
    burned: int
    reward: int
    reward_display: str
