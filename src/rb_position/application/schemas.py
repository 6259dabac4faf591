"""Pydantic schemas for rb_position calls."""

from pydantic import BaseModel, Field

from src.rb_common.units import U64
from src.rb_position.domain.models import Position


class TransferPositionRequest(BaseModel):
    market_id: int = Field(..., ge=0)
    bin_indices: list[int]
    quantities: list[U64]
    from_user: str = Field(..., min_length=1)
    to_user: str = Field(..., min_length=1)


class GetPositionRequest(BaseModel):
    market_id: int = Field(..., ge=0)
    owner: str


class BinBalanceOut(BaseModel):
    index: int
    amount: int


class PositionResponse(BaseModel):
    owner: str
    market_id: int
    bins: list[BinBalanceOut]

    @classmethod
    def from_domain(cls, p: Position) -> "PositionResponse":
        return cls(
            owner=p.owner,
            market_id=p.market_id,
            bins=[BinBalanceOut(index=b.index, amount=b.amount) for b in p.bins],
        )


class TransferPositionResponse(BaseModel):
    market_id: int
    from_position: PositionResponse
    to_position: PositionResponse
