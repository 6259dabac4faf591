"""Pydantic schemas for admin calls."""

from pydantic import BaseModel, Field


class MarketClose(BaseModel):
    market_id: int = Field(..., ge=0)
    winning_bin: int


class CloseMarketsInOrderRequest(BaseModel):
    caller: str
    closes: list[MarketClose] = Field(..., min_length=1)
