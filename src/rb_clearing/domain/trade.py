"""Apply buy and sell legs to working copies of a market and a position.

Legs are processed left to right. Each leg is priced against the bin
quantity and total supply left behind by the previous leg, so a bin listed
twice sees its own earlier leg. Zero-quantity legs are skipped. Callers
save the mutated copies only after every leg has succeeded.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

from src.rb_market.domain.models import Market
from src.rb_math.cost import calculate_bin_buy_cost, calculate_bin_sell_cost
from src.rb_math.fixed_point import checked_add, checked_sub
from src.rb_position.domain.models import Position


@dataclass
class Fill:
    market_id: int
    user: str
    side: str                   # "BUY" | "SELL"
    bin_indices: list[int] = field(default_factory=list)
    quantities: list[int] = field(default_factory=list)
    collateral: int = 0         # cost paid (BUY) or revenue received (SELL)


def apply_buy(
    market: Market,
    position: Position,
    bin_indices: Sequence[int],
    quantities: Sequence[int],
) -> Fill:
    fill = Fill(market_id=market.id, user=position.owner, side="BUY")
    for bin_index, quantity in zip(bin_indices, quantities):
        if quantity == 0:
            continue
        offset = market.offset_of(bin_index)
        cost = calculate_bin_buy_cost(quantity, market.bins[offset], market.total_supply)
        market.bins[offset] = checked_add(market.bins[offset], quantity)
        market.total_supply = checked_add(market.total_supply, quantity)
        position.credit(bin_index, quantity)
        fill.collateral = checked_add(fill.collateral, cost)
        fill.bin_indices.append(bin_index)
        fill.quantities.append(quantity)
    market.collateral_balance = checked_add(market.collateral_balance, fill.collateral)
    return fill


def apply_sell(
    market: Market,
    position: Position,
    bin_indices: Sequence[int],
    quantities: Sequence[int],
) -> Fill:
    fill = Fill(market_id=market.id, user=position.owner, side="SELL")
    for bin_index, quantity in zip(bin_indices, quantities):
        if quantity == 0:
            continue
        offset = market.offset_of(bin_index)
        # bin-level failures (empty, oversell) take precedence over the holder's balance
        revenue = calculate_bin_sell_cost(quantity, market.bins[offset], market.total_supply)
        position.debit(bin_index, quantity)
        market.bins[offset] = checked_sub(market.bins[offset], quantity)
        market.total_supply = checked_sub(market.total_supply, quantity)
        fill.collateral = checked_add(fill.collateral, revenue)
        fill.bin_indices.append(bin_index)
        fill.quantities.append(quantity)
    market.collateral_balance = checked_sub(market.collateral_balance, fill.collateral)
    return fill
