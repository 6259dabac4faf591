"""QuoteService — read-only pricing against live market state.

Buy-side quotes require an Open&Active market; sell quotes only require the
market to exist. Multi-bin quotes thread quantities through a scratch copy
of the market, so they return exactly what the same buy or sell would cost
if submitted now. Nothing is saved.
"""

import copy
from collections.abc import Sequence

from src.rb_clearing.domain.trade import apply_buy
from src.rb_common.errors import (
    EmptyBinError,
    InsufficientBinBalanceError,
    InsufficientSupplyError,
)
from src.rb_common.units import validate_u64
from src.rb_market.application.schemas import QuoteResponse
from src.rb_market.domain.models import Market
from src.rb_market.domain.repository import LedgerRepositoryProtocol
from src.rb_math.cost import (
    calculate_bin_buy_cost,
    calculate_bin_sell_cost,
    calculate_x_for_bin,
    calculate_x_for_multi_bins,
)
from src.rb_math.fixed_point import checked_add, checked_mul
from src.rb_position.domain.models import Position
from src.rb_risk.rules.bin_request import check_bins_in_range, check_distinct_bins
from src.rb_risk.rules.market_status import check_market_tradable, require_market


class QuoteService:
    def __init__(self, repo: LedgerRepositoryProtocol) -> None:
        self._repo = repo

    def _load(self, market_id: int, *, tradable: bool) -> Market:
        market = require_market(self._repo.get_market(market_id), market_id)
        if tradable:
            check_market_tradable(market)
        return market

    # ------------------------------------------------------------------
    # Single bin
    # ------------------------------------------------------------------

    def calculate_bin_cost(self, market_id: int, bin_index: int, amount: int) -> QuoteResponse:
        market = self._load(market_id, tradable=True)
        cost = calculate_bin_buy_cost(amount, market.bin_quantity(bin_index), market.total_supply)
        return QuoteResponse(market_id=market_id, bin_indices=[bin_index], amount=amount, result=cost)

    def calculate_bin_sell_cost(self, market_id: int, bin_index: int, amount: int) -> QuoteResponse:
        market = self._load(market_id, tradable=False)
        revenue = calculate_bin_sell_cost(
            amount, market.bin_quantity(bin_index), market.total_supply
        )
        return QuoteResponse(
            market_id=market_id, bin_indices=[bin_index], amount=amount, result=revenue
        )

    def calculate_x_for_bin(self, market_id: int, bin_index: int, budget: int) -> QuoteResponse:
        market = self._load(market_id, tradable=True)
        quantity = calculate_x_for_bin(budget, market.bin_quantity(bin_index), market.total_supply)
        return QuoteResponse(
            market_id=market_id, bin_indices=[bin_index], amount=budget, result=quantity
        )

    # ------------------------------------------------------------------
    # Multiple bins, same amount in each
    # ------------------------------------------------------------------

    def calculate_multi_bins_buy_cost(
        self, market_id: int, bin_indices: Sequence[int], amount: int
    ) -> QuoteResponse:
        market = self._load(market_id, tradable=True)
        validate_u64("amount", amount)
        check_bins_in_range(market, bin_indices)

        scratch = copy.deepcopy(market)
        fill = apply_buy(
            scratch, Position(owner="", market_id=market_id), bin_indices, [amount] * len(bin_indices)
        )
        return QuoteResponse(
            market_id=market_id, bin_indices=list(bin_indices), amount=amount, result=fill.collateral
        )

    def calculate_multi_bins_sell_cost(
        self, market_id: int, bin_indices: Sequence[int], amount: int
    ) -> QuoteResponse:
        market = self._load(market_id, tradable=False)
        validate_u64("amount", amount)
        check_bins_in_range(market, bin_indices)
        if amount == 0:
            return QuoteResponse(
                market_id=market_id, bin_indices=list(bin_indices), amount=0, result=0
            )

        for bin_index in bin_indices:
            quantity = market.bin_quantity(bin_index)
            if quantity == 0:
                raise EmptyBinError()
            if amount > quantity:
                raise InsufficientBinBalanceError(amount, quantity)
        total_amount = checked_mul(amount, len(bin_indices))
        if total_amount > market.total_supply:
            raise InsufficientSupplyError(total_amount, market.total_supply)

        scratch = copy.deepcopy(market)
        revenue = 0
        for bin_index in bin_indices:
            offset = scratch.offset_of(bin_index)
            revenue = checked_add(
                revenue,
                calculate_bin_sell_cost(amount, scratch.bins[offset], scratch.total_supply),
            )
            scratch.bins[offset] -= amount
            scratch.total_supply -= amount
        return QuoteResponse(
            market_id=market_id, bin_indices=list(bin_indices), amount=amount, result=revenue
        )

    def calculate_x_for_multi_bins(
        self, market_id: int, bin_indices: Sequence[int], budget: int
    ) -> QuoteResponse:
        market = self._load(market_id, tradable=True)
        check_bins_in_range(market, bin_indices)
        check_distinct_bins(bin_indices)
        quantity = calculate_x_for_multi_bins(
            budget, [market.bin_quantity(i) for i in bin_indices], market.total_supply
        )
        return QuoteResponse(
            market_id=market_id, bin_indices=list(bin_indices), amount=budget, result=quantity
        )
