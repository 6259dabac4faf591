"""Call dispatcher — the result-returning boundary around the services.

Every call is parsed into its pydantic request model, routed to a service
method, and wrapped in a CallResult. AppError and payload validation
failures become error results; anything else propagates.

Log format:
    INFO [buy_tokens] → 0 (3ms) call_a1b2c3d4e5f6
"""

import logging
import time
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel, ValidationError

from src.rb_admin.application.schemas import CloseMarketsInOrderRequest
from src.rb_admin.application.service import AdminService
from src.rb_clearing.application.schemas import (
    BuyTokensRequest,
    ClaimRewardRequest,
    SellTokensRequest,
)
from src.rb_clearing.application.service import TradingService
from src.rb_common.errors import AppError, InvalidRequestError
from src.rb_common.response import CallResult, error_result, success_result
from src.rb_market.application.quotes import QuoteService
from src.rb_market.application.schemas import (
    ActivateMarketRequest,
    BinQuoteRequest,
    CloseMarketRequest,
    CreateMarketRequest,
    GetMarketRequest,
    InitializeProgramRequest,
    MultiBinQuoteRequest,
    WithdrawCollateralRequest,
)
from src.rb_market.application.service import MarketService
from src.rb_position.application.schemas import GetPositionRequest, TransferPositionRequest
from src.rb_position.application.service import PositionService

logger = logging.getLogger("rb.call")

Handler = Callable[[Any], Any]


class NoArgs(BaseModel):
    pass


def _validation_detail(exc: ValidationError) -> str:
    first = exc.errors()[0]
    loc = ".".join(str(p) for p in first["loc"]) or "payload"
    return f"{loc}: {first['msg']}"


class Dispatcher:
    def __init__(
        self,
        markets: MarketService,
        quotes: QuoteService,
        trading: TradingService,
        positions: PositionService,
        admin: AdminService,
    ) -> None:
        self._routes: dict[str, tuple[type[BaseModel], Handler]] = {
            # Registry and lifecycle
            "initialize_program": (
                InitializeProgramRequest, lambda r: markets.initialize_program(r.owner)
            ),
            "create_market": (
                CreateMarketRequest,
                lambda r: markets.create_market(
                    r.caller, r.tick_spacing, r.min_tick, r.max_tick, r.close_ts
                ),
            ),
            "activate_market": (
                ActivateMarketRequest,
                lambda r: markets.activate_market(r.caller, r.market_id, r.active),
            ),
            "close_market": (
                CloseMarketRequest,
                lambda r: markets.close_market(r.caller, r.market_id, r.winning_bin),
            ),
            "withdraw_collateral": (
                WithdrawCollateralRequest,
                lambda r: markets.withdraw_collateral(r.caller, r.market_id),
            ),
            "get_market": (GetMarketRequest, lambda r: markets.get_market(r.market_id)),
            "get_program_state": (NoArgs, lambda r: markets.get_program_state()),
            # Trading
            "buy_tokens": (
                BuyTokensRequest,
                lambda r: trading.buy_tokens(
                    r.market_id, r.user, r.bin_indices, r.quantities, r.max_collateral
                ),
            ),
            "sell_tokens": (
                SellTokensRequest,
                lambda r: trading.sell_tokens(
                    r.market_id, r.user, r.bin_indices, r.quantities, r.min_collateral
                ),
            ),
            "claim_reward": (
                ClaimRewardRequest, lambda r: trading.claim_reward(r.market_id, r.user)
            ),
            # Positions
            "transfer_position": (
                TransferPositionRequest,
                lambda r: positions.transfer_position(
                    r.market_id, r.bin_indices, r.quantities, r.from_user, r.to_user
                ),
            ),
            "get_position": (
                GetPositionRequest, lambda r: positions.get_position(r.owner, r.market_id)
            ),
            # Read-only quotes
            "calculate_bin_cost": (
                BinQuoteRequest,
                lambda r: quotes.calculate_bin_cost(r.market_id, r.bin_index, r.amount),
            ),
            "calculate_bin_sell_cost": (
                BinQuoteRequest,
                lambda r: quotes.calculate_bin_sell_cost(r.market_id, r.bin_index, r.amount),
            ),
            "calculate_x_for_bin": (
                BinQuoteRequest,
                lambda r: quotes.calculate_x_for_bin(r.market_id, r.bin_index, r.amount),
            ),
            "calculate_multi_bins_buy_cost": (
                MultiBinQuoteRequest,
                lambda r: quotes.calculate_multi_bins_buy_cost(
                    r.market_id, r.bin_indices, r.amount
                ),
            ),
            "calculate_multi_bins_sell_cost": (
                MultiBinQuoteRequest,
                lambda r: quotes.calculate_multi_bins_sell_cost(
                    r.market_id, r.bin_indices, r.amount
                ),
            ),
            "calculate_x_for_multi_bins": (
                MultiBinQuoteRequest,
                lambda r: quotes.calculate_x_for_multi_bins(r.market_id, r.bin_indices, r.amount),
            ),
            # Admin
            "verify_all_invariants": (
                NoArgs, lambda r: admin.verify_all_invariants()
            ),
            "close_markets_in_order": (
                CloseMarketsInOrderRequest,
                lambda r: admin.close_markets_in_order(
                    r.caller, [(c.market_id, c.winning_bin) for c in r.closes]
                ),
            ),
        }

    @property
    def operations(self) -> list[str]:
        return sorted(self._routes)

    def call(self, operation: str, payload: Mapping[str, Any] | None = None) -> CallResult:
        start = time.perf_counter()
        try:
            result = success_result(self._invoke(operation, payload or {}))
        except AppError as exc:
            result = error_result(exc.code, exc.kind, exc.message)
        elapsed_ms = (time.perf_counter() - start) * 1000

        logger.info(
            "[%s] → %d (%.0fms) %s", operation, result.code, elapsed_ms, result.call_id
        )
        return result

    def _invoke(self, operation: str, payload: Mapping[str, Any]) -> Any:
        route = self._routes.get(operation)
        if route is None:
            raise InvalidRequestError(f"unknown operation {operation!r}")
        model, handler = route
        try:
            request = model.model_validate(payload)
        except ValidationError as exc:
            raise InvalidRequestError(_validation_detail(exc)) from exc

        data = handler(request)
        return data.model_dump() if isinstance(data, BaseModel) else data
