"""TradingService — buy, sell and claim against a market's bonding curve.

Each call validates the whole request, applies every leg to working copies,
checks slippage and invariants, instructs custody, and only then saves.
"""

import logging

from config.settings import settings
from src.rb_clearing.application.schemas import ClaimRewardResponse, TradeResponse
from src.rb_clearing.domain.custody import CollateralCustodyProtocol
from src.rb_clearing.domain.invariants import verify_market_invariants
from src.rb_clearing.domain.settlement import apply_claim
from src.rb_clearing.domain.trade import apply_buy, apply_sell
from src.rb_common.enums import CollateralFlow
from src.rb_common.errors import NotWinningBinError, SlippageExceededError
from src.rb_common.units import amount_to_display, validate_u64
from src.rb_market.domain.repository import LedgerRepositoryProtocol
from src.rb_position.domain.models import Position
from src.rb_risk.rules.bin_request import check_bin_request
from src.rb_risk.rules.market_status import (
    check_market_closed,
    check_market_tradable,
    require_market,
)

logger = logging.getLogger(__name__)


def _display(amount: int) -> str:
    return amount_to_display(amount, settings.COLLATERAL_DECIMALS)


class TradingService:
    def __init__(self, repo: LedgerRepositoryProtocol, custody: CollateralCustodyProtocol) -> None:
        self._repo = repo
        self._custody = custody

    def buy_tokens(
        self,
        market_id: int,
        user: str,
        bin_indices: list[int],
        quantities: list[int],
        max_collateral: int,
    ) -> TradeResponse:
        validate_u64("max_collateral", max_collateral)
        with self._repo.atomic():
            market = require_market(self._repo.get_market(market_id), market_id)
            check_market_tradable(market)
            check_bin_request(market, bin_indices, quantities)

            position = self._repo.get_position(user, market_id) or Position(
                owner=user, market_id=market_id
            )
            fill = apply_buy(market, position, bin_indices, quantities)
            if fill.collateral > max_collateral:
                raise SlippageExceededError(fill.collateral, max_collateral, "BUY")
            verify_market_invariants(market)

            self._custody.deposit(market_id, user, fill.collateral, CollateralFlow.BUY_COST)
            self._repo.save_market(market)
            if fill.quantities:
                self._repo.save_position(position)

        logger.info(
            "Buy: market=%d, user=%s, bins=%s, quantities=%s, cost=%s",
            market_id, user, fill.bin_indices, fill.quantities, _display(fill.collateral),
        )
        return TradeResponse.from_fill(
            fill, market.total_supply, market.collateral_balance, _display(fill.collateral)
        )

    def sell_tokens(
        self,
        market_id: int,
        user: str,
        bin_indices: list[int],
        quantities: list[int],
        min_collateral: int,
    ) -> TradeResponse:
        validate_u64("min_collateral", min_collateral)
        with self._repo.atomic():
            market = require_market(self._repo.get_market(market_id), market_id)
            check_market_tradable(market)
            check_bin_request(market, bin_indices, quantities)

            position = self._repo.get_position(user, market_id) or Position(
                owner=user, market_id=market_id
            )
            fill = apply_sell(market, position, bin_indices, quantities)
            if fill.collateral < min_collateral:
                raise SlippageExceededError(fill.collateral, min_collateral, "SELL")
            verify_market_invariants(market)

            self._custody.release(market_id, user, fill.collateral, CollateralFlow.SELL_REVENUE)
            self._repo.save_market(market)
            if fill.quantities:
                self._repo.save_position(position)

        logger.info(
            "Sell: market=%d, user=%s, bins=%s, quantities=%s, revenue=%s",
            market_id, user, fill.bin_indices, fill.quantities, _display(fill.collateral),
        )
        return TradeResponse.from_fill(
            fill, market.total_supply, market.collateral_balance, _display(fill.collateral)
        )

    def claim_reward(self, market_id: int, user: str) -> ClaimRewardResponse:
        """Pay a winner its pro-rata share of the closed market's collateral."""
        with self._repo.atomic():
            market = require_market(self._repo.get_market(market_id), market_id)
            check_market_closed(market)
            position = self._repo.get_position(user, market_id)
            if position is None or market.winning_bin is None:
                raise NotWinningBinError(market_id, user)

            winning_bin = market.winning_bin
            burned = position.amount_of(winning_bin)
            reward = apply_claim(market, position)
            verify_market_invariants(market)

            self._custody.release(market_id, user, reward, CollateralFlow.REWARD_PAYOUT)
            self._repo.save_market(market)
            self._repo.save_position(position)

        logger.info(
            "Reward claimed: market=%d, user=%s, bin=%d, burned=%d, reward=%s",
            market_id, user, winning_bin, burned, _display(reward),
        )
        return ClaimRewardResponse(
            market_id=market_id,
            user=user,
            winning_bin=winning_bin,
            burned=burned,
            reward=reward,
            reward_display=_display(reward),
        )
