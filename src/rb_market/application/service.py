"""MarketService — program registry and market lifecycle.

Every mutating method runs inside `repo.atomic()`: records are loaded as
working copies, validated, mutated, and saved last. A raised AppError leaves
the ledger untouched.
"""

import logging
from collections.abc import Callable

from config.settings import settings
from src.rb_clearing.domain.custody import CollateralCustodyProtocol
from src.rb_clearing.domain.invariants import verify_market_invariants
from src.rb_common.datetime_utils import unix_now
from src.rb_common.enums import CollateralFlow
from src.rb_common.errors import (
    NoCollateralToWithdrawError,
    ProgramAlreadyInitializedError,
)
from src.rb_common.units import amount_to_display
from src.rb_market.application.schemas import (
    MarketDetail,
    ProgramStateResponse,
    WithdrawCollateralResponse,
)
from src.rb_market.domain.models import Market, ProgramState
from src.rb_market.domain.repository import LedgerRepositoryProtocol
from src.rb_math.fixed_point import checked_add
from src.rb_risk.rules.close_order import check_close_order
from src.rb_risk.rules.market_status import (
    check_market_closed,
    check_market_not_closed,
    require_market,
)
from src.rb_risk.rules.owner_check import check_owner, require_program
from src.rb_risk.rules.tick_range import check_tick_range

logger = logging.getLogger(__name__)


class MarketService:
    def __init__(
        self,
        repo: LedgerRepositoryProtocol,
        custody: CollateralCustodyProtocol,
        clock: Callable[[], int] = unix_now,
    ) -> None:
        self._repo = repo
        self._custody = custody
        self._clock = clock

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    def initialize_program(self, owner: str) -> ProgramStateResponse:
        with self._repo.atomic():
            if self._repo.get_program_state() is not None:
                raise ProgramAlreadyInitializedError()
            state = ProgramState(owner=owner)
            self._repo.save_program_state(state)
        logger.info("Program initialized: owner=%s", owner)
        return ProgramStateResponse.from_domain(state)

    def get_program_state(self) -> ProgramStateResponse:
        return ProgramStateResponse.from_domain(require_program(self._repo.get_program_state()))

    def get_market(self, market_id: int) -> MarketDetail:
        return MarketDetail.from_domain(
            require_market(self._repo.get_market(market_id), market_id)
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def create_market(
        self,
        caller: str,
        tick_spacing: int,
        min_tick: int,
        max_tick: int,
        close_ts: int,
    ) -> MarketDetail:
        with self._repo.atomic():
            state = require_program(self._repo.get_program_state())
            check_owner(state, caller)
            check_tick_range(tick_spacing, min_tick, max_tick)

            market = Market.open(
                market_id=state.market_count,
                tick_spacing=tick_spacing,
                min_tick=min_tick,
                max_tick=max_tick,
                open_ts=self._clock(),
                close_ts=close_ts,
            )
            state.market_count = checked_add(state.market_count, 1)
            verify_market_invariants(market)

            self._repo.save_market(market)
            self._repo.save_program_state(state)

        logger.info(
            "Market created: id=%d, ticks=[%d, %d] spacing=%d, bins=%d",
            market.id, min_tick, max_tick, tick_spacing, market.bin_count,
        )
        return MarketDetail.from_domain(market)

    def activate_market(self, caller: str, market_id: int, active: bool) -> MarketDetail:
        """Toggle Open&Active <-> Open&Inactive. Setting the current value again is a no-op."""
        with self._repo.atomic():
            state = require_program(self._repo.get_program_state())
            check_owner(state, caller)
            market = require_market(self._repo.get_market(market_id), market_id)
            check_market_not_closed(market)

            market.active = active
            verify_market_invariants(market)
            self._repo.save_market(market)

        logger.info("Market %s: id=%d", "activated" if active else "deactivated", market_id)
        return MarketDetail.from_domain(market)

    def close_market(self, caller: str, market_id: int, winning_bin: int) -> MarketDetail:
        """Close the next market in id order and fix its winning bin."""
        with self._repo.atomic():
            state = require_program(self._repo.get_program_state())
            check_owner(state, caller)
            market = require_market(self._repo.get_market(market_id), market_id)
            check_close_order(state, market)
            market.offset_of(winning_bin)

            market.closed = True
            market.winning_bin = winning_bin
            state.last_closed_market = market_id
            verify_market_invariants(market)

            self._repo.save_market(market)
            self._repo.save_program_state(state)

        logger.info("Market closed: id=%d, winning_bin=%d", market_id, winning_bin)
        return MarketDetail.from_domain(market)

    def withdraw_collateral(self, caller: str, market_id: int) -> WithdrawCollateralResponse:
        """Release a closed market's remaining collateral to the owner."""
        with self._repo.atomic():
            state = require_program(self._repo.get_program_state())
            check_owner(state, caller)
            market = require_market(self._repo.get_market(market_id), market_id)
            check_market_closed(market)
            amount = market.collateral_balance
            if amount == 0:
                raise NoCollateralToWithdrawError(market_id)

            market.collateral_balance = 0
            verify_market_invariants(market)
            self._custody.release(
                market_id, state.owner, amount, CollateralFlow.COLLATERAL_WITHDRAW
            )
            self._repo.save_market(market)

        display = amount_to_display(amount, settings.COLLATERAL_DECIMALS)
        logger.info("Collateral withdrawn: market=%d, owner=%s, amount=%s", market_id, caller, display)
        return WithdrawCollateralResponse(
            market_id=market_id, recipient=state.owner, amount=amount, amount_display=display
        )
