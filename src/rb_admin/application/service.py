# src/rb_admin/application/service.py
"""Admin application service."""
import logging
from collections.abc import Iterable
from typing import Any

from src.rb_clearing.domain.invariants import verify_conservation, verify_market_invariants
from src.rb_common.errors import AppError
from src.rb_market.application.service import MarketService
from src.rb_market.domain.repository import LedgerRepositoryProtocol
from src.rb_risk.rules.owner_check import require_program

logger = logging.getLogger(__name__)


class AdminService:
    def __init__(self, repo: LedgerRepositoryProtocol, markets: MarketService) -> None:
        self._repo = repo
        self._markets = markets

    def verify_all_invariants(self) -> dict[str, object]:
        """Run per-market (INV-1/2), conservation (INV-3) and registry (INV-R) checks."""
        violations: list[str] = []
        state = require_program(self._repo.get_program_state())
        markets = self._repo.list_markets()

        for market in markets:
            try:
                verify_market_invariants(market)
            except AssertionError as e:
                violations.append(str(e))
                logger.error("%s", e)
            violations.extend(verify_conservation(market, self._repo.list_positions(market.id)))

        if not (-1 <= state.last_closed_market < state.market_count):
            msg = (
                f"INV-R violated: last_closed_market={state.last_closed_market} "
                f"outside [-1, market_count={state.market_count})"
            )
            violations.append(msg)
            logger.error(msg)
        if len(markets) != state.market_count:
            msg = f"INV-R violated: {len(markets)} markets stored, market_count={state.market_count}"
            violations.append(msg)
            logger.error(msg)

        return {"ok": len(violations) == 0, "markets_checked": len(markets), "violations": violations}

    def close_markets_in_order(
        self, caller: str, closes: Iterable[tuple[int, int]]
    ) -> dict[str, Any]:
        """Close (market_id, winning_bin) pairs one atomic call at a time.

        Stops at the first rejection. The caller resumes from
        last_closed_market + 1.
        """
        closed: list[int] = []
        failure: dict[str, Any] | None = None
        for market_id, winning_bin in closes:
            try:
                self._markets.close_market(caller, market_id, winning_bin)
            except AppError as e:
                failure = {"market_id": market_id, "code": e.code, "message": e.message}
                logger.warning("Sequential close stopped at market %d: %s", market_id, e.message)
                break
            closed.append(market_id)

        state = require_program(self._repo.get_program_state())
        return {
            "closed": closed,
            "failure": failure,
            "last_closed_market": state.last_closed_market,
        }
