"""PositionService — moves bin balances between users without touching the market."""

import logging

from src.rb_market.domain.repository import LedgerRepositoryProtocol
from src.rb_position.application.schemas import PositionResponse, TransferPositionResponse
from src.rb_position.domain.models import Position
from src.rb_risk.rules.bin_request import check_bin_request
from src.rb_risk.rules.market_status import require_market
from src.rb_risk.rules.self_transfer import check_not_self_transfer

logger = logging.getLogger(__name__)


class PositionService:
    def __init__(self, repo: LedgerRepositoryProtocol) -> None:
        self._repo = repo

    def get_position(self, owner: str, market_id: int) -> PositionResponse:
        require_market(self._repo.get_market(market_id), market_id)
        position = self._repo.get_position(owner, market_id) or Position(
            owner=owner, market_id=market_id
        )
        return PositionResponse.from_domain(position)

    def transfer_position(
        self,
        market_id: int,
        bin_indices: list[int],
        quantities: list[int],
        from_user: str,
        to_user: str,
    ) -> TransferPositionResponse:
        """Zero-sum move of bin balances. Bin quantities, T and collateral are unchanged."""
        check_not_self_transfer(from_user, to_user)
        with self._repo.atomic():
            market = require_market(self._repo.get_market(market_id), market_id)
            check_bin_request(market, bin_indices, quantities)

            source = self._repo.get_position(from_user, market_id) or Position(
                owner=from_user, market_id=market_id
            )
            target = self._repo.get_position(to_user, market_id) or Position(
                owner=to_user, market_id=market_id
            )

            moved = 0
            for bin_index, quantity in zip(bin_indices, quantities):
                source.debit(bin_index, quantity)
                target.credit(bin_index, quantity)
                moved += quantity

            if moved:
                self._repo.save_position(source)
                self._repo.save_position(target)

        logger.info(
            "Position transferred: market=%d, from=%s, to=%s, bins=%s, quantities=%s",
            market_id, from_user, to_user, list(bin_indices), list(quantities),
        )
        return TransferPositionResponse(
            market_id=market_id,
            from_position=PositionResponse.from_domain(source),
            to_position=PositionResponse.from_domain(target),
        )
