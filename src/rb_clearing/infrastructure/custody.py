"""In-memory collateral custodian: wallets, per-market vaults, and a transfer journal."""

import logging
from collections import defaultdict
from dataclasses import dataclass

from src.rb_common.enums import CollateralFlow
from src.rb_common.errors import CustodyTransferError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CustodyTransfer:
    market_id: int
    user: str
    amount: int          # positive = into vault, negative = out of vault
    flow: CollateralFlow


class InMemoryCustody:
    """Reference custodian for tests and local runs."""

    def __init__(self, wallets: dict[str, int] | None = None) -> None:
        self.wallets: dict[str, int] = defaultdict(int, wallets or {})
        self.vaults: dict[int, int] = defaultdict(int)
        self.journal: list[CustodyTransfer] = []

    def fund(self, user: str, amount: int) -> None:
        self.wallets[user] += amount

    def deposit(self, market_id: int, from_user: str, amount: int, flow: CollateralFlow) -> None:
        if amount == 0:
            return
        if self.wallets[from_user] < amount:
            raise CustodyTransferError(
                f"wallet {from_user} holds {self.wallets[from_user]}, needs {amount}"
            )
        self.wallets[from_user] -= amount
        self.vaults[market_id] += amount
        self.journal.append(CustodyTransfer(market_id, from_user, amount, flow))
        logger.debug("custody deposit: market=%d user=%s amount=%d", market_id, from_user, amount)

    def release(self, market_id: int, to_user: str, amount: int, flow: CollateralFlow) -> None:
        if amount == 0:
            return
        if self.vaults[market_id] < amount:
            raise CustodyTransferError(
                f"vault {market_id} holds {self.vaults[market_id]}, needs {amount}"
            )
        self.vaults[market_id] -= amount
        self.wallets[to_user] += amount
        self.journal.append(CustodyTransfer(market_id, to_user, -amount, flow))
        logger.debug("custody release: market=%d user=%s amount=%d", market_id, to_user, amount)
