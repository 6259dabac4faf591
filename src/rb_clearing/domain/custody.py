"""Collateral custody port.

The ledger only tracks balances; moving real collateral belongs to an
external custodian. The ledger calls it inside the atomic block after all
validation has passed, so a custody failure rolls the whole call back.
"""

from typing import Protocol

from src.rb_common.enums import CollateralFlow


class CollateralCustodyProtocol(Protocol):
    def deposit(self, market_id: int, from_user: str, amount: int, flow: CollateralFlow) -> None:
        """Move `amount` from the user into the market vault."""
        ...

    def release(self, market_id: int, to_user: str, amount: int, flow: CollateralFlow) -> None:
        """Move `amount` from the market vault to the user."""
        ...
