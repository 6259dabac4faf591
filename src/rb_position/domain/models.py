"""Domain models for rb_position — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field

from src.rb_common.errors import InsufficientUserBalanceError
from src.rb_math.fixed_point import checked_add


@dataclass
class BinBalance:
    index: int     # signed bin index
    amount: int    # always > 0 while stored


@dataclass
class Position:
    """One user's holdings in one market. Entries that reach 0 are dropped."""

    owner: str
    market_id: int
    bins: list[BinBalance] = field(default_factory=list)

    def amount_of(self, bin_index: int) -> int:
        for bal in self.bins:
            if bal.index == bin_index:
                return bal.amount
        return 0

    @property
    def is_empty(self) -> bool:
        return not self.bins

    def credit(self, bin_index: int, amount: int) -> None:
        if amount == 0:
            return
        for bal in self.bins:
            if bal.index == bin_index:
                bal.amount = checked_add(bal.amount, amount)
                return
        self.bins.append(BinBalance(index=bin_index, amount=amount))

    def debit(self, bin_index: int, amount: int) -> None:
        """Remove `amount` from a bin. Raises InsufficientUserBalanceError if not held."""
        if amount == 0:
            return
        for i, bal in enumerate(self.bins):
            if bal.index == bin_index:
                if bal.amount < amount:
                    raise InsufficientUserBalanceError(bin_index, amount, bal.amount)
                bal.amount -= amount
                if bal.amount == 0:
                    del self.bins[i]
                return
        raise InsufficientUserBalanceError(bin_index, amount, 0)
