"""Integer amount utilities for the collateral-backed range-bet ledger.

All quantities, costs, and balances are ints in the token's smallest unit.
No float, no Decimal.
"""

from typing import Annotated

from pydantic import Field

from src.rb_common.errors import InvalidAmountError
from src.rb_math.fixed_point import U64_MAX


def validate_u64(name: str, value: object) -> int:
    """Return value unchanged if it is an int in [0, U64_MAX], else raise InvalidAmountError."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmountError(name, value)
    if not (0 <= value <= U64_MAX):
        raise InvalidAmountError(name, value)
    return value


def amount_to_display(amount: int, decimals: int = 6) -> str:
    """Render a smallest-unit amount: 1_500_000 (6 decimals) -> '1.500000'."""
    if decimals <= 0:
        return f"{amount:,}"
    sign = "-" if amount < 0 else ""
    whole, frac = divmod(abs(amount), 10**decimals)
    return f"{sign}{whole:,}.{frac:0{decimals}d}"


# Request-model field type: pydantic enforces the same bounds as validate_u64.
U64 = Annotated[int, Field(ge=0, le=U64_MAX)]
