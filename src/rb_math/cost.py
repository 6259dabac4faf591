"""Bonding-curve cost engine.

A bin's marginal price is its share of total supply, x / T. Buying q tokens
into a bin holding x integrates that price while bin and total grow
together:

    cost(x, q, T)    = q - (T - x) * ln((T + q) / T)     T > 0
    cost(x, q, 0)    = q                                 first trade, price 1

Selling traverses the same path backwards:

    revenue(x, q, T) = q - (T - x) * ln(T / (T - q))     x < T
    revenue(T, q, T) = q

Rounding is pinned against the caller: buy costs round up (lower-bound ln,
floor of the reduction) and sell revenues round down (upper-bound ln,
ceiling of the reduction).

Batches thread T left to right exactly as if every leg were submitted on
its own: each leg is priced against the total left behind by the previous
one. Batch prices are therefore order dependent.
"""

from collections.abc import Sequence

from src.rb_common.errors import (
    ArrayLengthMismatchError,
    EmptyBinError,
    InsufficientBinBalanceError,
    InsufficientSupplyError,
    InvalidBinStateError,
)
from src.rb_common.units import validate_u64
from src.rb_math.fixed_point import (
    U64_MAX,
    WAD,
    checked_add,
    checked_mul,
    checked_sub,
    mul_div_ceil,
    mul_div_floor,
)
from src.rb_math.ln import LN_ERROR_BOUND_WAD, ln_ratio_wad
from src.rb_math.root_finder import bisect_max_within


def _check_bin_state(bin_quantity: int, total_supply: int) -> None:
    if bin_quantity > total_supply:
        raise InvalidBinStateError(bin_quantity, total_supply)


# ---------------------------------------------------------------------------
# Single bin
# ---------------------------------------------------------------------------


def calculate_bin_buy_cost(amount: int, bin_quantity: int, total_supply: int) -> int:
    """Collateral required to buy `amount` tokens into one bin."""
    validate_u64("amount", amount)
    validate_u64("bin_quantity", bin_quantity)
    validate_u64("total_supply", total_supply)
    _check_bin_state(bin_quantity, total_supply)

    if amount == 0:
        return 0
    new_total = checked_add(total_supply, amount)
    if total_supply == 0 or bin_quantity == total_supply:
        return amount

    ln_wad = ln_ratio_wad(new_total, total_supply)
    reduction = mul_div_floor(total_supply - bin_quantity, ln_wad, WAD)
    return checked_sub(amount, reduction)


def calculate_bin_sell_cost(amount: int, bin_quantity: int, total_supply: int) -> int:
    """Collateral returned for selling `amount` tokens out of one bin."""
    validate_u64("amount", amount)
    validate_u64("bin_quantity", bin_quantity)
    validate_u64("total_supply", total_supply)

    if amount == 0:
        return 0
    if bin_quantity == 0:
        raise EmptyBinError()
    if amount > bin_quantity:
        raise InsufficientBinBalanceError(amount, bin_quantity)
    _check_bin_state(bin_quantity, total_supply)

    if bin_quantity == total_supply:
        return amount

    # amount <= bin_quantity < total_supply, so the remainder is positive
    remaining = total_supply - amount
    ln_wad = ln_ratio_wad(total_supply, remaining) + LN_ERROR_BOUND_WAD
    reduction = mul_div_ceil(total_supply - bin_quantity, ln_wad, WAD)
    return amount - min(reduction, amount)


# ---------------------------------------------------------------------------
# Batches (per-bin amounts)
# ---------------------------------------------------------------------------


def calculate_batch_buy_cost(
    bin_quantities: Sequence[int], amounts: Sequence[int], total_supply: int
) -> int:
    """Total cost of buying amounts[i] into distinct bins holding bin_quantities[i].

    Zero amounts are skipped and do not move T.
    """
    if len(bin_quantities) != len(amounts):
        raise ArrayLengthMismatchError(len(bin_quantities), len(amounts))

    total_cost = 0
    current_total = total_supply
    for bin_quantity, amount in zip(bin_quantities, amounts):
        if amount == 0:
            continue
        cost = calculate_bin_buy_cost(amount, bin_quantity, current_total)
        total_cost = checked_add(total_cost, cost)
        current_total = checked_add(current_total, amount)
    return total_cost


def calculate_batch_sell_cost(
    bin_quantities: Sequence[int], amounts: Sequence[int], total_supply: int
) -> int:
    """Total revenue of selling amounts[i] out of distinct bins holding bin_quantities[i]."""
    if len(bin_quantities) != len(amounts):
        raise ArrayLengthMismatchError(len(bin_quantities), len(amounts))

    total_revenue = 0
    current_total = total_supply
    for bin_quantity, amount in zip(bin_quantities, amounts):
        if amount == 0:
            continue
        revenue = calculate_bin_sell_cost(amount, bin_quantity, current_total)
        total_revenue = checked_add(total_revenue, revenue)
        current_total = checked_sub(current_total, amount)
    return total_revenue


# ---------------------------------------------------------------------------
# Multi-bin convenience (same amount in every bin)
# ---------------------------------------------------------------------------


def calculate_multi_bins_buy_cost(
    amount: int, bin_quantities: Sequence[int], total_supply: int
) -> int:
    if not bin_quantities or amount == 0:
        return 0
    return calculate_batch_buy_cost(
        bin_quantities, [amount] * len(bin_quantities), total_supply
    )


def calculate_multi_bins_sell_cost(
    amount: int, bin_quantities: Sequence[int], total_supply: int
) -> int:
    if not bin_quantities or amount == 0:
        return 0

    for bin_quantity in bin_quantities:
        if bin_quantity == 0:
            raise EmptyBinError()
        if amount > bin_quantity:
            raise InsufficientBinBalanceError(amount, bin_quantity)
    total_amount = checked_mul(amount, len(bin_quantities))
    if total_amount > total_supply:
        raise InsufficientSupplyError(total_amount, total_supply)

    return calculate_batch_sell_cost(
        bin_quantities, [amount] * len(bin_quantities), total_supply
    )


# ---------------------------------------------------------------------------
# Inverse: budget -> quantity
# ---------------------------------------------------------------------------


def calculate_x_for_bin(budget: int, bin_quantity: int, total_supply: int) -> int:
    """Largest amount whose buy cost in this bin does not exceed `budget`."""
    validate_u64("budget", budget)
    validate_u64("bin_quantity", bin_quantity)
    validate_u64("total_supply", total_supply)
    _check_bin_state(bin_quantity, total_supply)

    if budget == 0:
        return 0
    headroom = U64_MAX - total_supply
    if total_supply == 0 or bin_quantity == total_supply:
        return min(budget, headroom)

    # cost(q) <= q, so the budget itself is always affordable
    return bisect_max_within(
        lambda q: calculate_bin_buy_cost(q, bin_quantity, total_supply),
        budget,
        lo=min(budget, headroom),
        hi=headroom,
    )


def calculate_x_for_multi_bins(
    budget: int, bin_quantities: Sequence[int], total_supply: int
) -> int:
    """Largest uniform per-bin amount whose threaded batch cost fits `budget`."""
    validate_u64("budget", budget)
    validate_u64("total_supply", total_supply)
    if budget == 0 or not bin_quantities:
        return 0

    count = len(bin_quantities)
    hi = (U64_MAX - total_supply) // count
    return bisect_max_within(
        lambda x: calculate_multi_bins_buy_cost(x, bin_quantities, total_supply),
        budget,
        lo=min(budget // count, hi),
        hi=hi,
    )
