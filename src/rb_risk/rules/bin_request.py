"""Shape checks for bin-indexed requests (buy, sell, transfer, quotes)."""

from collections.abc import Sequence

from src.rb_common.errors import (
    ArrayLengthMismatchError,
    DuplicateBinIndexError,
    EmptyRequestError,
)
from src.rb_common.units import validate_u64
from src.rb_market.domain.models import Market


def check_bin_request(
    market: Market, bin_indices: Sequence[int], quantities: Sequence[int]
) -> None:
    """Equal non-empty arrays, u64 quantities, every index in range.

    A zero quantity is still range-checked: one bad index fails the whole call.
    """
    if len(bin_indices) != len(quantities):
        raise ArrayLengthMismatchError(len(bin_indices), len(quantities))
    if not bin_indices:
        raise EmptyRequestError()
    for quantity in quantities:
        validate_u64("quantity", quantity)
    check_bins_in_range(market, bin_indices)


def check_bins_in_range(market: Market, bin_indices: Sequence[int]) -> None:
    if not bin_indices:
        raise EmptyRequestError()
    for bin_index in bin_indices:
        market.offset_of(bin_index)


def check_distinct_bins(bin_indices: Sequence[int]) -> None:
    seen: set[int] = set()
    for bin_index in bin_indices:
        if bin_index in seen:
            raise DuplicateBinIndexError(bin_index)
        seen.add(bin_index)
