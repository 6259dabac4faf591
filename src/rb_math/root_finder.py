"""Bounded bisection used to invert the cost curve (no closed-form inverse)."""

import logging
from collections.abc import Callable
from typing import Final

from src.rb_common.enums import ErrorKind
from src.rb_common.errors import AppError

logger = logging.getLogger(__name__)

# A u64 search interval collapses to width 1 in at most 64 halvings
INVERSE_MAX_ITERATIONS: Final[int] = 64


def _fits(fn: Callable[[int], int], n: int, budget: int) -> bool:
    try:
        return fn(n) <= budget
    except AppError as e:
        # overflow while pricing n means n is unaffordable
        if e.kind is ErrorKind.ARITHMETIC:
            return False
        raise


def bisect_max_within(
    fn: Callable[[int], int],
    budget: int,
    lo: int,
    hi: int,
    max_iterations: int = INVERSE_MAX_ITERATIONS,
) -> int:
    """Largest n in [lo, hi] with fn(n) <= budget.

    fn must be non-decreasing and fn(lo) <= budget. If the iteration bound
    is hit before the interval closes, the best affordable n found so far
    is returned, never one that exceeds the budget.
    """
    if hi <= lo:
        return lo
    if _fits(fn, hi, budget):
        return hi

    # invariant: fn(lo) <= budget < fn(hi)
    for _ in range(max_iterations):
        if hi - lo <= 1:
            return lo
        mid = lo + (hi - lo) // 2
        if _fits(fn, mid, budget):
            lo = mid
        else:
            hi = mid

    if hi - lo <= 1:
        return lo
    logger.warning("bisection stopped at iteration bound: lo=%d hi=%d", lo, hi)
    return lo
