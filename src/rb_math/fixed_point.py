"""Checked unsigned fixed-width arithmetic.

Python ints never overflow, so the u64/u128 widths of the ledger are
enforced explicitly: every helper raises instead of wrapping or going
negative. Quantities live in u64; multiply-then-divide sequences widen to
u128 for the intermediate product.
"""

from typing import Final

from src.rb_common.errors import DivisionByZeroError, MathOverflowError, MathUnderflowError

U64_MAX: Final[int] = (1 << 64) - 1
U128_MAX: Final[int] = (1 << 128) - 1

# 18-decimal fixed-point scale for logarithms
WAD: Final[int] = 10**18


def checked_add(a: int, b: int, bound: int = U64_MAX) -> int:
    result = a + b
    if result > bound:
        raise MathOverflowError(f"{a} + {b}")
    return result


def checked_sub(a: int, b: int) -> int:
    if b > a:
        raise MathUnderflowError(f"{a} - {b}")
    return a - b


def checked_mul(a: int, b: int, bound: int = U64_MAX) -> int:
    result = a * b
    if result > bound:
        raise MathOverflowError(f"{a} * {b}")
    return result


def checked_div(a: int, b: int) -> int:
    if b == 0:
        raise DivisionByZeroError(f"{a} / 0")
    return a // b


def mul_div_floor(a: int, b: int, denominator: int, bound: int = U64_MAX) -> int:
    """floor(a * b / denominator) with a u128 intermediate."""
    if denominator == 0:
        raise DivisionByZeroError(f"{a} * {b} / 0")
    product = checked_mul(a, b, U128_MAX)
    result = product // denominator
    if result > bound:
        raise MathOverflowError(f"{a} * {b} / {denominator}")
    return result


def mul_div_ceil(a: int, b: int, denominator: int, bound: int = U64_MAX) -> int:
    """ceil(a * b / denominator) with a u128 intermediate."""
    if denominator == 0:
        raise DivisionByZeroError(f"{a} * {b} / 0")
    product = checked_mul(a, b, U128_MAX)
    result = -(-product // denominator)
    if result > bound:
        raise MathOverflowError(f"{a} * {b} / {denominator}")
    return result
