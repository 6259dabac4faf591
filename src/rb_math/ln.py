"""Deterministic natural logarithm of an integer ratio, WAD scaled.

Algorithm (pinned, every executor must reproduce it bit for bit):

  1. k = floor(log2(a / b)) from the bit length of the integer quotient.
  2. m = floor(a * WAD / (b << k)), the mantissa in [WAD, 2 * WAD).
  3. z = floor((m - WAD) * WAD / (m + WAD)), so z / WAD < 1/3.
  4. ln(m) = 2 * sum(z^(2i+1) / (2i+1)) for i in [0, LN_SERIES_TERMS),
     each power and quotient truncated.
  5. ln(a / b) = k * LN2_WAD + ln(m).

Every step truncates toward zero, so the result never exceeds the exact
value and falls short of it by less than LN_ERROR_BOUND_WAD.
"""

from typing import Final

from src.rb_common.errors import DivisionByZeroError, MathUnderflowError
from src.rb_math.fixed_point import U128_MAX, WAD, checked_add, mul_div_floor

# floor(ln(2) * 10**18)
LN2_WAD: Final[int] = 693_147_180_559_945_309

LN_SERIES_TERMS: Final[int] = 24

# Upper bound on (exact - computed) in WAD units for any u64 ratio
LN_ERROR_BOUND_WAD: Final[int] = 128


def ln_ratio_wad(numerator: int, denominator: int) -> int:
    """Return floor-biased ln(numerator / denominator) * WAD for numerator >= denominator > 0."""
    if denominator == 0:
        raise DivisionByZeroError(f"ln({numerator} / 0)")
    if numerator < denominator:
        raise MathUnderflowError(f"ln({numerator} / {denominator}) is negative")
    if numerator == denominator:
        return 0

    k = (numerator // denominator).bit_length() - 1
    mantissa = mul_div_floor(numerator, WAD, denominator << k, U128_MAX)

    z = mul_div_floor(mantissa - WAD, WAD, mantissa + WAD, U128_MAX)
    z_squared = mul_div_floor(z, z, WAD, U128_MAX)

    series = 0
    term = z
    for i in range(LN_SERIES_TERMS):
        series = checked_add(series, term // (2 * i + 1), U128_MAX)
        term = mul_div_floor(term, z_squared, WAD, U128_MAX)

    return checked_add(k * LN2_WAD, 2 * series, U128_MAX)
