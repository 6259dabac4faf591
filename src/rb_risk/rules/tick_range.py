from typing import Final

from src.rb_common.errors import (
    InvalidTickRangeError,
    InvalidTickSpacingError,
    TickNotMultipleError,
    TooManyBinsError,
)

# bins are stored densely; 2**16 keeps every dense offset within u16
MAX_BIN_COUNT: Final[int] = 65_536


def check_tick_range(tick_spacing: int, min_tick: int, max_tick: int) -> None:
    """Validate a market's tick grid before any bin is allocated."""
    if tick_spacing <= 0:
        raise InvalidTickSpacingError(tick_spacing)
    if min_tick % tick_spacing != 0:
        raise TickNotMultipleError("min_tick", min_tick, tick_spacing)
    if max_tick % tick_spacing != 0:
        raise TickNotMultipleError("max_tick", max_tick, tick_spacing)
    if min_tick >= max_tick:
        raise InvalidTickRangeError(min_tick, max_tick)
    bin_count = (max_tick - min_tick) // tick_spacing + 1
    if bin_count > MAX_BIN_COUNT:
        raise TooManyBinsError(bin_count, MAX_BIN_COUNT)
