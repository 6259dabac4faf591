"""Domain models for rb_market — pure dataclasses, no SQLAlchemy dependency.

Bin indices are signed: bin_index = tick / tick_spacing. The dense `bins`
vector is stored from min_bin_index upwards, so the storage offset of a bin
is bin_index - min_bin_index. Offsets never leave this module.
"""

from dataclasses import dataclass, field

from src.rb_common.enums import MarketStatus
from src.rb_common.errors import BinIndexOutOfRangeError


@dataclass
class ProgramState:
    owner: str
    market_count: int = 0            # next market id
    last_closed_market: int = -1     # -1 = no market closed yet

    @property
    def next_market_to_close(self) -> int:
        return self.last_closed_market + 1


@dataclass
class Market:
    id: int
    tick_spacing: int
    min_tick: int
    max_tick: int
    open_ts: int
    close_ts: int
    bins: list[int] = field(default_factory=list)   # token quantity per bin
    total_supply: int = 0                            # T == sum(bins)
    collateral_balance: int = 0
    active: bool = True
    closed: bool = False
    winning_bin: int | None = None

    @classmethod
    def open(
        cls, market_id: int, tick_spacing: int, min_tick: int, max_tick: int,
        open_ts: int, close_ts: int,
    ) -> "Market":
        """New Open&Active market with every bin empty."""
        market = cls(
            id=market_id,
            tick_spacing=tick_spacing,
            min_tick=min_tick,
            max_tick=max_tick,
            open_ts=open_ts,
            close_ts=close_ts,
        )
        market.bins = [0] * market.bin_count
        return market

    @property
    def min_bin_index(self) -> int:
        return self.min_tick // self.tick_spacing

    @property
    def max_bin_index(self) -> int:
        return -(-self.max_tick // self.tick_spacing)

    @property
    def bin_count(self) -> int:
        return self.max_bin_index - self.min_bin_index + 1

    @property
    def status(self) -> MarketStatus:
        if self.closed:
            return MarketStatus.CLOSED
        return MarketStatus.OPEN_ACTIVE if self.active else MarketStatus.OPEN_INACTIVE

    def contains_bin(self, bin_index: int) -> bool:
        return self.min_bin_index <= bin_index <= self.max_bin_index

    def offset_of(self, bin_index: int) -> int:
        if not self.contains_bin(bin_index):
            raise BinIndexOutOfRangeError(bin_index, self.min_bin_index, self.max_bin_index)
        return bin_index - self.min_bin_index

    def bin_quantity(self, bin_index: int) -> int:
        return self.bins[self.offset_of(bin_index)]

    def bin_range(self) -> range:
        return range(self.min_bin_index, self.max_bin_index + 1)
