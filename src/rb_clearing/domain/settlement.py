"""Winner payout for a closed market.

Each holder of the winning bin claims a pro-rata share of the remaining
collateral, floored:

    reward = held * collateral_balance // bins[winning_bin]

The claimed tokens are burned from the bin and from total supply, and the
reward leaves the collateral balance. Later claimants therefore divide what
is left by what is left, and the last claimant receives the remainder of
the rounding.
"""

from src.rb_common.errors import NotWinningBinError, ZeroRewardError
from src.rb_market.domain.models import Market
from src.rb_math.fixed_point import checked_sub, mul_div_floor
from src.rb_position.domain.models import Position


def compute_reward(market: Market, position: Position | None, user: str) -> tuple[int, int]:
    """Return (winning_bin, reward) for the user's holding in the winning bin."""
    winning_bin = market.winning_bin
    if winning_bin is None or position is None or position.amount_of(winning_bin) == 0:
        raise NotWinningBinError(market.id, user)
    held = position.amount_of(winning_bin)
    reward = mul_div_floor(held, market.collateral_balance, market.bin_quantity(winning_bin))
    return winning_bin, reward


def apply_claim(market: Market, position: Position) -> int:
    """Burn the position's winning entry and return the reward it pays."""
    winning_bin, reward = compute_reward(market, position, position.owner)
    if reward == 0:
        raise ZeroRewardError(market.id, position.owner)

    held = position.amount_of(winning_bin)
    offset = market.offset_of(winning_bin)
    position.debit(winning_bin, held)
    market.bins[offset] = checked_sub(market.bins[offset], held)
    market.total_supply = checked_sub(market.total_supply, held)
    market.collateral_balance = checked_sub(market.collateral_balance, reward)
    return reward
