"""Ledger invariant verification after each mutation.

INV-1: total_supply == sum(bins), no bin negative
INV-2: winning_bin is set iff the market is closed, and lies in range
INV-3: for every bin, the position amounts sum to the bin quantity
"""

import logging
from collections import defaultdict

from src.rb_market.domain.models import Market
from src.rb_position.domain.models import Position

logger = logging.getLogger(__name__)


def verify_market_invariants(market: Market) -> None:
    """Check INV-1 and INV-2 on one market record. Raises AssertionError if violated."""
    bin_sum = sum(market.bins)
    assert market.total_supply == bin_sum, (
        f"INV-1 violated: market={market.id} total_supply={market.total_supply} "
        f"!= sum(bins)={bin_sum}"
    )
    assert all(q >= 0 for q in market.bins), f"INV-1 violated: market={market.id} negative bin"
    assert len(market.bins) == market.bin_count, (
        f"INV-1 violated: market={market.id} holds {len(market.bins)} bins, "
        f"range needs {market.bin_count}"
    )
    if market.closed:
        assert market.winning_bin is not None and market.contains_bin(market.winning_bin), (
            f"INV-2 violated: market={market.id} closed with winning_bin={market.winning_bin}"
        )
    else:
        assert market.winning_bin is None, (
            f"INV-2 violated: market={market.id} open with winning_bin={market.winning_bin}"
        )

    logger.debug(
        "Invariants OK: market=%d, total_supply=%d, collateral=%d",
        market.id, market.total_supply, market.collateral_balance,
    )


def verify_conservation(market: Market, positions: list[Position]) -> list[str]:
    """Check INV-3. Returns list of violation strings."""
    violations: list[str] = []
    held: dict[int, int] = defaultdict(int)
    for position in positions:
        for bal in position.bins:
            held[bal.index] += bal.amount

    for bin_index in sorted(held):
        if not market.contains_bin(bin_index):
            violations.append(
                f"INV-3 violated: market={market.id} positions hold bin {bin_index} "
                f"outside [{market.min_bin_index}, {market.max_bin_index}]"
            )
    for bin_index in market.bin_range():
        quantity = market.bin_quantity(bin_index)
        if held[bin_index] != quantity:
            violations.append(
                f"INV-3 violated: market={market.id} bin={bin_index} "
                f"positions={held[bin_index]} != bin quantity={quantity}"
            )

    for msg in violations:
        logger.error(msg)
    return violations
