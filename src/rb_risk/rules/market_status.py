from src.rb_common.errors import (
    MarketClosedError,
    MarketNotActiveError,
    MarketNotClosedError,
    MarketNotFoundError,
)
from src.rb_market.domain.models import Market


def require_market(market: Market | None, market_id: int) -> Market:
    if market is None:
        raise MarketNotFoundError(market_id)
    return market


def check_market_tradable(market: Market) -> None:
    """Raise MarketClosedError or MarketNotActiveError unless Open&Active. Closed wins."""
    if market.closed:
        raise MarketClosedError(market.id)
    if not market.active:
        raise MarketNotActiveError(market.id)


def check_market_not_closed(market: Market) -> None:
    if market.closed:
        raise MarketClosedError(market.id)


def check_market_closed(market: Market) -> None:
    if not market.closed:
        raise MarketNotClosedError(market.id)
