from src.rb_common.errors import MarketAlreadyClosedError, OutOfOrderCloseError
from src.rb_market.domain.models import Market, ProgramState


def check_close_order(state: ProgramState, market: Market) -> None:
    """Markets close strictly in id order.

    The order check runs first, so closing an earlier market again reports
    OutOfOrderCloseError. MarketAlreadyClosedError only fires when the next
    expected market is flagged closed without the registry having advanced.
    """
    expected = state.next_market_to_close
    if market.id != expected:
        raise OutOfOrderCloseError(market.id, expected)
    if market.closed:
        raise MarketAlreadyClosedError(market.id)
