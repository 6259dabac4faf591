"""InMemoryLedgerRepository — dict-backed implementation of LedgerRepositoryProtocol.

Records are deep-copied on every read and write so callers only ever hold
detached working copies. `atomic()` snapshots the store and restores it if
the block raises.
"""

import copy
from collections.abc import Iterator
from contextlib import contextmanager

from src.rb_market.domain.models import Market, ProgramState
from src.rb_position.domain.models import Position


class InMemoryLedgerRepository:
    def __init__(self) -> None:
        self._program: ProgramState | None = None
        self._markets: dict[int, Market] = {}
        self._positions: dict[tuple[str, int], Position] = {}

    @contextmanager
    def atomic(self) -> Iterator[None]:
        snapshot = copy.deepcopy((self._program, self._markets, self._positions))
        try:
            yield
        except Exception:
            self._program, self._markets, self._positions = snapshot
            raise

    def get_program_state(self) -> ProgramState | None:
        return copy.deepcopy(self._program)

    def save_program_state(self, state: ProgramState) -> None:
        self._program = copy.deepcopy(state)

    def get_market(self, market_id: int) -> Market | None:
        return copy.deepcopy(self._markets.get(market_id))

    def save_market(self, market: Market) -> None:
        self._markets[market.id] = copy.deepcopy(market)

    def list_markets(self) -> list[Market]:
        return [copy.deepcopy(m) for _, m in sorted(self._markets.items())]

    def get_position(self, owner: str, market_id: int) -> Position | None:
        return copy.deepcopy(self._positions.get((owner, market_id)))

    def save_position(self, position: Position) -> None:
        self._positions[(position.owner, position.market_id)] = copy.deepcopy(position)

    def list_positions(self, market_id: int) -> list[Position]:
        return [
            copy.deepcopy(p)
            for (_, mid), p in sorted(self._positions.items())
            if mid == market_id
        ]
