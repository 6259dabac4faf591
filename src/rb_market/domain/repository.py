"""Repository Protocol — the explicit ledger handle every operation receives.

Reads return detached copies: mutating a returned record changes nothing
until it is passed back to a save method. Saves made inside `atomic()` are
discarded together if the block raises.

Unit tests use the in-memory implementation; the SQLAlchemy implementation
persists the same records.
"""

from contextlib import AbstractContextManager
from typing import Protocol

from src.rb_market.domain.models import Market, ProgramState
from src.rb_position.domain.models import Position


class LedgerRepositoryProtocol(Protocol):
    def atomic(self) -> AbstractContextManager[None]: ...

    def get_program_state(self) -> ProgramState | None: ...

    def save_program_state(self, state: ProgramState) -> None: ...

    def get_market(self, market_id: int) -> Market | None: ...

    def save_market(self, market: Market) -> None: ...

    def list_markets(self) -> list[Market]: ...

    def get_position(self, owner: str, market_id: int) -> Position | None: ...

    def save_position(self, position: Position) -> None: ...

    def list_positions(self, market_id: int) -> list[Position]: ...
