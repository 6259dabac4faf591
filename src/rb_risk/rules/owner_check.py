from src.rb_common.errors import OwnerOnlyError, ProgramNotInitializedError
from src.rb_market.domain.models import ProgramState


def require_program(state: ProgramState | None) -> ProgramState:
    if state is None:
        raise ProgramNotInitializedError()
    return state


def check_owner(state: ProgramState, caller: str) -> None:
    """Raise OwnerOnlyError(3001) unless caller is the program owner."""
    if caller != state.owner:
        raise OwnerOnlyError(caller)
