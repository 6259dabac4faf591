"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Validation (bad arguments, unknown records)
  2xxx: State (lifecycle preconditions)
  3xxx: Authorization
  4xxx: Economic (balances, slippage)
  5xxx: Arithmetic (fixed-point kernel)

No error is retryable from the engine's point of view.
"""

from src.rb_common.enums import ErrorKind


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        kind: ErrorKind = ErrorKind.VALIDATION,
    ) -> None:
        self.code = code
        self.message = message
        self.kind = kind
        super().__init__(message)


# --- 1xxx: Validation ---

class InvalidTickSpacingError(AppError):
    def __init__(self, tick_spacing: int) -> None:
        super().__init__(1001, f"Tick spacing must be positive, got {tick_spacing}")


class TickNotMultipleError(AppError):
    def __init__(self, name: str, tick: int, tick_spacing: int) -> None:
        super().__init__(
            1002, f"{name} {tick} is not a multiple of tick spacing {tick_spacing}"
        )


class InvalidTickRangeError(AppError):
    def __init__(self, min_tick: int, max_tick: int) -> None:
        super().__init__(
            1003, f"Min tick must be less than max tick: {min_tick} >= {max_tick}"
        )


class BinIndexOutOfRangeError(AppError):
    def __init__(self, bin_index: int, min_bin: int, max_bin: int) -> None:
        super().__init__(
            1004, f"Bin index {bin_index} out of range [{min_bin}, {max_bin}]"
        )


class ArrayLengthMismatchError(AppError):
    def __init__(self, indices: int, quantities: int) -> None:
        super().__init__(
            1005, f"Array length mismatch: {indices} bin indices, {quantities} quantities"
        )


class EmptyRequestError(AppError):
    def __init__(self) -> None:
        super().__init__(1006, "At least one bin must be supplied")


class InvalidAmountError(AppError):
    def __init__(self, name: str, value: object) -> None:
        super().__init__(1007, f"{name} must be an unsigned 64-bit integer, got {value!r}")


class DuplicateBinIndexError(AppError):
    def __init__(self, bin_index: int) -> None:
        super().__init__(1008, f"Bin index {bin_index} listed more than once")


class InvalidBinStateError(AppError):
    def __init__(self, bin_quantity: int, total_supply: int) -> None:
        super().__init__(
            1009,
            f"Invalid bin state: bin quantity {bin_quantity} exceeds total supply {total_supply}",
        )


class MarketNotFoundError(AppError):
    def __init__(self, market_id: int) -> None:
        super().__init__(1010, f"Market not found: {market_id}")


class InvalidRequestError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(1011, f"Invalid request: {detail}")


class TooManyBinsError(AppError):
    def __init__(self, bin_count: int, max_bins: int) -> None:
        super().__init__(1012, f"Tick range spans {bin_count} bins, maximum is {max_bins}")


# --- 2xxx: State ---

class MarketNotActiveError(AppError):
    def __init__(self, market_id: int) -> None:
        super().__init__(2001, f"Market is not active: {market_id}", ErrorKind.STATE)


class MarketClosedError(AppError):
    def __init__(self, market_id: int) -> None:
        super().__init__(2002, f"Market is closed: {market_id}", ErrorKind.STATE)


class MarketAlreadyClosedError(AppError):
    def __init__(self, market_id: int) -> None:
        super().__init__(2003, f"Market already closed: {market_id}", ErrorKind.STATE)


class OutOfOrderCloseError(AppError):
    def __init__(self, market_id: int, expected: int) -> None:
        super().__init__(
            2004,
            f"Markets must be closed in order: got {market_id}, expected {expected}",
            ErrorKind.STATE,
        )


class MarketNotClosedError(AppError):
    def __init__(self, market_id: int) -> None:
        super().__init__(2005, f"Market is not closed: {market_id}", ErrorKind.STATE)


class ProgramNotInitializedError(AppError):
    def __init__(self) -> None:
        super().__init__(2006, "Program state has not been initialized", ErrorKind.STATE)


class ProgramAlreadyInitializedError(AppError):
    def __init__(self) -> None:
        super().__init__(2007, "Program state already initialized", ErrorKind.STATE)


# --- 3xxx: Authorization ---

class OwnerOnlyError(AppError):
    def __init__(self, caller: str) -> None:
        super().__init__(3001, f"Owner only function, caller {caller}", ErrorKind.AUTHORIZATION)


# --- 4xxx: Economic ---

class EmptyBinError(AppError):
    def __init__(self) -> None:
        super().__init__(4001, "Cannot sell tokens from empty bin", ErrorKind.ECONOMIC)


class InsufficientBinBalanceError(AppError):
    def __init__(self, amount: int, bin_quantity: int) -> None:
        super().__init__(
            4002,
            f"Cannot sell {amount} tokens, bin holds {bin_quantity}",
            ErrorKind.ECONOMIC,
        )


class InsufficientUserBalanceError(AppError):
    def __init__(self, bin_index: int, required: int, available: int) -> None:
        super().__init__(
            4003,
            f"Insufficient balance in bin {bin_index}: required {required}, available {available}",
            ErrorKind.ECONOMIC,
        )


class SlippageExceededError(AppError):
    def __init__(self, amount: int, limit: int, side: str) -> None:
        bound = "maximum" if side == "BUY" else "minimum"
        super().__init__(
            4004,
            f"Slippage exceeded: {side} amount {amount} violates {bound} {limit}",
            ErrorKind.ECONOMIC,
        )


class NoCollateralToWithdrawError(AppError):
    def __init__(self, market_id: int) -> None:
        super().__init__(4005, f"No collateral to withdraw: {market_id}", ErrorKind.ECONOMIC)


class SelfTransferError(AppError):
    def __init__(self) -> None:
        super().__init__(4006, "Cannot transfer to self", ErrorKind.ECONOMIC)


class NotWinningBinError(AppError):
    def __init__(self, market_id: int, user: str) -> None:
        super().__init__(
            4007,
            f"No claimable tokens in winning bin: market {market_id}, user {user}",
            ErrorKind.ECONOMIC,
        )


class InsufficientSupplyError(AppError):
    def __init__(self, amount: int, total_supply: int) -> None:
        super().__init__(
            4008,
            f"Cannot sell {amount} tokens, total supply is {total_supply}",
            ErrorKind.ECONOMIC,
        )


class CustodyTransferError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(4009, f"Custody rejected transfer: {detail}", ErrorKind.ECONOMIC)


class ZeroRewardError(AppError):
    def __init__(self, market_id: int, user: str) -> None:
        super().__init__(
            4010,
            f"Claim pays nothing: market {market_id}, user {user}",
            ErrorKind.ECONOMIC,
        )


# --- 5xxx: Arithmetic ---

class MathOverflowError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(5001, f"Math operation overflow: {detail}", ErrorKind.ARITHMETIC)


class MathUnderflowError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(5002, f"Math operation underflow: {detail}", ErrorKind.ARITHMETIC)


class DivisionByZeroError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(5003, f"Division by zero: {detail}", ErrorKind.ARITHMETIC)
