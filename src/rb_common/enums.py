"""Global enums shared by every module."""

from enum import Enum


class ErrorKind(str, Enum):
    """Top-level failure taxonomy; every AppError carries exactly one."""

    VALIDATION = "VALIDATION"
    STATE = "STATE"
    AUTHORIZATION = "AUTHORIZATION"
    ECONOMIC = "ECONOMIC"
    ARITHMETIC = "ARITHMETIC"


class MarketStatus(str, Enum):
    OPEN_ACTIVE = "OPEN_ACTIVE"
    OPEN_INACTIVE = "OPEN_INACTIVE"
    CLOSED = "CLOSED"


class CollateralFlow(str, Enum):
    """Direction of a custody instruction issued by the ledger."""

    BUY_COST = "BUY_COST"                  # user -> market vault
    SELL_REVENUE = "SELL_REVENUE"          # market vault -> user
    REWARD_PAYOUT = "REWARD_PAYOUT"        # market vault -> winner
    COLLATERAL_WITHDRAW = "COLLATERAL_WITHDRAW"  # market vault -> owner
