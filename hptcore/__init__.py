"""hptcore — fixed-supply fungible token ledger. Zero dependencies."""

from .crypto import GENESIS, hash_state, verify_records
from .errors import (
    InsufficientAllowance,
    InsufficientBalance,
    InvalidAmount,
    Overflow,
    TokenError,
    Underflow,
)
from .events import Approval, EventLog, EventRecord, Transfer
from .ledger import Ledger
from .token import DEFAULT_CONFIG, ZERO_ADDRESS, Token, TokenConfig
from .uint import MAX_UINT256, expand_to_decimals

__version__ = "1.0.0"

__all__ = [
    "Token",
    "TokenConfig",
    "DEFAULT_CONFIG",
    "Ledger",
    "Transfer",
    "Approval",
    "EventLog",
    "EventRecord",
    "TokenError",
    "InsufficientBalance",
    "InsufficientAllowance",
    "InvalidAmount",
    "Overflow",
    "Underflow",
    "MAX_UINT256",
    "ZERO_ADDRESS",
    "GENESIS",
    "expand_to_decimals",
    "hash_state",
    "verify_records",
]
