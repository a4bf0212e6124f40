"""Exceptions raised by ledger primitives and token operations.

Every error is raised before the failing call mutates any state.
"""

from __future__ import annotations


class TokenError(ValueError):
    """Base class for all token errors."""


class InvalidAmount(TokenError):
    """Amount is not an unsigned 256-bit integer."""

    def __init__(self, amount: object) -> None:
        self.amount = amount
        super().__init__(f"Invalid amount: {amount!r}")


class InsufficientBalance(TokenError):
    def __init__(self, account: str, balance: int, needed: int) -> None:
        self.account = account
        self.balance = balance
        self.needed = needed
        super().__init__(
            f"Insufficient balance: {account} has {balance}, needs {needed}"
        )


class InsufficientAllowance(TokenError):
    def __init__(self, owner: str, spender: str, allowance: int, needed: int) -> None:
        self.owner = owner
        self.spender = spender
        self.allowance = allowance
        self.needed = needed
        super().__init__(
            f"Insufficient allowance: {spender} may spend {allowance} "
            f"of {owner}, needs {needed}"
        )


class Overflow(TokenError):
    """Result would exceed MAX_UINT256."""


class Underflow(TokenError):
    """Result would drop below zero."""
