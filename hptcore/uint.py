"""Unsigned 256-bit amount arithmetic.

Amounts are plain Python ints constrained to ``[0, MAX_UINT256]``.
Nothing wraps: leaving the range raises.
"""

from __future__ import annotations

from .errors import InvalidAmount, Overflow, Underflow

MAX_UINT256 = 2**256 - 1


def require_amount(amount: object) -> int:
    """Return ``amount`` if it is a valid uint256, else raise InvalidAmount."""
    # bool is an int subclass
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmount(amount)
    if amount < 0 or amount > MAX_UINT256:
        raise InvalidAmount(amount)
    return amount


def checked_add(a: int, b: int) -> int:
    result = a + b
    if result > MAX_UINT256:
        raise Overflow(f"Overflow: {a} + {b} exceeds MAX_UINT256")
    return result


def checked_sub(a: int, b: int) -> int:
    if b > a:
        raise Underflow(f"Underflow: {a} - {b} is negative")
    return a - b


def expand_to_decimals(n: int, decimals: int = 18) -> int:
    """Scale a whole-token count to base units, e.g. ``10`` -> ``10 * 10**18``."""
    return require_amount(n * 10**decimals)
