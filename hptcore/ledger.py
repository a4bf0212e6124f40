"""Ledger — balances, allowances and total supply for one token.

The ledger owns all state and exposes atomic primitives. Each primitive
either applies fully or raises before touching state. Higher-level
operations combine them, so they run the matching ``check_*`` for every
step before the first mutation.

    Invariant:  total_supply() == sum(balance_of(a) for every account a)

An allowance equal to ``MAX_UINT256`` means unlimited and is never
decremented by ``spend_allowance``.
"""

from __future__ import annotations

import logging
from typing import Any

from .crypto import hash_state
from .errors import InsufficientAllowance, InsufficientBalance
from .uint import MAX_UINT256, checked_add, checked_sub, require_amount

logger = logging.getLogger(__name__)


class Ledger:
    """In-memory token state for a single asset.

    Usage::

        ledger = Ledger("alice", supply=1_000_000)
        ledger.debit("alice", 10)
        ledger.credit("bob", 10)

        ledger.balance_of("bob")   # 10
        ledger.is_conserved()      # True
    """

    def __init__(self, holder: str, supply: int) -> None:
        require_amount(supply)
        self._balances: dict[str, int] = {}
        self._allowances: dict[tuple[str, str], int] = {}
        self._total_supply = supply
        if supply:
            self._balances[holder] = supply
        logger.info("Minted initial supply %d to %s", supply, holder)

    # Queries

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    def allowance_of(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    def total_supply(self) -> int:
        return self._total_supply

    # Pre-checks: raise exactly what the matching mutator would

    def check_credit(self, account: str, amount: int) -> int:
        """Return the balance ``credit`` would produce."""
        require_amount(amount)
        return checked_add(self.balance_of(account), amount)

    def check_debit(self, account: str, amount: int) -> int:
        """Return the balance ``debit`` would produce."""
        require_amount(amount)
        balance = self.balance_of(account)
        if amount > balance:
            raise InsufficientBalance(account, balance, amount)
        return balance - amount

    def check_spend(self, owner: str, spender: str, amount: int) -> int:
        """Return the allowance ``spend_allowance`` would leave."""
        require_amount(amount)
        current = self.allowance_of(owner, spender)
        if current == MAX_UINT256:
            return current
        if amount > current:
            raise InsufficientAllowance(owner, spender, current, amount)
        return current - amount

    # Mutators

    def credit(self, account: str, amount: int) -> None:
        self._balances[account] = self.check_credit(account, amount)

    def debit(self, account: str, amount: int) -> None:
        remaining = self.check_debit(account, amount)
        if remaining:
            self._balances[account] = remaining
        else:
            self._balances.pop(account, None)

    def set_allowance(self, owner: str, spender: str, amount: int) -> None:
        """Overwrite the allowance, whatever its previous value."""
        self._allowances[(owner, spender)] = require_amount(amount)

    def spend_allowance(self, owner: str, spender: str, amount: int) -> None:
        remaining = self.check_spend(owner, spender, amount)
        if remaining != MAX_UINT256:
            self._allowances[(owner, spender)] = remaining

    def reduce_supply(self, amount: int) -> None:
        """Lower total supply. The caller must already have debited ``amount``."""
        require_amount(amount)
        self._total_supply = checked_sub(self._total_supply, amount)

    # Inspection

    def holders(self) -> dict[str, int]:
        """All accounts with a nonzero balance."""
        return {a: b for a, b in self._balances.items() if b}

    def allowances(self) -> dict[tuple[str, str], int]:
        return dict(self._allowances)

    def is_conserved(self) -> bool:
        """Check that total supply equals the sum of all balances."""
        return self._total_supply == sum(self._balances.values())

    def snapshot(self) -> dict[str, Any]:
        """JSON-safe canonical dump of the full state."""
        allowances: dict[str, dict[str, str]] = {}
        for (owner, spender), amount in sorted(self._allowances.items()):
            allowances.setdefault(owner, {})[spender] = str(amount)
        return {
            "total_supply": str(self._total_supply),
            "balances": {a: str(b) for a, b in sorted(self.holders().items())},
            "allowances": allowances,
        }

    def state_hash(self) -> str:
        """SHA-256 of the canonical snapshot."""
        return hash_state(self.snapshot())
