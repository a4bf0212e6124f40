"""Token — the public operations of a fixed-supply fungible token.

Every mutating call is one step: validate, mutate, notify. All checks for
a call run before its first ledger mutation, so a failing call changes
nothing and emits nothing. On success exactly one event is appended to
``token.events``, after the state change is complete.

    token = Token("alice", config=TokenConfig(total_supply=1_000_000))
    token.transfer("alice", "bob", 10)
    token.approve("alice", "bob", 10)
    token.transfer_from("bob", "alice", "bob", 10)

    token.balance_of("bob")            # 20
    token.allowance("alice", "bob")    # 0
    token.events.last                  # Transfer("alice", "bob", 10)
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Optional

from .errors import TokenError
from .events import Approval, EventLog, Listener, Transfer
from .ledger import Ledger
from .uint import expand_to_decimals, require_amount

logger = logging.getLogger(__name__)

ZERO_ADDRESS = "0x" + "0" * 40

# Whole tokens minted when no explicit supply is configured
DEFAULT_WHOLE_SUPPLY = 100 * 10**4


@dataclass(frozen=True)
class TokenConfig:
    """Static token metadata and the fixed supply minted at construction.

    ``total_supply`` is in base units. When omitted it is
    ``DEFAULT_WHOLE_SUPPLY`` scaled by ``decimals``.
    """

    name: str = "Hotpot Funds"
    symbol: str = "HPT"
    decimals: int = 18
    total_supply: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Token name must not be empty")
        if not self.symbol:
            raise ValueError("Token symbol must not be empty")
        if not 0 <= self.decimals <= 255:
            raise ValueError(f"Decimals must be in 0..255, got {self.decimals}")
        if self.total_supply is None:
            supply = expand_to_decimals(DEFAULT_WHOLE_SUPPLY, self.decimals)
            object.__setattr__(self, "total_supply", supply)
        require_amount(self.total_supply)


DEFAULT_CONFIG = TokenConfig()


class Token:
    """Transfer, approve, transfer_from, burn and burn_from over a Ledger.

    Caller identities are supplied by the host and trusted as given.
    The ledger is private: state changes only through these operations.

    A single lock serializes mutating calls on one instance. A mutating
    call made from inside another one on the same thread, e.g. by an
    event listener, raises ``TokenError`` instead of deadlocking.

    Each event is stamped with ``state_hash()``, which hashes the full
    snapshot, so every successful call costs O(accounts + allowances).
    """

    def __init__(
        self,
        holder: str,
        config: TokenConfig = DEFAULT_CONFIG,
        listeners: Iterable[Listener] = (),
    ) -> None:
        self.config = config
        self._ledger = Ledger(holder, config.total_supply)
        self.events = EventLog(listeners=list(listeners))
        self._lock = threading.Lock()
        self._owner: Optional[int] = None
        with self._exclusive("mint"):
            self._emit(Transfer(ZERO_ADDRESS, holder, config.total_supply))

    # Metadata

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def symbol(self) -> str:
        return self.config.symbol

    @property
    def decimals(self) -> int:
        return self.config.decimals

    # Queries

    def total_supply(self) -> int:
        return self._ledger.total_supply()

    def balance_of(self, account: str) -> int:
        return self._ledger.balance_of(account)

    def allowance(self, owner: str, spender: str) -> int:
        return self._ledger.allowance_of(owner, spender)

    def holders(self) -> dict[str, int]:
        return self._ledger.holders()

    def allowances(self) -> dict[tuple[str, str], int]:
        return self._ledger.allowances()

    def is_conserved(self) -> bool:
        return self._ledger.is_conserved()

    def snapshot(self) -> dict[str, Any]:
        return self._ledger.snapshot()

    def state_hash(self) -> str:
        return self._ledger.state_hash()

    # Operations

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        """Move ``amount`` from ``sender`` to ``recipient``.

        Self-transfer is not special-cased: it fails like any other
        overspend when ``amount`` exceeds the balance.
        """
        with self._exclusive("transfer"):
            try:
                self._ledger.check_debit(sender, amount)
                if recipient != sender:
                    self._ledger.check_credit(recipient, amount)
            except TokenError as exc:
                self._rejected("transfer", exc)
                raise
            self._ledger.debit(sender, amount)
            self._ledger.credit(recipient, amount)
            self._emit(Transfer(sender, recipient, amount))
        return True

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        """Set the allowance of ``spender`` over ``owner``, overwriting it."""
        with self._exclusive("approve"):
            try:
                require_amount(amount)
            except TokenError as exc:
                self._rejected("approve", exc)
                raise
            self._ledger.set_allowance(owner, spender, amount)
            self._emit(Approval(owner, spender, amount))
        return True

    def transfer_from(self, caller: str, owner: str, recipient: str, amount: int) -> bool:
        """Move ``amount`` of ``owner``'s tokens to ``recipient`` on allowance.

        The allowance is checked before the balance, so an unauthorized
        caller learns nothing about the owner's balance.
        """
        with self._exclusive("transfer_from"):
            try:
                self._ledger.check_spend(owner, caller, amount)
                self._ledger.check_debit(owner, amount)
                if recipient != owner:
                    self._ledger.check_credit(recipient, amount)
            except TokenError as exc:
                self._rejected("transfer_from", exc)
                raise
            self._ledger.spend_allowance(owner, caller, amount)
            self._ledger.debit(owner, amount)
            self._ledger.credit(recipient, amount)
            self._emit(Transfer(owner, recipient, amount))
        return True

    def burn(self, caller: str, amount: int) -> bool:
        """Destroy ``amount`` of the caller's tokens."""
        with self._exclusive("burn"):
            try:
                self._ledger.check_debit(caller, amount)
            except TokenError as exc:
                self._rejected("burn", exc)
                raise
            self._ledger.debit(caller, amount)
            self._ledger.reduce_supply(amount)
            self._emit(Transfer(caller, ZERO_ADDRESS, amount))
        return True

    def burn_from(self, caller: str, owner: str, amount: int) -> bool:
        """Destroy ``amount`` of ``owner``'s tokens on allowance."""
        with self._exclusive("burn_from"):
            try:
                self._ledger.check_spend(owner, caller, amount)
                self._ledger.check_debit(owner, amount)
            except TokenError as exc:
                self._rejected("burn_from", exc)
                raise
            self._ledger.spend_allowance(owner, caller, amount)
            self._ledger.debit(owner, amount)
            self._ledger.reduce_supply(amount)
            self._emit(Transfer(owner, ZERO_ADDRESS, amount))
        return True

    @contextmanager
    def _exclusive(self, operation: str) -> Iterator[None]:
        # Only the holding thread can observe its own ident in _owner
        if self._owner == threading.get_ident():
            exc = TokenError(f"re-entrant call to {operation}")
            self._rejected(operation, exc)
            raise exc
        with self._lock:
            self._owner = threading.get_ident()
            try:
                yield
            finally:
                self._owner = None

    def _emit(self, event: Transfer | Approval) -> None:
        record = self.events.append(event, self._ledger.state_hash())
        logger.debug("%s #%d %s", event.kind, record.index, event)

    @staticmethod
    def _rejected(operation: str, exc: TokenError) -> None:
        logger.debug("%s rejected: %s (%s)", operation, type(exc).__name__, exc)
