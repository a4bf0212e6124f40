"""Notifications emitted by token operations, and the log that records them.

Each successful mutating call produces exactly one event. The log stamps it
with the ledger state hash after the call and links it to the previous record:

    link[N] = hash(link[N-1] + kind + hash(event) + state_hash)

The first record links to ``GENESIS``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Union

from .crypto import GENESIS, compute_link, hash_state, verify_records

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transfer:
    """Value moved from ``sender`` to ``recipient``.

    Burns use ``ZERO_ADDRESS`` as recipient, the initial mint uses it as sender.
    """

    sender: str
    recipient: str
    amount: int

    kind = "Transfer"

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "from": self.sender,
            "to": self.recipient,
            "amount": str(self.amount),
        }


@dataclass(frozen=True)
class Approval:
    """``owner`` set the allowance of ``spender`` to ``amount``."""

    owner: str
    spender: str
    amount: int

    kind = "Approval"

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "owner": self.owner,
            "spender": self.spender,
            "amount": str(self.amount),
        }


Event = Union[Transfer, Approval]


def event_from_dict(data: dict[str, Any]) -> Event:
    """Deserialize a Transfer or Approval from its dict form."""
    kind = data.get("kind")
    if kind == Transfer.kind:
        return Transfer(data["from"], data["to"], int(data["amount"]))
    if kind == Approval.kind:
        return Approval(data["owner"], data["spender"], int(data["amount"]))
    raise ValueError(f"Unknown event kind: {kind!r}")


@dataclass
class EventRecord:
    """A logged event with its position and proof of ordering."""

    index: int
    event: Event
    state_hash: str  # Ledger state after the call
    prev: str
    link: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "event": self.event.to_dict(),
            "state_hash": self.state_hash,
            "prev": self.prev,
            "link": self.link,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EventRecord":
        return cls(
            index=data["index"],
            event=event_from_dict(data["event"]),
            state_hash=data["state_hash"],
            prev=data["prev"],
            link=data["link"],
        )


Listener = Callable[[EventRecord], None]


@dataclass
class EventLog:
    """Ordered, hash-linked record of every emitted notification."""

    records: list[EventRecord] = field(default_factory=list)
    listeners: list[Listener] = field(default_factory=list, repr=False)

    @property
    def head(self) -> str:
        """Link hash of the latest record, or ``GENESIS`` when empty."""
        if not self.records:
            return GENESIS
        return self.records[-1].link

    @property
    def events(self) -> list[Event]:
        return [r.event for r in self.records]

    @property
    def last(self) -> Event | None:
        if not self.records:
            return None
        return self.records[-1].event

    def subscribe(self, listener: Listener) -> None:
        """Register a callback invoked with every new record.

        Listeners run synchronously after the state change is committed.
        An exception raised by a listener is logged and does not reach the
        caller of the token operation, nor stop later listeners. A listener
        must not call mutating methods of the token that emitted the record:
        such a call is rejected as re-entrant.
        """
        self.listeners.append(listener)

    def append(self, event: Event, state_hash: str) -> EventRecord:
        """Record an event and notify listeners synchronously."""
        prev = self.head
        record = EventRecord(
            index=len(self.records),
            event=event,
            state_hash=state_hash,
            prev=prev,
            link=compute_link(prev, event.kind, hash_state(event.to_dict()), state_hash),
        )
        self.records.append(record)
        for listener in self.listeners:
            try:
                listener(record)
            except Exception:
                logger.exception("Listener %r failed on record #%d", listener, record.index)
        return record

    def verify(self) -> tuple[bool, int | None]:
        """Verify the whole log. Returns (valid, break_index)."""
        return verify_records(self.records)

    def to_dict(self) -> dict[str, Any]:
        return {
            "records": [r.to_dict() for r in self.records],
            "length": len(self.records),
            "head": self.head,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EventLog":
        return cls(records=[EventRecord.from_dict(r) for r in data.get("records", [])])

    def __len__(self) -> int:
        return len(self.records)

    def __getitem__(self, index: int) -> EventRecord:
        return self.records[index]

    def __iter__(self) -> Iterator[EventRecord]:
        return iter(self.records)
