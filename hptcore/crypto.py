"""Hash functions and verification for ledger snapshots and the event log."""

from __future__ import annotations

import hashlib
import json
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .events import EventRecord

GENESIS = "GENESIS"


def hash_state(state: dict) -> str:
    """Hash any JSON-safe state dict.

    Uses canonical JSON (sorted keys, compact separators) for determinism.
    """
    canonical = json.dumps(state, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def compute_link(prev: str, kind: str, event_hash: str, state_hash: str) -> str:
    """Compute the link hash binding an event to its predecessor.

    Returns a string in the format ``hpt_{sha256_hex}``.
    """
    data = f"{prev}:{kind}:{event_hash}:{state_hash}"
    digest = hashlib.sha256(data.encode("utf-8")).hexdigest()
    return f"hpt_{digest}"


def verify_record(record: "EventRecord") -> bool:
    """Verify that a single record's link hash is correct."""
    expected = compute_link(
        record.prev,
        record.event.kind,
        hash_state(record.event.to_dict()),
        record.state_hash,
    )
    return record.link == expected


def verify_records(records: "list[EventRecord]") -> tuple[bool, int | None]:
    """Verify an ordered list of records.

    Returns (True, None) if valid, or (False, break_index) if broken.
    """
    for i, record in enumerate(records):
        if record.index != i or not verify_record(record):
            return False, i
        if i == 0:
            if record.prev != GENESIS:
                return False, i
        else:
            if record.prev != records[i - 1].link:
                return False, i
    return True, None
