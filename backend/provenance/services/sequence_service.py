# Overview: Global monotonic sequences (event ids, notification numbers).

from __future__ import annotations

from .kv_store import LedgerTransaction
from .storage_keys import MAX_U64, event_seq_key, notification_seq_key


class SequenceExhaustedError(RuntimeError):
    """The u64 sequence space is used up."""


def _next(txn: LedgerTransaction, key: bytes) -> int:
    """
    Read-increment-write of a single authoritative counter.

    The counter starts at 0 so the first id handed out is 1. Ids consumed
    by an operation that later aborts roll back with it.
    """
    current = int(txn.get(key, 0))
    if current >= MAX_U64:
        raise SequenceExhaustedError("sequence exhausted")
    nxt = current + 1
    txn.set(key, nxt)
    return nxt


def next_event_id(txn: LedgerTransaction) -> int:
    return _next(txn, event_seq_key())


def next_notification_seq(txn: LedgerTransaction) -> int:
    return _next(txn, notification_seq_key())


def current_event_seq(txn: LedgerTransaction) -> int:
    return int(txn.get(event_seq_key(), 0))
