# Overview: Secondary indexes maintained incrementally on every write (by event type, by owner).

"""
Secondary Index Invariants

- TYPE_COUNT(product, type) always equals the number of stored events with
  that product and type.
- TYPE_RANK(product, type, rank) for rank in 1..count maps to event ids in
  append order; ranks are never reassigned.
- Indexes are derived data written in the same transaction as the event
  that produced them; they are never rebuilt from a scan.
- OWNER_PRODUCTS(owner) lists the ids the principal currently owns, in the
  order the principal acquired them.
"""
from __future__ import annotations

from collections import Counter

from ..records import TrackingEvent
from .kv_store import LedgerTransaction
from .storage_keys import (
    event_key,
    owner_products_key,
    product_event_ids_key,
    type_count_key,
    type_rank_key,
)


def type_count(txn: LedgerTransaction, product_id: str, event_type: str) -> int:
    return int(txn.get(type_count_key(product_id, event_type), 0))


def index_event(txn: LedgerTransaction, event: TrackingEvent) -> int:
    """Add an appended event to its (product, type) index. Returns its rank."""
    rank = type_count(txn, event.product_id, event.event_type) + 1
    txn.set(type_rank_key(event.product_id, event.event_type, rank), event.event_id)
    txn.set(type_count_key(event.product_id, event.event_type), rank)
    return rank


def ids_by_type(
    txn: LedgerTransaction,
    product_id: str,
    event_type: str,
    offset: int,
    limit: int,
) -> tuple[list[int], int]:
    """
    Event ids of one type, paginated without touching other events.

    offset is 0-based; ranks are 1-based. Returns (ids, total).
    """
    total = type_count(txn, product_id, event_type)
    if offset >= total or limit == 0:
        return [], total
    end = min(offset + limit, total)
    ids = [
        int(txn.get(type_rank_key(product_id, event_type, rank)))
        for rank in range(offset + 1, end + 1)
    ]
    return ids, total


def recount_types(txn: LedgerTransaction, product_id: str) -> Counter:
    """Full scan of a product's events by type. Used only for verification."""
    counts: Counter = Counter()
    for event_id in txn.get(product_event_ids_key(product_id), []):
        raw = txn.get(event_key(event_id))
        if raw is not None:
            counts[raw["event_type"]] += 1
    return counts


def owned_product_ids(txn: LedgerTransaction, owner: str) -> list[str]:
    return list(txn.get(owner_products_key(owner), []))


def owner_index_add(txn: LedgerTransaction, owner: str, product_id: str) -> None:
    ids = owned_product_ids(txn, owner)
    if product_id not in ids:
        ids.append(product_id)
        txn.set(owner_products_key(owner), ids)


def owner_index_remove(txn: LedgerTransaction, owner: str, product_id: str) -> None:
    ids = owned_product_ids(txn, owner)
    if product_id in ids:
        ids.remove(product_id)
        if ids:
            txn.set(owner_products_key(owner), ids)
        else:
            txn.delete(owner_products_key(owner))
