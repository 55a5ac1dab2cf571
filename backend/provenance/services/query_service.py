# Overview: Paginated reads over the event log; indexed by type, scan for composite filters.

"""
Query / Pagination Engine

Every paginated read returns Page(items, total_count, has_more):
- offset is 0-based (items to skip), limit is the max items returned.
- total_count is the size of the *filtered* population.
- has_more = offset + len(items) < total_count.
- offset beyond the population yields an empty page, never an error.

Filter sentinels mean "dimension inactive": "" for event_type/location,
0 for start_time, MAX_U64 for end_time. Time bounds are inclusive.

Type-only filters use the (product, type) rank index: O(limit) reads.
Any other combination scans the product's event-id list and evaluates the
predicate in memory (slow path, O(events for the product)).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from ..records import TrackingEvent
from ..validation import validate_pagination
from . import index_service
from .kv_store import LedgerTransaction, ledger_transaction
from .storage_keys import MAX_U64, event_key, product_event_ids_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Page:
    items: list
    total_count: int
    has_more: bool
    offset: int = 0
    limit: int = 0

    @classmethod
    def build(cls, items: list, *, total: int, offset: int, limit: int) -> "Page":
        return cls(
            items=items,
            total_count=total,
            has_more=offset + len(items) < total,
            offset=offset,
            limit=limit,
        )

    def to_dict(self, render: Callable[[Any], Any] | None = None) -> dict:
        render = render or (lambda item: item.to_dict())
        return {
            "items": [render(item) for item in self.items],
            "total_count": self.total_count,
            "has_more": self.has_more,
            "offset": self.offset,
            "limit": self.limit,
        }


@dataclass(frozen=True)
class EventFilter:
    event_type: str = ""
    start_time: int = 0
    end_time: int = MAX_U64
    location: str = ""

    @property
    def type_only(self) -> bool:
        return (
            self.event_type != ""
            and self.start_time == 0
            and self.end_time == MAX_U64
            and self.location == ""
        )

    def matches(self, event: TrackingEvent) -> bool:
        if self.event_type and event.event_type != self.event_type:
            return False
        if self.start_time != 0 and event.timestamp < self.start_time:
            return False
        if self.end_time != MAX_U64 and event.timestamp > self.end_time:
            return False
        if self.location and event.location != self.location:
            return False
        return True


def _load_event(txn: LedgerTransaction, event_id: int) -> TrackingEvent:
    return TrackingEvent.from_dict(txn.get(event_key(event_id)))


def _require_product(txn: LedgerTransaction, product_id: str) -> None:
    from .products_service import read_product

    read_product(txn, product_id)


def _product_event_ids(txn: LedgerTransaction, product_id: str) -> list[int]:
    _require_product(txn, product_id)
    return [int(i) for i in txn.get(product_event_ids_key(product_id), [])]


def _page_by_type(txn: LedgerTransaction, product_id: str, event_type: str, offset: int, limit: int) -> Page:
    ids, total = index_service.ids_by_type(txn, product_id, event_type, offset, limit)
    items = [_load_event(txn, eid) for eid in ids]
    return Page.build(items, total=total, offset=offset, limit=limit)


def _page_by_scan(txn: LedgerTransaction, ids: list[int], flt: EventFilter, offset: int, limit: int) -> Page:
    matched = [ev for ev in (_load_event(txn, eid) for eid in ids) if flt.matches(ev)]
    logger.debug("Scanned %d events, %d matched", len(ids), len(matched))
    return Page.build(matched[offset:offset + limit], total=len(matched), offset=offset, limit=limit)


def get_events(product_id: str, offset: int = 0, limit: int = 20) -> Page:
    validate_pagination(offset, limit)
    with ledger_transaction(read_only=True) as txn:
        ids = _product_event_ids(txn, product_id)
        items = [_load_event(txn, eid) for eid in ids[offset:offset + limit]]
        return Page.build(items, total=len(ids), offset=offset, limit=limit)


def get_events_by_type(product_id: str, event_type: str, offset: int = 0, limit: int = 20) -> Page:
    validate_pagination(offset, limit)
    if not event_type:
        # Sentinel: type dimension inactive
        return get_events(product_id, offset, limit)
    with ledger_transaction(read_only=True) as txn:
        _require_product(txn, product_id)
        return _page_by_type(txn, product_id, event_type, offset, limit)


def get_events_by_time_range(
    product_id: str,
    start_time: int,
    end_time: int,
    offset: int = 0,
    limit: int = 20,
) -> Page:
    return get_events_filtered(
        product_id,
        EventFilter(start_time=start_time, end_time=end_time),
        offset,
        limit,
    )


def get_events_filtered(product_id: str, flt: EventFilter, offset: int = 0, limit: int = 20) -> Page:
    validate_pagination(offset, limit)
    with ledger_transaction(read_only=True) as txn:
        if flt.type_only:
            _require_product(txn, product_id)
            return _page_by_type(txn, product_id, flt.event_type, offset, limit)
        ids = _product_event_ids(txn, product_id)
        return _page_by_scan(txn, ids, flt, offset, limit)
