# Overview: Append-only tracking event log; sequencing, per-product event lists and index upkeep.

"""
Event Log Invariants (authoritative)

- Events are immutable and never deleted.
- event_id is strictly increasing across the whole ledger and never reused.
- An event always references a product that existed when it was appended.
- The event, the product's event-id list, the type index and the
  notification are written in one ledger transaction.
"""
from __future__ import annotations

import logging

from ..errors import ErrorCode, LedgerError, NotFoundError
from ..records import EventInput, Product, TrackingEvent
from ..time_utils import ledger_now
from ..validation import validate_event_input
from . import ledger_service
from .authorization_service import require_can_append
from .index_service import index_event, type_count
from .kv_store import LedgerTransaction, ledger_transaction, run_ledger_operation
from .products_service import check_batch_bounds, read_product
from .sequence_service import next_event_id
from .storage_keys import MAX_U64, event_key, product_event_ids_key, product_key

logger = logging.getLogger(__name__)


def _store_event(txn: LedgerTransaction, actor: str, inp: EventInput, timestamp: int) -> TrackingEvent:
    """Write pass for one event; preconditions are already established."""
    event = TrackingEvent(
        event_id=next_event_id(txn),
        product_id=inp.product_id,
        actor=actor,
        timestamp=timestamp,
        event_type=inp.event_type,
        data_hash=bytes(inp.data_hash),
        location=inp.location,
        note=inp.note,
        metadata=dict(inp.metadata),
    )
    txn.set(event_key(event.event_id), event.to_dict())

    ids_key = product_event_ids_key(event.product_id)
    ids = txn.get(ids_key, [])
    ids.append(event.event_id)
    txn.set(ids_key, ids)

    index_event(txn, event)

    ledger_service.publish(
        txn,
        topic=ledger_service.EVENT_APPENDED,
        subject=event.product_id,
        payload=event.to_dict(),
        timestamp=timestamp,
    )
    return event


def append_event(actor: str, inp: EventInput, *, timestamp: int | None = None) -> int:
    """
    Append a tracking event to a product.

    Raises:
        ValidationError: bad event fields
        NotFoundError: unknown product
        InvalidStateError: product inactive
        UnauthorizedError: actor is neither owner nor allow-listed
    """
    validate_event_input(inp)
    ts = timestamp if timestamp is not None else ledger_now()

    def _op():
        with ledger_transaction() as txn:
            product = read_product(txn, inp.product_id)
            require_can_append(txn, product, actor)
            return _store_event(txn, actor, inp, ts)

    event = run_ledger_operation(_op)
    logger.info("Appended event %d (%s) to product %s", event.event_id, event.event_type, event.product_id)
    return event.event_id


def append_events_batch(actor: str, inputs: list[EventInput], *, timestamp: int | None = None) -> list[int]:
    """
    Append many events as one unit.

    Pass 1 checks every input (fields, product exists and is active, actor
    authorized) with one authorization decision per distinct product.
    Pass 2 appends in input order and cannot fail on a precondition.
    """
    check_batch_bounds(inputs)
    ts = timestamp if timestamp is not None else ledger_now()

    def _op():
        with ledger_transaction() as txn:
            checked: dict[str, Product] = {}
            for index, inp in enumerate(inputs):
                try:
                    validate_event_input(inp)
                    if inp.product_id not in checked:
                        product = read_product(txn, inp.product_id)
                        require_can_append(txn, product, actor)
                        checked[inp.product_id] = product
                except LedgerError as exc:
                    exc.index = index
                    raise

            return [_store_event(txn, actor, inp, ts).event_id for inp in inputs]

    event_ids = run_ledger_operation(_op)
    logger.info("Appended batch of %d events for %s", len(event_ids), actor)
    return event_ids


def get_event(event_id: int) -> TrackingEvent:
    with ledger_transaction(read_only=True) as txn:
        raw = txn.get(event_key(event_id)) if 0 <= event_id <= MAX_U64 else None
        if raw is None:
            raise NotFoundError(ErrorCode.EVENT_NOT_FOUND, f"Event {event_id} not found")
        return TrackingEvent.from_dict(raw)


def get_event_count(product_id: str) -> int:
    """Number of events for a product; 0 for an unknown product."""
    with ledger_transaction(read_only=True) as txn:
        return len(txn.get(product_event_ids_key(product_id), []))


def get_event_count_by_type(product_id: str, event_type: str) -> int:
    with ledger_transaction(read_only=True) as txn:
        if not txn.has(product_key(product_id)):
            return 0
        return type_count(txn, product_id, event_type)
