# backend/provenance/services/products_service.py
"""
Products Service (record store)

- Product ids are unique and immutable for the life of the ledger.
- Products are never deleted; deactivation is a soft flag that blocks new
  events but leaves history and indexes intact.
- Every operation runs in one ledger transaction and publishes a domain
  notification on success.
"""
from __future__ import annotations

import logging

from flask import current_app

from ..errors import AlreadyExistsError, BatchError, ErrorCode, LedgerError, NotFoundError
from ..records import Product, ProductInput
from ..time_utils import ledger_now
from ..validation import validate_pagination, validate_product_input
from . import ledger_service
from .authorization_service import require_owner, set_authorized
from .index_service import owned_product_ids, owner_index_add, owner_index_remove
from .kv_store import LedgerTransaction, ledger_transaction, run_ledger_operation
from .storage_keys import product_event_ids_key, product_key

logger = logging.getLogger(__name__)

DEFAULT_MAX_BATCH_SIZE = 50


def read_product(txn: LedgerTransaction, product_id: str) -> Product:
    raw = txn.get(product_key(product_id))
    if raw is None:
        raise NotFoundError(ErrorCode.PRODUCT_NOT_FOUND, f"Product {product_id} not found")
    return Product.from_dict(raw)


def write_product(txn: LedgerTransaction, product: Product) -> None:
    txn.set(product_key(product.id), product.to_dict())


def product_exists(txn: LedgerTransaction, product_id: str) -> bool:
    return txn.has(product_key(product_id))


def max_batch_size() -> int:
    return int(current_app.config.get("LEDGER_MAX_BATCH_SIZE", DEFAULT_MAX_BATCH_SIZE))


def check_batch_bounds(items: list) -> None:
    if not items:
        raise BatchError(ErrorCode.BATCH_EMPTY, "Batch cannot be empty")
    limit = max_batch_size()
    if len(items) > limit:
        raise BatchError(ErrorCode.BATCH_TOO_LARGE, f"Batch cannot exceed {limit} items")


def _store_new_product(txn: LedgerTransaction, owner: str, inp: ProductInput, timestamp: int) -> Product:
    """Write pass for one registration; inputs are already validated."""
    product = Product(
        id=inp.id,
        owner=owner,
        name=inp.name,
        description=inp.description,
        origin=inp.origin,
        category=inp.category,
        created_at=timestamp,
        active=True,
        tags=list(inp.tags),
        certifications=list(inp.certifications),
        media_hashes=list(inp.media_hashes),
        custom=dict(inp.custom),
    )
    write_product(txn, product)
    txn.set(product_event_ids_key(product.id), [])
    owner_index_add(txn, owner, product.id)

    ledger_service.publish(
        txn,
        topic=ledger_service.PRODUCT_REGISTERED,
        subject=product.id,
        payload=product.to_dict(),
        timestamp=timestamp,
    )
    return product


def register_product(owner: str, inp: ProductInput, *, timestamp: int | None = None) -> Product:
    """
    Register a new product owned by owner.

    Raises:
        ValidationError: first failing field check
        AlreadyExistsError: id already registered
    """
    validate_product_input(inp)
    ts = timestamp if timestamp is not None else ledger_now()

    def _op():
        with ledger_transaction() as txn:
            if product_exists(txn, inp.id):
                raise AlreadyExistsError(ErrorCode.PRODUCT_ALREADY_EXISTS, f"Product {inp.id} already exists")
            return _store_new_product(txn, owner, inp, ts)

    product = run_ledger_operation(_op)
    logger.info("Registered product %s for %s", product.id, owner)
    return product


def register_batch(owner: str, inputs: list[ProductInput], *, timestamp: int | None = None) -> list[Product]:
    """
    Register many products, all or nothing.

    Pass 1 validates every input (fields, duplicates within the batch,
    ids already stored) without writing. Pass 2 writes in input order.
    """
    check_batch_bounds(inputs)
    ts = timestamp if timestamp is not None else ledger_now()

    def _op():
        with ledger_transaction() as txn:
            seen: set[str] = set()
            for index, inp in enumerate(inputs):
                try:
                    validate_product_input(inp)
                    if inp.id in seen:
                        raise BatchError(ErrorCode.DUPLICATE_IN_BATCH, f"Duplicate id {inp.id} in batch")
                    if product_exists(txn, inp.id):
                        raise AlreadyExistsError(ErrorCode.PRODUCT_ALREADY_EXISTS, f"Product {inp.id} already exists")
                except LedgerError as exc:
                    exc.index = index
                    raise
                seen.add(inp.id)

            return [_store_new_product(txn, owner, inp, ts) for inp in inputs]

    products = run_ledger_operation(_op)
    logger.info("Registered batch of %d products for %s", len(products), owner)
    return products


def get_product(product_id: str) -> Product:
    with ledger_transaction(read_only=True) as txn:
        return read_product(txn, product_id)


def get_product_event_ids(product_id: str) -> list[int]:
    with ledger_transaction(read_only=True) as txn:
        read_product(txn, product_id)
        return [int(i) for i in txn.get(product_event_ids_key(product_id), [])]


def transfer_ownership(current_owner: str, product_id: str, new_owner: str, *, timestamp: int | None = None) -> Product:
    """
    Hand a product to new_owner.

    Explicit authorizations held by other actors are left untouched.
    """
    ts = timestamp if timestamp is not None else ledger_now()

    def _op():
        with ledger_transaction() as txn:
            product = read_product(txn, product_id)
            require_owner(product, current_owner)

            previous = product.owner
            if new_owner == previous:
                return product, previous
            # Owners are never stored as edges; clear any stale ones on both sides
            set_authorized(txn, product_id, previous, False)
            set_authorized(txn, product_id, new_owner, False)

            product.owner = new_owner
            write_product(txn, product)
            owner_index_remove(txn, previous, product_id)
            owner_index_add(txn, new_owner, product_id)

            ledger_service.publish(
                txn,
                topic=ledger_service.PRODUCT_TRANSFERRED,
                subject=product_id,
                payload={"product_id": product_id, "from": previous, "to": new_owner},
                timestamp=ts,
            )
            return product, previous

    product, previous = run_ledger_operation(_op)
    logger.info("Transferred product %s from %s to %s", product_id, previous, new_owner)
    return product


def set_active(owner: str, product_id: str, active: bool, *, timestamp: int | None = None) -> Product:
    """Toggle the active flag. Past events and indexes are unaffected."""
    ts = timestamp if timestamp is not None else ledger_now()

    def _op():
        with ledger_transaction() as txn:
            product = read_product(txn, product_id)
            require_owner(product, owner)
            if product.active != active:
                product.active = active
                write_product(txn, product)
                ledger_service.publish(
                    txn,
                    topic=ledger_service.PRODUCT_STATUS_CHANGED,
                    subject=product_id,
                    payload={"product_id": product_id, "active": active},
                    timestamp=ts,
                )
            return product

    product = run_ledger_operation(_op)
    logger.info("Set product %s active=%s", product_id, active)
    return product


def list_products_by_owner(owner: str, offset: int = 0, limit: int = 20):
    """Products currently owned by owner, in acquisition order."""
    from .query_service import Page

    validate_pagination(offset, limit)
    with ledger_transaction(read_only=True) as txn:
        ids = owned_product_ids(txn, owner)
        window = ids[offset:offset + limit]
        items = [read_product(txn, pid) for pid in window]
        return Page.build(items, total=len(ids), offset=offset, limit=limit)
