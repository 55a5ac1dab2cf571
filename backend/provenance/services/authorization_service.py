# Overview: Per-product authorization registry; owner is implicit, other actors are allow-listed.

"""
Authorization Registry

WHY: Only the owner and actors the owner explicitly allow-listed may append
events to a product.

DESIGN PRINCIPLES:
- Three-way decision: OWNER | ALLOW_LISTED | UNAUTHORIZED.
- The owner is derived from the product record and is never stored as an
  edge, so the owner's authorization cannot be revoked except by transfer.
- Revoking an actor that has no edge is a no-op.
- Allow-list edges survive ownership transfer: authorized actors may
  service several owners over the asset's life.
"""
from __future__ import annotations

import logging
from enum import Enum

from ..errors import ErrorCode, InvalidStateError, UnauthorizedError
from ..records import Product
from ..time_utils import ledger_now
from . import ledger_service
from .kv_store import LedgerTransaction, ledger_transaction, run_ledger_operation
from .storage_keys import auth_key

logger = logging.getLogger(__name__)


class AuthDecision(Enum):
    OWNER = "owner"
    ALLOW_LISTED = "allow_listed"
    UNAUTHORIZED = "unauthorized"

    @property
    def allowed(self) -> bool:
        return self is not AuthDecision.UNAUTHORIZED


def has_edge(txn: LedgerTransaction, product_id: str, actor: str) -> bool:
    return bool(txn.get(auth_key(product_id, actor), False))


def decide(txn: LedgerTransaction, product: Product, actor: str) -> AuthDecision:
    if actor == product.owner:
        return AuthDecision.OWNER
    if has_edge(txn, product.id, actor):
        return AuthDecision.ALLOW_LISTED
    return AuthDecision.UNAUTHORIZED


def set_authorized(txn: LedgerTransaction, product_id: str, actor: str, allow: bool) -> bool:
    """
    Insert or remove an allow-list edge. Returns True if anything changed.

    Callers must already have verified ownership.
    """
    key = auth_key(product_id, actor)
    present = bool(txn.get(key, False))
    if allow:
        if present:
            return False
        txn.set(key, True)
        return True
    if not present:
        return False
    txn.delete(key)
    return True


def require_owner(product: Product, caller: str) -> None:
    if caller != product.owner:
        logger.warning("Ownership check failed for product %s by %s", product.id, caller)
        raise UnauthorizedError(ErrorCode.UNAUTHORIZED, "Caller is not the product owner")


def require_can_append(txn: LedgerTransaction, product: Product, actor: str) -> AuthDecision:
    """
    Event-append gate.

    Inactive products reject everyone, the owner included.
    """
    if not product.active:
        raise InvalidStateError(ErrorCode.INVALID_STATE, f"Product {product.id} is inactive")
    decision = decide(txn, product, actor)
    if not decision.allowed:
        logger.warning("Append denied for product %s by %s", product.id, actor)
        raise UnauthorizedError(ErrorCode.UNAUTHORIZED, "Actor is not authorized for this product")
    return decision


def is_authorized(product_id: str, actor: str) -> bool:
    from .products_service import read_product

    with ledger_transaction(read_only=True) as txn:
        product = read_product(txn, product_id)
        return decide(txn, product, actor).allowed


def _change_actor(owner: str, product_id: str, actor: str, allow: bool, timestamp: int | None) -> None:
    from .products_service import read_product

    ts = timestamp if timestamp is not None else ledger_now()

    def _op():
        with ledger_transaction() as txn:
            product = read_product(txn, product_id)
            require_owner(product, owner)
            # The owner is implicitly authorized and never stored as an edge
            if actor == product.owner:
                return
            if set_authorized(txn, product_id, actor, allow):
                ledger_service.publish(
                    txn,
                    topic=ledger_service.ACTOR_AUTHORIZED if allow else ledger_service.ACTOR_REVOKED,
                    subject=product_id,
                    payload={"product_id": product_id, "actor": actor},
                    timestamp=ts,
                )

    run_ledger_operation(_op)


def add_authorized_actor(owner: str, product_id: str, actor: str, *, timestamp: int | None = None) -> None:
    _change_actor(owner, product_id, actor, True, timestamp)


def remove_authorized_actor(owner: str, product_id: str, actor: str, *, timestamp: int | None = None) -> None:
    _change_actor(owner, product_id, actor, False, timestamp)
