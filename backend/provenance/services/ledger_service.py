# Overview: Domain notification outbox; notifications are written in the same transaction as the change they report.

from __future__ import annotations

import logging

from ..records import Notification
from .kv_store import LedgerTransaction, ledger_transaction
from .sequence_service import next_notification_seq
from .storage_keys import notification_key, notification_seq_key

"""
Notification Outbox Invariants (authoritative)

- Append-only; notifications are never updated or deleted.
- A notification is written inside the same ledger transaction as the
  mutation it reports, so an aborted mutation never publishes.
- Delivery is external: observers poll list_notifications() by sequence.
"""

logger = logging.getLogger(__name__)

PRODUCT_REGISTERED = "product_registered"
PRODUCT_TRANSFERRED = "product_transferred"
PRODUCT_STATUS_CHANGED = "product_status_changed"
ACTOR_AUTHORIZED = "actor_authorized"
ACTOR_REVOKED = "actor_revoked"
EVENT_APPENDED = "event_appended"


def publish(
    txn: LedgerTransaction,
    *,
    topic: str,
    subject: str,
    payload: dict,
    timestamp: int,
) -> Notification:
    """
    Append a domain notification to the outbox.

    - No domain logic here.
    - subject is the product id the change belongs to.
    """
    seq = next_notification_seq(txn)
    note = Notification(seq=seq, topic=topic, subject=subject, timestamp=timestamp, payload=payload)
    txn.set(notification_key(seq), note.to_dict())
    logger.info("Published %s for %s (seq=%d)", topic, subject, seq)
    return note


def list_notifications(*, after_seq: int = 0, limit: int = 100) -> list[Notification]:
    """Notifications with seq > after_seq, oldest first."""
    with ledger_transaction(read_only=True) as txn:
        head = int(txn.get(notification_seq_key(), 0))
        items: list[Notification] = []
        seq = max(after_seq, 0) + 1
        while seq <= head and len(items) < limit:
            raw = txn.get(notification_key(seq))
            if raw is not None:
                items.append(Notification.from_dict(raw))
            seq += 1
        return items
