# backend/provenance/models.py
from __future__ import annotations
from .extensions import db


class KvEntry(db.Model):
    """
    Single-key storage substrate.

    WHY: Ledger state (products, events, indexes, authorization edges,
    counters) lives in one keyed namespace. Keys are built by
    services/storage_keys.py; values are JSON documents. Only get/set/delete
    by exact key are used; there are no multi-key queries against this table.
    """
    __tablename__ = "kv_entries"

    key = db.Column(db.LargeBinary, primary_key=True)
    value = db.Column(db.JSON, nullable=False)
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<KvEntry key={self.key.hex()}>"
