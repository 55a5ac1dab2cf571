# backend/provenance/routes/system.py
"""
System health endpoint.

Reports database connectivity and the ledger's sequence heads for
deployment debugging.
"""

import time
from flask import Blueprint, current_app

from ..extensions import db
from ..models import KvEntry
from ..services.kv_store import ledger_transaction
from ..services.sequence_service import current_event_seq
from ..services.storage_keys import notification_seq_key

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """
    Check database connectivity and read the sequence heads.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        entry_count = db.session.query(KvEntry).count()
        with ledger_transaction(read_only=True) as txn:
            event_seq = current_event_seq(txn)
            notification_seq = int(txn.get(notification_seq_key(), 0))

        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "response_time_ms": round(elapsed_ms, 2),
            "kv_entries": entry_count,
            "event_seq": event_seq,
            "notification_seq": notification_seq,
        }
    except Exception as e:
        current_app.logger.exception("Database health check failed")
        db.session.rollback()
        return {
            "status": "unhealthy",
            "error": str(e),
        }


@system_bp.get("/health")
def health():
    database = check_database_health()
    status_code = 200 if database["status"] == "healthy" else 503
    return {"status": database["status"], "database": database}, status_code
