# Overview: Commit retry helpers for transient database lock failures.

from __future__ import annotations

import logging
import time

from flask import current_app
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db

logger = logging.getLogger(__name__)


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, locks) and StaleDataError
    (optimistic locking conflicts). func must redo its reads on every
    attempt, not just its writes.
    """
    last_exc = None
    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError) as exc:
            db.session.rollback()
            last_exc = exc
            if attempt >= attempts - 1:
                raise
            logger.warning("Commit attempt %d failed (%s); retrying", attempt + 1, exc.__class__.__name__)
            time.sleep(backoff_base * (2 ** attempt))
    if last_exc:
        raise last_exc


def configured_attempts() -> int:
    return int(current_app.config.get("LEDGER_COMMIT_ATTEMPTS", 3))
