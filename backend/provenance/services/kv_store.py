# Overview: Transaction boundary over the single-key store; all writes of one operation commit together.

"""
Ledger transaction boundary.

INVARIANTS:
- Every public ledger operation runs inside exactly one ledger_transaction().
- Writes are buffered; nothing reaches the database before commit.
- Reads see the operation's own buffered writes first.
- Any exception inside the block discards the buffer and rolls back the
  session, so storage is exactly as it was before the operation began.
"""
from __future__ import annotations

import copy
import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator, TypeVar

from ..extensions import db
from ..models import KvEntry
from .concurrency import configured_attempts, run_with_retry

logger = logging.getLogger(__name__)

_DELETED = object()
T = TypeVar("T")


class ReadOnlyTransactionError(RuntimeError):
    """Raised when a read-only transaction is asked to write."""


class LedgerTransaction:
    """Buffered view over kv_entries with get/set/delete by exact key."""

    def __init__(self, session=None, *, read_only: bool = False):
        self.session = session if session is not None else db.session
        self.read_only = read_only
        self._writes: dict[bytes, Any] = {}

    def get(self, key: bytes, default: Any = None) -> Any:
        if key in self._writes:
            value = self._writes[key]
            if value is _DELETED:
                return default
            return copy.deepcopy(value)
        entry = self.session.get(KvEntry, key)
        if entry is None:
            return default
        return copy.deepcopy(entry.value)

    def has(self, key: bytes) -> bool:
        if key in self._writes:
            return self._writes[key] is not _DELETED
        return self.session.get(KvEntry, key) is not None

    def set(self, key: bytes, value: Any) -> None:
        self._require_writable()
        self._writes[key] = copy.deepcopy(value)

    def delete(self, key: bytes) -> None:
        self._require_writable()
        self._writes[key] = _DELETED

    def _require_writable(self) -> None:
        if self.read_only:
            raise ReadOnlyTransactionError("write attempted in a read-only ledger transaction")

    def _apply(self) -> None:
        for key, value in self._writes.items():
            entry = self.session.get(KvEntry, key)
            if value is _DELETED:
                if entry is not None:
                    self.session.delete(entry)
            elif entry is None:
                self.session.add(KvEntry(key=key, value=value))
            else:
                entry.value = value
        self.session.commit()

    def commit(self) -> None:
        """
        Apply the buffer once. Retries go through run_ledger_operation,
        which repeats the reads as well as the writes.
        """
        if not self._writes:
            return
        count = len(self._writes)
        self._apply()
        self._writes.clear()
        logger.debug("Committed ledger transaction with %d key writes", count)

    def rollback(self) -> None:
        self._writes.clear()
        self.session.rollback()


@contextmanager
def ledger_transaction(*, read_only: bool = False) -> Iterator[LedgerTransaction]:
    """
    Run a block as one all-or-nothing unit of work.

    Usage:
        with ledger_transaction() as txn:
            txn.set(key, value)
    """
    txn = LedgerTransaction(read_only=read_only)
    try:
        yield txn
        if not read_only:
            txn.commit()
    except BaseException:
        txn.rollback()
        raise


def run_ledger_operation(func: Callable[[], T]) -> T:
    """
    Run a write operation with retry on transient lock failures.

    func must open its own ledger_transaction(), so every attempt re-reads
    current state before building its writes.
    """
    return run_with_retry(func, attempts=configured_attempts())
