# Overview: Error taxonomy for ledger operations; every kind carries a stable numeric code.

"""
Ledger error kinds.

Callers must be able to tell "fix input" from "not allowed" from
"does not exist", so every failure raises a specific subclass of
LedgerError with an ErrorCode. Codes 1..20 are stable wire values.
"""
from __future__ import annotations

from enum import IntEnum


class ErrorCode(IntEnum):
    PRODUCT_ALREADY_EXISTS = 1
    PRODUCT_NOT_FOUND = 2
    UNAUTHORIZED = 3
    INVALID_STATE = 4
    EVENT_NOT_FOUND = 5

    INVALID_PRODUCT_ID = 6
    INVALID_PRODUCT_NAME = 7
    INVALID_ORIGIN = 8
    INVALID_CATEGORY = 9

    PRODUCT_ID_TOO_LONG = 10
    PRODUCT_NAME_TOO_LONG = 11
    ORIGIN_TOO_LONG = 12
    CATEGORY_TOO_LONG = 13
    DESCRIPTION_TOO_LONG = 14

    TOO_MANY_TAGS = 15
    TAG_TOO_LONG = 16
    TOO_MANY_CERTIFICATIONS = 17
    TOO_MANY_MEDIA_HASHES = 18

    TOO_MANY_CUSTOM_FIELDS = 19
    CUSTOM_FIELD_VALUE_TOO_LONG = 20

    BATCH_EMPTY = 21
    BATCH_TOO_LARGE = 22
    DUPLICATE_IN_BATCH = 23

    INVALID_CUSTOM_FIELD_KEY = 24
    INVALID_EVENT_TYPE = 25
    EVENT_TYPE_TOO_LONG = 26
    LOCATION_TOO_LONG = 27
    NOTE_TOO_LONG = 28
    INVALID_HASH = 29
    INVALID_PAGINATION = 30
    INVALID_PAYLOAD = 31


class LedgerError(Exception):
    """Base for every ledger failure."""

    code: ErrorCode = ErrorCode.INVALID_STATE

    def __init__(self, code: ErrorCode | None = None, message: str | None = None, index: int | None = None):
        if code is not None:
            self.code = code
        self.message = message or self.code.name.replace("_", " ").capitalize()
        # Position of the failing input when raised from a batch
        self.index = index
        super().__init__(self.message)

    @property
    def kind(self) -> str:
        return self.code.name

    def to_dict(self) -> dict:
        data = {"error": self.message, "code": int(self.code), "kind": self.kind}
        if self.index is not None:
            data["index"] = self.index
        return data


class AlreadyExistsError(LedgerError):
    """Duplicate identity on create."""
    code = ErrorCode.PRODUCT_ALREADY_EXISTS


class NotFoundError(LedgerError):
    """Product or event does not exist."""
    code = ErrorCode.PRODUCT_NOT_FOUND


class UnauthorizedError(LedgerError):
    """Caller is neither owner nor allow-listed (or not the owner where required)."""
    code = ErrorCode.UNAUTHORIZED


class InvalidStateError(LedgerError):
    """Operation disallowed by the product's state (inactive)."""
    code = ErrorCode.INVALID_STATE


class ValidationError(LedgerError, ValueError):
    """400-level input problem; code names the failing field/limit."""
    code = ErrorCode.INVALID_PRODUCT_ID


class BatchError(LedgerError, ValueError):
    """Batch-level rejection (empty, too large, duplicate id within the batch)."""
    code = ErrorCode.BATCH_EMPTY
