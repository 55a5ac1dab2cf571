from __future__ import annotations

import re
from typing import Any, Sized

from .errors import ErrorCode, ValidationError
from .records import EventInput, ProductInput


# Product limits
MAX_ID_LEN = 64
MAX_NAME_LEN = 128
MAX_ORIGIN_LEN = 256
MAX_CATEGORY_LEN = 64
MAX_DESCRIPTION_LEN = 2048
MAX_TAG_LEN = 64
MAX_CUSTOM_VALUE_LEN = 512

MAX_TAGS = 20
MAX_CERTIFICATIONS = 50
MAX_MEDIA_HASHES = 50
MAX_CUSTOM_FIELDS = 20

# Short keys (custom fields, metadata, event types)
MAX_SYMBOL_LEN = 32

# Event limits
MAX_LOCATION_LEN = 256
MAX_NOTE_LEN = 1024

HASH_LEN = 32

_SYMBOL_RE = re.compile(r"^[A-Za-z0-9_]+$")


def non_empty(s: Any) -> bool:
    return isinstance(s, str) and len(s) > 0


def max_len(s: Any, n: int) -> bool:
    return isinstance(s, str) and len(s) <= n


def max_count(items: Sized, n: int) -> bool:
    return len(items) <= n


def is_symbol(s: Any) -> bool:
    return isinstance(s, str) and bool(_SYMBOL_RE.match(s))


def is_hash(h: Any) -> bool:
    return isinstance(h, (bytes, bytearray)) and len(h) == HASH_LEN


def _check(ok: bool, code: ErrorCode, message: str) -> None:
    if not ok:
        raise ValidationError(code, message)


def _validate_string_map(values: Any, label: str) -> None:
    """Shared rules for product custom fields and event metadata."""
    _check(isinstance(values, dict), ErrorCode.INVALID_PAYLOAD, f"{label} must be a mapping")
    _check(
        max_count(values, MAX_CUSTOM_FIELDS),
        ErrorCode.TOO_MANY_CUSTOM_FIELDS,
        f"{label} cannot have more than {MAX_CUSTOM_FIELDS} entries",
    )
    for k, v in values.items():
        _check(isinstance(v, str), ErrorCode.INVALID_PAYLOAD, f"{label} value for {k!r} must be a string")
        _check(
            is_symbol(k) and len(k) <= MAX_SYMBOL_LEN,
            ErrorCode.INVALID_CUSTOM_FIELD_KEY,
            f"{label} key {k!r} must be 1-{MAX_SYMBOL_LEN} characters of [A-Za-z0-9_]",
        )
        _check(
            max_len(v, MAX_CUSTOM_VALUE_LEN),
            ErrorCode.CUSTOM_FIELD_VALUE_TOO_LONG,
            f"{label} value for {k!r} exceeds max length {MAX_CUSTOM_VALUE_LEN}",
        )


def validate_product_input(inp: ProductInput) -> None:
    """
    Field checks for a registration, in a fixed order.

    The first failing check raises; the same bad input always yields
    the same error code.
    """
    _check(non_empty(inp.id), ErrorCode.INVALID_PRODUCT_ID, "id cannot be blank")
    _check(max_len(inp.id, MAX_ID_LEN), ErrorCode.PRODUCT_ID_TOO_LONG, f"id exceeds max length {MAX_ID_LEN}")
    _check(non_empty(inp.name), ErrorCode.INVALID_PRODUCT_NAME, "name cannot be blank")
    _check(max_len(inp.name, MAX_NAME_LEN), ErrorCode.PRODUCT_NAME_TOO_LONG, f"name exceeds max length {MAX_NAME_LEN}")
    _check(non_empty(inp.origin), ErrorCode.INVALID_ORIGIN, "origin cannot be blank")
    _check(max_len(inp.origin, MAX_ORIGIN_LEN), ErrorCode.ORIGIN_TOO_LONG, f"origin exceeds max length {MAX_ORIGIN_LEN}")
    _check(non_empty(inp.category), ErrorCode.INVALID_CATEGORY, "category cannot be blank")
    _check(
        max_len(inp.category, MAX_CATEGORY_LEN),
        ErrorCode.CATEGORY_TOO_LONG,
        f"category exceeds max length {MAX_CATEGORY_LEN}",
    )
    _check(
        max_len(inp.description, MAX_DESCRIPTION_LEN),
        ErrorCode.DESCRIPTION_TOO_LONG,
        f"description exceeds max length {MAX_DESCRIPTION_LEN}",
    )

    for label, items in (("tags", inp.tags), ("certifications", inp.certifications), ("media_hashes", inp.media_hashes)):
        _check(isinstance(items, list), ErrorCode.INVALID_PAYLOAD, f"{label} must be a list")

    _check(max_count(inp.tags, MAX_TAGS), ErrorCode.TOO_MANY_TAGS, f"cannot have more than {MAX_TAGS} tags")
    for tag in inp.tags:
        _check(isinstance(tag, str), ErrorCode.INVALID_PAYLOAD, "tags must be strings")
        _check(max_len(tag, MAX_TAG_LEN), ErrorCode.TAG_TOO_LONG, f"tag exceeds max length {MAX_TAG_LEN}")

    _check(
        max_count(inp.certifications, MAX_CERTIFICATIONS),
        ErrorCode.TOO_MANY_CERTIFICATIONS,
        f"cannot have more than {MAX_CERTIFICATIONS} certifications",
    )
    for h in inp.certifications:
        _check(is_hash(h), ErrorCode.INVALID_HASH, f"certification must be a {HASH_LEN}-byte hash")

    _check(
        max_count(inp.media_hashes, MAX_MEDIA_HASHES),
        ErrorCode.TOO_MANY_MEDIA_HASHES,
        f"cannot have more than {MAX_MEDIA_HASHES} media hashes",
    )
    for h in inp.media_hashes:
        _check(is_hash(h), ErrorCode.INVALID_HASH, f"media hash must be a {HASH_LEN}-byte hash")

    _validate_string_map(inp.custom, "custom")


def validate_event_input(inp: EventInput) -> None:
    """Field checks for a tracking event, in a fixed order."""
    _check(
        non_empty(inp.event_type) and is_symbol(inp.event_type),
        ErrorCode.INVALID_EVENT_TYPE,
        "event_type must be non-empty and contain only [A-Za-z0-9_]",
    )
    _check(
        len(inp.event_type) <= MAX_SYMBOL_LEN,
        ErrorCode.EVENT_TYPE_TOO_LONG,
        f"event_type exceeds max length {MAX_SYMBOL_LEN}",
    )
    _check(
        max_len(inp.location, MAX_LOCATION_LEN),
        ErrorCode.LOCATION_TOO_LONG,
        f"location exceeds max length {MAX_LOCATION_LEN}",
    )
    _check(is_hash(inp.data_hash), ErrorCode.INVALID_HASH, f"data_hash must be a {HASH_LEN}-byte hash")
    _check(max_len(inp.note, MAX_NOTE_LEN), ErrorCode.NOTE_TOO_LONG, f"note exceeds max length {MAX_NOTE_LEN}")
    _validate_string_map(inp.metadata, "metadata")


def validate_pagination(offset: Any, limit: Any) -> None:
    for label, value in (("offset", offset), ("limit", limit)):
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            raise ValidationError(ErrorCode.INVALID_PAGINATION, f"{label} must be a non-negative integer")
