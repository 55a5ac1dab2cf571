# Overview: Typed key builders for the single-key ledger namespace.

"""
Ledger key encoding.

Every key is a one-byte key-space tag followed by length-prefixed
components:

- str   -> 0x01 | u32 big-endian byte length | UTF-8 bytes
- int   -> 0x02 | u64 big-endian
- bytes -> 0x03 | u32 big-endian byte length | raw bytes

Because each component declares its own length, no value (including
one containing separator-like characters) can shift a boundary and
collide with a different key.
"""
from __future__ import annotations

import struct
from enum import IntEnum

MAX_U64 = 2**64 - 1

_STR = b"\x01"
_INT = b"\x02"
_BYTES = b"\x03"


class KeySpace(IntEnum):
    PRODUCT = 1
    PRODUCT_EVENT_IDS = 2
    EVENT = 3
    EVENT_SEQ = 4
    AUTH = 5
    TYPE_COUNT = 6
    TYPE_RANK = 7
    OWNER_PRODUCTS = 8
    NOTIFICATION = 9
    NOTIFICATION_SEQ = 10


def _component(value) -> bytes:
    if isinstance(value, bool):
        raise TypeError("bool is not a valid key component")
    if isinstance(value, int):
        if value < 0 or value > MAX_U64:
            raise ValueError(f"integer key component out of range: {value}")
        return _INT + struct.pack(">Q", value)
    if isinstance(value, str):
        raw = value.encode("utf-8")
        return _STR + struct.pack(">I", len(raw)) + raw
    if isinstance(value, (bytes, bytearray)):
        return _BYTES + struct.pack(">I", len(value)) + bytes(value)
    raise TypeError(f"unsupported key component type: {type(value).__name__}")


def build_key(space: KeySpace, *components) -> bytes:
    return bytes([space]) + b"".join(_component(c) for c in components)


def product_key(product_id: str) -> bytes:
    return build_key(KeySpace.PRODUCT, product_id)


def product_event_ids_key(product_id: str) -> bytes:
    return build_key(KeySpace.PRODUCT_EVENT_IDS, product_id)


def event_key(event_id: int) -> bytes:
    return build_key(KeySpace.EVENT, event_id)


def event_seq_key() -> bytes:
    return build_key(KeySpace.EVENT_SEQ)


def auth_key(product_id: str, actor: str) -> bytes:
    return build_key(KeySpace.AUTH, product_id, actor)


def type_count_key(product_id: str, event_type: str) -> bytes:
    return build_key(KeySpace.TYPE_COUNT, product_id, event_type)


def type_rank_key(product_id: str, event_type: str, rank: int) -> bytes:
    return build_key(KeySpace.TYPE_RANK, product_id, event_type, rank)


def owner_products_key(owner: str) -> bytes:
    return build_key(KeySpace.OWNER_PRODUCTS, owner)


def notification_key(seq: int) -> bytes:
    return build_key(KeySpace.NOTIFICATION, seq)


def notification_seq_key() -> bytes:
    return build_key(KeySpace.NOTIFICATION_SEQ)
