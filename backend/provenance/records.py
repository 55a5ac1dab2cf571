# Overview: Domain records stored in the ledger and the inputs that create them.

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .errors import ErrorCode, ValidationError
from .time_utils import to_utc_z


def _list_field(payload: dict, key: str) -> list:
    value = payload.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValidationError(ErrorCode.INVALID_PAYLOAD, f"{key} must be a list")
    return list(value)


def _map_field(payload: dict, key: str) -> dict:
    value = payload.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValidationError(ErrorCode.INVALID_PAYLOAD, f"{key} must be an object")
    return dict(value)


def hash_to_hex(value: bytes) -> str:
    return value.hex()


def hash_from_hex(value: Any) -> Any:
    """
    Decode a hex string into bytes. Non-strings are returned unchanged so
    validation can report them with the proper error code.
    """
    if isinstance(value, str):
        try:
            return bytes.fromhex(value)
        except ValueError:
            return value
    return value


@dataclass
class Product:
    id: str
    owner: str
    name: str
    description: str
    origin: str
    category: str
    created_at: int
    active: bool = True
    tags: list[str] = field(default_factory=list)
    certifications: list[bytes] = field(default_factory=list)
    media_hashes: list[bytes] = field(default_factory=list)
    custom: dict[str, str] = field(default_factory=dict)

    def __repr__(self) -> str:
        return f"<Product id={self.id!r} owner={self.owner!r} active={self.active}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "owner": self.owner,
            "name": self.name,
            "description": self.description,
            "origin": self.origin,
            "category": self.category,
            "created_at": self.created_at,
            "active": self.active,
            "tags": list(self.tags),
            "certifications": [hash_to_hex(h) for h in self.certifications],
            "media_hashes": [hash_to_hex(h) for h in self.media_hashes],
            "custom": dict(self.custom),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Product":
        return cls(
            id=data["id"],
            owner=data["owner"],
            name=data["name"],
            description=data.get("description", ""),
            origin=data["origin"],
            category=data["category"],
            created_at=int(data["created_at"]),
            active=bool(data.get("active", True)),
            tags=list(data.get("tags") or []),
            certifications=[bytes.fromhex(h) for h in data.get("certifications") or []],
            media_hashes=[bytes.fromhex(h) for h in data.get("media_hashes") or []],
            custom=dict(data.get("custom") or {}),
        )

    def to_api_dict(self) -> dict:
        data = self.to_dict()
        data["created_at_iso"] = to_utc_z(self.created_at)
        return data


@dataclass(frozen=True)
class TrackingEvent:
    event_id: int
    product_id: str
    actor: str
    timestamp: int
    event_type: str
    data_hash: bytes
    location: str = ""
    note: str = ""
    metadata: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "event_id": self.event_id,
            "product_id": self.product_id,
            "actor": self.actor,
            "timestamp": self.timestamp,
            "event_type": self.event_type,
            "location": self.location,
            "data_hash": hash_to_hex(self.data_hash),
            "note": self.note,
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TrackingEvent":
        return cls(
            event_id=int(data["event_id"]),
            product_id=data["product_id"],
            actor=data["actor"],
            timestamp=int(data["timestamp"]),
            event_type=data["event_type"],
            data_hash=bytes.fromhex(data["data_hash"]),
            location=data.get("location", ""),
            note=data.get("note", ""),
            metadata=dict(data.get("metadata") or {}),
        )

    def to_api_dict(self) -> dict:
        data = self.to_dict()
        data["timestamp_iso"] = to_utc_z(self.timestamp)
        return data


@dataclass
class ProductInput:
    """Caller-supplied fields for a registration."""
    id: str
    name: str
    origin: str
    category: str
    description: str = ""
    tags: list[str] = field(default_factory=list)
    certifications: list[bytes] = field(default_factory=list)
    media_hashes: list[bytes] = field(default_factory=list)
    custom: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: dict) -> "ProductInput":
        return cls(
            id=payload.get("id") or "",
            name=payload.get("name") or "",
            origin=payload.get("origin") or "",
            category=payload.get("category") or "",
            description=payload.get("description") or "",
            tags=_list_field(payload, "tags"),
            certifications=[hash_from_hex(h) for h in _list_field(payload, "certifications")],
            media_hashes=[hash_from_hex(h) for h in _list_field(payload, "media_hashes")],
            custom=_map_field(payload, "custom"),
        )


@dataclass
class EventInput:
    """Caller-supplied fields for a tracking event."""
    product_id: str
    event_type: str
    data_hash: bytes
    location: str = ""
    note: str = ""
    metadata: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: dict, product_id: str | None = None) -> "EventInput":
        return cls(
            product_id=product_id if product_id is not None else (payload.get("product_id") or ""),
            event_type=payload.get("event_type") or "",
            data_hash=hash_from_hex(payload.get("data_hash") or ""),
            location=payload.get("location") or "",
            note=payload.get("note") or "",
            metadata=_map_field(payload, "metadata"),
        )


@dataclass(frozen=True)
class Notification:
    """Domain notification persisted alongside the change it reports."""
    seq: int
    topic: str
    subject: str
    timestamp: int
    payload: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "seq": self.seq,
            "topic": self.topic,
            "subject": self.subject,
            "timestamp": self.timestamp,
            "payload": self.payload,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Notification":
        return cls(
            seq=int(data["seq"]),
            topic=data["topic"],
            subject=data["subject"],
            timestamp=int(data["timestamp"]),
            payload=dict(data.get("payload") or {}),
        )
