# Overview: Flask API routes for tracking events and notifications; parses input and returns JSON responses.

"""
Tracking event routes.

Time semantics:
- start/end accept UNIX seconds or ISO-8601 datetimes (normalized to UTC).
- Time bounds are inclusive: start <= timestamp <= end.
- Omitted filters are inactive (empty type/location, start 0, end max).
"""
from flask import Blueprint, g, request

from ..decorators import ledger_errors, require_principal
from ..errors import ErrorCode, ValidationError
from ..records import EventInput
from ..services import events_service, ledger_service, query_service
from ..services.query_service import EventFilter
from ..services.storage_keys import MAX_U64
from ..time_utils import parse_timestamp
from .params import decode_items, json_list, json_object, page_args

events_bp = Blueprint("events", __name__, url_prefix="/api")


def _time_arg(name: str, default: int) -> int:
    raw = request.args.get(name)
    try:
        value = parse_timestamp(raw)
    except ValueError:
        raise ValidationError(ErrorCode.INVALID_PAYLOAD, f"{name} must be UNIX seconds or an ISO-8601 datetime")
    return default if value is None else value


@events_bp.post("/products/<product_id>/events")
@require_principal
@ledger_errors
def append_event_route(product_id: str):
    """
    Append a tracking event as the caller.

    Body: {"event_type", "data_hash" (64 hex chars), "location"?, "note"?, "metadata"?}
    """
    payload = json_object()
    event_id = events_service.append_event(g.principal, EventInput.from_payload(payload, product_id))
    return {"event_id": event_id}, 201


@events_bp.post("/events/batch")
@require_principal
@ledger_errors
def append_events_batch_route():
    """Body: {"events": [{"product_id", "event_type", "data_hash", ...}, ...]}"""
    payload = json_object()
    inputs = decode_items(json_list(payload, "events"), EventInput.from_payload)
    event_ids = events_service.append_events_batch(g.principal, inputs)
    return {"event_ids": event_ids, "count": len(event_ids)}, 201


@events_bp.get("/events/<int:event_id>")
@ledger_errors
def get_event_route(event_id: int):
    return events_service.get_event(event_id).to_api_dict(), 200


@events_bp.get("/products/<product_id>/events")
@ledger_errors
def list_events_route(product_id: str):
    """
    Paginated events for a product.

    Query params: type, location, start, end, offset, limit
    """
    offset, limit = page_args()
    flt = EventFilter(
        event_type=request.args.get("type", ""),
        start_time=_time_arg("start", 0),
        end_time=_time_arg("end", MAX_U64),
        location=request.args.get("location", ""),
    )
    if flt == EventFilter():
        page = query_service.get_events(product_id, offset, limit)
    else:
        page = query_service.get_events_filtered(product_id, flt, offset, limit)
    return page.to_dict(lambda ev: ev.to_api_dict()), 200


@events_bp.get("/products/<product_id>/events/count")
@ledger_errors
def count_events_route(product_id: str):
    event_type = request.args.get("type")
    if event_type:
        count = events_service.get_event_count_by_type(product_id, event_type)
    else:
        count = events_service.get_event_count(product_id)
    return {"product_id": product_id, "event_type": event_type or None, "count": count}, 200


@events_bp.get("/notifications")
@ledger_errors
def list_notifications_route():
    """Notifications after a sequence number (exclusive), oldest first."""
    after = request.args.get("after", default=0, type=int)
    _, limit = page_args()
    items = ledger_service.list_notifications(after_seq=after, limit=limit)
    next_after = items[-1].seq if items else after
    return {"items": [n.to_dict() for n in items], "next_after": next_after, "limit": limit}, 200
