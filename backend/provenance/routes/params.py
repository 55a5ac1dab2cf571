# Overview: Query-string helpers shared by the ledger routes.

from flask import current_app, request

from ..errors import ErrorCode, LedgerError, ValidationError


def page_args() -> tuple[int, int]:
    """
    offset/limit from the query string.

    limit defaults to LEDGER_DEFAULT_PAGE_SIZE and is capped at
    LEDGER_MAX_PAGE_SIZE; negative values are rejected.
    """
    default_limit = current_app.config.get("LEDGER_DEFAULT_PAGE_SIZE", 20)
    max_limit = current_app.config.get("LEDGER_MAX_PAGE_SIZE", 100)

    offset = request.args.get("offset", default=0, type=int)
    limit = request.args.get("limit", default=default_limit, type=int)
    if offset is None or limit is None or offset < 0 or limit < 0:
        raise ValidationError(ErrorCode.INVALID_PAGINATION, "offset and limit must be non-negative integers")
    return offset, min(limit, max_limit)


def json_object() -> dict:
    payload = request.get_json(silent=True)
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError(ErrorCode.INVALID_PAYLOAD, "Invalid JSON payload")
    return payload


def json_list(payload: dict, key: str) -> list:
    items = payload.get(key)
    if items is None:
        return []
    if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
        raise ValidationError(ErrorCode.INVALID_PAYLOAD, f"{key} must be a list of objects")
    return items


def text_field(payload: dict, key: str) -> str:
    value = payload.get(key)
    return value.strip() if isinstance(value, str) else ""


def decode_items(items: list, decode) -> list:
    """Decode batch items, tagging a failure with the item's position."""
    decoded = []
    for index, item in enumerate(items):
        try:
            decoded.append(decode(item))
        except LedgerError as exc:
            exc.index = index
            raise
    return decoded
