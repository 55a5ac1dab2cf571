# Overview: Flask API routes for product records; parses input and returns JSON responses.

# backend/provenance/routes/products.py
"""
Product record routes.

SECURITY: Mutating routes require a caller principal (X-Principal).
- Registration makes the caller the owner.
- Transfer, activation and allow-list changes require the caller to be the owner.
Reads are public.
"""
from flask import Blueprint, g

from ..decorators import ledger_errors, require_principal
from ..records import ProductInput
from ..services import authorization_service, products_service
from .params import decode_items, json_list, json_object, page_args, text_field

products_bp = Blueprint("products", __name__, url_prefix="/api")


@products_bp.post("/products")
@require_principal
@ledger_errors
def register_product_route():
    """Register a product owned by the caller."""
    payload = json_object()
    product = products_service.register_product(g.principal, ProductInput.from_payload(payload))
    return product.to_api_dict(), 201


@products_bp.post("/products/batch")
@require_principal
@ledger_errors
def register_batch_route():
    """
    Register several products, all or nothing.

    Body: {"products": [<product>, ...]}
    """
    payload = json_object()
    inputs = decode_items(json_list(payload, "products"), ProductInput.from_payload)
    products = products_service.register_batch(g.principal, inputs)
    return {"items": [p.to_api_dict() for p in products], "count": len(products)}, 201


@products_bp.get("/products/<product_id>")
@ledger_errors
def get_product_route(product_id: str):
    return products_service.get_product(product_id).to_api_dict(), 200


@products_bp.get("/products/<product_id>/event-ids")
@ledger_errors
def get_product_event_ids_route(product_id: str):
    ids = products_service.get_product_event_ids(product_id)
    return {"product_id": product_id, "event_ids": ids, "count": len(ids)}, 200


@products_bp.post("/products/<product_id>/transfer")
@require_principal
@ledger_errors
def transfer_product_route(product_id: str):
    """Body: {"new_owner": "<principal>"}"""
    payload = json_object()
    new_owner = text_field(payload, "new_owner")
    if not new_owner:
        return {"error": "new_owner is required"}, 400

    product = products_service.transfer_ownership(g.principal, product_id, new_owner)
    return product.to_api_dict(), 200


@products_bp.post("/products/<product_id>/active")
@require_principal
@ledger_errors
def set_active_route(product_id: str):
    """Body: {"active": true|false}"""
    payload = json_object()
    active = payload.get("active")
    if not isinstance(active, bool):
        return {"error": "active must be a boolean"}, 400

    product = products_service.set_active(g.principal, product_id, active)
    return product.to_api_dict(), 200


@products_bp.post("/products/<product_id>/actors")
@require_principal
@ledger_errors
def add_actor_route(product_id: str):
    """Body: {"actor": "<principal>"}"""
    payload = json_object()
    actor = text_field(payload, "actor")
    if not actor:
        return {"error": "actor is required"}, 400

    authorization_service.add_authorized_actor(g.principal, product_id, actor)
    return {"ok": True}, 200


@products_bp.delete("/products/<product_id>/actors/<actor>")
@require_principal
@ledger_errors
def remove_actor_route(product_id: str, actor: str):
    authorization_service.remove_authorized_actor(g.principal, product_id, actor)
    return {"ok": True}, 200


@products_bp.get("/products/<product_id>/actors/<actor>")
@ledger_errors
def is_authorized_route(product_id: str, actor: str):
    allowed = authorization_service.is_authorized(product_id, actor)
    return {"product_id": product_id, "actor": actor, "authorized": allowed}, 200


@products_bp.get("/owners/<owner>/products")
@ledger_errors
def list_owner_products_route(owner: str):
    offset, limit = page_args()
    page = products_service.list_products_by_owner(owner, offset, limit)
    return page.to_dict(lambda p: p.to_api_dict()), 200
