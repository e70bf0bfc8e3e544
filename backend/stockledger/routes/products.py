# backend/stockledger/routes/products.py
"""
Catalog routes.

Reads are open; create/delete require an actor because both write a log entry.
"""
from flask import Blueprint, request, g

from ..decorators import require_actor_identity
from ..models import Product
from ..services import inventory_service, products_service
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_product,
)

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "price_cents", "image_url", "category_name", "shelf_life_days"},
    required_on_create={"name"},
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
def list_products_route():
    category = request.args.get("category") or None
    products = products_service.list_products(category=category)
    return {"items": [p.to_dict() for p in products], "count": len(products)}


@products_bp.get("/available")
def available_products_route():
    """Products that currently have stock to withdraw."""
    products = inventory_service.available_products()
    return {"items": [{"id": p.id, "product_name": p.name} for p in products]}


@products_bp.get("/<int:product_id>")
def get_product_route(product_id: int):
    return products_service.get_product(product_id).to_dict()


@products_bp.post("")
@require_actor_identity
def create_product_route():
    payload = request.get_json(silent=True) or {}
    if isinstance(payload, dict):
        payload = {k: v for k, v in payload.items() if k != "actor_name"}

    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY)
    enforce_rules_product(patch)

    product = products_service.create_product(patch, actor_name=g.actor_name)
    return product.to_dict(), 201


@products_bp.delete("/<int:product_id>")
@require_actor_identity
def delete_product_route(product_id: int):
    products_service.delete_product(product_id, actor_name=g.actor_name)
    return {"message": "Product deleted", "id": product_id}
