# backend/stockledger/routes/inventory.py
"""
Inventory read routes. Nothing here mutates the ledger.

Date semantics:
- "today" defaults to the current date in LEDGER_TIMEZONE.
- ?today=YYYY-MM-DD overrides it (what-if views, tests).
"""
from flask import Blueprint, request

from ..services import inventory_service, purge_service
from ..validation import require_date


inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


def _today_arg():
    raw = request.args.get("today")
    if not raw:
        return None
    return require_date(raw, "today")


@inventory_bp.get("")
def inventory_snapshot_route():
    """
    Inventory grouped by product with active/expired totals and batch detail.

    Query params:
    - today: YYYY-MM-DD (optional)
    - category: exact category name (optional)
    """
    today = _today_arg()
    category = request.args.get("category") or None

    items = inventory_service.snapshot(today=today, category=category)
    return {"items": [item.to_dict() for item in items], "count": len(items)}


@inventory_bp.get("/expired")
def expired_batches_route():
    """Descriptors for every expired batch, ready to post to /api/stock/delete-expired."""
    today = _today_arg()
    category = request.args.get("category") or None

    descriptors = purge_service.collect_expired(today=today, category=category)
    return {
        "expired_batches": [d.to_dict() for d in descriptors],
        "count": len(descriptors),
        "total_quantity": sum(d.quantity for d in descriptors),
    }


@inventory_bp.get("/<int:product_id>/batches")
def product_batches_route(product_id: int):
    batches = inventory_service.list_batches(product_id)
    return {
        "product_id": product_id,
        "batches": [b.to_dict() for b in batches],
        "available_quantity": sum(b.quantity for b in batches),
    }
