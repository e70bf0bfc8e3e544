# backend/stockledger/routes/stock.py
"""
Stock mutation routes: receive, FIFO withdraw, expired purge.

Every route requires an actor (see require_actor_identity). Each call is one
ledger transaction; on any error nothing is applied.

Error responses carry {"error", "code"}:
- 400 invalid_argument
- 404 not_found
- 409 insufficient_stock
- 500 storage_failure
"""
from flask import Blueprint, request, g, current_app

from ..decorators import require_actor_identity
from ..errors import ValidationError
from ..services import purge_service, receive_service, withdrawal_service


stock_bp = Blueprint("stock", __name__, url_prefix="/api/stock")


def _json_payload() -> dict:
    payload = request.get_json(silent=True)
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    return payload


@stock_bp.post("/add")
@require_actor_identity
def receive_stock_route():
    """
    Receive a new batch.

    Body: {"product_id": int, "receive_date": "YYYY-MM-DD", "quantity": int}
    """
    payload = _json_payload()

    batch = receive_service.receive(
        product_id=payload.get("product_id"),
        receive_date=payload.get("receive_date"),
        quantity=payload.get("quantity"),
        actor_name=g.actor_name,
    )
    return {"message": "Stock added", "stock_id": batch.id, "batch": batch.to_dict()}, 201


@stock_bp.post("/withdraw")
@require_actor_identity
def withdraw_stock_route():
    """
    Withdraw stock, oldest batches first.

    Body: {"product_id": int, "quantity": int}
    """
    payload = _json_payload()

    result = withdrawal_service.withdraw(
        product_id=payload.get("product_id"),
        quantity=payload.get("quantity"),
        actor_name=g.actor_name,
    )
    return {"message": "Stock withdrawn", **result.to_dict()}


@stock_bp.post("/delete-expired")
@require_actor_identity
def delete_expired_route():
    """
    Purge expired batches selected by the caller.

    Body: {"expired_batches": [{"stock_id", "product_id", "product_name",
                                "quantity", "expiry_date"}, ...]}
    """
    payload = _json_payload()
    expired_batches = payload.get("expired_batches")
    if not isinstance(expired_batches, list) or not expired_batches:
        raise ValidationError("No expired batches selected")

    result = purge_service.purge_expired(expired_batches, actor_name=g.actor_name)
    if result.skipped:
        current_app.logger.warning(
            "Purge by %s skipped %s batch(es) changed since selection",
            g.actor_name, len(result.skipped),
        )
    return {"message": f"Purged {result.count} expired batch(es)", **result.to_dict()}
