# backend/stockledger/services/products_service.py
"""
Catalog collaborator.

The ledger only needs a product lookup (name, shelf life, category). Creating
and deleting products lives here so that both actions land in the transaction
log like every other state change.

Deletion semantics:
- the product's batches go with it
- existing log rows keep their history but lose the product link (product_id -> NULL)
- a DELETE_PRODUCT entry records the name in extra_info
"""
from __future__ import annotations

import logging

from flask import current_app, has_app_context
from sqlalchemy.exc import IntegrityError

from ..errors import ConflictError, NotFoundError, StorageFailureError
from ..extensions import db
from ..models import ActionType, Product, TransactionLogEntry
from ..validation import require_actor
from . import batch_store
from .concurrency import ledger_transaction
from .transaction_log_service import append_transaction

logger = logging.getLogger(__name__)

PRODUCT_MUTABLE_FIELDS = {"name", "price_cents", "image_url", "category_name", "shelf_life_days"}


def _config_default(key: str, fallback):
    if has_app_context():
        return current_app.config.get(key, fallback)
    return fallback


def get_product(product_id: int) -> Product:
    product = db.session.get(Product, product_id)
    if product is None:
        raise NotFoundError(f"Product {product_id} not found")
    return product


def list_products(*, category: str | None = None) -> list[Product]:
    q = db.session.query(Product)
    if category:
        q = q.filter(Product.category_name == category)
    return q.order_by(Product.category_name.asc(), Product.name.asc()).all()


def create_product(patch: dict, *, actor_name: str) -> Product:
    """
    Create a catalog product from a validated patch.

    shelf_life_days and category_name fall back to the configured defaults.
    """
    actor_name = require_actor(actor_name)

    fields = {k: v for k, v in patch.items() if k in PRODUCT_MUTABLE_FIELDS}
    if fields.get("shelf_life_days") is None:
        fields["shelf_life_days"] = _config_default("DEFAULT_SHELF_LIFE_DAYS", 7)
    if not fields.get("category_name"):
        fields["category_name"] = _config_default("DEFAULT_CATEGORY", "General")

    name = fields.get("name")
    if db.session.query(Product.id).filter(Product.name == name).first() is not None:
        raise ConflictError(f"Product name already exists: {name}")

    try:
        with ledger_transaction():
            product = Product(**fields)
            db.session.add(product)
            db.session.flush()
            append_transaction(
                action=ActionType.CREATE_PRODUCT,
                actor_name=actor_name,
                product_id=product.id,
                extra_info=product.name,
            )
    except StorageFailureError as exc:
        if isinstance(exc.__cause__, IntegrityError):
            raise ConflictError(f"Product name already exists: {name}") from exc
        raise

    logger.info("Created product %s (%s) by %s", product.id, product.name, actor_name)
    return product


def delete_product(product_id: int, *, actor_name: str) -> None:
    actor_name = require_actor(actor_name)

    with ledger_transaction():
        product = get_product(product_id)
        deleted_name = product.name

        batch_store.delete_batches_for_product(product_id)

        # Keep history, drop the link
        db.session.query(TransactionLogEntry).filter(
            TransactionLogEntry.product_id == product_id
        ).update({TransactionLogEntry.product_id: None}, synchronize_session=False)

        db.session.delete(product)
        db.session.flush()

        append_transaction(
            action=ActionType.DELETE_PRODUCT,
            actor_name=actor_name,
            extra_info=deleted_name,
        )

    logger.info("Deleted product %s (%s) by %s", product_id, deleted_name, actor_name)
