# Overview: Receipt of a new stock batch, committed with its ADD log entry.

from __future__ import annotations

import logging

from ..errors import NotFoundError
from ..extensions import db
from ..models import ActionType, Product, StockBatch
from ..time_utils import add_days
from ..validation import require_actor, require_date, require_positive_quantity, require_product_id
from . import batch_store
from .concurrency import ledger_transaction
from .transaction_log_service import append_transaction

logger = logging.getLogger(__name__)


def receive(*, product_id, receive_date, quantity, actor_name) -> StockBatch:
    """
    Receive `quantity` units of a product as a new batch.

    expiry_date = receive_date + the product's shelf_life_days, plain calendar
    addition. The batch insert and the ADD log entry commit together.
    """
    product_id = require_product_id(product_id)
    receive_dt = require_date(receive_date, "receive_date")
    quantity = require_positive_quantity(quantity)
    actor_name = require_actor(actor_name)

    with ledger_transaction():
        product = db.session.get(Product, product_id)
        if product is None:
            raise NotFoundError(f"Product {product_id} not found")

        shelf_life = product.shelf_life_days
        expiry_dt = add_days(receive_dt, shelf_life) if shelf_life is not None else None

        batch = batch_store.insert_batch(
            product_id=product_id,
            receive_date=receive_dt,
            expiry_date=expiry_dt,
            quantity=quantity,
        )
        append_transaction(
            action=ActionType.ADD,
            actor_name=actor_name,
            product_id=product_id,
            quantity=quantity,
        )

    logger.info(
        "Received %s of product %s as batch %s (expires %s) by %s",
        quantity, product_id, batch.id, batch.expiry_date, actor_name,
    )
    return batch
