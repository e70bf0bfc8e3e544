# Overview: Persistence helpers for stock batches; no commits happen here.

from __future__ import annotations

from datetime import date

from sqlalchemy import func

from ..extensions import db
from ..models import StockBatch
from .concurrency import lock_for_update
"""
Batch store invariants (authoritative)

- Reads never return exhausted batches (quantity <= 0).
- FIFO order is (receive_date ASC, id ASC).
- Callers own the transaction; helpers only add/flush/delete on the session.
"""


def _live_batches_query(product_id: int):
    return db.session.query(StockBatch).filter(
        StockBatch.product_id == product_id,
        StockBatch.quantity > 0,
    )


def fifo_batches(product_id: int, *, lock: bool = False) -> list[StockBatch]:
    """Non-exhausted batches for a product, oldest first."""
    query = _live_batches_query(product_id).order_by(
        StockBatch.receive_date.asc(),
        StockBatch.id.asc(),
    )
    if lock:
        query = lock_for_update(query)
    return query.all()


def available_quantity(product_id: int) -> int:
    total = db.session.query(
        func.coalesce(func.sum(StockBatch.quantity), 0)
    ).filter(
        StockBatch.product_id == product_id,
        StockBatch.quantity > 0,
    ).scalar()
    return int(total or 0)


def get_batch(batch_id: int, *, lock: bool = False) -> StockBatch | None:
    query = db.session.query(StockBatch).filter(StockBatch.id == batch_id)
    if lock:
        query = lock_for_update(query)
    return query.first()


def insert_batch(
    *,
    product_id: int,
    receive_date: date,
    expiry_date: date | None,
    quantity: int,
) -> StockBatch:
    batch = StockBatch(
        product_id=product_id,
        receive_date=receive_date,
        expiry_date=expiry_date,
        quantity=quantity,
    )
    db.session.add(batch)
    db.session.flush()  # assigns batch.id without committing
    return batch


def decrement_batch(batch: StockBatch, amount: int) -> StockBatch:
    if amount <= 0 or amount >= batch.quantity:
        raise ValueError("decrement must leave a positive remainder; delete the batch instead")
    batch.quantity = batch.quantity - amount
    return batch


def delete_batch(batch: StockBatch) -> None:
    db.session.delete(batch)


def delete_batches_for_product(product_id: int) -> int:
    # ORM deletes so batches already in the identity map are not left stale
    batches = db.session.query(StockBatch).filter(
        StockBatch.product_id == product_id
    ).all()
    for batch in batches:
        db.session.delete(batch)
    return len(batches)
