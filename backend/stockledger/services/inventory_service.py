# Overview: Read-only inventory view grouping live batches per product into active/expired totals.

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from sqlalchemy import and_

from ..extensions import db
from ..models import Product, StockBatch
from ..time_utils import ledger_today, to_iso_date
from . import batch_store
from .expiry import ExpiryStatus, classify, days_remaining, warning_window
"""
Inventory View Semantics (authoritative)

- Read-only. One SELECT (products LEFT OUTER JOIN live stock), so each snapshot
  is self-consistent without serializable isolation.
- EXPIRED batches count toward total_expired_quantity; every other status
  (DUE_TODAY, NEAR, NORMAL) counts as active.
- Products with no live batches are still listed with zero totals, so they
  show up as out of stock instead of disappearing.
- Ordered by product name, batches in FIFO order.
"""


@dataclass(frozen=True)
class BatchView:
    batch_id: int
    receive_date: date
    expiry_date: date | None
    quantity: int
    status: ExpiryStatus
    days_remaining: int | None

    @property
    def is_expired(self) -> bool:
        return self.status is ExpiryStatus.EXPIRED

    def to_dict(self) -> dict:
        return {
            "stock_id": self.batch_id,
            "receive_date": to_iso_date(self.receive_date),
            "expiry_date": to_iso_date(self.expiry_date),
            "quantity": self.quantity,
            "status": self.status.value,
            "days_remaining": self.days_remaining,
            "is_expired": self.is_expired,
        }


@dataclass
class ProductInventory:
    product: Product
    total_active_quantity: int = 0
    total_expired_quantity: int = 0
    batches: list[BatchView] = field(default_factory=list)

    @property
    def expired_batches(self) -> list[BatchView]:
        return [b for b in self.batches if b.is_expired]

    def to_dict(self) -> dict:
        return {
            "id": self.product.id,
            "product_name": self.product.name,
            "image_url": self.product.image_url,
            "category_name": self.product.category_name,
            "total_quantity": self.total_active_quantity,
            "expired_quantity": self.total_expired_quantity,
            "batches": [b.to_dict() for b in self.batches],
        }


def snapshot(*, today: date | None = None, category: str | None = None) -> list[ProductInventory]:
    """
    Inventory grouped by product as of `today` (defaults to the ledger's today).
    """
    if today is None:
        today = ledger_today()
    warning_days = warning_window()

    q = db.session.query(Product, StockBatch).outerjoin(
        StockBatch,
        and_(StockBatch.product_id == Product.id, StockBatch.quantity > 0),
    )
    if category:
        q = q.filter(Product.category_name == category)
    q = q.order_by(
        Product.name.asc(),
        StockBatch.receive_date.asc(),
        StockBatch.id.asc(),
    )

    grouped: dict[int, ProductInventory] = {}
    for product, batch in q.all():
        view = grouped.get(product.id)
        if view is None:
            view = ProductInventory(product=product)
            grouped[product.id] = view

        if batch is None:
            continue

        status = classify(batch.expiry_date, today, warning_days)
        view.batches.append(BatchView(
            batch_id=batch.id,
            receive_date=batch.receive_date,
            expiry_date=batch.expiry_date,
            quantity=batch.quantity,
            status=status,
            days_remaining=days_remaining(batch.expiry_date, today),
        ))
        if status is ExpiryStatus.EXPIRED:
            view.total_expired_quantity += batch.quantity
        else:
            view.total_active_quantity += batch.quantity

    return list(grouped.values())


def available_products() -> list[Product]:
    """Products that currently hold at least one live batch."""
    return (
        db.session.query(Product)
        .filter(
            Product.id.in_(
                db.session.query(StockBatch.product_id).filter(StockBatch.quantity > 0)
            )
        )
        .order_by(Product.name.asc())
        .all()
    )


def list_batches(product_id: int) -> list[StockBatch]:
    return batch_store.fifo_batches(product_id)
