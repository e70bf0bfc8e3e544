# Overview: Bulk purge of caller-selected expired batches, one EXPIRED log entry per batch, one transaction.

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date

from ..errors import ValidationError
from ..extensions import db
from ..models import ActionType, Product
from ..time_utils import ledger_today, to_iso_date
from ..validation import coerce_integer, require_actor, require_date
from . import batch_store
from .concurrency import ledger_transaction
from .inventory_service import snapshot
from .transaction_log_service import append_transaction

logger = logging.getLogger(__name__)

"""
Purge Semantics (authoritative)

- Descriptors are built by the caller at selection time (collect_expired() or
  the UI) and carry product name and expiry date, so the log still reads
  correctly after the batch or product is gone.
- Batch ids are not re-selected server-side. A descriptor whose batch no longer
  exists is still logged (idempotent purge).
- Re-validation: a batch that still exists but now holds less than the
  descriptor quantity was shrunk by a concurrent withdrawal after selection.
  That descriptor is skipped (no delete, no log) and reported; the rest proceed.
  A batch that belongs to a different product than the descriptor names is
  skipped the same way.
- A stock_id may appear only once per purge.
- All deletes and all log writes commit together or not at all.
"""

EXTRA_INFO_TEMPLATE = "{product_name} | expired: {expiry_date}"


@dataclass(frozen=True)
class ExpiredBatchDescriptor:
    batch_id: int
    product_id: int | None
    product_name: str
    quantity: int
    expiry_date: date | None

    @classmethod
    def from_dict(cls, payload: dict) -> "ExpiredBatchDescriptor":
        if not isinstance(payload, dict):
            raise ValidationError("each expired batch must be an object")

        batch_id = payload.get("stock_id", payload.get("batch_id"))
        if batch_id is None:
            raise ValidationError("stock_id is required for each expired batch")

        quantity = payload.get("quantity")
        if quantity is None:
            raise ValidationError("quantity is required for each expired batch")

        product_id = payload.get("product_id")
        expiry_raw = payload.get("expiry_date")

        return cls(
            batch_id=coerce_integer(batch_id, "stock_id"),
            product_id=coerce_integer(product_id, "product_id") if product_id is not None else None,
            product_name=str(payload.get("product_name") or "").strip(),
            quantity=coerce_integer(quantity, "quantity"),
            expiry_date=require_date(expiry_raw, "expiry_date") if expiry_raw else None,
        )

    @property
    def extra_info(self) -> str:
        return EXTRA_INFO_TEMPLATE.format(
            product_name=self.product_name,
            expiry_date=to_iso_date(self.expiry_date) or "-",
        )

    def to_dict(self) -> dict:
        return {
            "stock_id": self.batch_id,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "expiry_date": to_iso_date(self.expiry_date),
        }


@dataclass
class PurgeResult:
    purged: list[ExpiredBatchDescriptor] = field(default_factory=list)
    skipped: list[ExpiredBatchDescriptor] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.purged)

    def to_dict(self) -> dict:
        return {
            "count": self.count,
            "purged": [d.to_dict() for d in self.purged],
            "skipped": [d.to_dict() for d in self.skipped],
        }


def collect_expired(*, today: date | None = None, category: str | None = None) -> list[ExpiredBatchDescriptor]:
    """Descriptors for every batch the inventory view classifies as EXPIRED."""
    if today is None:
        today = ledger_today()

    descriptors = []
    for item in snapshot(today=today, category=category):
        for batch in item.expired_batches:
            descriptors.append(ExpiredBatchDescriptor(
                batch_id=batch.batch_id,
                product_id=item.product.id,
                product_name=item.product.name,
                quantity=batch.quantity,
                expiry_date=batch.expiry_date,
            ))
    return descriptors


def _validate_descriptors(descriptors) -> list[ExpiredBatchDescriptor]:
    if not descriptors:
        raise ValidationError("No expired batches selected")

    cleaned = []
    seen_batch_ids = set()
    for d in descriptors:
        if isinstance(d, dict):
            d = ExpiredBatchDescriptor.from_dict(d)
        if not isinstance(d, ExpiredBatchDescriptor):
            raise ValidationError("each expired batch must be an object")
        if d.quantity <= 0:
            raise ValidationError("quantity must be > 0 for each expired batch")
        # A repeat would be logged twice through the already-gone path
        if d.batch_id in seen_batch_ids:
            raise ValidationError(f"stock_id {d.batch_id} is listed more than once")
        seen_batch_ids.add(d.batch_id)
        cleaned.append(d)
    return cleaned


def _stale_descriptor(descriptor: ExpiredBatchDescriptor, batch) -> bool:
    """True when the live batch no longer matches what was selected."""
    if batch.quantity < descriptor.quantity:
        return True
    return descriptor.product_id is not None and batch.product_id != descriptor.product_id


def _linked_product_id(product_id: int | None) -> int | None:
    # The product may have been deleted since selection; extra_info keeps its name
    if product_id is None or db.session.get(Product, product_id) is None:
        return None
    return product_id


def purge_expired(descriptors, *, actor_name) -> PurgeResult:
    """
    Delete the described batches and log one EXPIRED entry per purged batch.

    Accepts ExpiredBatchDescriptor instances or their dict form.
    """
    descriptors = _validate_descriptors(descriptors)
    actor_name = require_actor(actor_name)

    result = PurgeResult()
    with ledger_transaction():
        for descriptor in descriptors:
            batch = batch_store.get_batch(descriptor.batch_id, lock=True)
            if batch is not None:
                if _stale_descriptor(descriptor, batch):
                    result.skipped.append(descriptor)
                    continue
                batch_store.delete_batch(batch)

            append_transaction(
                action=ActionType.EXPIRED,
                actor_name=actor_name,
                product_id=_linked_product_id(descriptor.product_id),
                quantity=descriptor.quantity,
                extra_info=descriptor.extra_info,
            )
            result.purged.append(descriptor)

    for descriptor in result.skipped:
        logger.warning(
            "Skipped purge of batch %s: batch changed since selection",
            descriptor.batch_id,
        )
    logger.info("Purged %s expired batch(es) by %s", result.count, actor_name)
    return result
