# Overview: FIFO withdrawal across a product's batches, committed with its WITHDRAW log entry.

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..errors import InsufficientStockError
from ..models import ActionType, StockBatch
from ..validation import require_actor, require_positive_quantity, require_product_id
from . import batch_store
from .concurrency import ledger_transaction
from .transaction_log_service import append_transaction

logger = logging.getLogger(__name__)

"""
Withdrawal Invariants (authoritative)

- All-or-nothing: if quantity > available, nothing changes.
- Oldest batch first, (receive_date, id) order. A batch that is fully consumed
  is deleted; at most one batch is partially decremented, and it is the last one
  touched.
- The availability check reads the same locked rows that get mutated, inside
  the same transaction, so concurrent withdrawals cannot jointly overdraw.
- Exactly one WITHDRAW log entry per call, carrying the requested quantity
  (not the per-batch split).
"""


@dataclass(frozen=True)
class BatchAllocation:
    batch_id: int
    taken: int
    remaining: int

    @property
    def deleted(self) -> bool:
        return self.remaining == 0

    def to_dict(self) -> dict:
        return {
            "batch_id": self.batch_id,
            "taken": self.taken,
            "remaining": self.remaining,
            "deleted": self.deleted,
        }


@dataclass
class WithdrawalResult:
    product_id: int
    quantity: int
    log_entry_id: int | None = None
    batches_affected: list[BatchAllocation] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "quantity": self.quantity,
            "log_entry_id": self.log_entry_id,
            "batches_affected": [a.to_dict() for a in self.batches_affected],
        }


def allocate_fifo(
    batches: list[StockBatch], quantity: int, *, product_id: int | None = None
) -> list[BatchAllocation]:
    """
    Plan the greedy FIFO walk without touching the session.

    `batches` must already be in FIFO order. Raises InsufficientStockError when
    they cannot cover `quantity`.
    """
    available = sum(b.quantity for b in batches)
    if quantity > available:
        raise InsufficientStockError(product_id, quantity, available)

    plan: list[BatchAllocation] = []
    still_needed = quantity
    for batch in batches:
        if still_needed <= 0:
            break
        if batch.quantity <= still_needed:
            plan.append(BatchAllocation(batch_id=batch.id, taken=batch.quantity, remaining=0))
            still_needed -= batch.quantity
        else:
            plan.append(BatchAllocation(
                batch_id=batch.id,
                taken=still_needed,
                remaining=batch.quantity - still_needed,
            ))
            still_needed = 0
    return plan


def withdraw(*, product_id, quantity, actor_name) -> WithdrawalResult:
    """
    Withdraw `quantity` units of a product, oldest batches first.

    An unknown product has no batches, so it fails as insufficient stock.
    """
    product_id = require_product_id(product_id)
    quantity = require_positive_quantity(quantity)
    actor_name = require_actor(actor_name)

    with ledger_transaction():
        batches = batch_store.fifo_batches(product_id, lock=True)
        plan = allocate_fifo(batches, quantity, product_id=product_id)

        by_id = {b.id: b for b in batches}
        for allocation in plan:
            batch = by_id[allocation.batch_id]
            if allocation.deleted:
                batch_store.delete_batch(batch)
            else:
                batch_store.decrement_batch(batch, allocation.taken)

        entry = append_transaction(
            action=ActionType.WITHDRAW,
            actor_name=actor_name,
            product_id=product_id,
            quantity=quantity,
        )
        result = WithdrawalResult(
            product_id=product_id,
            quantity=quantity,
            log_entry_id=entry.id,
            batches_affected=plan,
        )

    logger.info(
        "Withdrew %s of product %s across %s batch(es) by %s",
        quantity, product_id, len(plan), actor_name,
    )
    return result
