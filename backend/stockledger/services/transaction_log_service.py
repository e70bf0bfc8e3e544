# Overview: Append-only transaction log; writes ride inside the caller's transaction.

from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..extensions import db
from ..models import ActionType, Product, TransactionLogEntry
from ..time_utils import ledger_now
"""
Transaction Log Invariants (authoritative)

- Append-only: rows are never updated or deleted by the ledger.
  (The catalog nulls product_id when a product is deleted; nothing else changes.)
- One entry is written inside the same DB transaction as the mutation it records.
- action_date is ledger-local wall clock, second precision.
- History reads fall back to DELETED_PRODUCT_LABEL once the product link is gone.
"""

DELETED_PRODUCT_LABEL = "[deleted product]"

USER_ACTIONS = frozenset({ActionType.CREATE_USER, ActionType.DELETE_USER})


def append_transaction(
    *,
    action: ActionType,
    actor_name: str,
    product_id: int | None = None,
    quantity: int | None = None,
    extra_info: Optional[str] = None,
    action_date: Optional[datetime] = None,
) -> TransactionLogEntry:
    """
    Append one log entry.

    - No domain logic here.
    - Flushes so the id is assigned; never commits.
    """
    if action == ActionType.UNKNOWN:
        raise ValueError("UNKNOWN is a read-side passthrough and cannot be written")

    entry = TransactionLogEntry(
        action_type=ActionType(action).value,
        product_id=product_id,
        quantity=quantity,
        actor_name=actor_name,
        action_date=action_date or ledger_now(),
        extra_info=extra_info,
    )
    db.session.add(entry)
    db.session.flush()
    return entry


def get_history(*, limit: int | None = None, action: ActionType | None = None) -> list[dict]:
    """
    Log entries newest first, each rendered with a product_name.

    Collaborator kinds render the same way as stock kinds. User actions never
    carry a product, so their product_name stays None.
    """
    q = db.session.query(TransactionLogEntry, Product.name).outerjoin(
        Product, TransactionLogEntry.product_id == Product.id
    )
    if action is not None:
        q = q.filter(TransactionLogEntry.action_type == ActionType(action).value)

    q = q.order_by(
        TransactionLogEntry.action_date.desc(),
        TransactionLogEntry.id.desc(),
    )
    if limit is not None:
        q = q.limit(limit)

    history = []
    for entry, product_name in q.all():
        row = entry.to_dict()
        if product_name is not None:
            row["product_name"] = product_name
        elif entry.action in USER_ACTIONS:
            row["product_name"] = None
        else:
            row["product_name"] = DELETED_PRODUCT_LABEL
        history.append(row)
    return history


def totals_by_action(product_id: int) -> dict[str, int]:
    """Summed logged quantity per stock action for one product."""
    rows = db.session.query(
        TransactionLogEntry.action_type,
        db.func.coalesce(db.func.sum(TransactionLogEntry.quantity), 0),
    ).filter(
        TransactionLogEntry.product_id == product_id,
    ).group_by(TransactionLogEntry.action_type).all()
    return {action_type: int(total) for action_type, total in rows}
