from __future__ import annotations

import enum

from ..extensions import db
from ..time_utils import to_ledger_timestamp


class ActionType(str, enum.Enum):
    """
    Closed set of log action kinds.

    ADD / WITHDRAW / EXPIRED are written by the stock engines. The user and
    product kinds come from collaborators; the ledger stores and renders them
    but never interprets them. UNKNOWN is the read-side passthrough for any
    stored string outside this set (the raw text is kept on the row).
    """
    ADD = "ADD"
    WITHDRAW = "WITHDRAW"
    EXPIRED = "EXPIRED"
    CREATE_USER = "CREATE_USER"
    DELETE_USER = "DELETE_USER"
    CREATE_PRODUCT = "CREATE_PRODUCT"
    DELETE_PRODUCT = "DELETE_PRODUCT"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, raw: str | None) -> "ActionType":
        if raw is None:
            return cls.UNKNOWN
        try:
            return cls(raw.strip().upper())
        except ValueError:
            return cls.UNKNOWN


STOCK_ACTIONS = frozenset({ActionType.ADD, ActionType.WITHDRAW, ActionType.EXPIRED})


class TransactionLogEntry(db.Model):
    """
    Append-only audit row. One per ledger mutation, same DB transaction.

    product_id is nullable: collaborator actions may have no product, and
    deleting a product nulls the link while keeping the row. extra_info carries
    display context (e.g. product name and expiry date) that must survive that.
    """
    __tablename__ = "transactions_log"
    __table_args__ = (
        db.Index("ix_txlog_action_date", "action_date", "id"),
        db.Index("ix_txlog_product_action", "product_id", "action_type"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    action_type = db.Column(db.String(32), nullable=False, index=True)

    product_id = db.Column(
        db.Integer,
        db.ForeignKey("products.id", ondelete="SET NULL"),
        nullable=True,
    )

    quantity = db.Column(db.Integer, nullable=True)

    actor_name = db.Column(db.String(255), nullable=False)

    # Ledger-local wall clock, second precision, naive
    action_date = db.Column(db.DateTime, nullable=False)

    extra_info = db.Column(db.Text, nullable=True)

    @property
    def action(self) -> ActionType:
        return ActionType.parse(self.action_type)

    def __repr__(self) -> str:
        return (
            f"<TransactionLogEntry id={self.id} action_type={self.action_type!r} "
            f"product_id={self.product_id} quantity={self.quantity}>"
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "action_type": self.action_type,
            "action": self.action.value,
            "product_id": self.product_id,
            "quantity": self.quantity,
            "actor_name": self.actor_name,
            "action_date": to_ledger_timestamp(self.action_date),
            "extra_info": self.extra_info,
        }
