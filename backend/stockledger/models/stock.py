from __future__ import annotations

from ..extensions import db
from ..time_utils import to_iso_date


class StockBatch(db.Model):
    """
    One receipt of a product: its own receive date, expiry date and remaining quantity.

    INVARIANTS:
    - quantity >= 0. A batch at 0 is exhausted; withdrawals delete it on the spot
      and every read filters quantity > 0 anyway.
    - FIFO order per product is (receive_date ASC, id ASC). The id tie-break keeps
      allocation stable for batches received on the same day.
    - Every write is checked against version_id. SQLite ignores FOR UPDATE, so
      two withdrawals can read the same rows; the second writer then fails
      instead of overwriting the first.
    - expiry_date is NULL only when shelf life was unknown at receipt; such a
      batch never classifies as expired.
    """
    __tablename__ = "stock"
    __table_args__ = (
        db.Index("ix_stock_product_fifo", "product_id", "receive_date", "id"),
        db.CheckConstraint("quantity >= 0", name="ck_stock_quantity_nonnegative"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    product_id = db.Column(
        db.Integer,
        db.ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    receive_date = db.Column(db.Date, nullable=False)
    expiry_date = db.Column(db.Date, nullable=True, index=True)

    quantity = db.Column(db.Integer, nullable=False)

    # Optimistic lock: a decrement or delete based on a stale read matches no row
    version_id = db.Column(db.Integer, nullable=False, default=1)

    product = db.relationship("Product", back_populates="batches")
    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return (
            f"<StockBatch id={self.id} product_id={self.product_id} "
            f"receive_date={self.receive_date} quantity={self.quantity}>"
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "receive_date": to_iso_date(self.receive_date),
            "expiry_date": to_iso_date(self.expiry_date),
            "quantity": self.quantity,
        }
