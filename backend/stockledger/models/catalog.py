from __future__ import annotations

from ..extensions import db


class Product(db.Model):
    """
    Product master data, owned by the catalog.

    The ledger only reads from this table: shelf_life_days at receipt time,
    name/category for inventory views. Products are never mutated by stock
    operations.

    SHELF LIFE:
    expiry_date = receive_date + shelf_life_days, computed once when a batch
    is received. Editing shelf_life_days later does not re-date existing batches.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.UniqueConstraint("name", name="uq_products_name"),
        db.Index("ix_products_category_name", "category_name", "name"),
        db.CheckConstraint("shelf_life_days >= 0", name="ck_products_shelf_life_nonnegative"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(255), nullable=False)

    # Authoritative storage in cents (frontend may only format for display)
    price_cents = db.Column(db.Integer, nullable=True)

    image_url = db.Column(db.String(512), nullable=True)
    category_name = db.Column(db.String(120), nullable=False, default="General")

    shelf_life_days = db.Column(db.Integer, nullable=False, default=7)

    batches = db.relationship(
        "StockBatch",
        back_populates="product",
        lazy=True,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r} shelf_life_days={self.shelf_life_days}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "price_cents": self.price_cents,
            "image_url": self.image_url,
            "category_name": self.category_name,
            "shelf_life_days": self.shelf_life_days,
        }
