from __future__ import annotations

from ..extensions import db
from ispstock.time_utils import to_utc_z
from .mixins import new_id


STOCK_CATEGORIES = ("router", "switch", "cable", "modem", "antenna", "accessory")


class StockItem(db.Model):
    """
    Stock master data with the on-hand quantity.

    Quantity is mutated by direct CRUD, by the quantity adjustment endpoint
    and by transaction approval (see transaction_service.approve_transaction).
    """
    __tablename__ = "stock_items"
    __table_args__ = (
        db.Index("ix_stock_items_category", "category"),
        db.Index("ix_stock_items_brand", "brand"),
        db.Index("ix_stock_items_quantity", "quantity"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    name = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(20), nullable=False)
    brand = db.Column(db.String(100), nullable=False)
    model = db.Column(db.String(100), nullable=False)

    quantity = db.Column(db.Integer, nullable=False, default=0)
    min_stock = db.Column(db.Integer, nullable=False, default=0)
    unit = db.Column(db.String(20), nullable=False, default="pcs")
    location = db.Column(db.String(255), nullable=False)
    price = db.Column(db.Numeric(15, 2), nullable=False, default=0)
    description = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<StockItem id={self.id} name={self.name!r} quantity={self.quantity}>"

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.min_stock

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "brand": self.brand,
            "model": self.model,
            "quantity": self.quantity,
            "min_stock": self.min_stock,
            "unit": self.unit,
            "location": self.location,
            "price": float(self.price) if self.price is not None else 0.0,
            "description": self.description or "",
            "is_low_stock": self.is_low_stock,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
