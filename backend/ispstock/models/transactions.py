from __future__ import annotations

from ..extensions import db
from ispstock.time_utils import to_utc_z
from .mixins import new_id


TRANSACTION_TYPES = ("installation", "maintenance", "return", "borrow")
TRANSACTION_STATUSES = ("pending", "approved", "rejected", "completed")


class Transaction(db.Model):
    """
    A request to move stock in or out for a field job.

    LIFECYCLE:
    - pending: created with its items; stock untouched
    - approved: stock adjusted (installation/borrow subtract, return adds)
    - rejected: terminal, no stock change
    - completed: terminal, reached only from approved
    """
    __tablename__ = "transactions"
    __table_args__ = (
        db.Index("ix_transactions_type", "type"),
        db.Index("ix_transactions_status", "status"),
        db.Index("ix_transactions_created_at", "created_at"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    type = db.Column(db.String(20), nullable=False)
    staff_id = db.Column(db.String(36), db.ForeignKey("staff.id"), nullable=False, index=True)
    customer_id = db.Column(db.String(36), db.ForeignKey("customers.id"), nullable=True)
    status = db.Column(db.String(20), nullable=False, default="pending")
    notes = db.Column(db.Text, nullable=False)

    created_by = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=True)
    approved_by = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=True)
    approved_at = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    staff = db.relationship("Staff", backref=db.backref("transactions", lazy=True))
    customer = db.relationship("Customer", backref=db.backref("transactions", lazy=True))
    approver = db.relationship("User", foreign_keys=[approved_by])
    creator = db.relationship("User", foreign_keys=[created_by])
    items = db.relationship(
        "TransactionItem",
        backref="transaction",
        lazy=True,
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="TransactionItem.position",
    )

    def to_dict(self, include_items: bool = True) -> dict:
        data = {
            "id": self.id,
            "type": self.type,
            "staff_id": self.staff_id,
            "staff_name": self.staff.name if self.staff else None,
            "customer_id": self.customer_id,
            "customer_name": self.customer.name if self.customer else None,
            "status": self.status,
            "notes": self.notes,
            "created_by": self.created_by,
            "approved_by": self.approved_by,
            "approved_by_name": self.approver.name if self.approver else None,
            "approved_at": to_utc_z(self.approved_at) if self.approved_at else None,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if include_items:
            data["items"] = [item.to_dict() for item in self.items]
        return data


class TransactionItem(db.Model):
    __tablename__ = "transaction_items"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    transaction_id = db.Column(
        db.String(36),
        db.ForeignKey("transactions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    stock_id = db.Column(db.String(36), db.ForeignKey("stock_items.id"), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False)
    notes = db.Column(db.Text, nullable=True)
    # Index of the line in the create request
    position = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    stock_item = db.relationship("StockItem")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "transaction_id": self.transaction_id,
            "stock_id": self.stock_id,
            "stock_name": self.stock_item.name if self.stock_item else None,
            "unit": self.stock_item.unit if self.stock_item else None,
            "quantity": self.quantity,
            "notes": self.notes or "",
        }
