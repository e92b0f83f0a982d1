from __future__ import annotations

from ..extensions import db
from ispstock.time_utils import to_utc_z, to_iso_date
from .mixins import new_id


SERVICE_TYPES = ("residential", "business")
CUSTOMER_STATUSES = ("active", "suspended", "terminated")
DEVICE_STATUSES = ("active", "maintenance", "replaced")
SERVICE_HISTORY_TYPES = ("installation", "maintenance", "repair", "upgrade")
SERVICE_HISTORY_STATUSES = ("completed", "pending", "cancelled")


class Customer(db.Model):
    """
    Subscriber record.

    Devices and service history are owned by the customer and removed with it.
    """
    __tablename__ = "customers"
    __table_args__ = (
        db.Index("ix_customers_service_type", "service_type"),
        db.Index("ix_customers_status", "status"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(20), nullable=False)
    address = db.Column(db.Text, nullable=False)
    service_type = db.Column(db.String(20), nullable=False)
    package_type = db.Column(db.String(100), nullable=False)
    status = db.Column(db.String(20), nullable=False, default="active")
    installation_date = db.Column(db.Date, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    devices = db.relationship(
        "CustomerDevice",
        backref="customer",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="CustomerDevice.install_date.desc()",
    )
    service_history = db.relationship(
        "ServiceHistory",
        backref="customer",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="ServiceHistory.date.desc()",
    )

    def to_dict(self, include_details: bool = False) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "service_type": self.service_type,
            "package_type": self.package_type,
            "status": self.status,
            "installation_date": to_iso_date(self.installation_date),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if include_details:
            data["devices"] = [device.to_dict() for device in self.devices]
            data["service_history"] = [entry.to_dict() for entry in self.service_history]
        return data


class CustomerDevice(db.Model):
    """Stock item installed at a customer premises, tracked by serial number."""
    __tablename__ = "customer_devices"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    customer_id = db.Column(db.String(36), db.ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    stock_id = db.Column(db.String(36), db.ForeignKey("stock_items.id"), nullable=False)
    serial_number = db.Column(db.String(100), nullable=False, unique=True, index=True)
    install_date = db.Column(db.Date, nullable=False)
    location = db.Column(db.String(255), nullable=False)
    status = db.Column(db.String(20), nullable=False, default="active")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    stock_item = db.relationship("StockItem")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customer_id": self.customer_id,
            "stock_id": self.stock_id,
            "stock_name": self.stock_item.name if self.stock_item else None,
            "serial_number": self.serial_number,
            "install_date": to_iso_date(self.install_date),
            "location": self.location,
            "status": self.status,
        }


class ServiceHistory(db.Model):
    __tablename__ = "service_history"
    __table_args__ = (
        db.Index("ix_service_history_type", "type"),
        db.Index("ix_service_history_status", "status"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    customer_id = db.Column(db.String(36), db.ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    type = db.Column(db.String(20), nullable=False)
    description = db.Column(db.Text, nullable=False)
    technician = db.Column(db.String(255), nullable=False)
    date = db.Column(db.Date, nullable=False)
    status = db.Column(db.String(20), nullable=False, default="pending")
    cost = db.Column(db.Numeric(15, 2), nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customer_id": self.customer_id,
            "type": self.type,
            "description": self.description,
            "technician": self.technician,
            "date": to_iso_date(self.date),
            "status": self.status,
            "cost": float(self.cost) if self.cost is not None else 0.0,
        }
