# Overview: Service-layer operations for customers, their installed devices and service history.

from __future__ import annotations

from datetime import timedelta

from sqlalchemy import case, func, or_

from ..errors import ServiceError
from ..extensions import db
from ..models import Customer, CustomerDevice, ServiceHistory, StockItem, CUSTOMER_STATUSES
from ..time_utils import today
from .pagination import paginate


CUSTOMER_FIELDS = (
    "name", "email", "phone", "address", "service_type",
    "package_type", "status", "installation_date",
)


class CustomerError(ServiceError):
    """Raised for customer operation errors."""
    pass


def list_customers(
    *,
    service_type: str | None = None,
    status: str | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 50,
) -> tuple[list[Customer], dict]:
    query = db.session.query(Customer)

    if service_type and service_type != "all":
        query = query.filter(Customer.service_type == service_type)
    if status and status != "all":
        query = query.filter(Customer.status == status)
    if search:
        term = f"%{search}%"
        query = query.filter(or_(Customer.name.ilike(term), Customer.email.ilike(term), Customer.address.ilike(term)))

    query = query.order_by(Customer.created_at.desc())
    return paginate(query, page, limit)


def get_customer(customer_id: str) -> Customer:
    customer = db.session.get(Customer, customer_id)
    if not customer:
        raise CustomerError("Customer not found", 404)
    return customer


def create_customer(data: dict) -> Customer:
    customer = Customer(**{k: data[k] for k in CUSTOMER_FIELDS if k in data})
    if customer.installation_date is None:
        customer.installation_date = today()
    db.session.add(customer)
    db.session.commit()
    return customer


def update_customer(customer_id: str, data: dict) -> Customer:
    customer = get_customer(customer_id)
    for key in CUSTOMER_FIELDS:
        if data.get(key) is not None:
            setattr(customer, key, data[key])
    db.session.commit()
    return customer


def delete_customer(customer_id: str) -> None:
    """Hard delete. Devices and service history go with the customer."""
    customer = get_customer(customer_id)
    db.session.delete(customer)
    db.session.commit()


def set_status(customer_id: str, status: str) -> Customer:
    if status not in CUSTOMER_STATUSES:
        raise CustomerError("Invalid status. Must be active, suspended, or terminated")
    customer = get_customer(customer_id)
    customer.status = status
    db.session.commit()
    return customer


# =============================================================================
# DEVICES & SERVICE HISTORY
# =============================================================================

def add_device(customer_id: str, data: dict) -> CustomerDevice:
    get_customer(customer_id)

    if db.session.query(CustomerDevice.id).filter_by(serial_number=data["serial_number"]).first():
        raise CustomerError("Device with this serial number already exists", 409)
    if not db.session.get(StockItem, data["stock_id"]):
        raise CustomerError("Stock item not found", 404)

    device = CustomerDevice(
        customer_id=customer_id,
        stock_id=data["stock_id"],
        serial_number=data["serial_number"],
        install_date=data.get("install_date") or today(),
        location=data["location"],
        status=data.get("status", "active"),
    )
    db.session.add(device)
    db.session.commit()
    return device


def add_service_history(customer_id: str, data: dict) -> ServiceHistory:
    get_customer(customer_id)

    entry = ServiceHistory(
        customer_id=customer_id,
        type=data["type"],
        description=data["description"],
        technician=data["technician"],
        date=data.get("date") or today(),
        status=data.get("status", "pending"),
        cost=data.get("cost", 0),
    )
    db.session.add(entry)
    db.session.commit()
    return entry


# =============================================================================
# STATS
# =============================================================================

def get_customer_stats() -> dict:
    overview = db.session.query(
        func.count(Customer.id).label("total_customers"),
        func.count(case((Customer.status == "active", 1))).label("active_customers"),
        func.count(case((Customer.status == "suspended", 1))).label("suspended_customers"),
        func.count(case((Customer.status == "terminated", 1))).label("terminated_customers"),
        func.count(case((Customer.service_type == "residential", 1))).label("residential_customers"),
        func.count(case((Customer.service_type == "business", 1))).label("business_customers"),
    ).one()

    count = func.count(Customer.id)
    packages = (
        db.session.query(Customer.package_type, Customer.service_type, count.label("count"))
        .group_by(Customer.package_type, Customer.service_type)
        .order_by(count.desc())
        .all()
    )

    month = func.strftime("%Y-%m", Customer.installation_date)
    monthly = (
        db.session.query(month.label("month"), count.label("installations"))
        .filter(Customer.installation_date >= today() - timedelta(days=365))
        .group_by(month)
        .order_by(month.desc())
        .all()
    )

    return {
        "overview": dict(overview._mapping),
        "packages": [dict(row._mapping) for row in packages],
        "monthly": [dict(row._mapping) for row in monthly],
    }
