# Overview: Service-layer operations for stock items; encapsulates business logic and database work.

"""
Stock Service

Stock item CRUD, low stock queries and the quantity adjustment primitive.

apply_quantity_change() is the only code path that mutates
StockItem.quantity after creation (besides a full PUT). It is shared by the
direct adjustment endpoint and by transaction approval, and it never
commits: callers wrap it in concurrency.atomic().
"""
from __future__ import annotations

from sqlalchemy import func, or_, update

from ..errors import ServiceError
from ..extensions import db
from ..models import StockItem, TransactionItem, CustomerDevice
from .concurrency import atomic, lock_for_update
from .pagination import paginate


OPERATION_ADD = "add"
OPERATION_SUBTRACT = "subtract"

STOCK_FIELDS = (
    "name", "category", "brand", "model", "quantity", "min_stock",
    "unit", "location", "price", "description",
)


class StockError(ServiceError):
    """Raised for stock operation errors."""
    pass


# =============================================================================
# QUANTITY ADJUSTMENT
# =============================================================================

def apply_quantity_change(
    stock_id: str,
    quantity: int,
    operation: str,
    *,
    allow_negative: bool = False,
) -> dict:
    """
    Add to or subtract from a stock item's quantity inside the caller's
    database transaction.

    For "subtract" the UPDATE is guarded by quantity >= requested unless
    allow_negative is set; a guarded subtract that would go negative raises
    StockError and writes nothing.

    Returns {"previousQuantity", "newQuantity", "operation", "change"}.
    """
    if operation not in (OPERATION_ADD, OPERATION_SUBTRACT):
        raise StockError('Invalid operation. Use "add" or "subtract"')
    if quantity <= 0:
        raise StockError("Quantity must be positive")

    item = lock_for_update(db.session.query(StockItem).filter_by(id=stock_id)).first()
    if not item:
        raise StockError(f"Stock item {stock_id} not found", 404)

    previous_quantity = item.quantity

    stmt = update(StockItem).where(StockItem.id == stock_id)
    if operation == OPERATION_ADD:
        stmt = stmt.values(quantity=StockItem.quantity + quantity, updated_at=func.now())
    else:
        stmt = stmt.values(quantity=StockItem.quantity - quantity, updated_at=func.now())
        if not allow_negative:
            stmt = stmt.where(StockItem.quantity >= quantity)

    result = db.session.execute(stmt.execution_options(synchronize_session=False))
    if result.rowcount == 0:
        raise StockError("Insufficient stock quantity")

    db.session.refresh(item)

    return {
        "previousQuantity": previous_quantity,
        "newQuantity": item.quantity,
        "operation": operation,
        "change": quantity,
    }


def adjust_quantity(stock_id: str, quantity: int, operation: str) -> dict:
    """Standalone adjustment (its own database transaction, never below zero)."""
    with atomic():
        return apply_quantity_change(stock_id, quantity, operation)


# =============================================================================
# CRUD
# =============================================================================

def list_stock_items(
    *,
    category: str | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 50,
) -> tuple[list[StockItem], dict]:
    query = db.session.query(StockItem)

    if category and category != "all":
        query = query.filter(StockItem.category == category)

    if search:
        term = f"%{search}%"
        query = query.filter(or_(
            StockItem.name.ilike(term),
            StockItem.brand.ilike(term),
            StockItem.model.ilike(term),
            StockItem.location.ilike(term),
        ))

    query = query.order_by(StockItem.created_at.desc())
    return paginate(query, page, limit)


def get_stock_item(stock_id: str) -> StockItem:
    item = db.session.get(StockItem, stock_id)
    if not item:
        raise StockError("Stock item not found", 404)
    return item


def create_stock_item(data: dict) -> StockItem:
    item = StockItem(**{k: data[k] for k in STOCK_FIELDS if k in data})
    db.session.add(item)
    db.session.commit()
    return item


def update_stock_item(stock_id: str, data: dict) -> StockItem:
    item = get_stock_item(stock_id)
    for key in STOCK_FIELDS:
        if key in data:
            setattr(item, key, data[key])
    db.session.commit()
    return item


def delete_stock_item(stock_id: str) -> None:
    """
    Delete a stock item.

    Refused (409) while transactions or installed devices still reference it.
    """
    item = get_stock_item(stock_id)

    in_transactions = db.session.query(TransactionItem.id).filter_by(stock_id=stock_id).first()
    in_devices = db.session.query(CustomerDevice.id).filter_by(stock_id=stock_id).first()
    if in_transactions or in_devices:
        raise StockError("Stock item is referenced by transactions or customer devices", 409)

    db.session.delete(item)
    db.session.commit()


# =============================================================================
# LOW STOCK
# =============================================================================

def get_low_stock_items(limit: int | None = None) -> list[StockItem]:
    """Items with quantity <= min_stock, most depleted first."""
    query = db.session.query(StockItem).filter(
        StockItem.quantity <= StockItem.min_stock
    ).order_by((StockItem.quantity - StockItem.min_stock).asc())
    if limit:
        query = query.limit(limit)
    return query.all()
