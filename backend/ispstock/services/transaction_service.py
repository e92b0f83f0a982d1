# Overview: Service-layer operations for stock transactions; encapsulates business logic and database work.

"""
Transaction Service

Stock transactions move equipment out to (or back from) field staff.

LIFECYCLE:
    pending --approve--> approved --complete--> completed
    pending --reject---> rejected

Stock is never touched at creation. Availability is checked when the
transaction is created and quantities change only when it is approved:

    installation, borrow -> subtract
    return               -> add
    maintenance          -> no stock effect

Status transitions are claimed with a conditional UPDATE
(WHERE status = <expected>) so two concurrent approvals cannot both win:
the loser sees zero affected rows and fails before touching stock.
"""
from __future__ import annotations

from datetime import timedelta

from flask import current_app
from sqlalchemy import case, func, or_, update

from ..errors import ServiceError
from ..extensions import db
from ..models import Customer, Staff, StockItem, Transaction, TransactionItem, TRANSACTION_TYPES
from ..time_utils import utcnow
from .auth_service import get_notification_recipients
from .concurrency import atomic, lock_for_update
from .notification_service import TransactionCreated, emit
from .pagination import paginate
from .stock_service import OPERATION_ADD, OPERATION_SUBTRACT, StockError, apply_quantity_change


STOCK_EFFECTS = {
    "installation": OPERATION_SUBTRACT,
    "borrow": OPERATION_SUBTRACT,
    "return": OPERATION_ADD,
    "maintenance": None,
}

NOT_FOUND_OR_PROCESSED = "Transaction not found or already processed"
NOT_FOUND_OR_NOT_APPROVED = "Transaction not found or not approved"


class TransactionError(ServiceError):
    """Raised for transaction workflow errors."""
    pass


# =============================================================================
# CREATE
# =============================================================================

def create_transaction(
    *,
    type: str,
    staff_id: str,
    notes: str,
    items: list[dict],
    customer_id: str | None = None,
    created_by: str | None = None,
) -> Transaction:
    """
    Create a pending transaction with its items in one database transaction.

    Every referenced row is checked first; any failure rolls back the whole
    unit so nothing is persisted. After commit the approvers are notified.
    """
    if type not in TRANSACTION_TYPES:
        raise TransactionError(f"Invalid transaction type: {type}")
    if not items:
        raise TransactionError("At least one item is required")

    with atomic():
        staff = db.session.query(Staff).filter_by(id=staff_id, is_active=True).first()
        if not staff:
            raise TransactionError("Staff member not found")

        if customer_id:
            if not db.session.get(Customer, customer_id):
                raise TransactionError("Customer not found")
        else:
            customer_id = None

        # Lines naming the same stock item draw on the same quantity
        requested: dict[str, int] = {}
        for entry in items:
            requested[entry["stock_id"]] = requested.get(entry["stock_id"], 0) + entry["quantity"]

        for stock_id, quantity in requested.items():
            stock = lock_for_update(db.session.query(StockItem).filter_by(id=stock_id)).first()
            if not stock:
                raise TransactionError(f"Stock item {stock_id} not found")
            if type != "return" and stock.quantity < quantity:
                raise TransactionError(f"Insufficient stock for item {stock_id}")

        transaction = Transaction(
            type=type,
            staff_id=staff_id,
            customer_id=customer_id,
            status="pending",
            notes=notes,
            created_by=created_by,
        )
        db.session.add(transaction)
        for position, entry in enumerate(items):
            transaction.items.append(TransactionItem(
                stock_id=entry["stock_id"],
                quantity=entry["quantity"],
                notes=entry.get("notes") or None,
                position=position,
            ))
        db.session.flush()

    notify_transaction_created(transaction)
    return transaction


def notify_transaction_created(transaction: Transaction) -> int:
    """Email every active admin/supervisor about a new pending transaction."""
    try:
        event = TransactionCreated.from_transaction(transaction)
        recipients = get_notification_recipients()
    except Exception:
        current_app.logger.exception("Failed to prepare notification for transaction %s", transaction.id)
        return 0
    return emit(event, recipients)


# =============================================================================
# STATUS TRANSITIONS
# =============================================================================

def _claim(transaction_id: str, expected: str, new_status: str, **values) -> bool:
    """Move a transaction from expected to new_status. False when no row matched."""
    stmt = (
        update(Transaction)
        .where(Transaction.id == transaction_id, Transaction.status == expected)
        .values(status=new_status, updated_at=func.now(), **values)
        .execution_options(synchronize_session=False)
    )
    return db.session.execute(stmt).rowcount == 1


def approve_transaction(transaction_id: str, approver_id: str, *, strict: bool = False) -> Transaction:
    """
    Approve a pending transaction and apply its stock effect.

    The status claim and every quantity change commit together; a failure on
    any item rolls all of them back and the transaction stays pending.

    strict=False lets stock go negative (availability was checked at create);
    strict=True refuses any subtract that would go below zero.
    """
    with atomic():
        if not _claim(transaction_id, "pending", "approved", approved_by=approver_id, approved_at=utcnow()):
            raise TransactionError(NOT_FOUND_OR_PROCESSED, 404)

        transaction = db.session.get(Transaction, transaction_id, populate_existing=True)
        operation = STOCK_EFFECTS.get(transaction.type)

        if operation is not None:
            for item in transaction.items:
                try:
                    apply_quantity_change(item.stock_id, item.quantity, operation, allow_negative=not strict)
                except StockError as exc:
                    if exc.status_code == 404:
                        raise TransactionError(exc.message, 404) from exc
                    raise TransactionError(f"Insufficient stock for item {item.stock_id}") from exc

    return transaction


def reject_transaction(transaction_id: str, approver_id: str) -> Transaction:
    with atomic():
        if not _claim(transaction_id, "pending", "rejected", approved_by=approver_id, approved_at=utcnow()):
            raise TransactionError(NOT_FOUND_OR_PROCESSED, 404)
    return get_transaction(transaction_id, refresh=True)


def complete_transaction(transaction_id: str) -> Transaction:
    with atomic():
        if not _claim(transaction_id, "approved", "completed"):
            raise TransactionError(NOT_FOUND_OR_NOT_APPROVED, 404)
    return get_transaction(transaction_id, refresh=True)


# =============================================================================
# QUERIES
# =============================================================================

def get_transaction(transaction_id: str, *, refresh: bool = False) -> Transaction:
    transaction = db.session.get(Transaction, transaction_id, populate_existing=refresh)
    if not transaction:
        raise TransactionError("Transaction not found", 404)
    return transaction


def list_transactions(
    *,
    type: str | None = None,
    status: str | None = None,
    staff_id: str | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 50,
) -> tuple[list[Transaction], dict]:
    query = db.session.query(Transaction)

    if type and type != "all":
        query = query.filter(Transaction.type == type)
    if status and status != "all":
        query = query.filter(Transaction.status == status)
    if staff_id:
        query = query.filter(Transaction.staff_id == staff_id)
    if search:
        term = f"%{search}%"
        query = query.filter(or_(Transaction.notes.ilike(term), Transaction.id.ilike(term)))

    query = query.order_by(Transaction.created_at.desc(), Transaction.id.desc())
    return paginate(query, page, limit)


def _count_where(condition):
    return func.count(case((condition, 1)))


def get_transaction_stats() -> dict:
    """Totals by status and type, monthly counts for the last year, busiest staff."""
    overview = db.session.query(
        func.count(Transaction.id).label("total_transactions"),
        _count_where(Transaction.status == "pending").label("pending_transactions"),
        _count_where(Transaction.status == "approved").label("approved_transactions"),
        _count_where(Transaction.status == "rejected").label("rejected_transactions"),
        _count_where(Transaction.status == "completed").label("completed_transactions"),
        _count_where(Transaction.type == "installation").label("installations"),
        _count_where(Transaction.type == "maintenance").label("maintenance"),
        _count_where(Transaction.type == "return").label("returns"),
        _count_where(Transaction.type == "borrow").label("borrows"),
    ).one()

    month = func.strftime("%Y-%m", Transaction.created_at)
    monthly = (
        db.session.query(month.label("month"), Transaction.type, func.count(Transaction.id).label("count"))
        .filter(Transaction.created_at >= utcnow() - timedelta(days=365))
        .group_by(month, Transaction.type)
        .order_by(month.desc())
        .all()
    )

    transaction_count = func.count(Transaction.id)
    staff_rows = (
        db.session.query(
            Staff.name,
            transaction_count.label("transaction_count"),
            _count_where(Transaction.status == "completed").label("completed_count"),
        )
        .outerjoin(Transaction, Transaction.staff_id == Staff.id)
        .filter(Staff.is_active.is_(True))
        .group_by(Staff.id, Staff.name)
        .order_by(transaction_count.desc())
        .limit(10)
        .all()
    )

    return {
        "overview": dict(overview._mapping),
        "monthly": [
            {"month": row.month, "type": row.type, "count": row.count}
            for row in monthly
        ],
        "staff": [
            {
                "staff_name": row.name,
                "transaction_count": row.transaction_count,
                "completed_count": row.completed_count,
            }
            for row in staff_rows
        ],
    }
