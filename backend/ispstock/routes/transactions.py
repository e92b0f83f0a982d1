# Overview: Flask API routes for stock transactions; parses input and returns JSON responses.

# backend/ispstock/routes/transactions.py
"""
Transaction API Routes

Approval workflow for moving stock to and from field staff:
- Create (pending, stock untouched)
- Approve (stock adjusted) or reject (no stock change)
- Complete (approved only)

SECURITY:
- Any authenticated role may create and view transactions
- Approve, reject and complete require the approve permission
  (admin, supervisor)
"""

from flask import Blueprint, current_app, g, request

from ..decorators import get_page_args, require_auth, require_permission, validate_json
from ..permissions import Action, Resource
from ..responses import fail, ok, server_error
from ..services import transaction_service
from ..services.transaction_service import TransactionError
from ..validation import TRANSACTION_SCHEMA


transactions_bp = Blueprint("transactions", __name__, url_prefix="/api/transactions")


# =============================================================================
# QUERIES
# =============================================================================

@transactions_bp.get("")
@require_auth
@require_permission(Action.VIEW, Resource.TRANSACTION)
def list_transactions_route():
    """
    Query params: type, status (either may be "all"), staff_id, search, page, limit.

    Newest first.
    """
    try:
        page, limit = get_page_args()
        transactions, pagination = transaction_service.list_transactions(
            type=request.args.get("type"),
            status=request.args.get("status"),
            staff_id=request.args.get("staff_id"),
            search=request.args.get("search"),
            page=page,
            limit=limit,
        )
        return ok({
            "transactions": [t.to_dict() for t in transactions],
            "pagination": pagination,
        })
    except Exception:
        current_app.logger.exception("Failed to list transactions")
        return server_error()


@transactions_bp.get("/stats/overview")
@require_auth
@require_permission(Action.VIEW, Resource.TRANSACTION)
def transaction_stats_route():
    try:
        return ok(transaction_service.get_transaction_stats())
    except Exception:
        current_app.logger.exception("Failed to get transaction statistics")
        return server_error()


@transactions_bp.get("/<transaction_id>")
@require_auth
@require_permission(Action.VIEW, Resource.TRANSACTION)
def get_transaction_route(transaction_id: str):
    try:
        return ok(transaction_service.get_transaction(transaction_id).to_dict())
    except TransactionError as e:
        return fail(e.message, e.status_code)
    except Exception:
        current_app.logger.exception("Failed to get transaction")
        return server_error()


# =============================================================================
# CREATE
# =============================================================================

@transactions_bp.post("")
@require_auth
@require_permission(Action.CREATE, Resource.TRANSACTION)
@validate_json(TRANSACTION_SCHEMA)
def create_transaction_route():
    """
    Request body:
    {
        "type": "installation" | "maintenance" | "return" | "borrow",
        "staff_id": "<uuid>",
        "customer_id": "<uuid>",  (optional, "" treated as absent)
        "notes": "Install at block C",
        "items": [{"stock_id": "<uuid>", "quantity": 2, "notes": ""}]
    }

    Returns:
        201: Transaction created (status pending)
        400: Validation error, unknown staff/customer/stock, insufficient stock
    """
    data = g.validated_data
    try:
        transaction = transaction_service.create_transaction(
            type=data["type"],
            staff_id=data["staff_id"],
            customer_id=data.get("customer_id"),
            notes=data["notes"],
            items=data["items"],
            created_by=g.current_user.id,
        )
        return ok(transaction.to_dict(), message="Transaction created successfully", status=201)

    except TransactionError as e:
        return fail(e.message, e.status_code)
    except Exception:
        current_app.logger.exception("Failed to create transaction")
        return server_error()


# =============================================================================
# STATUS TRANSITIONS
# =============================================================================

@transactions_bp.patch("/<transaction_id>/approve")
@require_auth
@require_permission(Action.APPROVE, Resource.TRANSACTION)
def approve_transaction_route(transaction_id: str):
    """
    Approve a pending transaction and apply its stock effect.

    Returns:
        200: Approved
        400: Insufficient stock (only with STRICT_STOCK_ON_APPROVE)
        404: Not found or no longer pending
    """
    try:
        transaction = transaction_service.approve_transaction(
            transaction_id,
            approver_id=g.current_user.id,
            strict=current_app.config.get("STRICT_STOCK_ON_APPROVE", False),
        )
        return ok(transaction.to_dict(), message="Transaction approved successfully")

    except TransactionError as e:
        return fail(e.message, e.status_code)
    except Exception:
        current_app.logger.exception("Failed to approve transaction")
        return server_error()


@transactions_bp.patch("/<transaction_id>/reject")
@require_auth
@require_permission(Action.APPROVE, Resource.TRANSACTION)
def reject_transaction_route(transaction_id: str):
    try:
        transaction = transaction_service.reject_transaction(transaction_id, approver_id=g.current_user.id)
        return ok(transaction.to_dict(), message="Transaction rejected successfully")

    except TransactionError as e:
        return fail(e.message, e.status_code)
    except Exception:
        current_app.logger.exception("Failed to reject transaction")
        return server_error()


@transactions_bp.patch("/<transaction_id>/complete")
@require_auth
@require_permission(Action.APPROVE, Resource.TRANSACTION)
def complete_transaction_route(transaction_id: str):
    try:
        transaction = transaction_service.complete_transaction(transaction_id)
        return ok(transaction.to_dict(), message="Transaction completed successfully")

    except TransactionError as e:
        return fail(e.message, e.status_code)
    except Exception:
        current_app.logger.exception("Failed to complete transaction")
        return server_error()
