# Overview: Flask API routes for stock items; parses input and returns JSON responses.

# backend/ispstock/routes/stock.py
"""
Stock API Routes

CRUD over stock items, the quantity adjustment endpoint and low stock alerts.

PATCH /api/stock/<id>/quantity never drives quantity below zero: a subtract
larger than the current quantity is refused with 400 and nothing is written.
"""

from flask import Blueprint, current_app, g, request

from ..decorators import get_page_args, require_auth, require_permission, validate_json
from ..permissions import Action, Resource
from ..responses import fail, ok, server_error
from ..services import stock_service
from ..services.auth_service import get_notification_recipients
from ..services.notification_service import LowStockDetected, emit
from ..services.stock_service import StockError
from ..validation import STOCK_ITEM_SCHEMA, STOCK_QUANTITY_SCHEMA


stock_bp = Blueprint("stock", __name__, url_prefix="/api/stock")


@stock_bp.get("")
@require_auth
@require_permission(Action.VIEW, Resource.STOCK)
def list_stock_route():
    """
    Query params: category (or "all"), search, page, limit.
    """
    try:
        page, limit = get_page_args()
        items, pagination = stock_service.list_stock_items(
            category=request.args.get("category"),
            search=request.args.get("search"),
            page=page,
            limit=limit,
        )
        return ok({
            "items": [item.to_dict() for item in items],
            "pagination": pagination,
        })
    except Exception:
        current_app.logger.exception("Failed to list stock items")
        return server_error()


@stock_bp.get("/<stock_id>")
@require_auth
@require_permission(Action.VIEW, Resource.STOCK)
def get_stock_route(stock_id: str):
    try:
        return ok(stock_service.get_stock_item(stock_id).to_dict())
    except StockError as e:
        return fail(e.message, e.status_code)
    except Exception:
        current_app.logger.exception("Failed to get stock item")
        return server_error()


@stock_bp.post("")
@require_auth
@require_permission(Action.CREATE, Resource.STOCK)
@validate_json(STOCK_ITEM_SCHEMA)
def create_stock_route():
    try:
        item = stock_service.create_stock_item(g.validated_data)
        return ok(item.to_dict(), message="Stock item created successfully", status=201)
    except StockError as e:
        return fail(e.message, e.status_code)
    except Exception:
        current_app.logger.exception("Failed to create stock item")
        return server_error()


@stock_bp.put("/<stock_id>")
@require_auth
@require_permission(Action.UPDATE, Resource.STOCK)
@validate_json(STOCK_ITEM_SCHEMA)
def update_stock_route(stock_id: str):
    try:
        item = stock_service.update_stock_item(stock_id, g.validated_data)
        return ok(item.to_dict(), message="Stock item updated successfully")
    except StockError as e:
        return fail(e.message, e.status_code)
    except Exception:
        current_app.logger.exception("Failed to update stock item")
        return server_error()


@stock_bp.delete("/<stock_id>")
@require_auth
@require_permission(Action.DELETE, Resource.STOCK)
def delete_stock_route(stock_id: str):
    """
    Returns:
        200: Deleted
        404: Not found
        409: Still referenced by transactions or customer devices
    """
    try:
        stock_service.delete_stock_item(stock_id)
        return ok(message="Stock item deleted successfully")
    except StockError as e:
        return fail(e.message, e.status_code)
    except Exception:
        current_app.logger.exception("Failed to delete stock item")
        return server_error()


@stock_bp.patch("/<stock_id>/quantity")
@require_auth
@require_permission(Action.ADJUST, Resource.STOCK)
@validate_json(STOCK_QUANTITY_SCHEMA)
def adjust_quantity_route(stock_id: str):
    """
    Request body:
    {
        "quantity": 5,
        "operation": "add" | "subtract"
    }
    """
    data = g.validated_data
    try:
        result = stock_service.adjust_quantity(stock_id, data["quantity"], data["operation"])
        return ok(result, message="Stock quantity updated successfully")
    except StockError as e:
        message = "Stock item not found" if e.status_code == 404 else e.message
        return fail(message, e.status_code)
    except Exception:
        current_app.logger.exception("Failed to adjust stock quantity")
        return server_error()


# =============================================================================
# LOW STOCK ALERTS
# =============================================================================

@stock_bp.get("/alerts/low-stock")
@require_auth
@require_permission(Action.VIEW, Resource.STOCK)
def low_stock_route():
    try:
        items = stock_service.get_low_stock_items()
        return ok([item.to_dict() for item in items])
    except Exception:
        current_app.logger.exception("Failed to list low stock items")
        return server_error()


@stock_bp.post("/alerts/send-email")
@require_auth
@require_permission(Action.NOTIFY, Resource.STOCK)
def send_low_stock_alert_route():
    """
    Email the current low stock list to every active admin/supervisor.

    Delivery happens on the notification worker; the response only reports
    how many recipients were queued.
    """
    try:
        items = stock_service.get_low_stock_items()
        if not items:
            return fail("No low stock items found", 400)

        recipients = get_notification_recipients()
        queued = emit(LowStockDetected.from_stock_items(items), recipients)

        return ok(
            {"items": len(items), "recipients": queued},
            message="Low stock alert sent successfully",
        )
    except Exception:
        current_app.logger.exception("Failed to send low stock alert")
        return server_error()
