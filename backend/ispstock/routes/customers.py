# Overview: Flask API routes for customers, devices and service history; parses input and returns JSON responses.

from flask import Blueprint, current_app, g, request

from ..decorators import get_page_args, require_auth, require_permission, validate_json
from ..permissions import Action, Resource
from ..responses import fail, ok, server_error
from ..services import customer_service
from ..services.customer_service import CustomerError
from ..validation import CUSTOMER_SCHEMA, CUSTOMER_STATUS_SCHEMA, DEVICE_SCHEMA, SERVICE_HISTORY_SCHEMA


customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")


@customers_bp.get("")
@require_auth
@require_permission(Action.VIEW, Resource.CUSTOMER)
def list_customers_route():
    """
    Query params: service_type, status, search, page, limit.

    Each customer carries its devices and service history.
    """
    try:
        page, limit = get_page_args()
        customers, pagination = customer_service.list_customers(
            service_type=request.args.get("service_type"),
            status=request.args.get("status"),
            search=request.args.get("search"),
            page=page,
            limit=limit,
        )
        return ok({
            "customers": [c.to_dict(include_details=True) for c in customers],
            "pagination": pagination,
        })
    except Exception:
        current_app.logger.exception("Failed to list customers")
        return server_error()


@customers_bp.get("/stats/overview")
@require_auth
@require_permission(Action.VIEW, Resource.CUSTOMER)
def customer_stats_route():
    try:
        return ok(customer_service.get_customer_stats())
    except Exception:
        current_app.logger.exception("Failed to get customer statistics")
        return server_error()


@customers_bp.get("/<customer_id>")
@require_auth
@require_permission(Action.VIEW, Resource.CUSTOMER)
def get_customer_route(customer_id: str):
    try:
        customer = customer_service.get_customer(customer_id)
        return ok(customer.to_dict(include_details=True))
    except CustomerError as e:
        return fail(e.message, e.status_code)
    except Exception:
        current_app.logger.exception("Failed to get customer")
        return server_error()


@customers_bp.post("")
@require_auth
@require_permission(Action.CREATE, Resource.CUSTOMER)
@validate_json(CUSTOMER_SCHEMA)
def create_customer_route():
    try:
        customer = customer_service.create_customer(g.validated_data)
        return ok(customer.to_dict(include_details=True), message="Customer created successfully", status=201)
    except CustomerError as e:
        return fail(e.message, e.status_code)
    except Exception:
        current_app.logger.exception("Failed to create customer")
        return server_error()


@customers_bp.put("/<customer_id>")
@require_auth
@require_permission(Action.UPDATE, Resource.CUSTOMER)
@validate_json(CUSTOMER_SCHEMA)
def update_customer_route(customer_id: str):
    try:
        customer = customer_service.update_customer(customer_id, g.validated_data)
        return ok(customer.to_dict(include_details=True), message="Customer updated successfully")
    except CustomerError as e:
        return fail(e.message, e.status_code)
    except Exception:
        current_app.logger.exception("Failed to update customer")
        return server_error()


@customers_bp.delete("/<customer_id>")
@require_auth
@require_permission(Action.DELETE, Resource.CUSTOMER)
def delete_customer_route(customer_id: str):
    try:
        customer_service.delete_customer(customer_id)
        return ok(message="Customer deleted successfully")
    except CustomerError as e:
        return fail(e.message, e.status_code)
    except Exception:
        current_app.logger.exception("Failed to delete customer")
        return server_error()


@customers_bp.patch("/<customer_id>/status")
@require_auth
@require_permission(Action.UPDATE, Resource.CUSTOMER)
@validate_json(CUSTOMER_STATUS_SCHEMA)
def customer_status_route(customer_id: str):
    try:
        customer = customer_service.set_status(customer_id, g.validated_data["status"])
        return ok(customer.to_dict(), message="Customer status updated successfully")
    except CustomerError as e:
        return fail(e.message, e.status_code)
    except Exception:
        current_app.logger.exception("Failed to update customer status")
        return server_error()


# =============================================================================
# DEVICES & SERVICE HISTORY
# =============================================================================

@customers_bp.post("/<customer_id>/devices")
@require_auth
@require_permission(Action.UPDATE, Resource.CUSTOMER)
@validate_json(DEVICE_SCHEMA)
def add_device_route(customer_id: str):
    """
    Returns:
        201: Device added
        404: Customer or stock item not found
        409: Serial number already registered
    """
    try:
        device = customer_service.add_device(customer_id, g.validated_data)
        return ok(device.to_dict(), message="Device added to customer successfully", status=201)
    except CustomerError as e:
        return fail(e.message, e.status_code)
    except Exception:
        current_app.logger.exception("Failed to add customer device")
        return server_error()


@customers_bp.post("/<customer_id>/service-history")
@require_auth
@require_permission(Action.UPDATE, Resource.CUSTOMER)
@validate_json(SERVICE_HISTORY_SCHEMA)
def add_service_history_route(customer_id: str):
    try:
        entry = customer_service.add_service_history(customer_id, g.validated_data)
        return ok(entry.to_dict(), message="Service history added successfully", status=201)
    except CustomerError as e:
        return fail(e.message, e.status_code)
    except Exception:
        current_app.logger.exception("Failed to add service history")
        return server_error()
