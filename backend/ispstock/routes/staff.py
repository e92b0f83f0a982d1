# Overview: Flask API routes for field staff; parses input and returns JSON responses.

from flask import Blueprint, current_app, g, request

from ..decorators import get_page_args, require_auth, require_permission, validate_json
from ..permissions import Action, Resource
from ..responses import fail, ok, server_error
from ..services import staff_service
from ..services.staff_service import StaffError
from ..validation import STAFF_PERFORMANCE_SCHEMA, STAFF_SCHEMA


staff_bp = Blueprint("staff", __name__, url_prefix="/api/staff")


@staff_bp.get("")
@require_auth
@require_permission(Action.VIEW, Resource.STAFF)
def list_staff_route():
    """Active staff only. Query params: role, team, search, page, limit."""
    try:
        page, limit = get_page_args()
        staff, pagination = staff_service.list_staff(
            role=request.args.get("role"),
            team=request.args.get("team"),
            search=request.args.get("search"),
            page=page,
            limit=limit,
        )
        return ok({
            "staff": [member.to_dict() for member in staff],
            "pagination": pagination,
        })
    except Exception:
        current_app.logger.exception("Failed to list staff")
        return server_error()


@staff_bp.get("/stats/overview")
@require_auth
@require_permission(Action.VIEW, Resource.STAFF)
def staff_stats_route():
    try:
        return ok(staff_service.get_staff_stats())
    except Exception:
        current_app.logger.exception("Failed to get staff statistics")
        return server_error()


@staff_bp.get("/<staff_id>")
@require_auth
@require_permission(Action.VIEW, Resource.STAFF)
def get_staff_route(staff_id: str):
    try:
        return ok(staff_service.get_staff(staff_id).to_dict())
    except StaffError as e:
        return fail(e.message, e.status_code)
    except Exception:
        current_app.logger.exception("Failed to get staff member")
        return server_error()


@staff_bp.post("")
@require_auth
@require_permission(Action.CREATE, Resource.STAFF)
@validate_json(STAFF_SCHEMA)
def create_staff_route():
    try:
        staff = staff_service.create_staff(g.validated_data)
        return ok(staff.to_dict(), message="Staff member created successfully", status=201)
    except StaffError as e:
        return fail(e.message, e.status_code)
    except Exception:
        current_app.logger.exception("Failed to create staff member")
        return server_error()


@staff_bp.put("/<staff_id>")
@require_auth
@require_permission(Action.UPDATE, Resource.STAFF)
@validate_json(STAFF_SCHEMA)
def update_staff_route(staff_id: str):
    try:
        staff = staff_service.update_staff(staff_id, g.validated_data)
        return ok(staff.to_dict(), message="Staff member updated successfully")
    except StaffError as e:
        return fail(e.message, e.status_code)
    except Exception:
        current_app.logger.exception("Failed to update staff member")
        return server_error()


@staff_bp.delete("/<staff_id>")
@require_auth
@require_permission(Action.DELETE, Resource.STAFF)
def delete_staff_route(staff_id: str):
    try:
        staff_service.deactivate_staff(staff_id)
        return ok(message="Staff member deleted successfully")
    except StaffError as e:
        return fail(e.message, e.status_code)
    except Exception:
        current_app.logger.exception("Failed to delete staff member")
        return server_error()


@staff_bp.patch("/<staff_id>/performance")
@require_auth
@require_permission(Action.UPDATE, Resource.STAFF)
@validate_json(STAFF_PERFORMANCE_SCHEMA)
def update_performance_route(staff_id: str):
    try:
        staff = staff_service.update_performance(staff_id, **g.validated_data)
        return ok(staff.to_dict(), message="Staff performance updated successfully")
    except StaffError as e:
        return fail(e.message, e.status_code)
    except Exception:
        current_app.logger.exception("Failed to update staff performance")
        return server_error()
