# Overview: Flask API routes for dashboard aggregates; read-only.

from flask import Blueprint, current_app

from ..decorators import require_auth, require_permission
from ..permissions import Action, Resource
from ..responses import ok, server_error
from ..services import dashboard_service


dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


@dashboard_bp.get("/stats")
@require_auth
@require_permission(Action.VIEW, Resource.DASHBOARD)
def dashboard_stats_route():
    try:
        return ok(dashboard_service.get_dashboard_stats())
    except Exception:
        current_app.logger.exception("Failed to get dashboard stats")
        return server_error()


@dashboard_bp.get("/trends")
@require_auth
@require_permission(Action.VIEW, Resource.DASHBOARD)
def dashboard_trends_route():
    try:
        return ok(dashboard_service.get_trends())
    except Exception:
        current_app.logger.exception("Failed to get dashboard trends")
        return server_error()


@dashboard_bp.get("/performance")
@require_auth
@require_permission(Action.VIEW, Resource.DASHBOARD)
def dashboard_performance_route():
    try:
        return ok(dashboard_service.get_performance())
    except Exception:
        current_app.logger.exception("Failed to get performance metrics")
        return server_error()
