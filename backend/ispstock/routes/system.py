# backend/ispstock/routes/system.py
"""
Health endpoint for load balancers and deployment checks.

No authentication and no envelope: returns 200 when the database answers,
503 otherwise.
"""

import time

from flask import Blueprint, current_app

from ..extensions import db
from ..models import StockItem, User
from ispstock.time_utils import utcnow

system_bp = Blueprint("system", __name__, url_prefix="/api")


def check_database_health() -> dict:
    start_time = time.time()
    try:
        user_count = db.session.query(User).count()
        stock_count = db.session.query(StockItem).count()

        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "users": user_count,
                "stock_items": stock_count,
            }
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error"
        }


def check_notification_health() -> dict:
    dispatcher = current_app.extensions.get("notifications")
    if dispatcher is None:
        return {"status": "degraded", "warning": "Notification dispatcher not configured"}
    return {
        "status": "healthy",
        "details": {
            "sender": type(dispatcher.sender).__name__,
            "async": dispatcher.async_mode,
        }
    }


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200: database reachable (status "OK", or "degraded" when notifications are off)
    - 503: database unreachable
    """
    database_health = check_database_health()
    notification_health = check_notification_health()

    if database_health["status"] == "unhealthy":
        overall_status, http_status = "unhealthy", 503
    elif notification_health["status"] != "healthy":
        overall_status, http_status = "degraded", 200
    else:
        overall_status, http_status = "OK", 200

    return {
        "status": overall_status,
        "timestamp": utcnow().isoformat() + "Z",
        "checks": {
            "database": database_health,
            "notifications": notification_health,
        }
    }, http_status
