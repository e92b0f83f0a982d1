# backend/ispstock/__init__.py
import atexit
import logging

from flask import Flask, request
from werkzeug.exceptions import BadRequest, HTTPException

from .config import Config
from .extensions import db, migrate
from .responses import fail, server_error


def create_app(overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    app.logger.setLevel(getattr(logging, str(app.config["LOG_LEVEL"]).upper(), logging.INFO))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Notification worker (emails sent after commit, off the request thread)
    from .services.notification_service import build_dispatcher
    dispatcher = build_dispatcher(app.config)
    app.extensions["notifications"] = dispatcher
    atexit.register(dispatcher.shutdown)

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.stock import stock_bp
    from .routes.staff import staff_bp
    from .routes.customers import customers_bp
    from .routes.transactions import transactions_bp
    from .routes.dashboard import dashboard_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(stock_bp)
    app.register_blueprint(staff_bp)
    app.register_blueprint(customers_bp)
    app.register_blueprint(transactions_bp)
    app.register_blueprint(dashboard_bp)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin and origin == app.config.get("FRONTEND_URL"):
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Credentials"] = "true"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
        return response

    register_error_handlers(app)

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(BadRequest)
    def handle_bad_request(e):
        # Flask raises BadRequest from get_json() on an unparsable body
        if request.is_json:
            return fail("Invalid JSON in request body", 400)
        return fail(e.description or "Bad request", 400)

    @app.errorhandler(404)
    def handle_not_found(e):
        if request.path.startswith("/api"):
            return fail("API endpoint not found", 404)
        return fail("Not found", 404)

    @app.errorhandler(405)
    def handle_method_not_allowed(e):
        return fail("Method not allowed", 405)

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        if isinstance(e, HTTPException):
            return fail(e.description or e.name, e.code or 500)
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        return server_error()
