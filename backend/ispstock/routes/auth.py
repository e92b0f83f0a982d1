# Overview: Flask API routes for authentication; parses input and returns JSON responses.

# backend/ispstock/routes/auth.py
"""
Authentication API Routes

- POST /api/auth/login     email + password -> bearer token
- POST /api/auth/logout    revoke the presented token
- GET  /api/auth/me        current user with role permissions
- POST /api/auth/register  admin-only account creation
- GET  /api/auth/users     account list (admin, supervisor)

There is no self-registration. The first admin is created with
`flask system init` or `flask users create`.
"""

from flask import Blueprint, current_app, g, request

from ..decorators import require_auth, require_permission, validate_json
from ..extensions import db
from ..models import User
from ..permissions import Action, Resource, get_permission_definition, get_role_permissions
from ..responses import fail, ok, server_error
from ..services import auth_service, session_service
from ..services.auth_service import AuthError
from ..validation import LOGIN_SCHEMA, REGISTER_SCHEMA


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/login")
@validate_json(LOGIN_SCHEMA)
def login_route():
    """
    Authenticate and create a session token.

    The token goes in `Authorization: Bearer <token>` on every other call.
    """
    data = g.validated_data
    try:
        user = auth_service.authenticate(data["email"], data["password"])
        if not user:
            return fail("Invalid credentials", 401)

        _, token = session_service.create_session(
            user_id=user.id,
            user_agent=request.headers.get("User-Agent"),
            ip_address=request.remote_addr,
        )

        return ok({"token": token, "user": user.to_dict()}, message="Login successful")

    except Exception:
        current_app.logger.exception("Failed to login user")
        return server_error()


@auth_bp.post("/logout")
@require_auth
def logout_route():
    try:
        session_service.revoke_session(g.auth_token, reason="User logout")
        return ok(message="Logout successful")
    except Exception:
        current_app.logger.exception("Failed to logout user")
        return server_error()


@auth_bp.get("/me")
@require_auth
def me_route():
    user = g.current_user
    data = user.to_dict()
    codes = sorted(get_role_permissions(user.role))
    data["permissions"] = codes
    data["permission_details"] = [get_permission_definition(code) for code in codes]
    return ok(data)


@auth_bp.post("/register")
@require_auth
@require_permission(Action.CREATE, Resource.USER)
@validate_json(REGISTER_SCHEMA)
def register_route():
    """
    Create a user account (admin only).

    Returns:
        201: User created
        400: Validation error
        409: Email already registered
    """
    data = g.validated_data
    try:
        user = auth_service.create_user(
            name=data["name"],
            email=data["email"],
            password=data["password"],
            role=data["role"],
            phone=data.get("phone"),
            password_rounds=current_app.config["BCRYPT_ROUNDS"],
        )
        return ok(user.to_dict(), message="User registered successfully", status=201)

    except AuthError as e:
        return fail(e.message, e.status_code)
    except Exception:
        current_app.logger.exception("Failed to register user")
        return server_error()


@auth_bp.get("/users")
@require_auth
@require_permission(Action.VIEW, Resource.USER)
def list_users_route():
    try:
        users = db.session.query(User).order_by(User.created_at.asc()).all()
        return ok([user.to_dict() for user in users])
    except Exception:
        current_app.logger.exception("Failed to list users")
        return server_error()
