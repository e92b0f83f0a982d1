# Overview: Request, permission and validation decorators for API routes.

from functools import wraps

from flask import current_app, g, request

from .permissions import Action, Actor, Resource, is_allowed
from .responses import fail
from .services import session_service
from .validation import Schema, ValidationError


def _is_authenticated() -> bool:
    return getattr(g, "current_user", None) is not None


def require_auth(f):
    """
    Require a valid bearer session.

    Sets g.current_user to the authenticated User.

    Returns 401 if:
    - No Authorization header
    - Invalid, revoked or expired token
    - User account deactivated
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_header = request.headers.get("Authorization")

        if not auth_header or not auth_header.startswith("Bearer "):
            return fail("Access token required", 401)

        token = auth_header.split(" ", 1)[1].strip()
        user = session_service.validate_session(token)

        if not user:
            return fail("Invalid or expired token", 401)

        g.current_user = user
        g.auth_token = token

        return f(*args, **kwargs)

    return decorated_function


def require_permission(action: Action, resource: Resource):
    """
    Require the current user's role to allow (action, resource).

    Must be applied after @require_auth. Denials are logged with the user,
    role and path.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not _is_authenticated():
                return fail("Access token required", 401)

            user = g.current_user
            if not is_allowed(Actor.from_user(user), action, resource):
                current_app.logger.warning(
                    "Permission denied: user=%s role=%s action=%s resource=%s path=%s",
                    user.id, user.role, Action(action).value, Resource(resource).value, request.path,
                )
                return fail("Insufficient permissions", 403)

            return f(*args, **kwargs)

        return decorated_function
    return decorator


def validate_json(schema: Schema):
    """
    Validate the JSON body against schema before the handler runs.

    The cleaned payload is available as g.validated_data. Every violated
    field is reported in one 400 response.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            payload = request.get_json(silent=True)
            if payload is None and request.get_data(cache=True):
                return fail("Invalid JSON in request body", 400)

            try:
                g.validated_data = schema.validate(payload)
            except ValidationError as e:
                return fail("Validation error", 400, errors=str(e))

            return f(*args, **kwargs)

        return decorated_function
    return decorator


def get_page_args() -> tuple[int, int]:
    """
    Read ?page= and ?limit= from the query string.

    Non-numeric or non-positive values fall back to the defaults; limit is
    capped at MAX_PAGE_SIZE.
    """
    default_limit = current_app.config.get("DEFAULT_PAGE_SIZE", 50)
    max_limit = current_app.config.get("MAX_PAGE_SIZE", 200)

    page = request.args.get("page", 1, type=int) or 1
    limit = request.args.get("limit", default_limit, type=int) or default_limit

    page = max(page, 1)
    limit = min(max(limit, 1), max_limit)
    return page, limit
