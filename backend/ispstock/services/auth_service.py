# Overview: Service-layer operations for user accounts; password hashing, login and approver lookup.

"""
Authentication Service

Accounts log in with email + password (bcrypt). Session tokens live in
session_service. Password length and shape are checked by
validation.REGISTER_SCHEMA before create_user() is reached.
"""

import bcrypt
from ..errors import ServiceError
from ..extensions import db
from ..models import User, USER_ROLES
from ispstock.time_utils import utcnow


class AuthError(ServiceError):
    """Raised when account operations fail."""
    pass


def hash_password(password: str, rounds: int = 12) -> str:
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # Malformed hash in the database
        return False


def create_user(
    name: str,
    email: str,
    password: str,
    role: str = "technician",
    phone: str | None = None,
    password_rounds: int = 12,
) -> User:
    """
    Create a new user account.

    Raises AuthError (409) if the email is already registered.
    """
    if role not in USER_ROLES:
        raise AuthError(f"Invalid role: {role}")

    email = email.strip().lower()
    existing = db.session.query(User).filter_by(email=email).first()
    if existing:
        raise AuthError("User with this email already exists", 409)

    user = User(
        name=name,
        email=email,
        password_hash=hash_password(password, rounds=password_rounds),
        role=role,
        phone=phone,
        is_active=True,
    )
    db.session.add(user)
    db.session.commit()
    return user


def authenticate(email: str, password: str) -> User | None:
    """
    Authenticate by email + password.

    Returns the User on success, None on bad credentials or a deactivated
    account. Updates last_login_at.
    """
    user = db.session.query(User).filter_by(email=email.strip().lower()).first()
    if not user or not user.is_active:
        return None

    if not verify_password(password, user.password_hash):
        return None

    user.last_login_at = utcnow()
    db.session.commit()
    return user


def get_notification_recipients() -> list[str]:
    """Email addresses of every active admin/supervisor account."""
    rows = db.session.query(User.email).filter(
        User.role.in_(("admin", "supervisor")),
        User.is_active.is_(True),
    ).all()
    return [row.email for row in rows]
