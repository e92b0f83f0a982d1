# Overview: Bearer token sessions for API users; issue, resolve and revoke.

"""
Session Service

Login issues an opaque bearer token. Only its SHA-256 digest is stored in
session_tokens; the plaintext goes to the client once.

A session stops resolving when any of these holds:
- it was revoked (logout, idle timeout, deactivated user)
- it is older than SESSION_ABSOLUTE_TIMEOUT
- it has not been used for SESSION_IDLE_TIMEOUT
"""

import hashlib
import secrets
from datetime import timedelta

from ..extensions import db
from ..models import SessionToken, User
from ..time_utils import utcnow


SESSION_ABSOLUTE_TIMEOUT = timedelta(hours=24)
SESSION_IDLE_TIMEOUT = timedelta(hours=2)

TOKEN_BYTES = 32


def _digest(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _find_live(token: str) -> SessionToken | None:
    return db.session.query(SessionToken).filter_by(token_hash=_digest(token), is_revoked=False).first()


def _revoke(session: SessionToken, reason: str) -> None:
    session.is_revoked = True
    session.revoked_at = utcnow()
    session.revoked_reason = reason
    db.session.commit()


def create_session(
    user_id: str,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> tuple[SessionToken, str]:
    """Returns (session_row, plaintext_token)."""
    token = secrets.token_hex(TOKEN_BYTES)
    issued_at = utcnow()

    session = SessionToken(
        user_id=user_id,
        token_hash=_digest(token),
        created_at=issued_at,
        last_used_at=issued_at,
        expires_at=issued_at + SESSION_ABSOLUTE_TIMEOUT,
        user_agent=(user_agent or "")[:255] or None,
        ip_address=ip_address,
    )
    db.session.add(session)
    db.session.commit()
    return session, token


def validate_session(token: str) -> User | None:
    """
    Resolve a bearer token to its active User, or None.

    Idle sessions and sessions of deactivated users are revoked on the way
    out. A successful lookup refreshes last_used_at.
    """
    session = _find_live(token)
    if session is None:
        return None

    now = utcnow()
    if session.expires_at < now:
        return None
    if now - session.last_used_at > SESSION_IDLE_TIMEOUT:
        _revoke(session, "Idle timeout")
        return None

    user = session.user
    if user is None or not user.is_active:
        _revoke(session, "User account deactivated")
        return None

    session.last_used_at = now
    db.session.commit()
    return user


def revoke_session(token: str, reason: str = "User logout") -> bool:
    """False when the token is unknown or already revoked."""
    session = _find_live(token)
    if session is None:
        return False
    _revoke(session, reason)
    return True
