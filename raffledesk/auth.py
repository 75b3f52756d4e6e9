"""Per-admin credentials and bearer-token sessions."""

from __future__ import annotations

import hashlib
import logging
import os
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from dotenv import load_dotenv
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from .db.utils import utcnow
from .errors import AuthenticationError, ValidationError
from .models import Admin, AdminSession

logger = logging.getLogger(__name__)

load_dotenv()
DEFAULT_SESSION_TTL = timedelta(hours=12)


def session_ttl() -> timedelta:
    """Return the token lifetime from ``RAFFLE_SESSION_TTL_HOURS``."""

    raw = os.getenv("RAFFLE_SESSION_TTL_HOURS")
    if not raw:
        return DEFAULT_SESSION_TTL
    try:
        return timedelta(hours=float(raw))
    except ValueError:
        logger.warning(
            f"Ignoring malformed RAFFLE_SESSION_TTL_HOURS={raw!r}; using 12 hours"
        )
        return DEFAULT_SESSION_TTL


def _digest(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _as_utc(dt: datetime) -> datetime:
    # SQLite returns naive datetimes for timezone-aware columns.
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)


def create_admin(
    session: Session,
    email: str,
    password: str,
    *,
    name: Optional[str] = None,
    role: Optional[str] = None,
) -> Admin:
    """Persist a new admin with a hashed password."""

    if not email or not email.strip():
        raise ValidationError.for_field("email", "Email is required")
    if not password:
        raise ValidationError.for_field("password", "Password is required")
    if Admin.get_by_email(session, email) is not None:
        raise ValidationError.for_field("email", "An admin with this email already exists")

    admin = Admin(
        email=email,
        password_hash=generate_password_hash(password),
        name=name,
        role=role,
    )
    session.add(admin)
    session.flush()
    return admin


def authenticate(
    session: Session,
    email: str,
    password: str,
    *,
    ttl: Optional[timedelta] = None,
) -> str:
    """Check credentials and issue a new bearer token.

    The plain token is returned once; only its SHA-256 digest is stored.

    Raises
    ------
    AuthenticationError
        If the email is unknown or the password does not match.
    """

    admin = Admin.get_by_email(session, email) if email else None
    if admin is None or not check_password_hash(admin.password_hash, password or ""):
        # Same message for both cases so emails cannot be probed.
        logger.info("Rejected admin login attempt")
        raise AuthenticationError("Invalid email or password")

    token = secrets.token_urlsafe(32)
    now = utcnow()
    session.add(
        AdminSession(
            admin_id=admin.id,
            token_digest=_digest(token),
            created_at=now,
            expires_at=now + (ttl or session_ttl()),
        )
    )
    session.flush()
    logger.info(f"Issued session token for admin {admin.id}")
    return token


def verify_token(session: Session, token: Optional[str]) -> Admin:
    """Return the admin owning ``token`` if it is valid, unexpired and not revoked."""

    if not token:
        raise AuthenticationError("Unauthorized")
    admin_session = AdminSession.get_by_digest(session, _digest(token))
    if admin_session is None or admin_session.revoked_at is not None:
        raise AuthenticationError("Unauthorized")
    if _as_utc(admin_session.expires_at) <= utcnow():
        raise AuthenticationError("Session expired")
    return admin_session.admin


def revoke_token(session: Session, token: str) -> None:
    admin_session = AdminSession.get_by_digest(session, _digest(token))
    if admin_session is None:
        return
    admin_session.revoked_at = utcnow()
    session.flush()


__all__ = ["authenticate", "create_admin", "revoke_token", "verify_token"]
