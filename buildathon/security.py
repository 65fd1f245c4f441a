"""Admin session handling: credential check, signed cookie and route guard."""
from __future__ import annotations

import base64
import hashlib
import hmac
from datetime import datetime

from fastapi import Cookie, status

from buildathon.config import ADMIN_COOKIE_NAME, Settings, get_settings
from buildathon.utils.errors import reject
from buildathon.utils.time import to_epoch_ms, utcnow

ADMIN_ACTOR = "admin"
PUBLIC_ACTOR = "public"


def _safe_equal(left: str, right: str) -> bool:
    return hmac.compare_digest(left.encode("utf-8"), right.encode("utf-8"))


def _b64url(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _sign(secret: str, payload: str) -> str:
    digest = hmac.new(secret.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256).digest()
    return _b64url(digest)


def verify_admin_credentials(username: str, password: str, settings: Settings | None = None) -> bool:
    """Return True only when both configured credentials match."""

    settings = settings or get_settings()
    expected_user = settings.ADMIN_USERNAME
    expected_password = settings.ADMIN_PASSWORD
    if not expected_user or not expected_password:
        return False
    # Evaluate both so timing does not reveal which one differed.
    user_ok = _safe_equal(username, expected_user)
    password_ok = _safe_equal(password, expected_password)
    return user_ok and password_ok


def create_session_value(settings: Settings | None = None, *, now: datetime | None = None) -> str | None:
    """Return ``<issued_at_ms>.<signature>``, or None when no secret is configured."""

    settings = settings or get_settings()
    secret = settings.ADMIN_SESSION_SECRET
    if not secret:
        return None
    issued_at = str(to_epoch_ms(now or utcnow()))
    return f"{issued_at}.{_sign(secret, issued_at)}"


def is_valid_session_value(
    value: str | None, settings: Settings | None = None, *, now: datetime | None = None
) -> bool:
    """Check signature and age of an admin session cookie value."""

    if not value:
        return False
    settings = settings or get_settings()
    secret = settings.ADMIN_SESSION_SECRET
    if not secret:
        return False

    issued_at, sep, signature = value.partition(".")
    if not sep or not issued_at or not signature:
        return False
    try:
        issued_ms = int(issued_at)
    except ValueError:
        return False

    age_ms = to_epoch_ms(now or utcnow()) - issued_ms
    if age_ms > settings.ADMIN_SESSION_MAX_AGE_SECONDS * 1000:
        return False
    return _safe_equal(signature, _sign(secret, issued_at))


def require_admin(
    admin_session: str | None = Cookie(default=None, alias=ADMIN_COOKIE_NAME),
) -> str:
    """FastAPI dependency guarding admin-only routes; returns the audit actor."""

    if not is_valid_session_value(admin_session):
        raise reject(status.HTTP_401_UNAUTHORIZED, "UNAUTHORIZED", "Admin session required.")
    return ADMIN_ACTOR


__all__ = [
    "ADMIN_ACTOR",
    "PUBLIC_ACTOR",
    "create_session_value",
    "is_valid_session_value",
    "require_admin",
    "verify_admin_credentials",
]
