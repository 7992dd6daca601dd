# src/utils/auth_service.py
"""
Login / register / logout / password reset on top of Supabase auth,
plus the user's level from `profiles`.

Every auth call gets its own client (create_auth_client) because the
client keeps the signed-in session.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel

from utils import quotas
from utils.errors import AuthRequired, BadRequest
from utils.logging_config import get_logger
from utils.supabase_utils import create_auth_client, get_site_url, get_supabase_client

logger = get_logger(__name__)

MIN_PASSWORD_LENGTH = 6


class AuthSession(BaseModel):
    user_id: str
    email: Optional[str] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    level: str = quotas.FREE
    level_expires_at: Optional[str] = None


def validate_new_password(password: str, confirm: Optional[str] = None) -> None:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise BadRequest(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
    if confirm is not None and password != confirm:
        raise BadRequest("Passwords do not match.")


def get_profile(user_id: str, *, sb=None) -> Dict[str, Any]:
    sb = sb or get_supabase_client()
    res = (
        sb.table("profiles")
        .select("id, level, level_expires_at")
        .eq("id", user_id)
        .limit(1)
        .execute()
    )
    rows = getattr(res, "data", None) or []
    return rows[0] if rows else {"id": user_id, "level": quotas.FREE, "level_expires_at": None}


def resolve_level(user_id: str, *, sb=None, now: Optional[datetime] = None) -> tuple[str, Optional[str]]:
    prof = get_profile(user_id, sb=sb)
    expires = prof.get("level_expires_at")
    return quotas.effective_level(prof.get("level"), expires, now=now), expires


def login(email: str, password: str, *, client=None, sb=None) -> AuthSession:
    if not email or not password:
        raise BadRequest("Email and password are required.")
    client = client or create_auth_client()
    try:
        res = client.auth.sign_in_with_password({"email": email.strip(), "password": password})
    except Exception as e:
        logger.info("sign in failed for %s: %s", email, e)
        raise AuthRequired(str(e) or "Invalid login credentials") from e

    user = getattr(res, "user", None)
    session = getattr(res, "session", None)
    if user is None:
        raise AuthRequired("Invalid login credentials")

    level, expires = resolve_level(user.id, sb=sb)
    return AuthSession(
        user_id=user.id,
        email=getattr(user, "email", None) or email,
        access_token=getattr(session, "access_token", None),
        refresh_token=getattr(session, "refresh_token", None),
        level=level,
        level_expires_at=expires,
    )


def register(email: str, password: str, confirm: Optional[str] = None, *, client=None) -> Dict[str, Any]:
    if not email:
        raise BadRequest("Email is required.")
    validate_new_password(password, confirm)
    client = client or create_auth_client()
    try:
        res = client.auth.sign_up(
            {
                "email": email.strip(),
                "password": password,
                "options": {"email_redirect_to": f"{get_site_url()}/"},
            }
        )
    except Exception as e:
        raise BadRequest(str(e) or "Registration failed") from e

    user = getattr(res, "user", None)
    return {
        "ok": user is not None,
        "user_id": getattr(user, "id", None),
        # no session back means Supabase sent a confirmation email
        "confirmation_pending": getattr(res, "session", None) is None,
    }


def logout(access_token: Optional[str] = None, refresh_token: Optional[str] = None, *, client=None) -> None:
    """End the user's Supabase session (revokes its refresh token)."""
    if not access_token or not refresh_token:
        logger.info("logout without session tokens; nothing to revoke")
        return
    client = client or create_auth_client()
    try:
        client.auth.set_session(access_token, refresh_token)
        client.auth.sign_out()
    except Exception as e:
        # the local session is dropped by the caller regardless
        logger.warning("sign_out failed: %s", e)


def request_password_reset(email: str, *, client=None, redirect_to: Optional[str] = None) -> Dict[str, Any]:
    if not email:
        raise BadRequest("Email is required.")
    client = client or create_auth_client()
    redirect_to = redirect_to or f"{get_site_url()}/reset-password"
    try:
        client.auth.reset_password_for_email(email.strip(), {"redirect_to": redirect_to})
    except Exception as e:
        raise BadRequest(str(e) or "Could not send reset email") from e
    return {"ok": True}


def update_password(
    new_password: str,
    confirm: Optional[str] = None,
    *,
    access_token: Optional[str] = None,
    refresh_token: Optional[str] = None,
    token_hash: Optional[str] = None,
    client=None,
) -> Dict[str, Any]:
    """
    Set a new password for the current user. The session comes either from
    a signed-in user (access/refresh token) or from a recovery link (token_hash).
    """
    validate_new_password(new_password, confirm)
    client = client or create_auth_client()
    try:
        if token_hash:
            client.auth.verify_otp({"token_hash": token_hash, "type": "recovery"})
        elif access_token and refresh_token:
            client.auth.set_session(access_token, refresh_token)
        else:
            raise AuthRequired("Reset link is invalid or has expired.")
        client.auth.update_user({"password": new_password})
    except AuthRequired:
        raise
    except Exception as e:
        raise BadRequest(str(e) or "Could not update password") from e
    return {"ok": True}
