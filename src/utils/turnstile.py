# src/utils/turnstile.py
"""Cloudflare Turnstile (CAPTCHA) server-side verification."""

from __future__ import annotations

from typing import Any, Dict, Optional

import requests

from utils.errors import BadRequest, Forbidden, UpstreamError
from utils.logging_config import get_logger
from utils.supabase_utils import get_turnstile_secret

logger = get_logger(__name__)

SITEVERIFY_URL = "https://challenges.cloudflare.com/turnstile/v0/siteverify"


def verify_turnstile(
    token: Optional[str],
    remote_ip: Optional[str] = None,
    *,
    session=None,
    secret: Optional[str] = None,
) -> Dict[str, Any]:
    if not token:
        raise BadRequest("CAPTCHA token is missing.")
    secret = secret or get_turnstile_secret(required=True)

    form = {"secret": secret, "response": token}
    if remote_ip:
        form["remoteip"] = remote_ip

    http = session or requests
    try:
        resp = http.post(SITEVERIFY_URL, data=form, timeout=10)
    except requests.RequestException as e:
        logger.warning("turnstile siteverify unreachable: %s", e)
        raise UpstreamError("Failed to verify CAPTCHA with Cloudflare.") from e

    if not resp.ok:
        logger.warning("turnstile siteverify %s: %s", resp.status_code, resp.text[:200])
        raise UpstreamError("Failed to verify CAPTCHA with Cloudflare.")

    body = resp.json()
    if not body.get("success"):
        codes = body.get("error-codes") or []
        logger.info("turnstile verification failed: %s", codes)
        raise Forbidden("CAPTCHA verification failed.", details=codes)
    return body
