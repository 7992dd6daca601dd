# src/utils/payments.py
"""
Midtrans Snap checkout for level upgrades + the payment notification webhook.

Flow: create_transaction() -> user pays on the Snap page -> Midtrans POSTs a
notification -> handle_webhook() re-checks the status with the Core API and,
on `settlement`, writes the purchased level into `profiles`.
"""

from __future__ import annotations

import hashlib
import hmac
import time
from typing import Any, Dict, Optional, Tuple

import requests

from utils import quotas
from utils.errors import BadRequest, Forbidden, ServiceError, ServiceUnavailable, UpstreamError
from utils.logging_config import get_logger
from utils.supabase_utils import (
    get_midtrans_server_key,
    get_supabase_client,
    midtrans_is_production,
    payments_enabled,
)

logger = get_logger(__name__)

PLAN_PRICES = {quotas.PREMIUM: 50000, quotas.RESEARCHER: 150000}  # IDR

SNAP_URL = {
    False: "https://app.sandbox.midtrans.com/snap/v1/transactions",
    True: "https://app.midtrans.com/snap/v1/transactions",
}
CORE_API_BASE = {
    False: "https://api.sandbox.midtrans.com/v2",
    True: "https://api.midtrans.com/v2",
}


def make_order_id(plan: str, user_id: str, now_ms: Optional[int] = None) -> str:
    return f"UPG-{plan}-{user_id}-{now_ms if now_ms is not None else int(time.time() * 1000)}"


def parse_order_id(order_id: str) -> Tuple[Optional[str], Optional[str]]:
    """UPG-<plan>-<user id, may contain '-'>-<epoch ms> -> (user_id, plan)."""
    parts = (order_id or "").split("-")
    if len(parts) < 4 or parts[0] != "UPG" or parts[1] not in PLAN_PRICES:
        return None, None
    return "-".join(parts[2:-1]) or None, parts[1]


def build_snap_parameters(user_id: str, user_email: str, plan: str, *, now_ms: Optional[int] = None) -> Dict[str, Any]:
    gross = PLAN_PRICES[plan]
    return {
        "transaction_details": {"order_id": make_order_id(plan, user_id, now_ms), "gross_amount": gross},
        "customer_details": {"email": user_email},
        "item_details": [
            {"id": f"PLAN_{plan.upper()}", "price": gross, "quantity": 1, "name": f"{plan} Plan Subscription"}
        ],
        "metadata": {"supabase_user_id": user_id, "purchased_plan": plan},
    }


# -----------------------------
# Snap transaction
# -----------------------------
def create_transaction(
    user_id: Optional[str],
    user_email: Optional[str],
    plan: Optional[str],
    *,
    session=None,
    now_ms: Optional[int] = None,
) -> Dict[str, Any]:
    if not payments_enabled():
        raise ServiceUnavailable("Payment processing is temporarily disabled.")
    server_key = get_midtrans_server_key(required=True)

    if not user_id or not user_email or plan not in PLAN_PRICES:
        raise BadRequest("Missing or invalid parameters (userId, userEmail, plan)")

    params = build_snap_parameters(user_id, user_email, plan, now_ms=now_ms)
    order_id = params["transaction_details"]["order_id"]
    logger.info("creating Midtrans transaction order=%s plan=%s amount=%s", order_id, plan, PLAN_PRICES[plan])

    http = session or requests
    try:
        resp = http.post(
            SNAP_URL[midtrans_is_production()],
            json=params,
            auth=(server_key, ""),
            headers={"Accept": "application/json"},
            timeout=20,
        )
    except requests.RequestException as e:
        raise UpstreamError(f"Failed to create payment transaction: {e}") from e

    body = _json_or_empty(resp)
    if not resp.ok:
        messages = body.get("error_messages") or []
        msg = "; ".join(messages) if messages else (body.get("message") or "Failed to create payment transaction.")
        logger.warning("Midtrans Snap %s for order %s: %s", resp.status_code, order_id, msg)
        raise UpstreamError(msg, details={"status": resp.status_code})

    return {"token": body.get("token"), "redirect_url": body.get("redirect_url"), "order_id": order_id}


def _json_or_empty(resp) -> Dict[str, Any]:
    try:
        data = resp.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


# -----------------------------
# Webhook
# -----------------------------
def verify_signature(payload: Dict[str, Any], server_key: str) -> bool:
    """sha512(order_id + status_code + gross_amount + server_key) == signature_key"""
    fields = [payload.get(k) for k in ("order_id", "status_code", "gross_amount", "signature_key")]
    if not all(fields) or not server_key:
        return False
    order_id, status_code, gross_amount, signature = (str(f) for f in fields)
    expected = hashlib.sha512((order_id + status_code + gross_amount + server_key).encode("utf-8")).hexdigest()
    return hmac.compare_digest(expected, signature)


def fetch_transaction_status(order_id: str, *, server_key: str, session=None) -> Dict[str, Any]:
    http = session or requests
    url = f"{CORE_API_BASE[midtrans_is_production()]}/{order_id}/status"
    resp = http.get(url, auth=(server_key, ""), headers={"Accept": "application/json"}, timeout=20)
    resp.raise_for_status()
    return resp.json()


def _amount_matches(gross_amount: Any, plan: str) -> bool:
    try:
        return float(gross_amount) == float(PLAN_PRICES[plan])
    except (TypeError, ValueError):
        return False


def handle_webhook(payload: Dict[str, Any], *, session=None, sb=None) -> Dict[str, Any]:
    """
    Returns {"message": ...}; every non-error path is a 200 acknowledgement.

    The notification must be signed. User and plan are read from the order id
    the Core API confirms, never from the notification body.
    """
    server_key = get_midtrans_server_key(required=True)
    order_id = payload.get("order_id")
    if not order_id:
        raise BadRequest("Missing order_id")

    if not verify_signature(payload, server_key):
        logger.warning("Midtrans signature missing or invalid for order %s", order_id)
        raise Forbidden("Invalid signature")

    try:
        status = fetch_transaction_status(order_id, server_key=server_key, session=session)
    except (requests.RequestException, ValueError) as e:
        logger.error("Midtrans status check failed for %s: %s", order_id, e)
        raise ServiceError("Failed to verify transaction status", status_code=500) from e

    tx_status = status.get("transaction_status")
    logger.info("Midtrans status for %s: %s", order_id, tx_status)
    if tx_status != "settlement":
        return {"message": "Webhook received"}

    user_id, plan = parse_order_id(status.get("order_id") or order_id)
    if not user_id or plan not in PLAN_PRICES:
        logger.error("webhook for order %s has no user/plan", order_id)
        return {"message": "Webhook received but missing metadata."}
    if not _amount_matches(status.get("gross_amount"), plan):
        logger.error("order %s paid %s, %s costs %s", order_id, status.get("gross_amount"), plan, PLAN_PRICES[plan])
        return {"message": "Webhook received but the paid amount does not match the plan."}

    sb = sb or get_supabase_client()
    try:
        sb.table("profiles").update({"level": plan}).eq("id", user_id).execute()
    except Exception:
        logger.exception("profile update failed for user %s -> %s", user_id, plan)
        return {"message": "Webhook received but failed to update profile."}

    logger.info("user %s upgraded to %s (order %s)", user_id, plan, order_id)
    return {"message": "Webhook received"}
