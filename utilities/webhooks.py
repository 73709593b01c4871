"""
Standard Webhooks signature verification for platform hooks.
"""

import base64
import binascii
import hashlib
import hmac
import json
import time
from typing import Any, Dict, Mapping, Optional


class WebhookVerificationError(Exception):
    """Raised when a webhook payload cannot be authenticated."""


def _decode_secret(secret: str) -> bytes:
    value = secret.strip()
    if value.startswith("v1,"):
        value = value[len("v1,"):]
    if value.startswith("whsec_"):
        value = value[len("whsec_"):]
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as e:
        raise WebhookVerificationError("Invalid webhook secret") from e


def sign(secret: str, msg_id: str, timestamp: int, payload: str) -> str:
    """Compute the `v1,<base64>` signature for a payload."""
    key = _decode_secret(secret)
    to_sign = f"{msg_id}.{timestamp}.{payload}".encode("utf-8")
    digest = hmac.new(key, to_sign, hashlib.sha256).digest()
    return "v1," + base64.b64encode(digest).decode()


def _header(headers: Mapping[str, str], name: str) -> Optional[str]:
    # Starlette headers are case-insensitive; plain dicts from tests may not be.
    value = headers.get(name)
    if value is None:
        value = headers.get(name.title())
    return value


def verify(
    secret: str,
    payload: str,
    headers: Mapping[str, str],
    tolerance_seconds: int = 300,
    now: Optional[float] = None
) -> Dict[str, Any]:
    """
    Verify a signed webhook and return its decoded JSON body.

    Args:
        secret: Shared hook secret (`v1,whsec_...` or bare base64)
        payload: Raw request body
        headers: Request headers carrying webhook-id/timestamp/signature
        tolerance_seconds: Accepted clock skew in either direction
        now: Current unix time, injectable for tests

    Raises:
        WebhookVerificationError: On missing headers, stale timestamp or bad signature
    """
    if not secret:
        raise WebhookVerificationError("Webhook secret not configured")

    msg_id = _header(headers, "webhook-id")
    msg_timestamp = _header(headers, "webhook-timestamp")
    msg_signature = _header(headers, "webhook-signature")
    if not msg_id or not msg_timestamp or not msg_signature:
        raise WebhookVerificationError("Missing required headers")

    try:
        timestamp = int(msg_timestamp)
    except ValueError as e:
        raise WebhookVerificationError("Invalid signature headers") from e

    current = time.time() if now is None else now
    if abs(current - timestamp) > tolerance_seconds:
        raise WebhookVerificationError("Message timestamp outside tolerance")

    expected = sign(secret, msg_id, timestamp, payload).split(",", 1)[1]
    for versioned in msg_signature.split(" "):
        version, _, signature = versioned.partition(",")
        if version != "v1":
            continue
        if hmac.compare_digest(expected, signature):
            try:
                return json.loads(payload)
            except ValueError as e:
                raise WebhookVerificationError("Invalid JSON payload") from e

    raise WebhookVerificationError("No matching signature found")
