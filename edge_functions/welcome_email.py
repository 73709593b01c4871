"""
Self-service welcome email.

A caller may only send the welcome email to their own address, which keeps
this endpoint from being used as a relay to third parties.
"""

import structlog
from fastapi import APIRouter, Depends, Request

from edge_functions.auth import CredentialVerifier
from edge_functions.config import config as functions_config
from edge_functions.dependencies import (
    WELCOME_EMAIL_OPERATION,
    get_notifier,
    get_verifier,
    get_welcome_email_limiter,
)
from edge_functions.errors import Forbidden, RateLimited, UpstreamFailure, catch_unexpected
from edge_functions.models import WelcomeEmailRequest, read_json_body
from notifications.dispatcher import NotificationDispatcher
from platform_clients.base import PlatformError
from utilities.logger import AuditLogger
from utilities.rate_limit import FixedWindowRateLimiter
from utilities.timing import minimum_duration

logger = structlog.get_logger(__name__)
audit = AuditLogger(WELCOME_EMAIL_OPERATION)

router = APIRouter(tags=["Notifications"])


@router.post("/send-welcome-email")
@minimum_duration(floor_provider=lambda: functions_config.min_response_ms)
@catch_unexpected
async def send_welcome_email(
    request: Request,
    verifier: CredentialVerifier = Depends(get_verifier),
    notifier: NotificationDispatcher = Depends(get_notifier),
    limiter: FixedWindowRateLimiter = Depends(get_welcome_email_limiter),
):
    """Send the welcome email to the authenticated caller."""
    claims = await verifier.verify(request.headers.get("Authorization"))
    user_id = claims.subject_id

    body = await read_json_body(request, WelcomeEmailRequest)
    if not body.email or not claims.email or body.email.lower() != claims.email.lower():
        audit.log_denied("recipient is not the caller", actor_id=user_id)
        raise Forbidden("Email mismatch")

    rate_limit_key = limiter.make_key(WELCOME_EMAIL_OPERATION, user_id)
    if not limiter.allow(rate_limit_key):
        audit.log_rate_limited(user_id, rate_limit_key)
        raise RateLimited("Too many requests. Please try again later.")

    logger.info("Sending welcome email", user_id=user_id)
    try:
        return await notifier.send_welcome(body.email, body.display_name)
    except PlatformError as e:
        logger.error(
            "Welcome email failed",
            user_id=user_id,
            status_code=e.status_code,
            timed_out=e.timed_out,
            detail=e.detail
        )
        raise UpstreamFailure("An error occurred while sending the email")
