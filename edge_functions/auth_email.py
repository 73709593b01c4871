"""
Send-email hook for the identity provider.

The provider calls this endpoint, signed with the shared hook secret, whenever
a verification, recovery or email-change code must be delivered.
"""

import structlog
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from edge_functions.config import FunctionsConfig, config as functions_config
from edge_functions.dependencies import get_functions_config, get_notifier, get_platform_config
from edge_functions.errors import catch_unexpected
from notifications.dispatcher import NotificationDispatcher
from platform_clients.base import PlatformError
from utilities.config import PlatformConfig
from utilities.timing import minimum_duration
from utilities.webhooks import WebhookVerificationError, verify

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["Notifications"])


def _hook_error(http_code: int, message: str) -> JSONResponse:
    # The provider expects failures in this shape, always with 401.
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"error": {"http_code": http_code, "message": message}},
    )


@router.post("/send-auth-email")
@minimum_duration(floor_provider=lambda: functions_config.min_response_ms)
@catch_unexpected
async def send_auth_email(
    request: Request,
    notifier: NotificationDispatcher = Depends(get_notifier),
    platform_settings: PlatformConfig = Depends(get_platform_config),
    settings: FunctionsConfig = Depends(get_functions_config),
):
    """Deliver an auth code email for a signed provider hook."""
    payload = (await request.body()).decode("utf-8", errors="replace")
    try:
        event = verify(
            platform_settings.send_email_hook_secret,
            payload,
            request.headers,
            tolerance_seconds=settings.webhook_tolerance_seconds,
        )
    except WebhookVerificationError as e:
        logger.warning("Auth hook rejected", reason=str(e))
        return _hook_error(status.HTTP_401_UNAUTHORIZED, "Invalid webhook signature")

    user = event.get("user") if isinstance(event, dict) else None
    email_data = event.get("email_data") if isinstance(event, dict) else None
    if not isinstance(user, dict) or not isinstance(email_data, dict) or not user.get("email"):
        return _hook_error(status.HTTP_400_BAD_REQUEST, "Malformed hook payload")

    action_type = email_data.get("email_action_type") or ""
    metadata = user.get("user_metadata")
    display_name = metadata.get("display_name") if isinstance(metadata, dict) else None
    if display_name is not None and not isinstance(display_name, str):
        display_name = None
    logger.info("Sending auth email", action_type=action_type)

    try:
        await notifier.send_auth_email(
            user["email"], action_type, str(email_data.get("token") or ""), display_name
        )
    except PlatformError as e:
        logger.error(
            "Auth email failed",
            action_type=action_type,
            status_code=e.status_code,
            timed_out=e.timed_out,
            detail=e.detail
        )
        return _hook_error(e.status_code or status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to send email")
    except Exception:
        logger.exception("Auth email failed unexpectedly", action_type=action_type)
        return _hook_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to send email")

    return {}
