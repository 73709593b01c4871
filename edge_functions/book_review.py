"""
Admin review of uploaded books.

Phase 1 applies the status change. Phase 2 notifies the owner on a
best-effort basis: its failure is reported in the response but never undoes
or fails phase 1.
"""

import structlog
from fastapi import APIRouter, Depends, Request

from edge_functions.auth import CredentialVerifier, RoleAuthority
from edge_functions.book_status_email import dispatch_book_status, validate_status
from edge_functions.config import config as functions_config
from edge_functions.dependencies import (
    get_notifier,
    get_rest_client,
    get_role_authority,
    get_verifier,
)
from edge_functions.errors import (
    HandlerError,
    InvalidInput,
    NotFound,
    UpstreamFailure,
    catch_unexpected,
)
from edge_functions.models import (
    NotificationResult,
    ReviewBookRequest,
    ReviewBookResponse,
    read_json_body,
)
from notifications.dispatcher import NotificationDispatcher
from platform_clients.base import PlatformError
from platform_clients.supabase_rest import SupabaseRestClient
from utilities.logger import AuditLogger
from utilities.timing import minimum_duration

logger = structlog.get_logger(__name__)
audit = AuditLogger("review-book")

router = APIRouter(tags=["Books"])


async def notify_owner(notifier: NotificationDispatcher, book: dict, status) -> NotificationResult:
    """Send the owner notice; every failure is caught and reported."""
    try:
        await dispatch_book_status(
            notifier, str(book["id"]), book.get("title") or "", status, str(book.get("user_id") or "")
        )
    except HandlerError as e:
        audit.log_notification_failed(e.message, book_id=book.get("id"))
        return NotificationResult(sent=False, error=e.message)
    except Exception as e:
        logger.exception("Unexpected notification failure", book_id=book.get("id"))
        audit.log_notification_failed(str(e), book_id=book.get("id"))
        return NotificationResult(sent=False, error="Failed to send email")
    return NotificationResult(sent=True)


@router.post("/review-book", response_model=ReviewBookResponse)
@minimum_duration(floor_provider=lambda: functions_config.min_response_ms)
@catch_unexpected
async def review_book(
    request: Request,
    verifier: CredentialVerifier = Depends(get_verifier),
    roles: RoleAuthority = Depends(get_role_authority),
    rest_client: SupabaseRestClient = Depends(get_rest_client),
    notifier: NotificationDispatcher = Depends(get_notifier),
):
    """Approve or reject a book and notify its owner."""
    claims = await verifier.verify(request.headers.get("Authorization"))
    await roles.require(claims.subject_id)

    body = await read_json_body(request, ReviewBookRequest)
    if not body.book_id or not body.status:
        raise InvalidInput("Book ID and status are required")
    status = validate_status(body.status)

    try:
        book = await rest_client.update_book_status(body.book_id, status.value)
    except PlatformError as e:
        logger.error(
            "Status update failed",
            book_id=body.book_id,
            status_code=e.status_code,
            timed_out=e.timed_out,
            detail=e.detail
        )
        raise UpstreamFailure("Unable to update the book status")
    if book is None:
        raise NotFound("Book not found")

    logger.info("Book status updated", book_id=body.book_id, status=status.value, actor_id=claims.subject_id)

    notification = await notify_owner(notifier, book, status)
    return ReviewBookResponse(success=True, book=book, notification=notification)
