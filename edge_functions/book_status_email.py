"""
Owner notice for a book review decision.

Triggered by the admin review workflow after the status change has already
been applied; a failure here never reverts that change.
"""

import structlog
from fastapi import APIRouter, Depends, Request

from edge_functions.config import config as functions_config
from edge_functions.dependencies import get_notifier
from edge_functions.errors import ContactNotFound, InvalidInput, UpstreamFailure, catch_unexpected
from edge_functions.models import (
    BookStatus,
    BookStatusEmailRequest,
    BookStatusEmailResponse,
    read_json_body,
)
from notifications.dispatcher import ContactNotFoundError, NotificationDispatcher
from platform_clients.base import PlatformError
from utilities.timing import minimum_duration

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["Notifications"])

VALID_STATUSES = {s.value for s in BookStatus}


def validate_status(status: str) -> BookStatus:
    """
    Raises:
        InvalidInput: For anything other than approved/rejected
    """
    if status not in VALID_STATUSES:
        raise InvalidInput("Invalid status: must be 'approved' or 'rejected'")
    return BookStatus(status)


async def dispatch_book_status(
    notifier: NotificationDispatcher,
    book_id: str,
    book_title: str,
    status: BookStatus,
    user_id: str
) -> dict:
    """
    Send the owner notice and translate failures into handler errors.

    Raises:
        ContactNotFound: Owner has no contact address
        UpstreamFailure: Profile lookup or email provider failed
    """
    try:
        return await notifier.send_book_status(book_id, book_title, status.value, user_id)
    except ContactNotFoundError:
        raise ContactNotFound("Could not find user email")
    except PlatformError as e:
        logger.error(
            "Book status email failed",
            book_id=book_id,
            user_id=user_id,
            status_code=e.status_code,
            timed_out=e.timed_out,
            detail=e.detail
        )
        raise UpstreamFailure("Failed to send email")


@router.post("/send-book-status-email", response_model=BookStatusEmailResponse)
@minimum_duration(floor_provider=lambda: functions_config.min_response_ms)
@catch_unexpected
async def send_book_status_email(
    request: Request,
    notifier: NotificationDispatcher = Depends(get_notifier),
):
    """Email a book owner that their book was approved or rejected."""
    body = await read_json_body(request, BookStatusEmailRequest)
    if not body.book_id or not body.book_title or not body.status or not body.user_id:
        raise InvalidInput("Missing required fields: bookId, bookTitle, status, userId")
    status = validate_status(body.status)

    logger.info("Book status notice requested", book_id=body.book_id, user_id=body.user_id, status=status.value)
    email_response = await dispatch_book_status(
        notifier, body.book_id, body.book_title, status, body.user_id
    )
    return BookStatusEmailResponse(success=True, email_response=email_response)
