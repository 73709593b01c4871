"""
Dispatch of transactional emails.

This module provides:
- Welcome email for a newly registered reader
- Review decision notice for a book owner
- Verification-code emails for the auth hook
"""

from typing import Dict, Optional

import structlog

from notifications.rendering import render_auth_email, render_book_status, render_welcome
from platform_clients.resend import ResendClient
from platform_clients.supabase_rest import SupabaseRestClient

logger = structlog.get_logger(__name__)


class ContactNotFoundError(Exception):
    """Raised when the recipient's contact address cannot be resolved."""


class NotificationDispatcher:
    """Renders and sends notifications through the email provider."""

    def __init__(
        self,
        email_client: ResendClient,
        rest_client: SupabaseRestClient,
        sender: str,
        auth_sender: Optional[str] = None
    ):
        """
        Initialize the dispatcher.

        Args:
            email_client: Transactional email API client
            rest_client: Store client used for profile lookups
            sender: From address for reader-facing notifications
            auth_sender: From address for auth emails (defaults to sender)
        """
        self.email_client = email_client
        self.rest_client = rest_client
        self.sender = sender
        self.auth_sender = auth_sender or sender
        self.logger = logger.bind(component="notification_dispatcher")

    async def send_welcome(self, email: str, display_name: Optional[str] = None) -> Dict:
        message = render_welcome(display_name)
        return await self.email_client.send([email], message.subject, message.html, self.sender)

    async def send_book_status(
        self,
        book_id: str,
        book_title: str,
        status: str,
        user_id: str
    ) -> Dict:
        """
        Notify a book owner of a review decision.

        Args:
            book_id: Reviewed book id (for logs)
            book_title: Reviewed book title
            status: "approved" or "rejected"
            user_id: Owning identity

        Returns:
            Provider response

        Raises:
            ContactNotFoundError: If the owner has no profile email
            PlatformError: If the lookup or the send fails
        """
        message = render_book_status(status, book_title)
        profile = await self.rest_client.fetch_profile(user_id)
        if not profile or not profile.get("email"):
            self.logger.error("Owner contact address not found", book_id=book_id, user_id=user_id)
            raise ContactNotFoundError("Could not find user email")

        if profile.get("display_name"):
            message = render_book_status(status, book_title, profile["display_name"])

        self.logger.info("Sending book status email", book_id=book_id, user_id=user_id, status=status)
        return await self.email_client.send(
            [profile["email"]], message.subject, message.html, self.sender
        )

    async def send_auth_email(
        self,
        email: str,
        action_type: str,
        token: str,
        display_name: Optional[str] = None
    ) -> Dict:
        message = render_auth_email(action_type, token, display_name)
        self.logger.info("Sending auth email", action_type=action_type)
        return await self.email_client.send([email], message.subject, message.html, self.auth_sender)
