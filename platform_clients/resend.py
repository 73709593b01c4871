"""
Client for the transactional email API (Resend).
"""

from typing import Dict, List, Optional

import httpx

from platform_clients.base import BaseHTTPClient
from utilities.config import PlatformConfig


class ResendClient(BaseHTTPClient):
    """Sends single HTML messages."""

    service_name = "email_provider"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        super().__init__(
            base_url=base_url,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_config(cls, config: PlatformConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        return cls(
            base_url=config.resend_api_url,
            api_key=config.resend_api_key,
            timeout=config.request_timeout,
            transport=transport,
        )

    async def send(self, to: List[str], subject: str, html: str, sender: str) -> Dict:
        """
        Send one message.

        Returns:
            Provider response body (contains the message id)

        Raises:
            PlatformError: Carrying the provider's message on rejection
        """
        response = await self._request(
            "POST",
            "/emails",
            json={
                "from": sender,
                "to": to,
                "subject": subject,
                "html": html,
            },
        )
        self.logger.info("Email accepted by provider", recipients=len(to))
        return response.json()
