"""
Client for the hosted relational store (PostgREST) used with the service role key.
"""

from typing import Dict, Optional

import httpx

from platform_clients.base import BaseHTTPClient
from utilities.config import PlatformConfig


class SupabaseRestClient(BaseHTTPClient):
    """Point queries against role grants, profiles and books."""

    service_name = "rest_store"

    def __init__(
        self,
        base_url: str,
        service_role_key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        super().__init__(
            base_url=f"{base_url}/rest/v1",
            headers={
                "apikey": service_role_key,
                "Authorization": f"Bearer {service_role_key}",
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_config(cls, config: PlatformConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        return cls(
            base_url=config.supabase_url,
            service_role_key=config.supabase_service_role_key,
            timeout=config.request_timeout,
            transport=transport,
        )

    async def fetch_role_grant(self, user_id: str, role: str) -> Optional[Dict]:
        """
        Look up one grant filtered by both subject and role.

        Returns:
            The grant row if the identity holds the role, None otherwise

        Raises:
            PlatformError: If the query fails
        """
        response = await self._request(
            "GET",
            "/user_roles",
            params={
                "select": "role",
                "user_id": f"eq.{user_id}",
                "role": f"eq.{role}",
                "limit": "1",
            },
        )
        rows = response.json() or []
        return rows[0] if rows else None

    async def fetch_profile(self, user_id: str) -> Optional[Dict]:
        """
        Get the contact profile of an identity.

        Returns:
            Dict with email and display_name, or None if there is no profile
        """
        response = await self._request(
            "GET",
            "/profiles",
            params={
                "select": "email,display_name",
                "id": f"eq.{user_id}",
                "limit": "1",
            },
        )
        rows = response.json() or []
        return rows[0] if rows else None

    async def update_book_status(self, book_id: str, status: str) -> Optional[Dict]:
        """
        Set the review status of a book.

        Returns:
            The updated row (id, title, user_id, status), or None if no book matched
        """
        response = await self._request(
            "PATCH",
            "/books",
            params={
                "id": f"eq.{book_id}",
                "select": "id,title,user_id,status",
            },
            json={"status": status},
            headers={"Prefer": "return=representation"},
        )
        rows = response.json() or []
        return rows[0] if rows else None
