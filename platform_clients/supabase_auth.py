"""
Client for the hosted identity provider (Supabase Auth / GoTrue).
"""

from typing import Optional
from urllib.parse import quote

import httpx
from pydantic import BaseModel, Field

from platform_clients.base import BaseHTTPClient, PlatformError
from utilities.config import PlatformConfig


class Claims(BaseModel):
    """Identity assertions for a verified bearer token."""
    subject_id: str = Field(..., description="Stable subject identifier")
    email: Optional[str] = Field(None, description="Email address on the identity")


class SupabaseAuthClient(BaseHTTPClient):
    """Claims lookup, password sign-in and the account-deletion primitive."""

    service_name = "identity_provider"

    def __init__(
        self,
        base_url: str,
        service_role_key: str,
        anon_key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        super().__init__(
            base_url=f"{base_url}/auth/v1",
            headers={
                "apikey": anon_key or service_role_key,
                "Authorization": f"Bearer {service_role_key}",
            },
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_config(cls, config: PlatformConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        return cls(
            base_url=config.supabase_url,
            service_role_key=config.supabase_service_role_key,
            anon_key=config.get_anon_key(),
            timeout=config.request_timeout,
            transport=transport,
        )

    async def get_claims(self, token: str) -> Claims:
        """
        Resolve a bearer token to its subject and email.

        Raises:
            PlatformError: If the provider rejects the token or returns no subject
        """
        response = await self._request(
            "GET", "/user", headers={"Authorization": f"Bearer {token}"}
        )
        data = response.json() or {}
        subject_id = data.get("id") if isinstance(data, dict) else None
        if not subject_id:
            raise PlatformError("Token resolved to empty claims", status_code=response.status_code)
        return Claims(subject_id=subject_id, email=data.get("email"))

    async def sign_in_with_password(self, email: str, password: str) -> None:
        """
        Attempt a password sign-in; returns only when the credential is valid.

        The issued session is discarded.

        Raises:
            PlatformError: If the credential is rejected or the call fails
        """
        await self._request(
            "POST",
            "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )

    async def admin_delete_user(self, user_id: str) -> None:
        """
        Delete an identity. Dependent records are removed by the platform's
        cascade rules as part of the same operation.

        Raises:
            PlatformError: If the provider reports failure (404 when already gone)
        """
        await self._request("DELETE", f"/admin/users/{quote(user_id, safe='')}")
