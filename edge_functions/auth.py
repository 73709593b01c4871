"""
Authentication and authorization for the edge functions.
"""

from enum import Enum
from typing import Optional

import structlog

from edge_functions.errors import Forbidden, Unauthenticated
from platform_clients.base import PlatformError
from platform_clients.supabase_auth import Claims, SupabaseAuthClient
from platform_clients.supabase_rest import SupabaseRestClient

logger = structlog.get_logger(__name__)

ADMIN_ROLE = "admin"
BEARER_PREFIX = "Bearer "


class RoleCheck(str, Enum):
    """Outcome of a role lookup. Only ALLOWED grants access."""
    ALLOWED = "allowed"
    DENIED = "denied"
    QUERY_ERROR = "query_error"


def extract_bearer_token(authorization: Optional[str]) -> str:
    """
    Pull the token out of an Authorization header.

    Raises:
        Unauthenticated: If the header is missing or not a bearer credential
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise Unauthenticated("No authorization header")
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise Unauthenticated("No authorization header")
    return token


class CredentialVerifier:
    """Validates bearer tokens against the identity provider."""

    def __init__(self, auth_client: SupabaseAuthClient):
        self.auth_client = auth_client

    async def verify(self, authorization: Optional[str]) -> Claims:
        """
        Verify the caller's bearer token.

        Args:
            authorization: Raw Authorization header value

        Returns:
            Claims with subject id and email

        Raises:
            Unauthenticated: Missing header, rejected token, empty claims or provider error
        """
        token = extract_bearer_token(authorization)
        try:
            return await self.auth_client.get_claims(token)
        except PlatformError as e:
            logger.warning(
                "Token verification failed",
                status_code=e.status_code,
                timed_out=e.timed_out,
                error=e.message
            )
            raise Unauthenticated("Invalid token")


class RoleAuthority:
    """Answers whether an identity holds a role."""

    def __init__(self, rest_client: SupabaseRestClient):
        self.rest_client = rest_client

    async def check(self, subject_id: str, role: str = ADMIN_ROLE) -> RoleCheck:
        """
        Query the grant filtered by subject and role.

        Returns:
            ALLOWED if the grant exists, DENIED if not, QUERY_ERROR if the lookup failed
        """
        try:
            grant = await self.rest_client.fetch_role_grant(subject_id, role)
        except PlatformError as e:
            logger.error(
                "Role check failed",
                subject_id=subject_id,
                role=role,
                status_code=e.status_code,
                timed_out=e.timed_out,
                error=e.message
            )
            return RoleCheck.QUERY_ERROR

        if grant is not None and grant.get("role") == role:
            return RoleCheck.ALLOWED
        return RoleCheck.DENIED

    async def require(self, subject_id: str, role: str = ADMIN_ROLE) -> None:
        """
        Raise unless the identity holds role. Lookup errors deny.

        Raises:
            Forbidden: On DENIED or QUERY_ERROR
        """
        result = await self.check(subject_id, role)
        if result is not RoleCheck.ALLOWED:
            logger.warning("Role required", subject_id=subject_id, role=role, result=result.value)
            raise Forbidden("Admin access required")
