"""
Service providers injected into the handlers.

Everything is created once in the application lifespan and stored on
`app.state`; tests replace these providers through `app.dependency_overrides`.
"""

from dataclasses import dataclass

from fastapi import Request

from edge_functions.auth import CredentialVerifier, RoleAuthority
from edge_functions.config import FunctionsConfig, config as functions_config
from notifications.dispatcher import NotificationDispatcher
from platform_clients.resend import ResendClient
from platform_clients.supabase_auth import SupabaseAuthClient
from platform_clients.supabase_rest import SupabaseRestClient
from utilities.config import PlatformConfig, config as platform_config
from utilities.rate_limit import FixedWindowRateLimiter

DELETE_USER_OPERATION = "delete-user"
WELCOME_EMAIL_OPERATION = "welcome-email"


@dataclass
class Services:
    """Long-lived collaborators shared by all requests of one process."""
    auth_client: SupabaseAuthClient
    rest_client: SupabaseRestClient
    email_client: ResendClient
    verifier: CredentialVerifier
    roles: RoleAuthority
    notifier: NotificationDispatcher
    delete_user_limiter: FixedWindowRateLimiter
    welcome_email_limiter: FixedWindowRateLimiter

    async def aclose(self) -> None:
        await self.auth_client.aclose()
        await self.rest_client.aclose()
        await self.email_client.aclose()


def build_services(platform_config: PlatformConfig, functions_config: FunctionsConfig) -> Services:
    """Wire clients, verifiers, notifier and rate limiters from configuration."""
    auth_client = SupabaseAuthClient.from_config(platform_config)
    rest_client = SupabaseRestClient.from_config(platform_config)
    email_client = ResendClient.from_config(platform_config)
    return Services(
        auth_client=auth_client,
        rest_client=rest_client,
        email_client=email_client,
        verifier=CredentialVerifier(auth_client),
        roles=RoleAuthority(rest_client),
        notifier=NotificationDispatcher(
            email_client=email_client,
            rest_client=rest_client,
            sender=platform_config.email_from,
            auth_sender=platform_config.auth_email_from,
        ),
        delete_user_limiter=FixedWindowRateLimiter(
            max_attempts=functions_config.rate_limit_max_attempts,
            window_seconds=functions_config.delete_user_window_seconds,
        ),
        welcome_email_limiter=FixedWindowRateLimiter(
            max_attempts=functions_config.rate_limit_max_attempts,
            window_seconds=functions_config.welcome_email_window_seconds,
        ),
    )


def _services(request: Request) -> Services:
    return request.app.state.services


def get_verifier(request: Request) -> CredentialVerifier:
    return _services(request).verifier


def get_role_authority(request: Request) -> RoleAuthority:
    return _services(request).roles


def get_auth_client(request: Request) -> SupabaseAuthClient:
    return _services(request).auth_client


def get_rest_client(request: Request) -> SupabaseRestClient:
    return _services(request).rest_client


def get_notifier(request: Request) -> NotificationDispatcher:
    return _services(request).notifier


def get_delete_user_limiter(request: Request) -> FixedWindowRateLimiter:
    return _services(request).delete_user_limiter


def get_welcome_email_limiter(request: Request) -> FixedWindowRateLimiter:
    return _services(request).welcome_email_limiter


def get_functions_config() -> FunctionsConfig:
    return functions_config


def get_platform_config() -> PlatformConfig:
    return platform_config
