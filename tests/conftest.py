"""
Pytest configuration and shared fixtures.
"""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from edge_functions import dependencies
from edge_functions.auth import CredentialVerifier, RoleAuthority
from edge_functions.config import FunctionsConfig
from edge_functions.main import app
from notifications.dispatcher import NotificationDispatcher
from platform_clients.base import PlatformError
from platform_clients.resend import ResendClient
from platform_clients.supabase_auth import Claims, SupabaseAuthClient
from platform_clients.supabase_rest import SupabaseRestClient
from utilities.rate_limit import FixedWindowRateLimiter

ADMIN_ID = "11111111-aaaa-4000-8000-000000000001"
ADMIN_EMAIL = "Admin@HashEBooks.test"
OTHER_ADMIN_ID = "11111111-aaaa-4000-8000-000000000002"
READER_ID = "22222222-bbbb-4000-8000-000000000001"
READER_EMAIL = "reader@example.com"
ADMIN_PASSWORD = "correct-horse-battery"

TOKENS = {
    "admin-token": Claims(subject_id=ADMIN_ID, email=ADMIN_EMAIL),
    "reader-token": Claims(subject_id=READER_ID, email=READER_EMAIL),
}


class FakeClock:
    """Deterministic monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def admin_ids():
    """Identities holding the admin role in the fake role store."""
    return {ADMIN_ID, OTHER_ADMIN_ID}


@pytest.fixture
def mock_auth_client():
    """Identity provider with two known tokens and one valid admin password."""
    client = AsyncMock(spec=SupabaseAuthClient)

    async def get_claims(token):
        if token not in TOKENS:
            raise PlatformError("invalid JWT", status_code=401)
        return TOKENS[token]

    async def sign_in(email, password):
        if email != ADMIN_EMAIL or password != ADMIN_PASSWORD:
            raise PlatformError("Invalid login credentials", status_code=400)

    client.get_claims.side_effect = get_claims
    client.sign_in_with_password.side_effect = sign_in
    client.admin_delete_user.return_value = None
    return client


@pytest.fixture
def mock_rest_client(admin_ids):
    """REST store whose role grants come from admin_ids."""
    client = AsyncMock(spec=SupabaseRestClient)

    async def fetch_role_grant(user_id, role):
        if role == "admin" and user_id in admin_ids:
            return {"role": "admin"}
        return None

    client.fetch_role_grant.side_effect = fetch_role_grant
    client.fetch_profile.return_value = {"email": READER_EMAIL, "display_name": "Ada"}
    client.update_book_status.return_value = {
        "id": "book-1",
        "title": "A Light in the Attic",
        "user_id": READER_ID,
        "status": "approved",
    }
    return client


@pytest.fixture
def mock_email_client():
    client = AsyncMock(spec=ResendClient)
    client.send.return_value = {"id": "email_123"}
    return client


@pytest.fixture
def delete_user_limiter(fake_clock):
    return FixedWindowRateLimiter(max_attempts=3, window_seconds=900, clock=fake_clock)


@pytest.fixture
def welcome_email_limiter(fake_clock):
    return FixedWindowRateLimiter(max_attempts=3, window_seconds=3600, clock=fake_clock)


@pytest.fixture
def functions_settings():
    return FunctionsConfig()


@pytest.fixture
def client(
    mock_auth_client,
    mock_rest_client,
    mock_email_client,
    delete_user_limiter,
    welcome_email_limiter,
    functions_settings,
):
    """Test client with every platform collaborator replaced."""
    notifier = NotificationDispatcher(
        email_client=mock_email_client,
        rest_client=mock_rest_client,
        sender="HashEBooks <test@hashebooks.test>",
    )
    overrides = {
        dependencies.get_verifier: lambda: CredentialVerifier(mock_auth_client),
        dependencies.get_role_authority: lambda: RoleAuthority(mock_rest_client),
        dependencies.get_auth_client: lambda: mock_auth_client,
        dependencies.get_rest_client: lambda: mock_rest_client,
        dependencies.get_notifier: lambda: notifier,
        dependencies.get_delete_user_limiter: lambda: delete_user_limiter,
        dependencies.get_welcome_email_limiter: lambda: welcome_email_limiter,
        dependencies.get_functions_config: lambda: functions_settings,
    }
    app.dependency_overrides.update(overrides)
    yield TestClient(app)
    app.dependency_overrides.clear()
