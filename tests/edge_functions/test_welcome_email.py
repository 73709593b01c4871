"""
Tests for the self-service welcome email endpoint.
"""

from conftest import READER_EMAIL, READER_ID, bearer
from platform_clients.base import PlatformError


def test_requires_authorization(client, mock_email_client):
    response = client.post("/send-welcome-email", json={"email": READER_EMAIL})
    assert response.status_code == 401
    mock_email_client.send.assert_not_called()


def test_invalid_token(client, mock_email_client):
    response = client.post(
        "/send-welcome-email", json={"email": READER_EMAIL}, headers=bearer("expired")
    )
    assert response.status_code == 401
    mock_email_client.send.assert_not_called()


def test_sends_to_own_address(client, mock_email_client):
    response = client.post(
        "/send-welcome-email",
        json={"email": READER_EMAIL, "displayName": "Ada"},
        headers=bearer("reader-token"),
    )
    assert response.status_code == 200
    assert response.json() == {"id": "email_123"}

    mock_email_client.send.assert_awaited_once()
    to, subject, html, sender = mock_email_client.send.await_args.args
    assert to == [READER_EMAIL]
    assert subject == "Welcome to HashEBooks!"
    assert "Welcome, Ada!" in html


def test_email_match_is_case_insensitive(client, mock_email_client):
    response = client.post(
        "/send-welcome-email",
        json={"email": READER_EMAIL.upper()},
        headers=bearer("reader-token"),
    )
    assert response.status_code == 200


def test_other_recipient_is_forbidden(client, mock_email_client, welcome_email_limiter):
    response = client.post(
        "/send-welcome-email",
        json={"email": "victim@example.org"},
        headers=bearer("reader-token"),
    )
    assert response.status_code == 403
    assert response.json() == {"error": "Email mismatch"}
    mock_email_client.send.assert_not_called()
    assert welcome_email_limiter.get_rate_limit_info(f"welcome-email:{READER_ID}")["requests_used"] == 0


def test_missing_email_is_forbidden(client, mock_email_client):
    response = client.post("/send-welcome-email", json={}, headers=bearer("reader-token"))
    assert response.status_code == 403
    mock_email_client.send.assert_not_called()


def test_rate_limited_after_three_sends(client, mock_email_client, fake_clock):
    for _ in range(3):
        response = client.post(
            "/send-welcome-email", json={"email": READER_EMAIL}, headers=bearer("reader-token")
        )
        assert response.status_code == 200

    response = client.post(
        "/send-welcome-email", json={"email": READER_EMAIL}, headers=bearer("reader-token")
    )
    assert response.status_code == 429
    assert mock_email_client.send.await_count == 3

    fake_clock.advance(15 * 60 + 1)
    response = client.post(
        "/send-welcome-email", json={"email": READER_EMAIL}, headers=bearer("reader-token")
    )
    assert response.status_code == 429

    fake_clock.advance(60 * 60)
    response = client.post(
        "/send-welcome-email", json={"email": READER_EMAIL}, headers=bearer("reader-token")
    )
    assert response.status_code == 200


def test_welcome_and_delete_limits_are_independent(client, delete_user_limiter):
    for _ in range(3):
        delete_user_limiter.allow(f"delete-user:{READER_ID}")
    response = client.post(
        "/send-welcome-email", json={"email": READER_EMAIL}, headers=bearer("reader-token")
    )
    assert response.status_code == 200


def test_provider_failure_is_generic_500(client, mock_email_client):
    mock_email_client.send.side_effect = PlatformError(
        "API key is invalid", status_code=401, detail={"message": "API key is invalid"}
    )
    response = client.post(
        "/send-welcome-email", json={"email": READER_EMAIL}, headers=bearer("reader-token")
    )
    assert response.status_code == 500
    assert response.json() == {"error": "An error occurred while sending the email"}
