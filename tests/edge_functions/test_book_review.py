"""
Tests for the two-phase book review workflow.
"""

from conftest import READER_ID, bearer
from platform_clients.base import PlatformError


def review(client, token="admin-token", **body):
    return client.post("/review-book", json=body, headers=bearer(token))


def test_requires_admin(client, mock_rest_client):
    response = review(client, token="reader-token", bookId="book-1", status="approved")
    assert response.status_code == 403
    mock_rest_client.update_book_status.assert_not_called()


def test_requires_authentication(client, mock_rest_client):
    response = client.post("/review-book", json={"bookId": "book-1", "status": "approved"})
    assert response.status_code == 401
    mock_rest_client.update_book_status.assert_not_called()


def test_invalid_status_is_400(client, mock_rest_client):
    response = review(client, bookId="book-1", status="pending")
    assert response.status_code == 400
    mock_rest_client.update_book_status.assert_not_called()


def test_approve_updates_and_notifies(client, mock_rest_client, mock_email_client):
    response = review(client, bookId="book-1", status="approved")
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["book"]["status"] == "approved"
    assert data["notification"] == {"sent": True, "error": None}

    mock_rest_client.update_book_status.assert_awaited_once_with("book-1", "approved")
    mock_rest_client.fetch_profile.assert_awaited_once_with(READER_ID)
    mock_email_client.send.assert_awaited_once()


def test_notification_failure_does_not_fail_status_change(client, mock_rest_client, mock_email_client):
    mock_email_client.send.side_effect = PlatformError("provider down", status_code=503)
    response = review(client, bookId="book-1", status="approved")
    assert response.status_code == 200
    data = response.json()
    assert data["book"]["status"] == "approved"
    assert data["notification"] == {"sent": False, "error": "Failed to send email"}
    mock_rest_client.update_book_status.assert_awaited_once()


def test_missing_owner_contact_is_reported(client, mock_rest_client):
    mock_rest_client.fetch_profile.return_value = None
    response = review(client, bookId="book-1", status="rejected")
    assert response.status_code == 200
    assert response.json()["notification"] == {"sent": False, "error": "Could not find user email"}


def test_unexpected_notifier_error_is_contained(client, mock_rest_client):
    mock_rest_client.fetch_profile.side_effect = RuntimeError("boom")
    response = review(client, bookId="book-1", status="approved")
    assert response.status_code == 200
    assert response.json()["notification"]["sent"] is False


def test_unknown_book_is_404(client, mock_rest_client, mock_email_client):
    mock_rest_client.update_book_status.return_value = None
    response = review(client, bookId="missing", status="approved")
    assert response.status_code == 404
    assert response.json() == {"error": "Book not found"}
    mock_email_client.send.assert_not_called()


def test_status_update_failure_skips_notification(client, mock_rest_client, mock_email_client):
    mock_rest_client.update_book_status.side_effect = PlatformError("permission denied", status_code=401)
    response = review(client, bookId="book-1", status="approved")
    assert response.status_code == 500
    assert response.json() == {"error": "Unable to update the book status"}
    mock_email_client.send.assert_not_called()
