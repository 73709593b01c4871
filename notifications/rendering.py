"""
Email rendering. User-supplied values (titles, display names) are HTML-escaped.
"""

from dataclasses import dataclass
from typing import Optional

from jinja2 import Environment, PackageLoader, select_autoescape

BRAND = "HashEBooks"

_ENV = Environment(
    loader=PackageLoader("notifications", "templates"),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)

# email_action_type -> (subject, intro, footnote)
_AUTH_ACTIONS = {
    "signup": (
        f"Verify your {BRAND} account",
        f"Thank you for signing up for {BRAND}! Please use the verification code "
        "below to complete your registration:",
        "This code will expire in 1 hour. If you didn't request this, please ignore this email.",
    ),
    "recovery": (
        f"Reset your {BRAND} password",
        "We received a request to reset your password. Use the code below to set a new password:",
        "This code will expire in 1 hour. If you didn't request a password reset, "
        "please ignore this email.",
    ),
    "email_change": (
        f"Confirm your new email for {BRAND}",
        "Please use the code below to confirm your new email address:",
        "This code will expire in 1 hour. If you didn't request this change, "
        "please contact support immediately.",
    ),
}
_AUTH_ACTIONS["magiclink"] = _AUTH_ACTIONS["recovery"]
_AUTH_DEFAULT = (
    f"Your {BRAND} verification code",
    "Here is your verification code:",
    "This code will expire in 1 hour.",
)


@dataclass(frozen=True)
class RenderedEmail:
    """Subject and HTML body ready to send."""
    subject: str
    html: str


def render_welcome(display_name: Optional[str] = None) -> RenderedEmail:
    html = _ENV.get_template("welcome.html").render(brand=BRAND, display_name=display_name)
    return RenderedEmail(subject=f"Welcome to {BRAND}!", html=html)


def render_book_status(status: str, book_title: str, user_name: Optional[str] = None) -> RenderedEmail:
    """
    Render the owner notice for a review decision.

    Args:
        status: "approved" or "rejected"
        book_title: Title of the reviewed book
        user_name: Owner display name; "there" when unknown

    Raises:
        ValueError: For any other status
    """
    context = {
        "brand": BRAND,
        "book_title": book_title,
        "user_name": user_name or "there",
    }
    if status == "approved":
        return RenderedEmail(
            subject=f'\U0001F389 Your book "{book_title}" has been approved!',
            html=_ENV.get_template("book_approved.html").render(**context),
        )
    if status == "rejected":
        return RenderedEmail(
            subject=f'\U0001F4DA Update on your book "{book_title}"',
            html=_ENV.get_template("book_rejected.html").render(**context),
        )
    raise ValueError(f"Unsupported book status: {status}")


def render_auth_email(action_type: str, token: str, display_name: Optional[str] = None) -> RenderedEmail:
    """Render a verification-code email for an auth hook action."""
    subject, intro, footnote = _AUTH_ACTIONS.get(action_type, _AUTH_DEFAULT)
    html = _ENV.get_template("auth_code.html").render(
        brand=BRAND,
        greeting=f"Hello {display_name}" if display_name else "Hello",
        intro=intro,
        footnote=footnote,
        token=token,
    )
    return RenderedEmail(subject=subject, html=html)
