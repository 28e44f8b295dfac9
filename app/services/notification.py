"""
Outbound account notifications.

There is no SMTP transport: messages are written to the application log so
codes can be picked up in development.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from app.core.config import get_settings

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmailMessage:
    to: str
    subject: str
    body: str
    sender: str


def send_email(to: str, subject: str, body: str, settings: "Settings | None" = None) -> EmailMessage:
    """Deliver an email via the log transport and return what was sent."""
    settings = settings or get_settings()
    message = EmailMessage(to=to, subject=subject, body=body, sender=settings.MAIL_FROM)
    logger.info(
        "[MOCK EMAIL] To: %s | Subject: %s | Body: %s",
        message.to,
        message.subject,
        message.body,
        extra={"email_to": message.to, "email_subject": message.subject},
    )
    return message


def send_verification_code(to: str, code: str, ttl_minutes: int) -> EmailMessage:
    return send_email(
        to,
        "Verify your email",
        f"Your verification code is: {code}. It expires in {ttl_minutes} minutes.",
    )


def send_password_reset_code(to: str, code: str, ttl_minutes: int) -> EmailMessage:
    return send_email(
        to,
        "Reset your password",
        f"Your password reset code is: {code}. It expires in {ttl_minutes} minutes. "
        "If you did not request a reset, ignore this email.",
    )


def send_status_changed(to: str, full_name: str, is_active: bool) -> EmailMessage:
    status_text = "activated" if is_active else "deactivated"
    follow_up = (
        "You can now access your account normally."
        if is_active
        else "If you believe this is a mistake, please contact support."
    )
    return send_email(
        to,
        f"Account {status_text}",
        f"Hi {full_name}, your account has been {status_text} by an administrator. {follow_up}",
    )


def send_role_changed(to: str, full_name: str, old_role: str, new_role: str) -> EmailMessage:
    return send_email(
        to,
        "Account role changed",
        f"Hi {full_name}, your account role has been changed from {old_role} to {new_role} "
        "by an administrator. Please log in again to access your new role features.",
    )
