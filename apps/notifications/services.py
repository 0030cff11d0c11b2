"""Notification services for sending emails."""

from __future__ import annotations

import logging

from django.conf import settings  # type: ignore
from django.core.mail import send_mail  # type: ignore

from .messages import render_message

logger = logging.getLogger(__name__)


# ============================================================================
# EMAIL NOTIFICATIONS
# ============================================================================

def send_email_notification(recipient_email: str, subject: str, message: str) -> bool:
    """
    Send a plain-text email.

    Args:
        recipient_email: Recipient address
        subject: Subject line
        message: Body text

    Returns:
        bool: True if the email was handed to the mail backend
    """
    try:
        send_mail(
            subject=subject,
            message=message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient_email],
            fail_silently=False,
        )

        logger.info(f"Email sent successfully to {recipient_email}: {subject}")
        return True

    except Exception as e:
        logger.error(f"Failed to send email to {recipient_email}: {e}", exc_info=True)
        return False


def notify_user(recipient_email: str, kind: str, context: dict) -> bool:
    """Render the message of the given kind and email it."""
    subject, message = render_message(kind, context)
    return send_email_notification(recipient_email, subject, message)
