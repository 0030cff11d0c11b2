"""Email subjects and bodies, keyed by notification kind."""

from __future__ import annotations

WELCOME = "welcome"
BOOKING_REQUESTED = "booking_requested"
BOOKING_RECEIVED = "booking_received"
BOOKING_CONFIRMED = "booking_confirmed"
BOOKING_CANCELLED = "booking_cancelled"

SIGNATURE = "\n\nThe Nestly team"

MESSAGES: dict[str, tuple[str, str]] = {
    WELCOME: (
        "Welcome to Nestly",
        "Hello!\n\nYour {role} account for {email} is ready.",
    ),
    BOOKING_REQUESTED: (
        "Booking #{booking_code} received",
        "We received your request for {check_in} - {check_out}.\n"
        "Total: {total_price}. The host will confirm it shortly.",
    ),
    BOOKING_RECEIVED: (
        "New booking request #{booking_code}",
        "A guest requested your listing for {check_in} - {check_out}.\n"
        "Total: {total_price}. Please confirm or decline it.",
    ),
    BOOKING_CONFIRMED: (
        "Booking #{booking_code} confirmed!",
        "Your stay {check_in} - {check_out} is confirmed.",
    ),
    BOOKING_CANCELLED: (
        "Booking #{booking_code} cancelled",
        "The booking for {check_in} - {check_out} was cancelled.\nReason: {reason}",
    ),
}


def render_message(kind: str, context: dict) -> tuple[str, str]:
    """
    Return (subject, body) for a notification kind.

    Raises:
        KeyError: Unknown kind or a placeholder missing from context
    """
    subject, body = MESSAGES[kind]
    return subject.format(**context), body.format(**context) + SIGNATURE
