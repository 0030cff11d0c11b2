"""
Domain event handlers enqueueing notifications.

Handlers run after commit and only schedule Celery tasks; delivery
happens in the worker.
"""

from __future__ import annotations

import logging

from django.conf import settings  # type: ignore

from apps.bookings.domain.events import BookingCancelled, BookingConfirmed, BookingRequested
from apps.users.domain.events import UserRegistered
from shared.application.message_bus import message_bus

from . import messages
from .tasks import HOST, send_booking_notification, send_user_notification

logger = logging.getLogger(__name__)


def _enabled() -> bool:
    return getattr(settings, "NESTLY_NOTIFICATIONS_ENABLED", True)


def on_user_registered(event: UserRegistered) -> None:
    if _enabled():
        send_user_notification.delay(str(event.user_id), messages.WELCOME)


def on_booking_requested(event: BookingRequested) -> None:
    if not _enabled():
        return
    send_booking_notification.delay(str(event.booking_id), messages.BOOKING_REQUESTED)
    send_booking_notification.delay(str(event.booking_id), messages.BOOKING_RECEIVED, HOST)


def on_booking_confirmed(event: BookingConfirmed) -> None:
    if _enabled():
        send_booking_notification.delay(str(event.booking_id), messages.BOOKING_CONFIRMED)


def on_booking_cancelled(event: BookingCancelled) -> None:
    if _enabled():
        send_booking_notification.delay(str(event.booking_id), messages.BOOKING_CANCELLED, reason=event.reason)


def register_handlers() -> None:
    """Subscribe the notification handlers to the message bus (idempotent)."""
    message_bus.register_event_handler(UserRegistered, on_user_registered)
    message_bus.register_event_handler(BookingRequested, on_booking_requested)
    message_bus.register_event_handler(BookingConfirmed, on_booking_confirmed)
    message_bus.register_event_handler(BookingCancelled, on_booking_cancelled)
    logger.debug("Notification handlers registered")
