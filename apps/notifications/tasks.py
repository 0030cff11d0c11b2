"""Celery tasks delivering notifications."""

from __future__ import annotations

import logging
from uuid import UUID

from celery import shared_task  # type: ignore

from apps.bookings.infrastructure.repositories import DjangoBookingRepository
from apps.listings.infrastructure.repositories import DjangoListingRepository
from apps.users.infrastructure.repositories import DjangoUserRepository
from shared.application.context import RequestContext

from .services import notify_user

logger = logging.getLogger(__name__)

GUEST = "guest"
HOST = "host"


@shared_task(name="notifications.send_user_notification")
def send_user_notification(user_id: str, kind: str, context: dict | None = None) -> bool:
    """Email a user a message of the given kind."""
    user = DjangoUserRepository().get_by_id(RequestContext.background(), UUID(user_id))
    if not user:
        logger.warning(f"Notification {kind} skipped: user {user_id} not found")
        return False
    if not user.is_active:
        logger.info(f"Notification {kind} skipped: user {user_id} is deactivated")
        return False

    return notify_user(user.email, kind, {"email": user.email, "role": user.role.value, **(context or {})})


@shared_task(name="notifications.send_booking_notification")
def send_booking_notification(booking_id: str, kind: str, recipient: str = GUEST, reason: str = "") -> bool:
    """
    Email the guest or the listing host about a booking.

    The booking is read back from storage, so the message reflects the
    committed state.
    """
    ctx = RequestContext.background()
    booking = DjangoBookingRepository().get_by_id(ctx, UUID(booking_id))
    if not booking:
        logger.warning(f"Notification {kind} skipped: booking {booking_id} not found")
        return False

    user_id = booking.user_id
    if recipient == HOST:
        listing = DjangoListingRepository().get_by_id(ctx, booking.listing_id)
        if not listing:
            logger.warning(f"Notification {kind} skipped: listing {booking.listing_id} not found")
            return False
        user_id = listing.host_id

    context = {
        "booking_code": booking.booking_code,
        "check_in": booking.check_in.isoformat(),
        "check_out": booking.check_out.isoformat(),
        "total_price": booking.total_price,
        "reason": reason or booking.cancellation_reason or "-",
    }
    return send_user_notification(str(user_id), kind, context)
