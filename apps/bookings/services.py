"""Entry points for booking workflows, wired to the Django repositories."""

from __future__ import annotations

from datetime import date
from typing import List
from uuid import UUID

from apps.bookings.application.command_handlers import (
    CancelBookingCommand,
    CancelBookingHandler,
    CompleteBookingCommand,
    CompleteBookingHandler,
    CompleteFinishedBookingsCommand,
    CompleteFinishedBookingsHandler,
    ConfirmBookingCommand,
    ConfirmBookingHandler,
    RequestBookingCommand,
    RequestBookingHandler,
)
from apps.bookings.application.queries import BookingQueries, CalendarDay, CalendarQueries
from apps.bookings.domain.entities import Booking, BookingStatus
from apps.bookings.infrastructure.repositories import DjangoBookingRepository
from apps.listings.infrastructure.repositories import (
    DjangoAvailabilityRepository,
    DjangoListingRepository,
)
from apps.users.domain.entities import ActingUser
from apps.users.infrastructure.repositories import DjangoUserRepository
from shared.application.context import RequestContext
from shared.application.pagination import Page


def request_booking(
    actor: ActingUser,
    listing_id: UUID,
    user_id: UUID,
    check_in: date,
    check_out: date,
    ctx: RequestContext | None = None,
) -> Booking:
    handler = RequestBookingHandler(
        DjangoListingRepository(),
        DjangoAvailabilityRepository(),
        DjangoBookingRepository(),
        DjangoUserRepository(),
    )
    command = RequestBookingCommand(
        actor=actor,
        listing_id=listing_id,
        user_id=user_id,
        check_in=check_in,
        check_out=check_out,
    )
    return handler.handle(command, ctx)


def confirm_booking(actor: ActingUser, booking_id: UUID, ctx: RequestContext | None = None) -> Booking:
    handler = ConfirmBookingHandler(DjangoBookingRepository(), DjangoListingRepository())
    return handler.handle(ConfirmBookingCommand(actor=actor, booking_id=booking_id), ctx)


def cancel_booking(
    actor: ActingUser,
    booking_id: UUID,
    reason: str = "",
    ctx: RequestContext | None = None,
) -> Booking:
    handler = CancelBookingHandler(DjangoBookingRepository(), DjangoListingRepository())
    return handler.handle(CancelBookingCommand(actor=actor, booking_id=booking_id, reason=reason), ctx)


def complete_booking(actor: ActingUser, booking_id: UUID, ctx: RequestContext | None = None) -> Booking:
    handler = CompleteBookingHandler(DjangoBookingRepository(), DjangoListingRepository())
    return handler.handle(CompleteBookingCommand(actor=actor, booking_id=booking_id), ctx)


def complete_finished_bookings(batch_size: int = 100, ctx: RequestContext | None = None) -> List[Booking]:
    handler = CompleteFinishedBookingsHandler(DjangoBookingRepository(), DjangoListingRepository())
    return handler.handle(CompleteFinishedBookingsCommand(actor=ActingUser.system(), batch_size=batch_size), ctx)


def get_booking(actor: ActingUser, booking_id: UUID, ctx: RequestContext | None = None) -> Booking:
    return BookingQueries(DjangoBookingRepository(), DjangoListingRepository()).get(actor, booking_id, ctx)


def list_user_bookings(
    actor: ActingUser,
    user_id: UUID,
    limit: int | None = None,
    offset: int | None = None,
    ctx: RequestContext | None = None,
) -> Page[Booking]:
    queries = BookingQueries(DjangoBookingRepository(), DjangoListingRepository())
    return queries.list_for_user(actor, user_id, limit, offset, ctx)


def list_listing_bookings(
    actor: ActingUser,
    listing_id: UUID,
    limit: int | None = None,
    offset: int | None = None,
    ctx: RequestContext | None = None,
) -> Page[Booking]:
    queries = BookingQueries(DjangoBookingRepository(), DjangoListingRepository())
    return queries.list_for_listing(actor, listing_id, limit, offset, ctx)


def get_calendar(listing_id: UUID, start: date, end: date, ctx: RequestContext | None = None) -> List[CalendarDay]:
    queries = CalendarQueries(DjangoListingRepository(), DjangoAvailabilityRepository(), DjangoBookingRepository())
    return queries.get_calendar(listing_id, start, end, ctx)


def count_bookings(
    status: BookingStatus | None = None,
    listing_id: UUID | None = None,
    ctx: RequestContext | None = None,
) -> int:
    return BookingQueries(DjangoBookingRepository(), DjangoListingRepository()).count(status, listing_id, ctx)
