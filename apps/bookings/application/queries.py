"""
Read-side use cases for bookings and the listing calendar.

CalendarQueries merges the two sources that describe a date: the host's
calendar entry (closed or open, price override) and the active bookings
that occupy it.
"""

from dataclasses import dataclass
from datetime import date
from typing import List
from uuid import UUID

from apps.bookings.domain.entities import ACTIVE_STATUSES, Booking, BookingStatus
from apps.bookings.domain.pricing import nightly_prices
from apps.users.domain.entities import ActingUser
from apps.users.domain.policies import Action, Resource, authorize
from shared.application.context import RequestContext
from shared.application.pagination import Page, normalize_page
from shared.domain.exceptions import InvalidRangeError, NotFoundError
from shared.domain.value_objects import DateRange

MAX_CALENDAR_DAYS = 366


@dataclass(frozen=True)
class CalendarDay:
    date: date
    is_available: bool
    is_booked: bool
    price: int

    @property
    def is_bookable(self) -> bool:
        return self.is_available and not self.is_booked


class BookingQueries:

    def __init__(self, booking_repo, listing_repo):
        self.booking_repo = booking_repo
        self.listing_repo = listing_repo

    def get(self, actor: ActingUser, booking_id: UUID, ctx: RequestContext | None = None) -> Booking:
        """Visible to the guest, the listing host and admins"""
        ctx = ctx or RequestContext.background()
        booking = self.booking_repo.get_by_id(ctx, booking_id)
        if not booking:
            raise NotFoundError('Booking', booking_id)

        listing = self.listing_repo.get_by_id(ctx, booking.listing_id)
        authorize(actor, Resource.for_booking(booking, listing), Action.VIEW_BOOKING)
        return booking

    def list_for_user(
        self,
        actor: ActingUser,
        user_id: UUID,
        limit: int | None = None,
        offset: int | None = None,
        ctx: RequestContext | None = None,
    ) -> Page[Booking]:
        ctx = ctx or RequestContext.background()
        authorize(actor, Resource(owner_id=user_id), Action.VIEW_BOOKING)

        limit, offset = normalize_page(limit, offset)
        return Page(
            items=self.booking_repo.list_by_user(ctx, user_id, limit, offset),
            total_count=self.booking_repo.count(ctx, user_id=user_id),
            limit=limit,
            offset=offset,
        )

    def list_for_listing(
        self,
        actor: ActingUser,
        listing_id: UUID,
        limit: int | None = None,
        offset: int | None = None,
        ctx: RequestContext | None = None,
    ) -> Page[Booking]:
        ctx = ctx or RequestContext.background()
        listing = self.listing_repo.get_by_id(ctx, listing_id)
        if not listing:
            raise NotFoundError('Listing', listing_id)
        authorize(actor, Resource.for_listing(listing), Action.MANAGE_LISTING)

        limit, offset = normalize_page(limit, offset)
        return Page(
            items=self.booking_repo.list_by_listing(ctx, listing_id, limit, offset),
            total_count=self.booking_repo.count(ctx, listing_id=listing_id),
            limit=limit,
            offset=offset,
        )

    def count(
        self,
        status: BookingStatus | None = None,
        listing_id: UUID | None = None,
        ctx: RequestContext | None = None,
    ) -> int:
        return self.booking_repo.count(ctx or RequestContext.background(), status=status, listing_id=listing_id)


class CalendarQueries:

    def __init__(self, listing_repo, availability_repo, booking_repo):
        self.listing_repo = listing_repo
        self.availability_repo = availability_repo
        self.booking_repo = booking_repo

    def get_calendar(
        self,
        listing_id: UUID,
        start: date,
        end: date,
        ctx: RequestContext | None = None,
    ) -> List[CalendarDay]:
        """
        Per-date view of [start, end)

        Raises:
            InvalidRangeError: end <= start or the range is longer than a year
            NotFoundError: Unknown or deleted listing
        """
        ctx = ctx or RequestContext.background()
        dates = DateRange(start, end)
        if len(dates) > MAX_CALENDAR_DAYS:
            raise InvalidRangeError(f"Calendar range is limited to {MAX_CALENDAR_DAYS} days")

        listing = self.listing_repo.get_by_id(ctx, listing_id)
        if not listing or listing.is_deleted:
            raise NotFoundError('Listing', listing_id)

        entries = self.availability_repo.find_range(ctx, listing_id, dates.start_date, dates.last_night)
        bookings = self.booking_repo.find_overlapping(
            ctx, listing_id, dates.start_date, dates.last_night, ACTIVE_STATUSES,
        )
        closed = {entry.date for entry in entries if not entry.is_available}

        return [
            CalendarDay(
                date=day,
                is_available=day not in closed,
                is_booked=any(booking.dates.contains(day) for booking in bookings),
                price=price,
            )
            for day, price in nightly_prices(listing, dates.start_date, dates.end_date, entries)
        ]
