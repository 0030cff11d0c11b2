"""
Booking Calendar Aggregate

This is the CRITICAL aggregate for preventing double bookings.
All admissions MUST go through this aggregate.

A BookingCalendar is a snapshot of one listing over the requested period:
the listing itself, its calendar entries and the active bookings that
intersect the period. The application layer loads it under the
per-listing lock, so the checks below and the insert that follows form a
single admission unit.

Admission layers:
1. Domain validation: admit() checks blocked dates and overlaps
2. Process-local per-listing lock (KeyedLock)
3. Pessimistic locking: SELECT FOR UPDATE on the listing row
4. PostgreSQL EXCLUDE constraint on active booking ranges
"""

from dataclasses import dataclass, field
from datetime import date
from typing import List
from uuid import UUID

from apps.bookings.domain.entities import Booking
from apps.bookings.domain.pricing import compute_price
from apps.listings.domain.entities import Availability, Listing
from shared.domain.exceptions import (
    DateBlockedError,
    InvalidStayLengthError,
    ListingUnavailableError,
    OverlapError,
)
from shared.domain.value_objects import DateRange


def validate_stay_length(listing: Listing, dates: DateRange):
    """Stay length must lie within the listing's min/max stay"""
    nights = len(dates)
    if not listing.accepts_stay_of(nights):
        raise InvalidStayLengthError(
            f"Stay of {nights} day(s) is outside the allowed "
            f"{listing.min_stay_days}-{listing.max_stay_days} days for listing {listing.id}"
        )


def ensure_bookable(listing: Listing | None, listing_id: UUID):
    if listing is None or not listing.is_published:
        raise ListingUnavailableError(f"Listing {listing_id} is not available for booking")


@dataclass
class BookingCalendar:
    """
    Admission snapshot for one listing

    Key invariants enforced by admit():
    - no date of the stay is explicitly closed (is_available = False)
    - no active booking overlaps the stay (half-open comparison)
    """
    listing: Listing
    entries: List[Availability] = field(default_factory=list)
    active_bookings: List[Booking] = field(default_factory=list)

    def first_blocked_date(self, dates: DateRange) -> date | None:
        blocked = sorted(
            entry.date for entry in self.entries
            if not entry.is_available and dates.contains(entry.date)
        )
        return blocked[0] if blocked else None

    def find_conflict(self, dates: DateRange) -> Booking | None:
        for booking in sorted(self.active_bookings, key=lambda b: b.check_in):
            if booking.is_active and booking.overlaps(dates):
                return booking
        return None

    def quote(self, dates: DateRange) -> int:
        return compute_price(self.listing, dates.start_date, dates.end_date, self.entries)

    def admit(self, user_id: UUID, dates: DateRange) -> Booking:
        """
        Admit a stay and return the new CREATED booking

        Raises:
            InvalidStayLengthError: Stay outside min/max bounds
            ListingUnavailableError: Listing not published
            DateBlockedError: First closed date of the stay
            OverlapError: First conflicting active booking
            PriceOverflowError: Total does not fit 64 bits
        """
        validate_stay_length(self.listing, dates)
        ensure_bookable(self.listing, self.listing.id)

        blocked = self.first_blocked_date(dates)
        if blocked is not None:
            raise DateBlockedError(blocked, self.listing.id)

        conflict = self.find_conflict(dates)
        if conflict is not None:
            raise OverlapError(conflict.id, self.listing.id)

        booking = Booking.request(
            listing_id=self.listing.id,
            user_id=user_id,
            dates=dates,
            total_price=self.quote(dates),
        )
        self.active_bookings.append(booking)
        return booking
