"""Tests for the admission snapshot of a listing."""

from __future__ import annotations

from datetime import date
from uuid import uuid4

from django.test import SimpleTestCase

from apps.bookings.domain.admission import BookingCalendar
from apps.bookings.domain.entities import Booking
from apps.listings.domain.entities import Availability, ListingStatus
from shared.domain.exceptions import (
    DateBlockedError,
    InvalidStayLengthError,
    ListingUnavailableError,
    OverlapError,
)
from shared.domain.value_objects import DateRange
from shared.tests.fakes import make_listing


def _range(start: int, end: int) -> DateRange:
    return DateRange(date(2025, 1, start), date(2025, 1, end))


class BookingCalendarTests(SimpleTestCase):

    def setUp(self) -> None:
        self.listing = make_listing(uuid4(), price_per_day=10000, min_stay_days=2, max_stay_days=14)
        self.guest_id = uuid4()

    def _calendar(self, entries=(), bookings=()) -> BookingCalendar:
        return BookingCalendar(self.listing, list(entries), list(bookings))

    def _existing(self, start: int, end: int) -> Booking:
        return Booking(listing_id=self.listing.id, user_id=uuid4(), dates=_range(start, end), total_price=0)

    def test_admits_free_stay_with_price(self) -> None:
        booking = self._calendar().admit(self.guest_id, _range(10, 12))

        self.assertEqual(booking.total_price, 20000)
        self.assertEqual(booking.user_id, self.guest_id)
        self.assertEqual(booking.listing_id, self.listing.id)

    def test_admitted_booking_blocks_the_next_request(self) -> None:
        calendar = self._calendar()
        first = calendar.admit(self.guest_id, _range(10, 12))

        with self.assertRaises(OverlapError) as caught:
            calendar.admit(uuid4(), _range(11, 13))
        self.assertEqual(caught.exception.booking_id, first.id)

    def test_back_to_back_stays_do_not_overlap(self) -> None:
        calendar = self._calendar([], [self._existing(10, 12)])
        calendar.admit(self.guest_id, _range(12, 14))
        calendar.admit(self.guest_id, _range(8, 10))

    def test_names_first_blocked_date(self) -> None:
        entries = [
            Availability(listing_id=self.listing.id, date=date(2025, 1, 13), is_available=False),
            Availability(listing_id=self.listing.id, date=date(2025, 1, 11), is_available=False),
            Availability(listing_id=self.listing.id, date=date(2025, 1, 10), is_available=True),
        ]
        with self.assertRaises(DateBlockedError) as caught:
            self._calendar(entries).admit(self.guest_id, _range(10, 15))
        self.assertEqual(caught.exception.blocked_date, date(2025, 1, 11))

    def test_blocked_checkout_date_does_not_matter(self) -> None:
        entries = [Availability(listing_id=self.listing.id, date=date(2025, 1, 12), is_available=False)]
        booking = self._calendar(entries).admit(self.guest_id, _range(10, 12))
        self.assertEqual(booking.nights, 2)

    def test_blocked_date_is_reported_before_overlap(self) -> None:
        entries = [Availability(listing_id=self.listing.id, date=date(2025, 1, 11), is_available=False)]
        with self.assertRaises(DateBlockedError):
            self._calendar(entries, [self._existing(10, 12)]).admit(self.guest_id, _range(10, 12))

    def test_cancelled_bookings_do_not_occupy(self) -> None:
        cancelled = self._existing(10, 12)
        cancelled.cancel(date(2025, 1, 1))
        self._calendar([], [cancelled]).admit(self.guest_id, _range(10, 12))

    def test_stay_length_bounds(self) -> None:
        with self.assertRaises(InvalidStayLengthError):
            self._calendar().admit(self.guest_id, _range(20, 21))
        with self.assertRaises(InvalidStayLengthError):
            self._calendar().admit(self.guest_id, DateRange(date(2025, 1, 1), date(2025, 1, 16)))
        self._calendar().admit(self.guest_id, DateRange(date(2025, 1, 1), date(2025, 1, 15)))

    def test_unpublished_listing_is_unavailable(self) -> None:
        for status in (ListingStatus.DRAFT, ListingStatus.BLOCKED, ListingStatus.DELETED):
            self.listing.status = status
            with self.assertRaises(ListingUnavailableError):
                self._calendar().admit(self.guest_id, _range(10, 12))
