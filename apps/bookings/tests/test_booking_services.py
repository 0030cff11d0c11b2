"""End-to-end booking workflows against the database."""

from __future__ import annotations

from datetime import date
from unittest import mock, skipUnless
from uuid import uuid4

from django.core import mail
from django.db import IntegrityError, connection
from django.test import TestCase

from apps.bookings import services
from apps.bookings.domain.entities import Booking, BookingStatus
from apps.bookings.infrastructure.repositories import DjangoBookingRepository
from apps.bookings.models import NO_OVERLAP_CONSTRAINT, Booking as BookingModel
from apps.bookings.tasks import complete_finished_bookings
from apps.listings.application.command_handlers import AvailabilityInput, CreateListingCommand
from apps.listings.domain.entities import Address
from apps.listings.services import create_listing, publish_listing, set_availability
from apps.users.domain.entities import Role
from apps.users.services import register_user
from shared.application.context import RequestContext
from shared.domain.exceptions import (
    DateBlockedError,
    InvalidRangeError,
    NotFoundError,
    OverlapError,
    StorageError,
    UnauthorizedError,
)
from shared.domain.value_objects import DateRange


def day(month: int, number: int, year: int = 2031) -> date:
    return date(year, month, number)


class BookingServiceTestCase(TestCase):

    def setUp(self) -> None:
        self.host = register_user("host@example.com", role=Role.HOST)
        self.guest = register_user("guest@example.com")
        self.other_guest = register_user("other@example.com")

        listing = create_listing(CreateListingCommand(
            actor=self.host.as_actor(),
            host_id=self.host.id,
            title="Loft on Dostyk",
            description="Top floor, mountain view",
            price_per_day=10000,
            min_stay_days=2,
            max_stay_days=14,
            address=Address(country="KZ", city="Almaty", street="Dostyk ave", house="5"),
        ))
        self.listing = publish_listing(self.host.as_actor(), listing.id)

    def book(self, check_in: date, check_out: date, guest=None) -> Booking:
        guest = guest or self.guest
        return services.request_booking(guest.as_actor(), self.listing.id, guest.id, check_in, check_out)


class RequestBookingServiceTests(BookingServiceTestCase):

    def test_booking_is_persisted(self) -> None:
        booking = self.book(day(1, 10), day(1, 12))

        row = BookingModel.objects.get(pk=booking.id)
        self.assertEqual(row.status, BookingModel.Status.CREATED)
        self.assertEqual(row.total_price, 20000)
        self.assertEqual(row.guest_id, self.guest.id)
        self.assertEqual((row.check_in, row.check_out), (day(1, 10), day(1, 12)))
        self.assertEqual(row.booking_code, booking.booking_code)

    def test_overlap_is_rejected_and_back_to_back_accepted(self) -> None:
        self.book(day(1, 10), day(1, 12))

        with self.assertRaises(OverlapError):
            self.book(day(1, 11), day(1, 13), guest=self.other_guest)
        self.book(day(1, 12), day(1, 14), guest=self.other_guest)

        self.assertEqual(BookingModel.objects.filter(listing_id=self.listing.id).count(), 2)

    def test_blocked_date_is_rejected(self) -> None:
        set_availability(self.host.as_actor(), self.listing.id, [
            AvailabilityInput(date=day(1, 11), is_available=False),
        ])
        with self.assertRaises(DateBlockedError):
            self.book(day(1, 10), day(1, 13))
        self.assertFalse(BookingModel.objects.exists())

    def test_cancellation_releases_dates(self) -> None:
        booking = self.book(day(1, 10), day(1, 12))
        services.cancel_booking(self.guest.as_actor(), booking.id, reason="flight cancelled")

        row = BookingModel.objects.get(pk=booking.id)
        self.assertEqual(row.status, BookingModel.Status.CANCELLED)
        self.assertEqual(row.cancellation_reason, "flight cancelled")
        self.assertIsNotNone(row.cancelled_at)

        self.assertEqual(self.book(day(1, 10), day(1, 12), guest=self.other_guest).status, BookingStatus.CREATED)

    def test_host_confirms(self) -> None:
        booking = self.book(day(1, 10), day(1, 12))
        services.confirm_booking(self.host.as_actor(), booking.id)

        row = BookingModel.objects.get(pk=booking.id)
        self.assertEqual(row.status, BookingModel.Status.CONFIRMED)
        self.assertIsNotNone(row.confirmed_at)


class BookingQueryServiceTests(BookingServiceTestCase):

    def test_visibility(self) -> None:
        booking = self.book(day(1, 10), day(1, 12))

        self.assertEqual(services.get_booking(self.guest.as_actor(), booking.id).id, booking.id)
        self.assertEqual(services.get_booking(self.host.as_actor(), booking.id).id, booking.id)
        with self.assertRaises(UnauthorizedError):
            services.get_booking(self.other_guest.as_actor(), booking.id)
        with self.assertRaises(NotFoundError):
            services.get_booking(self.guest.as_actor(), uuid4())

    def test_user_and_listing_pages(self) -> None:
        first = self.book(day(1, 10), day(1, 12))
        second = self.book(day(2, 10), day(2, 12))
        self.book(day(3, 10), day(3, 12), guest=self.other_guest)

        page = services.list_user_bookings(self.guest.as_actor(), self.guest.id, limit=1)
        self.assertEqual(page.total_count, 2)
        self.assertEqual(len(page.items), 1)
        self.assertTrue(page.has_more)

        listing_page = services.list_listing_bookings(self.host.as_actor(), self.listing.id)
        self.assertEqual(listing_page.total_count, 3)
        self.assertEqual([b.id for b in listing_page.items][:2], [first.id, second.id])

        with self.assertRaises(UnauthorizedError):
            services.list_listing_bookings(self.guest.as_actor(), self.listing.id)

    def test_counts_by_status(self) -> None:
        booking = self.book(day(1, 10), day(1, 12))
        self.book(day(2, 10), day(2, 12))
        services.confirm_booking(self.host.as_actor(), booking.id)

        self.assertEqual(services.count_bookings(), 2)
        self.assertEqual(services.count_bookings(status=BookingStatus.CONFIRMED), 1)
        self.assertEqual(services.count_bookings(listing_id=uuid4()), 0)

    def test_calendar_merges_entries_and_bookings(self) -> None:
        set_availability(self.host.as_actor(), self.listing.id, [
            AvailabilityInput(date=day(1, 14), is_available=False),
            AvailabilityInput(date=day(1, 15), price_override=12500),
        ])
        self.book(day(1, 10), day(1, 12))

        calendar = services.get_calendar(self.listing.id, day(1, 9), day(1, 16))

        by_date = {entry.date: entry for entry in calendar}
        self.assertEqual([entry.date for entry in calendar], list(DateRange(day(1, 9), day(1, 16)).days()))
        self.assertTrue(by_date[day(1, 9)].is_bookable)
        self.assertTrue(by_date[day(1, 10)].is_booked)
        self.assertTrue(by_date[day(1, 11)].is_booked)
        self.assertFalse(by_date[day(1, 12)].is_booked)
        self.assertFalse(by_date[day(1, 14)].is_available)
        self.assertEqual(by_date[day(1, 15)].price, 12500)
        self.assertEqual(by_date[day(1, 13)].price, 10000)

    def test_calendar_range_is_limited(self) -> None:
        with self.assertRaises(InvalidRangeError):
            services.get_calendar(self.listing.id, day(1, 1), day(1, 1, year=2033))


class CompleteFinishedBookingsTaskTests(BookingServiceTestCase):

    def test_task_completes_past_confirmed_stays(self) -> None:
        past = self.book(day(1, 10, year=2020), day(1, 12, year=2020))
        future = self.book(day(1, 10), day(1, 12))
        for booking in (past, future):
            services.confirm_booking(self.host.as_actor(), booking.id)

        result = complete_finished_bookings.delay().get()

        self.assertEqual(result, {"completed": 1})
        self.assertEqual(BookingModel.objects.get(pk=past.id).status, BookingModel.Status.COMPLETED)
        self.assertEqual(BookingModel.objects.get(pk=future.id).status, BookingModel.Status.CONFIRMED)


class BookingNotificationTests(BookingServiceTestCase):

    def test_request_notifies_guest_and_host_after_commit(self) -> None:
        with self.captureOnCommitCallbacks(execute=True):
            booking = self.book(day(1, 10), day(1, 12))

        recipients = sorted((message.to[0], message.subject) for message in mail.outbox)
        self.assertEqual(recipients, [
            ("guest@example.com", f"Booking #{booking.booking_code} received"),
            ("host@example.com", f"New booking request #{booking.booking_code}"),
        ])

    def test_rejected_request_sends_nothing(self) -> None:
        self.book(day(1, 10), day(1, 12))
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            with self.assertRaises(OverlapError):
                self.book(day(1, 10), day(1, 12), guest=self.other_guest)

        self.assertEqual(callbacks, [])
        self.assertEqual(mail.outbox, [])

    def test_cancellation_email_carries_reason(self) -> None:
        booking = self.book(day(1, 10), day(1, 12))
        with self.captureOnCommitCallbacks(execute=True):
            services.cancel_booking(self.host.as_actor(), booking.id, reason="pipes burst")

        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ["guest@example.com"])
        self.assertIn("Reason: pipes burst", mail.outbox[0].body)


class BookingRepositoryTests(BookingServiceTestCase):

    def test_round_trip(self) -> None:
        ctx = RequestContext.background()
        repo = DjangoBookingRepository()
        booking = Booking.request(self.listing.id, self.guest.id, DateRange(day(5, 1), day(5, 4)), 30000)
        repo.save(ctx, booking)

        loaded = repo.get_by_id(ctx, booking.id)
        self.assertEqual(loaded.dates, booking.dates)
        self.assertEqual(loaded.user_id, self.guest.id)
        self.assertEqual(loaded.status, BookingStatus.CREATED)
        self.assertEqual(
            [b.id for b in repo.find_overlapping(ctx, self.listing.id, day(5, 3), day(5, 3), {BookingStatus.CREATED})],
            [booking.id],
        )
        self.assertEqual(repo.find_overlapping(ctx, self.listing.id, day(5, 4), day(5, 6), {BookingStatus.CREATED}), [])

    @skipUnless(connection.vendor == "postgresql", "exclusion constraint exists on PostgreSQL only")
    def test_exclusion_constraint_maps_to_overlap(self) -> None:
        ctx = RequestContext.background()
        repo = DjangoBookingRepository()
        repo.save(ctx, Booking.request(self.listing.id, self.guest.id, DateRange(day(5, 1), day(5, 4)), 30000))

        with self.assertRaises(OverlapError):
            repo.save(ctx, Booking.request(self.listing.id, self.other_guest.id, DateRange(day(5, 3), day(5, 5)), 20000))

    def test_constraint_violation_on_save_is_an_overlap(self) -> None:
        ctx = RequestContext.background()
        repo = DjangoBookingRepository()
        booking = Booking.request(self.listing.id, self.guest.id, DateRange(day(5, 1), day(5, 4)), 30000)
        violation = IntegrityError(
            f'conflicting key value violates exclusion constraint "{NO_OVERLAP_CONSTRAINT}"'
        )

        with mock.patch.object(BookingModel.objects, "update_or_create", side_effect=violation):
            with self.assertRaises(OverlapError) as caught:
                repo.save(ctx, booking)
        self.assertEqual(caught.exception.listing_id, self.listing.id)
        self.assertIs(caught.exception.__cause__, violation)
        self.assertFalse(BookingModel.objects.exists())

    def test_other_integrity_errors_stay_storage_errors(self) -> None:
        ctx = RequestContext.background()
        repo = DjangoBookingRepository()
        booking = Booking.request(self.listing.id, self.guest.id, DateRange(day(5, 1), day(5, 4)), 30000)
        violation = IntegrityError('duplicate key value violates unique constraint "bookings_booking_code_key"')

        with mock.patch.object(BookingModel.objects, "update_or_create", side_effect=violation):
            with self.assertRaises(StorageError) as caught:
                repo.save(ctx, booking)
        self.assertNotIsInstance(caught.exception, OverlapError)
        self.assertIs(caught.exception.__cause__, violation)
