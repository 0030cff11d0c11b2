"""
Booking Command Handlers

These are the use cases for the booking domain.
They orchestrate domain operations within transactions.

Commands:
- RequestBookingCommand: Admit a new booking for a listing
- ConfirmBookingCommand: Host accepts a booking
- CancelBookingCommand: Guest, host or admin cancels a booking
- CompleteBookingCommand: Close a stay once the checkout date has passed
- CompleteFinishedBookingsCommand: Periodic sweep completing finished stays
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, List
from uuid import UUID
import logging

from django.conf import settings
from django.utils import timezone

from apps.bookings.domain.admission import BookingCalendar, ensure_bookable, validate_stay_length
from apps.bookings.domain.entities import ACTIVE_STATUSES, Booking
from apps.users.domain.entities import ActingUser
from apps.users.domain.policies import Action, Resource, authorize
from shared.application.context import RequestContext
from shared.application.locks import listing_locks
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import (
    CancelledError,
    DomainError,
    InvalidInputError,
    InvalidStayLengthError,
    NotFoundError,
    UnauthorizedError,
)
from shared.domain.value_objects import DateRange

logger = logging.getLogger(__name__)


# ===== Commands =====

@dataclass
class RequestBookingCommand:
    """
    Command to admit a new booking

    check_out is exclusive: a stay from the 10th to the 12th occupies the
    nights of the 10th and the 11th.
    """
    actor: ActingUser
    listing_id: UUID
    user_id: UUID
    check_in: date
    check_out: date


@dataclass
class ConfirmBookingCommand:
    actor: ActingUser
    booking_id: UUID


@dataclass
class CancelBookingCommand:
    actor: ActingUser
    booking_id: UUID
    reason: str = ''


@dataclass
class CompleteBookingCommand:
    actor: ActingUser
    booking_id: UUID


@dataclass
class CompleteFinishedBookingsCommand:
    """Complete up to batch_size confirmed bookings whose checkout has passed"""
    actor: ActingUser
    batch_size: int = 100


def _lock_timeout() -> float | None:
    return getattr(settings, 'NESTLY_LOCK_TIMEOUT_SECONDS', None)


# ===== Command Handlers =====

class RequestBookingHandler:
    """
    Handler for RequestBooking command

    This implements the critical business logic for admitting bookings
    with double booking prevention.

    Admission layers:
    1. Validate the request without touching storage
    2. Acquire the per-listing lock (bounded by the caller's deadline)
    3. Start database transaction and lock the listing row (SELECT FOR UPDATE)
    4. Load calendar entries and active bookings into a BookingCalendar
    5. Admit in the domain (blocked dates, overlaps, price)
    6. Save the booking and collect its events
    7. Commit; BookingRequested is published after commit
    8. PostgreSQL EXCLUDE constraint as final safety net
    """

    def __init__(
        self,
        listing_repo,
        availability_repo,
        booking_repo,
        user_repo,
        *,
        uow_factory=DjangoUnitOfWork,
        locks=listing_locks,
    ):
        self.listing_repo = listing_repo
        self.availability_repo = availability_repo
        self.booking_repo = booking_repo
        self.user_repo = user_repo
        self.uow_factory = uow_factory
        self.locks = locks

    def handle(self, command: RequestBookingCommand, ctx: RequestContext | None = None) -> Booking:
        """
        Handle booking admission

        Returns: Created Booking aggregate (status CREATED)

        Raises:
            InvalidInputError: Missing ids or dates
            InvalidStayLengthError: check_in >= check_out or stay outside min/max
            UnauthorizedError: Actor may not book for this user, or user is banned
            NotFoundError: User does not exist
            ListingUnavailableError: Listing missing or not published
            DateBlockedError: A date of the stay is closed in the calendar
            OverlapError: An active booking already holds one of the dates
            CancelledError: Deadline expired, or the listing lock could not be
                taken within NESTLY_LOCK_TIMEOUT_SECONDS
            StorageError: Persistence failure

        A lock timeout under contention is reported as CancelledError, not
        OverlapError: the request was never admitted or rejected, and the
        caller may retry it.
        """
        ctx = ctx or RequestContext.background()
        dates = self._validated_dates(command)
        authorize(command.actor, Resource(owner_id=command.user_id), Action.REQUEST_BOOKING)

        logger.info(
            f"Requesting booking of listing {command.listing_id} "
            f"for user {command.user_id}, dates {dates}"
        )

        user = self.user_repo.get_by_id(ctx, command.user_id)
        if not user:
            raise NotFoundError('User', command.user_id)
        if not user.can_book:
            raise UnauthorizedError(f"User {user.id} is not allowed to book")

        # Cheap rejection before taking the lock; repeated under the lock below
        listing = self.listing_repo.get_by_id(ctx, command.listing_id)
        if listing is None:
            ensure_bookable(None, command.listing_id)
        validate_stay_length(listing, dates)
        ensure_bookable(listing, command.listing_id)

        try:
            with self.locks.hold(command.listing_id, ctx, timeout=_lock_timeout()):
                with self.uow_factory() as uow:
                    listing = self.listing_repo.get_by_id(ctx, command.listing_id, lock=True)
                    ensure_bookable(listing, command.listing_id)

                    calendar = BookingCalendar(
                        listing=listing,
                        entries=self.availability_repo.find_range(
                            ctx, listing.id, dates.start_date, dates.last_night
                        ),
                        active_bookings=self.booking_repo.find_overlapping(
                            ctx, listing.id, dates.start_date, dates.last_night, ACTIVE_STATUSES
                        ),
                    )
                    booking = calendar.admit(user.id, dates)

                    uow.collect_events(booking)
                    self.booking_repo.save(ctx, booking)
        except DomainError as exc:
            logger.warning(f"Booking of listing {command.listing_id} for {dates} rejected: {exc}")
            raise

        logger.info(
            f"Booking created successfully: {booking.booking_code} "
            f"(ID: {booking.id}, total {booking.total_price})"
        )
        return booking

    @staticmethod
    def _validated_dates(command: RequestBookingCommand) -> DateRange:
        if not command.listing_id or not command.user_id:
            raise InvalidInputError("listing_id and user_id are required")
        if command.check_in is None or command.check_out is None:
            raise InvalidInputError("check_in and check_out are required")
        for value in (command.check_in, command.check_out):
            if not isinstance(value, date) or isinstance(value, datetime):
                raise InvalidInputError(f"Stay dates must be calendar dates, got {value!r}")
        if command.check_in >= command.check_out:
            raise InvalidStayLengthError(
                f"Check-out date ({command.check_out}) must be after "
                f"check-in date ({command.check_in})"
            )
        return DateRange(command.check_in, command.check_out)


class _BookingTransitionHandler:
    """
    Loads a booking under a row lock, authorizes the actor against the
    booking and its listing, applies one transition and saves.
    """

    action: Action
    verb: str

    def __init__(
        self,
        booking_repo,
        listing_repo,
        *,
        uow_factory=DjangoUnitOfWork,
        clock: Callable[[], date] = timezone.localdate,
    ):
        self.booking_repo = booking_repo
        self.listing_repo = listing_repo
        self.uow_factory = uow_factory
        self.clock = clock

    def handle(self, command, ctx: RequestContext | None = None) -> Booking:
        ctx = ctx or RequestContext.background()
        logger.info(f"{self.verb.capitalize()} booking {command.booking_id} (by {command.actor.id})")

        with self.uow_factory() as uow:
            booking = self.booking_repo.get_by_id(ctx, command.booking_id, lock=True)
            if not booking:
                raise NotFoundError('Booking', command.booking_id)

            listing = self.listing_repo.get_by_id(ctx, booking.listing_id)
            authorize(command.actor, Resource.for_booking(booking, listing), self.action)

            self.apply(booking, command)

            uow.collect_events(booking)
            self.booking_repo.save(ctx, booking)

        logger.info(f"Booking {booking.booking_code} is now {booking.status.value}")
        return booking

    def apply(self, booking: Booking, command):
        raise NotImplementedError


class ConfirmBookingHandler(_BookingTransitionHandler):
    """Host of the listing (or an admin) accepts a CREATED booking"""

    action = Action.CONFIRM_BOOKING
    verb = 'confirming'

    def apply(self, booking: Booking, command: ConfirmBookingCommand):
        booking.confirm()


class CancelBookingHandler(_BookingTransitionHandler):
    """
    Guest, listing host or admin cancels a booking

    The calendar is not touched: a cancelled booking simply stops counting
    as occupancy for future admissions.
    """

    action = Action.CANCEL_BOOKING
    verb = 'cancelling'

    def apply(self, booking: Booking, command: CancelBookingCommand):
        booking.cancel(self.clock(), (command.reason or '').strip())


class CompleteBookingHandler(_BookingTransitionHandler):

    action = Action.COMPLETE_BOOKING
    verb = 'completing'

    def apply(self, booking: Booking, command: CompleteBookingCommand):
        booking.complete(self.clock())


class CompleteFinishedBookingsHandler:
    """
    Completes confirmed bookings whose checkout date has passed

    Each booking is completed in its own transaction so one failure does
    not hold back the rest of the batch.
    """

    def __init__(
        self,
        booking_repo,
        listing_repo,
        *,
        uow_factory=DjangoUnitOfWork,
        clock: Callable[[], date] = timezone.localdate,
    ):
        self.booking_repo = booking_repo
        self.complete_handler = CompleteBookingHandler(
            booking_repo, listing_repo, uow_factory=uow_factory, clock=clock,
        )
        self.clock = clock

    def handle(self, command: CompleteFinishedBookingsCommand, ctx: RequestContext | None = None) -> List[Booking]:
        ctx = ctx or RequestContext.background()
        if command.batch_size <= 0:
            raise InvalidInputError("batch_size must be positive")
        authorize(command.actor, Resource(), Action.COMPLETE_BOOKING)

        due = self.booking_repo.list_due_for_completion(ctx, self.clock(), command.batch_size)
        completed = []
        for booking in due:
            try:
                completed.append(self.complete_handler.handle(
                    CompleteBookingCommand(actor=command.actor, booking_id=booking.id), ctx,
                ))
            except CancelledError:
                raise
            except DomainError as exc:
                logger.error(f"Could not complete booking {booking.id}: {exc}")

        logger.info(f"Completed {len(completed)} of {len(due)} finished bookings")
        return completed
