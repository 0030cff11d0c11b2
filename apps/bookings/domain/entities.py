"""
Booking Domain Entities

Core business entities for the booking domain:
- Booking: Main aggregate representing a reservation
- BookingStatus: FSM states for booking lifecycle
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from uuid import UUID
import secrets

from shared.domain.base import Aggregate, utcnow
from shared.domain.exceptions import (
    InvalidTransitionError,
    PrematureCompletionError,
    TooLateToCancelError,
)
from shared.domain.value_objects import DateRange


class BookingStatus(Enum):
    """
    Booking Status Finite State Machine

    State transitions:
    - CREATED -> CONFIRMED (host or admin accepts)
    - CREATED -> CANCELLED (guest, host or admin)
    - CONFIRMED -> CANCELLED (guest, host or admin; only before the check-in date)
    - CONFIRMED -> COMPLETED (system or admin; only after the checkout date)
    """
    CREATED = 'created'
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'
    COMPLETED = 'completed'


BOOKING_TRANSITIONS = {
    BookingStatus.CREATED: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CANCELLED, BookingStatus.COMPLETED}),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.COMPLETED: frozenset(),
}

# Bookings in these states occupy their dates
ACTIVE_STATUSES = frozenset({BookingStatus.CREATED, BookingStatus.CONFIRMED})


def generate_booking_code() -> str:
    """Short human-readable reference, e.g. 3FA94C0D"""
    return secrets.token_hex(4).upper()


@dataclass(eq=False)
class Booking(Aggregate):
    """
    Booking Aggregate Root

    Represents a guest's reservation of a listing for specific dates.

    Key invariants:
    - dates.start_date < dates.end_date (checkout is exclusive)
    - total_price is fixed at admission time
    - only CREATED/CONFIRMED bookings block listing dates
    - bookings are never deleted; cancellation is a status
    """
    listing_id: UUID
    user_id: UUID
    dates: DateRange
    total_price: int
    booking_code: str = ''
    status: BookingStatus = BookingStatus.CREATED

    cancellation_reason: str = ''
    confirmed_at: datetime | None = None
    cancelled_at: datetime | None = None
    completed_at: datetime | None = None

    def __post_init__(self):
        if not self.booking_code:
            self.booking_code = generate_booking_code()

    @classmethod
    def request(cls, listing_id: UUID, user_id: UUID, dates: DateRange, total_price: int) -> 'Booking':
        """Create a booking in CREATED status and record BookingRequested"""
        from apps.bookings.domain.events import BookingRequested

        booking = cls(
            listing_id=listing_id,
            user_id=user_id,
            dates=dates,
            total_price=total_price,
        )
        booking.add_event(BookingRequested(
            aggregate_id=booking.id,
            booking_id=booking.id,
            listing_id=listing_id,
            user_id=user_id,
            check_in=dates.start_date,
            check_out=dates.end_date,
            total_price=total_price,
        ))
        return booking

    def _ensure_transition(self, target: BookingStatus):
        if target not in BOOKING_TRANSITIONS[self.status]:
            raise InvalidTransitionError(self.status.value, target.value)

    def confirm(self):
        """
        Confirm booking (CREATED -> CONFIRMED)

        Events: BookingConfirmed
        """
        self._ensure_transition(BookingStatus.CONFIRMED)

        from apps.bookings.domain.events import BookingConfirmed

        self.status = BookingStatus.CONFIRMED
        self.confirmed_at = utcnow()
        self.touch()

        self.add_event(BookingConfirmed(
            aggregate_id=self.id,
            booking_id=self.id,
            listing_id=self.listing_id,
            user_id=self.user_id,
        ))

    def cancel(self, today: date, reason: str = ''):
        """
        Cancel booking

        CREATED bookings can be cancelled at any time; CONFIRMED ones only
        while today is before the check-in date.
        Events: BookingCancelled
        """
        self._ensure_transition(BookingStatus.CANCELLED)

        if self.status is BookingStatus.CONFIRMED and today >= self.check_in:
            raise TooLateToCancelError(
                f"Booking {self.booking_code} starts {self.check_in.isoformat()}; "
                f"confirmed bookings can only be cancelled before check-in"
            )

        from apps.bookings.domain.events import BookingCancelled

        old_status = self.status
        self.status = BookingStatus.CANCELLED
        self.cancellation_reason = reason
        self.cancelled_at = utcnow()
        self.touch()

        self.add_event(BookingCancelled(
            aggregate_id=self.id,
            booking_id=self.id,
            listing_id=self.listing_id,
            user_id=self.user_id,
            reason=reason,
            old_status=old_status.value,
        ))

    def complete(self, today: date):
        """
        Complete booking (CONFIRMED -> COMPLETED)

        Allowed only once the checkout date has passed.
        Events: BookingCompleted
        """
        self._ensure_transition(BookingStatus.COMPLETED)

        if today <= self.check_out:
            raise PrematureCompletionError(
                f"Booking {self.booking_code} checks out {self.check_out.isoformat()}; "
                f"it can be completed only after that date"
            )

        from apps.bookings.domain.events import BookingCompleted

        self.status = BookingStatus.COMPLETED
        self.completed_at = utcnow()
        self.touch()

        self.add_event(BookingCompleted(
            aggregate_id=self.id,
            booking_id=self.id,
            listing_id=self.listing_id,
            user_id=self.user_id,
        ))

    def overlaps(self, dates: DateRange) -> bool:
        return self.dates.overlaps_with(dates)

    @property
    def check_in(self) -> date:
        return self.dates.start_date

    @property
    def check_out(self) -> date:
        return self.dates.end_date

    @property
    def nights(self) -> int:
        return len(self.dates)

    @property
    def is_active(self) -> bool:
        """Check if booking blocks its dates (CREATED or CONFIRMED)"""
        return self.status in ACTIVE_STATUSES

    def __str__(self):
        return f"Booking {self.booking_code} ({self.status.value})"

    def __repr__(self):
        return (
            f"Booking(id={self.id}, booking_code={self.booking_code}, "
            f"status={self.status.value}, dates={self.dates!r})"
        )
