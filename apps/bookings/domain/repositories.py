"""
Booking Repository Interface (Booking Store)

Implemented by apps.bookings.infrastructure.repositories (Django ORM).
Range lookups are inclusive of both bounds as passed by the caller.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Iterable, List
from uuid import UUID

from apps.bookings.domain.entities import Booking, BookingStatus
from shared.application.context import RequestContext


class BookingRepository(ABC):

    @abstractmethod
    def get_by_id(self, ctx: RequestContext, booking_id: UUID, lock: bool = False) -> Booking | None:
        """Find a booking by id; lock=True row-locks it for the transaction"""

    @abstractmethod
    def find_overlapping(
        self,
        ctx: RequestContext,
        listing_id: UUID,
        first: date,
        last: date,
        statuses: Iterable[BookingStatus],
    ) -> List[Booking]:
        """
        Bookings of a listing occupying any date in [first, last]

        A booking occupies [check_in, check_out - 1 day]; results are
        ordered by check-in ascending.
        """

    @abstractmethod
    def list_by_user(self, ctx: RequestContext, user_id: UUID, limit: int, offset: int) -> List[Booking]:
        """Bookings of a guest, newest first"""

    @abstractmethod
    def list_by_listing(self, ctx: RequestContext, listing_id: UUID, limit: int, offset: int) -> List[Booking]:
        """Bookings of a listing ordered by check-in"""

    @abstractmethod
    def list_due_for_completion(self, ctx: RequestContext, today: date, limit: int) -> List[Booking]:
        """CONFIRMED bookings whose checkout date is before today"""

    @abstractmethod
    def count(
        self,
        ctx: RequestContext,
        status: BookingStatus | None = None,
        user_id: UUID | None = None,
        listing_id: UUID | None = None,
    ) -> int:
        """Count bookings, optionally filtered"""

    @abstractmethod
    def exists_for_user(self, ctx: RequestContext, user_id: UUID, statuses: Iterable[BookingStatus]) -> bool:
        """Whether the user has any booking in one of the statuses"""

    @abstractmethod
    def save(self, ctx: RequestContext, booking: Booking):
        """
        Insert or update a booking

        Raises OverlapError when the store rejects an active booking that
        overlaps another one of the same listing.
        """
