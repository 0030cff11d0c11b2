"""Django ORM implementation of the booking repository."""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, List
from uuid import UUID

from django.db import IntegrityError, transaction  # type: ignore

from apps.bookings.domain.entities import Booking, BookingStatus
from apps.bookings.domain.repositories import BookingRepository
from apps.bookings.models import NO_OVERLAP_CONSTRAINT
from apps.bookings.models import Booking as BookingModel
from shared.application.context import RequestContext
from shared.domain.exceptions import OverlapError
from shared.domain.value_objects import DateRange
from shared.infrastructure.storage import storage_call

logger = logging.getLogger(__name__)


def booking_to_domain(model: BookingModel) -> Booking:
    return Booking(
        id=model.id,
        booking_code=model.booking_code,
        listing_id=model.listing_id,
        user_id=model.guest_id,
        dates=DateRange(model.check_in, model.check_out),
        total_price=model.total_price,
        status=BookingStatus(model.status),
        cancellation_reason=model.cancellation_reason,
        confirmed_at=model.confirmed_at,
        cancelled_at=model.cancelled_at,
        completed_at=model.completed_at,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def _status_values(statuses: Iterable[BookingStatus]) -> List[str]:
    return [status.value for status in statuses]


class DjangoBookingRepository(BookingRepository):

    def get_by_id(self, ctx: RequestContext, booking_id: UUID, lock: bool = False) -> Booking | None:
        with storage_call(ctx, "bookings.get_by_id", booking_id):
            queryset = BookingModel.objects.filter(pk=booking_id)
            if lock:
                queryset = queryset.select_for_update()
            model = queryset.first()
        return booking_to_domain(model) if model else None

    def find_overlapping(
        self,
        ctx: RequestContext,
        listing_id: UUID,
        first: date,
        last: date,
        statuses: Iterable[BookingStatus],
    ) -> List[Booking]:
        with storage_call(ctx, "bookings.find_overlapping", listing_id):
            # occupied nights [check_in, check_out - 1] intersect [first, last]
            models = list(
                BookingModel.objects.filter(
                    listing_id=listing_id,
                    status__in=_status_values(statuses),
                    check_in__lte=last,
                    check_out__gt=first,
                ).order_by("check_in")
            )
        return [booking_to_domain(model) for model in models]

    def list_by_user(self, ctx: RequestContext, user_id: UUID, limit: int, offset: int) -> List[Booking]:
        with storage_call(ctx, "bookings.list_by_user", user_id):
            models = list(
                BookingModel.objects.filter(guest_id=user_id)
                .order_by("-created_at", "id")[offset:offset + limit]
            )
        return [booking_to_domain(model) for model in models]

    def list_by_listing(self, ctx: RequestContext, listing_id: UUID, limit: int, offset: int) -> List[Booking]:
        with storage_call(ctx, "bookings.list_by_listing", listing_id):
            models = list(
                BookingModel.objects.filter(listing_id=listing_id)
                .order_by("check_in", "id")[offset:offset + limit]
            )
        return [booking_to_domain(model) for model in models]

    def list_due_for_completion(self, ctx: RequestContext, today: date, limit: int) -> List[Booking]:
        with storage_call(ctx, "bookings.list_due_for_completion"):
            models = list(
                BookingModel.objects.filter(
                    status=BookingStatus.CONFIRMED.value,
                    check_out__lt=today,
                ).order_by("check_out", "id")[:limit]
            )
        return [booking_to_domain(model) for model in models]

    def count(
        self,
        ctx: RequestContext,
        status: BookingStatus | None = None,
        user_id: UUID | None = None,
        listing_id: UUID | None = None,
    ) -> int:
        with storage_call(ctx, "bookings.count"):
            queryset = BookingModel.objects.all()
            if status is not None:
                queryset = queryset.filter(status=status.value)
            if user_id is not None:
                queryset = queryset.filter(guest_id=user_id)
            if listing_id is not None:
                queryset = queryset.filter(listing_id=listing_id)
            return queryset.count()

    def exists_for_user(self, ctx: RequestContext, user_id: UUID, statuses: Iterable[BookingStatus]) -> bool:
        with storage_call(ctx, "bookings.exists_for_user", user_id):
            return BookingModel.objects.filter(
                guest_id=user_id,
                status__in=_status_values(statuses),
            ).exists()

    def save(self, ctx: RequestContext, booking: Booking):
        try:
            with storage_call(ctx, "bookings.save", booking.id):
                # Savepoint so a constraint violation leaves the outer transaction usable
                with transaction.atomic():
                    BookingModel.objects.update_or_create(
                        pk=booking.id,
                        defaults={
                            "booking_code": booking.booking_code,
                            "guest_id": booking.user_id,
                            "listing_id": booking.listing_id,
                            "check_in": booking.check_in,
                            "check_out": booking.check_out,
                            "status": booking.status.value,
                            "total_price": booking.total_price,
                            "cancellation_reason": booking.cancellation_reason,
                            "confirmed_at": booking.confirmed_at,
                            "cancelled_at": booking.cancelled_at,
                            "completed_at": booking.completed_at,
                            "created_at": booking.created_at,
                            "updated_at": booking.updated_at,
                        },
                    )
        except Exception as exc:
            cause = exc.__cause__ if exc.__cause__ is not None else exc
            if isinstance(cause, IntegrityError) and NO_OVERLAP_CONSTRAINT in str(cause):
                logger.warning(f"Storage rejected overlapping booking {booking.id} for listing {booking.listing_id}")
                raise OverlapError(listing_id=booking.listing_id) from cause
            raise
        logger.debug(f"Saved booking {booking.id} ({booking.status.value})")
