"""Booking persistence models for Nestly."""

from __future__ import annotations

import uuid

from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

# Name of the PostgreSQL exclusion constraint created by migration 0002;
# the repository maps its violations to OverlapError.
NO_OVERLAP_CONSTRAINT = "booking_no_active_overlap"


class Booking(models.Model):
    """Guest's reservation of a listing; check_out is exclusive."""

    class Status(models.TextChoices):
        CREATED = "created", _("Created")
        CONFIRMED = "confirmed", _("Confirmed")
        CANCELLED = "cancelled", _("Cancelled")
        COMPLETED = "completed", _("Completed")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    booking_code = models.CharField(max_length=12, unique=True, editable=False)
    guest = models.ForeignKey(
        "users.User",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    listing = models.ForeignKey(
        "listings.Listing",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    check_in = models.DateField()
    check_out = models.DateField()
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.CREATED,
    )
    total_price = models.BigIntegerField(help_text=_("Total in minor currency units, fixed at admission."))
    cancellation_reason = models.CharField(max_length=255, blank=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(check_out__gt=models.F("check_in")),
                name="booking_valid_dates",
            ),
            models.CheckConstraint(
                condition=models.Q(total_price__gte=0),
                name="booking_price_non_negative",
            ),
        ]
        indexes = [
            models.Index(fields=["listing", "check_in", "check_out"], name="booking_listing_dates_idx"),
            models.Index(fields=["status"], name="booking_status_idx"),
            models.Index(fields=["guest", "status"], name="booking_guest_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.booking_code} for {self.listing_id}"
