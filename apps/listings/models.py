"""Listing and calendar persistence models for Nestly."""

from __future__ import annotations

import uuid

from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Listing(models.Model):
    """Rentable property published by a host."""

    class Status(models.TextChoices):
        DRAFT = "draft", _("Draft")
        PUBLISHED = "published", _("Published")
        BLOCKED = "blocked", _("Blocked")
        DELETED = "deleted", _("Deleted")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    host = models.ForeignKey(
        "users.User",
        on_delete=models.PROTECT,
        related_name="listings",
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.DRAFT)
    price_per_day = models.BigIntegerField(help_text=_("Price per day in minor currency units."))
    min_stay_days = models.PositiveIntegerField(default=1)
    max_stay_days = models.PositiveIntegerField(default=30)

    # Address is owned by the listing and stored inline
    country = models.CharField(max_length=100)
    city = models.CharField(max_length=100)
    street = models.CharField(max_length=255, blank=True)
    house = models.CharField(max_length=50, blank=True)
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name = _("Listing")
        verbose_name_plural = _("Listings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(min_stay_days__gt=0),
                name="listing_min_stay_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(max_stay_days__gte=models.F("min_stay_days")),
                name="listing_stay_bounds_ordered",
            ),
            models.CheckConstraint(
                condition=models.Q(price_per_day__gte=0),
                name="listing_price_non_negative",
            ),
        ]
        indexes = [
            models.Index(fields=["status"], name="listing_status_idx"),
            models.Index(fields=["host", "status"], name="listing_host_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.title} ({self.status})"


class ListingImage(models.Model):
    """Image reference attached to a listing."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    listing = models.ForeignKey(Listing, on_delete=models.CASCADE, related_name="images")
    url = models.URLField(max_length=500)
    position = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["position"]

    def __str__(self) -> str:
        return f"Image {self.position} of {self.listing_id}"


class Availability(models.Model):
    """Per-date calendar entry: bookability and optional price override."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    listing = models.ForeignKey(Listing, on_delete=models.CASCADE, related_name="availability")
    date = models.DateField()
    is_available = models.BooleanField(default=True)
    price_override = models.BigIntegerField(
        null=True,
        blank=True,
        help_text=_("Overrides the base price for this date only."),
    )
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name = _("Availability")
        verbose_name_plural = _("Availability")
        ordering = ["date"]
        constraints = [
            models.UniqueConstraint(fields=["listing", "date"], name="availability_unique_listing_date"),
            models.CheckConstraint(
                condition=models.Q(price_override__isnull=True) | models.Q(price_override__gte=0),
                name="availability_price_override_non_negative",
            ),
        ]

    def __str__(self) -> str:
        state = "open" if self.is_available else "blocked"
        return f"{self.listing_id} {self.date} {state}"
