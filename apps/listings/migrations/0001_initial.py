import uuid

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("users", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Listing",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("draft", "Draft"),
                            ("published", "Published"),
                            ("blocked", "Blocked"),
                            ("deleted", "Deleted"),
                        ],
                        default="draft",
                        max_length=20,
                    ),
                ),
                ("price_per_day", models.BigIntegerField(help_text="Price per day in minor currency units.")),
                ("min_stay_days", models.PositiveIntegerField(default=1)),
                ("max_stay_days", models.PositiveIntegerField(default=30)),
                ("country", models.CharField(max_length=100)),
                ("city", models.CharField(max_length=100)),
                ("street", models.CharField(blank=True, max_length=255)),
                ("house", models.CharField(blank=True, max_length=50)),
                ("latitude", models.FloatField(blank=True, null=True)),
                ("longitude", models.FloatField(blank=True, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "host",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="listings",
                        to="users.user",
                    ),
                ),
            ],
            options={
                "verbose_name": "Listing",
                "verbose_name_plural": "Listings",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status"], name="listing_status_idx"),
                    models.Index(fields=["host", "status"], name="listing_host_status_idx"),
                ],
                "constraints": [
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
                ],
            },
        ),
        migrations.CreateModel(
            name="ListingImage",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("url", models.URLField(max_length=500)),
                ("position", models.PositiveIntegerField(default=0)),
                (
                    "listing",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="images",
                        to="listings.listing",
                    ),
                ),
            ],
            options={
                "ordering": ["position"],
            },
        ),
        migrations.CreateModel(
            name="Availability",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("date", models.DateField()),
                ("is_available", models.BooleanField(default=True)),
                (
                    "price_override",
                    models.BigIntegerField(
                        blank=True,
                        help_text="Overrides the base price for this date only.",
                        null=True,
                    ),
                ),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "listing",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="availability",
                        to="listings.listing",
                    ),
                ),
            ],
            options={
                "verbose_name": "Availability",
                "verbose_name_plural": "Availability",
                "ordering": ["date"],
                "constraints": [
                    models.UniqueConstraint(fields=("listing", "date"), name="availability_unique_listing_date"),
                    models.CheckConstraint(
                        condition=models.Q(price_override__isnull=True) | models.Q(price_override__gte=0),
                        name="availability_price_override_non_negative",
                    ),
                ],
            },
        ),
    ]
