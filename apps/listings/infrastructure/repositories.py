"""Django ORM implementations of the listing and calendar repositories."""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, List
from uuid import UUID

from apps.listings.domain.entities import (
    Address,
    Availability,
    Listing,
    ListingImage,
    ListingStatus,
)
from apps.listings.domain.repositories import AvailabilityRepository, ListingRepository
from apps.listings.models import Availability as AvailabilityModel
from apps.listings.models import Listing as ListingModel
from apps.listings.models import ListingImage as ListingImageModel
from shared.application.context import RequestContext
from shared.infrastructure.storage import storage_call

logger = logging.getLogger(__name__)


def listing_to_domain(model: ListingModel, images: Iterable[ListingImageModel]) -> Listing:
    return Listing(
        id=model.id,
        host_id=model.host_id,
        title=model.title,
        description=model.description,
        price_per_day=model.price_per_day,
        min_stay_days=model.min_stay_days,
        max_stay_days=model.max_stay_days,
        status=ListingStatus(model.status),
        address=Address(
            country=model.country,
            city=model.city,
            street=model.street,
            house=model.house,
            latitude=model.latitude,
            longitude=model.longitude,
        ),
        images=[ListingImage(id=image.id, url=image.url, position=image.position) for image in images],
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def availability_to_domain(model: AvailabilityModel) -> Availability:
    return Availability(
        id=model.id,
        listing_id=model.listing_id,
        date=model.date,
        is_available=model.is_available,
        price_override=model.price_override,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


class DjangoListingRepository(ListingRepository):

    def _hydrate(self, models: List[ListingModel]) -> List[Listing]:
        return [listing_to_domain(model, model.images.all()) for model in models]

    def get_by_id(self, ctx: RequestContext, listing_id: UUID, lock: bool = False) -> Listing | None:
        with storage_call(ctx, "listings.get_by_id", listing_id):
            queryset = ListingModel.objects.filter(pk=listing_id)
            if lock:
                # Ignored by backends without row locks (SQLite); KeyedLock covers those
                queryset = queryset.select_for_update()
            model = queryset.first()
            if not model:
                return None
            images = list(ListingImageModel.objects.filter(listing_id=model.id).order_by("position"))
        return listing_to_domain(model, images)

    def list_by_host(self, ctx: RequestContext, host_id: UUID, limit: int, offset: int) -> List[Listing]:
        with storage_call(ctx, "listings.list_by_host", host_id):
            models = list(
                ListingModel.objects.filter(host_id=host_id)
                .prefetch_related("images")
                .order_by("-created_at", "id")[offset:offset + limit]
            )
            return self._hydrate(models)

    def list_by_status(self, ctx: RequestContext, status: ListingStatus, limit: int, offset: int) -> List[Listing]:
        with storage_call(ctx, "listings.list_by_status"):
            models = list(
                ListingModel.objects.filter(status=status.value)
                .prefetch_related("images")
                .order_by("-created_at", "id")[offset:offset + limit]
            )
            return self._hydrate(models)

    def count(self, ctx: RequestContext, status: ListingStatus | None = None, host_id: UUID | None = None) -> int:
        with storage_call(ctx, "listings.count"):
            queryset = ListingModel.objects.all()
            if status is not None:
                queryset = queryset.filter(status=status.value)
            if host_id is not None:
                queryset = queryset.filter(host_id=host_id)
            return queryset.count()

    def exists(self, ctx: RequestContext, listing_id: UUID) -> bool:
        with storage_call(ctx, "listings.exists", listing_id):
            return ListingModel.objects.filter(pk=listing_id).exists()

    def save(self, ctx: RequestContext, listing: Listing):
        with storage_call(ctx, "listings.save", listing.id):
            ListingModel.objects.update_or_create(
                pk=listing.id,
                defaults={
                    "host_id": listing.host_id,
                    "title": listing.title,
                    "description": listing.description,
                    "status": listing.status.value,
                    "price_per_day": listing.price_per_day,
                    "min_stay_days": listing.min_stay_days,
                    "max_stay_days": listing.max_stay_days,
                    "country": listing.address.country,
                    "city": listing.address.city,
                    "street": listing.address.street,
                    "house": listing.address.house,
                    "latitude": listing.address.latitude,
                    "longitude": listing.address.longitude,
                    "created_at": listing.created_at,
                    "updated_at": listing.updated_at,
                },
            )

            kept_ids = [image.id for image in listing.images]
            ListingImageModel.objects.filter(listing_id=listing.id).exclude(pk__in=kept_ids).delete()
            for image in listing.images:
                ListingImageModel.objects.update_or_create(
                    pk=image.id,
                    defaults={"listing_id": listing.id, "url": image.url, "position": image.position},
                )
        logger.debug(f"Saved listing {listing.id}")


class DjangoAvailabilityRepository(AvailabilityRepository):

    def get_by_id(self, ctx: RequestContext, availability_id: UUID) -> Availability | None:
        with storage_call(ctx, "availability.get_by_id", availability_id):
            model = AvailabilityModel.objects.filter(pk=availability_id).first()
        return availability_to_domain(model) if model else None

    def find_range(self, ctx: RequestContext, listing_id: UUID, first: date, last: date) -> List[Availability]:
        with storage_call(ctx, "availability.find_range", listing_id):
            models = list(
                AvailabilityModel.objects.filter(
                    listing_id=listing_id,
                    date__gte=first,
                    date__lte=last,
                ).order_by("date")
            )
        return [availability_to_domain(model) for model in models]

    def save_many(self, ctx: RequestContext, entries: Iterable[Availability]):
        entries = list(entries)
        if not entries:
            return

        with storage_call(ctx, "availability.save_many", entries[0].listing_id):
            AvailabilityModel.objects.bulk_create(
                [
                    AvailabilityModel(
                        id=entry.id,
                        listing_id=entry.listing_id,
                        date=entry.date,
                        is_available=entry.is_available,
                        price_override=entry.price_override,
                        created_at=entry.created_at,
                        updated_at=entry.updated_at,
                    )
                    for entry in entries
                ],
                update_conflicts=True,
                unique_fields=["listing", "date"],
                update_fields=["is_available", "price_override", "updated_at"],
            )
        logger.debug(f"Upserted {len(entries)} availability entries for listing {entries[0].listing_id}")
