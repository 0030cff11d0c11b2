"""
Listing Command Handlers

Commands:
- CreateListingCommand: Host creates a listing in DRAFT
- UpdateListingCommand: Change details / images of a listing
- ChangeListingStatusCommand: Publish, unpublish, block, unblock or delete
- SetAvailabilityCommand: Batch upsert of calendar entries (host calendar edit)
"""

from dataclasses import dataclass, field
from datetime import date
from typing import List
from uuid import UUID
import logging

from django.conf import settings

from apps.listings.domain.entities import (
    Address,
    Availability,
    Listing,
    ListingImage,
    ListingStatus,
)
from apps.listings.domain.events import ListingCreated
from apps.users.domain.entities import ActingUser
from apps.users.domain.policies import Action, Resource, authorize
from shared.application.context import RequestContext
from shared.application.locks import listing_locks
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import (
    InvalidInputError,
    ListingUnavailableError,
    NotFoundError,
)

logger = logging.getLogger(__name__)

MODERATED_STATUSES = frozenset({ListingStatus.BLOCKED})


# ===== Commands =====

@dataclass
class CreateListingCommand:
    actor: ActingUser
    host_id: UUID
    title: str
    description: str
    price_per_day: int
    min_stay_days: int
    max_stay_days: int
    address: Address
    image_urls: List[str] = field(default_factory=list)


@dataclass
class UpdateListingCommand:
    """Only the fields that are not None are changed"""
    actor: ActingUser
    listing_id: UUID
    title: str | None = None
    description: str | None = None
    price_per_day: int | None = None
    min_stay_days: int | None = None
    max_stay_days: int | None = None
    address: Address | None = None
    image_urls: List[str] | None = None


@dataclass
class ChangeListingStatusCommand:
    actor: ActingUser
    listing_id: UUID
    target: ListingStatus


@dataclass
class AvailabilityInput:
    date: date
    is_available: bool = True
    price_override: int | None = None


@dataclass
class SetAvailabilityCommand:
    actor: ActingUser
    listing_id: UUID
    entries: List[AvailabilityInput]


# ===== Command Handlers =====

class CreateListingHandler:
    """Creates a DRAFT listing for a host (or for any host when run by an admin)"""

    def __init__(self, listing_repo, user_repo, *, uow_factory=DjangoUnitOfWork):
        self.listing_repo = listing_repo
        self.user_repo = user_repo
        self.uow_factory = uow_factory

    def handle(self, command: CreateListingCommand, ctx: RequestContext | None = None) -> Listing:
        ctx = ctx or RequestContext.background()
        authorize(command.actor, Resource(owner_id=command.host_id), Action.CREATE_LISTING)

        listing = Listing(
            host_id=command.host_id,
            title=command.title.strip() if command.title else '',
            description=command.description or '',
            price_per_day=command.price_per_day,
            min_stay_days=command.min_stay_days,
            max_stay_days=command.max_stay_days,
            address=command.address,
            images=[
                ListingImage(url=url, position=index)
                for index, url in enumerate(command.image_urls)
            ],
        )

        with self.uow_factory() as uow:
            host = self.user_repo.get_by_id(ctx, command.host_id)
            if not host:
                raise NotFoundError('User', command.host_id)
            if not host.can_host:
                raise InvalidInputError(f"User {host.id} cannot host listings (role {host.role.value})")

            listing.add_event(ListingCreated(
                aggregate_id=listing.id,
                listing_id=listing.id,
                host_id=listing.host_id,
            ))
            uow.collect_events(listing)
            self.listing_repo.save(ctx, listing)

        logger.info(f"Listing {listing.id} created for host {listing.host_id}")
        return listing


class UpdateListingHandler:

    def __init__(self, listing_repo, *, uow_factory=DjangoUnitOfWork):
        self.listing_repo = listing_repo
        self.uow_factory = uow_factory

    def handle(self, command: UpdateListingCommand, ctx: RequestContext | None = None) -> Listing:
        ctx = ctx or RequestContext.background()

        changes = {
            name: getattr(command, name)
            for name in ('title', 'description', 'price_per_day', 'min_stay_days', 'max_stay_days', 'address')
            if getattr(command, name) is not None
        }

        with self.uow_factory() as uow:
            listing = self.listing_repo.get_by_id(ctx, command.listing_id, lock=True)
            if not listing:
                raise NotFoundError('Listing', command.listing_id)
            authorize(command.actor, Resource.for_listing(listing), Action.MANAGE_LISTING)

            if changes:
                listing.update_details(**changes)
            if command.image_urls is not None:
                listing.replace_images(command.image_urls)

            uow.collect_events(listing)
            self.listing_repo.save(ctx, listing)

        logger.info(f"Listing {listing.id} updated by {command.actor.id}: {sorted(changes)}")
        return listing


class ChangeListingStatusHandler:
    """
    Lifecycle transitions

    Hosts publish, unpublish and delete their own listings; moving a listing
    into or out of BLOCKED is admin moderation.
    """

    def __init__(self, listing_repo, *, uow_factory=DjangoUnitOfWork):
        self.listing_repo = listing_repo
        self.uow_factory = uow_factory

    def handle(self, command: ChangeListingStatusCommand, ctx: RequestContext | None = None) -> Listing:
        ctx = ctx or RequestContext.background()

        with self.uow_factory() as uow:
            listing = self.listing_repo.get_by_id(ctx, command.listing_id, lock=True)
            if not listing:
                raise NotFoundError('Listing', command.listing_id)

            moderated = command.target in MODERATED_STATUSES or listing.status in MODERATED_STATUSES
            action = Action.MODERATE_LISTING if moderated else Action.MANAGE_LISTING
            # Hosts may still delete a blocked listing of their own
            if command.target is ListingStatus.DELETED:
                action = Action.MANAGE_LISTING
            authorize(command.actor, Resource.for_listing(listing), action)

            listing.change_status(command.target)
            uow.collect_events(listing)
            self.listing_repo.save(ctx, listing)

        logger.info(f"Listing {listing.id} is now {listing.status.value} (by {command.actor.id})")
        return listing


class SetAvailabilityHandler:
    """
    Host calendar edit: batch upsert of (listing, date) entries

    Runs under the same per-listing lock as booking admission, so an edit
    and an admission touching the same listing are applied one after the
    other; whichever commits first wins.
    """

    def __init__(self, listing_repo, availability_repo, *, uow_factory=DjangoUnitOfWork, locks=listing_locks):
        self.listing_repo = listing_repo
        self.availability_repo = availability_repo
        self.uow_factory = uow_factory
        self.locks = locks

    def handle(self, command: SetAvailabilityCommand, ctx: RequestContext | None = None) -> List[Availability]:
        ctx = ctx or RequestContext.background()

        if not command.entries:
            raise InvalidInputError("At least one calendar entry is required")
        dates = [entry.date for entry in command.entries]
        if len(set(dates)) != len(dates):
            raise InvalidInputError("Calendar entries must not repeat a date")

        timeout = getattr(settings, 'NESTLY_LOCK_TIMEOUT_SECONDS', None)
        with self.locks.hold(command.listing_id, ctx, timeout=timeout):
            with self.uow_factory():
                listing = self.listing_repo.get_by_id(ctx, command.listing_id, lock=True)
                if not listing:
                    raise NotFoundError('Listing', command.listing_id)
                if listing.is_deleted:
                    raise ListingUnavailableError(f"Listing {listing.id} is deleted")
                authorize(command.actor, Resource.for_listing(listing), Action.MANAGE_LISTING)

                existing = {
                    entry.date: entry
                    for entry in self.availability_repo.find_range(ctx, listing.id, min(dates), max(dates))
                }

                saved: List[Availability] = []
                for item in sorted(command.entries, key=lambda entry: entry.date):
                    entry = existing.get(item.date)
                    if entry:
                        entry.apply(item.is_available, item.price_override)
                    else:
                        entry = Availability(
                            listing_id=listing.id,
                            date=item.date,
                            is_available=item.is_available,
                            price_override=item.price_override,
                        )
                    saved.append(entry)

                self.availability_repo.save_many(ctx, saved)

        logger.info(f"Calendar of listing {command.listing_id} updated: {len(saved)} entries")
        return saved
