"""Entry points for listing and calendar workflows, wired to the Django repositories."""

from __future__ import annotations

from typing import Iterable, List
from uuid import UUID

from apps.listings.application.command_handlers import (
    AvailabilityInput,
    ChangeListingStatusCommand,
    ChangeListingStatusHandler,
    CreateListingCommand,
    CreateListingHandler,
    SetAvailabilityCommand,
    SetAvailabilityHandler,
    UpdateListingCommand,
    UpdateListingHandler,
)
from apps.listings.application.queries import ListingQueries
from apps.listings.domain.entities import Availability, Listing, ListingStatus
from apps.listings.infrastructure.repositories import (
    DjangoAvailabilityRepository,
    DjangoListingRepository,
)
from apps.users.domain.entities import ActingUser
from apps.users.infrastructure.repositories import DjangoUserRepository
from shared.application.context import RequestContext
from shared.application.pagination import Page


def create_listing(command: CreateListingCommand, ctx: RequestContext | None = None) -> Listing:
    handler = CreateListingHandler(DjangoListingRepository(), DjangoUserRepository())
    return handler.handle(command, ctx)


def update_listing(command: UpdateListingCommand, ctx: RequestContext | None = None) -> Listing:
    return UpdateListingHandler(DjangoListingRepository()).handle(command, ctx)


def change_listing_status(
    actor: ActingUser,
    listing_id: UUID,
    target: ListingStatus,
    ctx: RequestContext | None = None,
) -> Listing:
    handler = ChangeListingStatusHandler(DjangoListingRepository())
    return handler.handle(ChangeListingStatusCommand(actor=actor, listing_id=listing_id, target=target), ctx)


def publish_listing(actor: ActingUser, listing_id: UUID, ctx: RequestContext | None = None) -> Listing:
    return change_listing_status(actor, listing_id, ListingStatus.PUBLISHED, ctx)


def delete_listing(actor: ActingUser, listing_id: UUID, ctx: RequestContext | None = None) -> Listing:
    return change_listing_status(actor, listing_id, ListingStatus.DELETED, ctx)


def set_availability(
    actor: ActingUser,
    listing_id: UUID,
    entries: Iterable[AvailabilityInput],
    ctx: RequestContext | None = None,
) -> List[Availability]:
    handler = SetAvailabilityHandler(DjangoListingRepository(), DjangoAvailabilityRepository())
    return handler.handle(SetAvailabilityCommand(actor=actor, listing_id=listing_id, entries=list(entries)), ctx)


def get_listing(listing_id: UUID, actor: ActingUser | None = None, ctx: RequestContext | None = None) -> Listing:
    return ListingQueries(DjangoListingRepository()).get(listing_id, actor, ctx)


def list_published_listings(
    limit: int | None = None,
    offset: int | None = None,
    ctx: RequestContext | None = None,
) -> Page[Listing]:
    return ListingQueries(DjangoListingRepository()).list_published(limit, offset, ctx)


def list_host_listings(
    actor: ActingUser,
    host_id: UUID,
    limit: int | None = None,
    offset: int | None = None,
    ctx: RequestContext | None = None,
) -> Page[Listing]:
    return ListingQueries(DjangoListingRepository()).list_by_host(actor, host_id, limit, offset, ctx)


def count_listings(status: ListingStatus | None = None, ctx: RequestContext | None = None) -> int:
    return ListingQueries(DjangoListingRepository()).count(status, ctx)
