"""Read-side use cases for listings."""

from uuid import UUID

from apps.listings.domain.entities import Listing, ListingStatus
from apps.users.domain.entities import ActingUser
from apps.users.domain.policies import Action, Resource, authorize, is_authorized
from shared.application.context import RequestContext
from shared.application.pagination import Page, normalize_page
from shared.domain.exceptions import NotFoundError


class ListingQueries:

    def __init__(self, listing_repo):
        self.listing_repo = listing_repo

    def get(
        self,
        listing_id: UUID,
        actor: ActingUser | None = None,
        ctx: RequestContext | None = None,
    ) -> Listing:
        """
        Published listings are public; any other status is visible only
        to the host and admins.
        """
        ctx = ctx or RequestContext.background()
        listing = self.listing_repo.get_by_id(ctx, listing_id)
        if not listing:
            raise NotFoundError('Listing', listing_id)

        if not listing.is_published:
            if actor is None or not is_authorized(actor, Resource.for_listing(listing), Action.MANAGE_LISTING):
                raise NotFoundError('Listing', listing_id)
        return listing

    def list_published(
        self,
        limit: int | None = None,
        offset: int | None = None,
        ctx: RequestContext | None = None,
    ) -> Page[Listing]:
        ctx = ctx or RequestContext.background()
        limit, offset = normalize_page(limit, offset)
        return Page(
            items=self.listing_repo.list_by_status(ctx, ListingStatus.PUBLISHED, limit, offset),
            total_count=self.listing_repo.count(ctx, status=ListingStatus.PUBLISHED),
            limit=limit,
            offset=offset,
        )

    def list_by_host(
        self,
        actor: ActingUser,
        host_id: UUID,
        limit: int | None = None,
        offset: int | None = None,
        ctx: RequestContext | None = None,
    ) -> Page[Listing]:
        ctx = ctx or RequestContext.background()
        authorize(actor, Resource(owner_id=host_id, host_id=host_id), Action.MANAGE_LISTING)

        limit, offset = normalize_page(limit, offset)
        return Page(
            items=self.listing_repo.list_by_host(ctx, host_id, limit, offset),
            total_count=self.listing_repo.count(ctx, host_id=host_id),
            limit=limit,
            offset=offset,
        )

    def count(self, status: ListingStatus | None = None, ctx: RequestContext | None = None) -> int:
        return self.listing_repo.count(ctx or RequestContext.background(), status=status)
