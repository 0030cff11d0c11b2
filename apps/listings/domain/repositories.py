"""
Listing and Calendar Repository Interfaces

Implemented by apps.listings.infrastructure.repositories (Django ORM).
Date range lookups are inclusive of both bounds; callers translate
half-open stays into [first_night, last_night].
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Iterable, List
from uuid import UUID

from apps.listings.domain.entities import Availability, Listing, ListingStatus
from shared.application.context import RequestContext


class ListingRepository(ABC):

    @abstractmethod
    def get_by_id(self, ctx: RequestContext, listing_id: UUID, lock: bool = False) -> Listing | None:
        """
        Find a listing by id

        lock=True takes a row lock held until the surrounding transaction
        ends; used to serialize admissions per listing.
        """

    @abstractmethod
    def list_by_host(self, ctx: RequestContext, host_id: UUID, limit: int, offset: int) -> List[Listing]:
        """Listings of a host, newest first"""

    @abstractmethod
    def list_by_status(self, ctx: RequestContext, status: ListingStatus, limit: int, offset: int) -> List[Listing]:
        """Listings with a given status, newest first"""

    @abstractmethod
    def count(self, ctx: RequestContext, status: ListingStatus | None = None, host_id: UUID | None = None) -> int:
        """Count listings, optionally filtered"""

    @abstractmethod
    def exists(self, ctx: RequestContext, listing_id: UUID) -> bool:
        """Check whether a listing exists"""

    @abstractmethod
    def save(self, ctx: RequestContext, listing: Listing):
        """Insert or update a listing with its address and images"""


class AvailabilityRepository(ABC):
    """Calendar Store"""

    @abstractmethod
    def get_by_id(self, ctx: RequestContext, availability_id: UUID) -> Availability | None:
        """Find one calendar entry"""

    @abstractmethod
    def find_range(self, ctx: RequestContext, listing_id: UUID, first: date, last: date) -> List[Availability]:
        """Entries of a listing with first <= date <= last, ordered by date ascending"""

    @abstractmethod
    def save_many(self, ctx: RequestContext, entries: Iterable[Availability]):
        """Batch upsert keyed by (listing_id, date)"""
